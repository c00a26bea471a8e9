"""Errors raised by the assignment lifecycle and grading services."""
from __future__ import annotations


class LifecycleError(RuntimeError):
    """Base class for errors local to a single lifecycle or grading operation."""


class Unauthorized(LifecycleError):
    """The caller does not hold the role the operation requires."""


class NotFound(LifecycleError):
    """An assignment or submission id did not resolve."""


class AlreadySubmitted(LifecycleError):
    """The student already has a submission for this assignment."""

    def __init__(self, assignment_id, student_id):
        super().__init__("You have already submitted this assignment.")
        self.assignment_id = assignment_id
        self.student_id = student_id


class PastDeadline(LifecycleError):
    """The assignment deadline has passed."""

    def __init__(self, assignment_id, deadline):
        super().__init__("The deadline for this assignment has passed.")
        self.assignment_id = assignment_id
        self.deadline = deadline


class InvalidGradingFields(LifecycleError):
    """Grading input does not fit the assignment kind."""


class InvalidRating(InvalidGradingFields):
    """Rating is not an integer between 0 and 10."""


class InvalidAssignment(LifecycleError):
    """Assignment fields are missing or contradict each other."""


class StorageUnavailable(LifecycleError):
    """The database could not be reached; nothing was written."""
