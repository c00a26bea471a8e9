"""SQLAlchemy-backed storage for assignments and submissions."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError

from extensions import db
from models import Assignment, Submission
from services.errors import AlreadySubmitted, StorageUnavailable

log = logging.getLogger(__name__)

GRADING_FIELDS = ("rating", "status", "feedback", "graded_at", "graded_by")


class EntityStore:
    """Keyed lookups, filtered listings and all-or-nothing writes.

    Every write commits or rolls back before returning; a failed write leaves
    nothing behind in the session.
    """

    def __init__(self, session):
        self.session = session

    def _commit(self):
        try:
            self.session.commit()
        except OperationalError as exc:
            self.session.rollback()
            log.error("Database unavailable: %s", exc)
            raise StorageUnavailable("The database is unavailable, please try again later.") from exc

    def _read(self, query):
        try:
            return query()
        except OperationalError as exc:
            self.session.rollback()
            log.error("Database unavailable: %s", exc)
            raise StorageUnavailable("The database is unavailable, please try again later.") from exc

    # ----- assignments -----
    def find_assignment(self, assignment_id) -> Optional[Assignment]:
        if assignment_id is None:
            return None
        return self._read(lambda: self.session.get(Assignment, assignment_id))

    def list_assignments(self, visible_at: Optional[datetime] = None, order: str = "created") -> List[Assignment]:
        """``order`` is "created" (newest first) or "deadline" (soonest first)."""
        query = self.session.query(Assignment)
        if visible_at is not None:
            query = query.filter(Assignment.visible_from <= visible_at)
        if order == "deadline":
            query = query.order_by(Assignment.deadline.asc(), Assignment.id.asc())
        else:
            query = query.order_by(Assignment.created_at.desc(), Assignment.id.desc())
        return self._read(query.all)

    def insert_assignment(self, assignment: Assignment) -> Assignment:
        self.session.add(assignment)
        self._commit()
        return assignment

    # ----- submissions -----
    def find_submission(self, assignment_id, student_id) -> Optional[Submission]:
        query = self.session.query(Submission).filter_by(assignment_id=assignment_id, student_id=student_id)
        return self._read(query.first)

    def get_submission(self, submission_id) -> Optional[Submission]:
        if submission_id is None:
            return None
        return self._read(lambda: self.session.get(Submission, submission_id))

    def list_submissions_by_assignment(self, assignment_id) -> List[Submission]:
        query = (
            self.session.query(Submission)
            .filter_by(assignment_id=assignment_id)
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        )
        return self._read(query.all)

    def list_submissions_by_student(self, student_id) -> List[Submission]:
        query = (
            self.session.query(Submission)
            .filter_by(student_id=student_id)
            .order_by(Submission.submitted_at.desc())
        )
        return self._read(query.all)

    def insert_submission(self, submission: Submission) -> Submission:
        # The unique constraint on (assignment_id, student_id) decides races.
        self.session.add(submission)
        try:
            self._commit()
        except IntegrityError as exc:
            self.session.rollback()
            log.info(
                "Duplicate submission rejected by the database for assignment %s, student %s",
                submission.assignment_id,
                submission.student_id,
            )
            raise AlreadySubmitted(submission.assignment_id, submission.student_id) from exc
        return submission

    def update_submission_grading(self, submission_id, fields: dict) -> Optional[Submission]:
        unknown = set(fields) - set(GRADING_FIELDS)
        if unknown:
            raise ValueError(f"Not a grading field: {', '.join(sorted(unknown))}")
        submission = self.get_submission(submission_id)
        if submission is None:
            return None
        for name, value in fields.items():
            setattr(submission, name, value)
        self._commit()
        return submission


def current_store() -> EntityStore:
    return EntityStore(db.session)
