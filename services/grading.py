"""Teacher grading of submissions.

Grading is re-enterable and always overwrites: every call stamps new
``graded_at``/``graded_by`` and replaces rating, status and feedback, with
fields left out of the input cleared to ``None``. No history is kept.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models import GRADING_STATUSES, KIND_EXAM, TEACHER_ROLE, Submission
from services.errors import InvalidGradingFields, InvalidRating, NotFound
from services.identity import Identity, require_role

log = logging.getLogger(__name__)

MIN_RATING = 0
MAX_RATING = 10


@dataclass
class GradingInput:
    rating: Optional[int] = None
    status: Optional[str] = None
    feedback: Optional[str] = None


def validate_rating(rating) -> Optional[int]:
    if rating is None:
        return None
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating(f"Rating must be a whole number between {MIN_RATING} and {MAX_RATING}.")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRating(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
    return rating


def grading_fields(kind: str, fields: GradingInput) -> dict:
    """Check the input against the assignment kind and return the columns to write."""
    rating = validate_rating(fields.rating)
    feedback = (fields.feedback or "").strip() or None
    status = (fields.status or "").strip().lower() or None

    if kind == KIND_EXAM:
        if feedback is not None:
            raise InvalidGradingFields("Exams are graded with a status and rating, not feedback.")
        if status is not None and status not in GRADING_STATUSES:
            raise InvalidGradingFields("Exam status must be 'pass' or 'fail'.")
    elif status is not None:
        raise InvalidGradingFields("Only exams are graded pass or fail.")

    return {"rating": rating, "status": status, "feedback": feedback}


def grade(store, submission: Optional[Submission], kind: str, fields: GradingInput, grader: Identity, now: datetime) -> Submission:
    require_role(grader, TEACHER_ROLE)
    if submission is None:
        raise NotFound("Submission not found.")

    values = grading_fields(kind, fields)
    values["graded_at"] = now
    values["graded_by"] = grader.name
    updated = store.update_submission_grading(submission.id, values)
    if updated is None:
        raise NotFound("Submission not found.")
    log.info(
        "Submission %s graded by %s (rating=%s, status=%s)",
        updated.id,
        grader.name,
        values["rating"],
        values["status"],
    )
    return updated
