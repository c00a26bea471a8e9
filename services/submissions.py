"""Submission eligibility and creation."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from models import STUDENT_ROLE, Assignment, Submission
from services.deadlines import as_utc, is_visible
from services.errors import AlreadySubmitted, NotFound, PastDeadline
from services.identity import Identity, require_role

log = logging.getLogger(__name__)


def is_past_deadline(assignment: Assignment, now: datetime) -> bool:
    return as_utc(now) >= as_utc(assignment.deadline)


def can_submit(assignment: Assignment, existing_submission: Optional[Submission], now: datetime) -> bool:
    if existing_submission is not None:
        return False
    return not is_past_deadline(assignment, now)


def submit(
    store,
    assignment: Optional[Assignment],
    identity: Identity,
    content: str,
    now: datetime,
    submitted_at: Optional[datetime] = None,
) -> Submission:
    """Record the one submission a student may make for an assignment.

    An existing submission is reported before a passed deadline, so a student
    who submitted in time and retries late still sees ``AlreadySubmitted``.
    Eligibility is always judged at ``now``; ``submitted_at`` only changes the
    recorded time and defaults to ``now``.
    """
    require_role(identity, STUDENT_ROLE)
    if assignment is None or not is_visible(now, assignment.visible_from):
        raise NotFound("Assignment not found.")

    existing = store.find_submission(assignment.id, identity.user_id)
    if existing is not None:
        raise AlreadySubmitted(assignment.id, identity.user_id)
    if is_past_deadline(assignment, now):
        log.info("Late submission refused for assignment %s, student %s", assignment.id, identity.user_id)
        raise PastDeadline(assignment.id, assignment.deadline)

    submission = Submission(
        assignment_id=assignment.id,
        student_id=identity.user_id,
        student_name=identity.name,
        content=content or "",
        submitted_at=submitted_at or now,
    )
    store.insert_submission(submission)
    log.info("Submission %s recorded for assignment %s by student %s", submission.id, assignment.id, identity.user_id)
    return submission
