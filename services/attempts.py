"""Timed attempts for quizzes and exams.

An attempt exists only once the student presses "start". Its state is held
client-side (the signed session cookie) and never written to the database,
so losing the cookie abandons the attempt. Remaining time is always derived
from the absolute ``ends_at``; tick counting is never trusted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import MutableMapping, Optional

from models import Assignment, Submission
from services.deadlines import as_utc
from services.errors import InvalidAssignment
from services.submissions import submit

log = logging.getLogger(__name__)

SESSION_KEY = "timed_attempts"


@dataclass(frozen=True)
class TimedAttempt:
    assignment_id: int
    started_at: datetime
    time_limit: int  # minutes

    @property
    def ends_at(self) -> datetime:
        return as_utc(self.started_at) + timedelta(minutes=self.time_limit)

    def remaining_seconds(self, now: datetime) -> int:
        remaining = (self.ends_at - as_utc(now)).total_seconds()
        return max(0, int(remaining))

    def expired(self, now: datetime) -> bool:
        return as_utc(now) >= self.ends_at

    def to_dict(self) -> dict:
        return {
            "assignment_id": self.assignment_id,
            "started_at": as_utc(self.started_at).isoformat(),
            "time_limit": self.time_limit,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TimedAttempt":
        return cls(
            assignment_id=int(data["assignment_id"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            time_limit=int(data["time_limit"]),
        )


def start_attempt(assignment: Assignment, now: datetime) -> TimedAttempt:
    if not assignment.is_timed or not assignment.time_limit:
        raise InvalidAssignment("Only quizzes and exams have a time limit.")
    return TimedAttempt(assignment_id=assignment.id, started_at=as_utc(now), time_limit=assignment.time_limit)


def load_attempt(session: MutableMapping, assignment_id: int) -> Optional[TimedAttempt]:
    raw = (session.get(SESSION_KEY) or {}).get(str(assignment_id))
    if not raw:
        return None
    try:
        return TimedAttempt.from_dict(raw)
    except (KeyError, TypeError, ValueError):
        log.warning("Discarding unreadable attempt state for assignment %s", assignment_id)
        return None


def store_attempt(session: MutableMapping, attempt: TimedAttempt) -> None:
    attempts = dict(session.get(SESSION_KEY) or {})
    attempts[str(attempt.assignment_id)] = attempt.to_dict()
    session[SESSION_KEY] = attempts


def clear_attempt(session: MutableMapping, assignment_id: int) -> None:
    attempts = dict(session.get(SESSION_KEY) or {})
    if attempts.pop(str(assignment_id), None) is not None:
        session[SESSION_KEY] = attempts


def begin_or_resume(session: MutableMapping, assignment: Assignment, now: datetime) -> TimedAttempt:
    """Start the countdown, or hand back the running one; it never restarts."""
    attempt = load_attempt(session, assignment.id)
    if attempt is not None:
        return attempt
    attempt = start_attempt(assignment, now)
    store_attempt(session, attempt)
    log.info("Timed attempt started for assignment %s, ends at %s", assignment.id, attempt.ends_at.isoformat())
    return attempt


def auto_submit(store, attempt: TimedAttempt, assignment: Assignment, identity, draft: str, now: datetime) -> Optional[Submission]:
    """Submit the last draft once the time limit has run out.

    Returns ``None`` while time remains. Expiry goes through the regular
    ``submit`` contract, so ``AlreadySubmitted`` and ``PastDeadline`` apply.
    A late request is recorded at ``ends_at``, never after it.
    """
    if not attempt.expired(now):
        return None
    log.info("Time limit reached for assignment %s, submitting on behalf of student %s", assignment.id, identity.user_id)
    return submit(store, assignment, identity, draft, now, submitted_at=min(as_utc(now), attempt.ends_at))
