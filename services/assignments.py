"""Creating and listing assignments."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from models import ASSIGNMENT_KINDS, TEACHER_ROLE, TIMED_KINDS, Assignment
from services.deadlines import as_utc
from services.errors import InvalidAssignment, NotFound
from services.identity import Identity, require_role

log = logging.getLogger(__name__)


def validate_assignment(title, description, kind, visible_from, deadline, time_limit) -> None:
    if not (title or "").strip() or not (description or "").strip():
        raise InvalidAssignment("Title and description are required.")
    if kind not in ASSIGNMENT_KINDS:
        raise InvalidAssignment(f"Unknown assignment kind '{kind}'.")
    if visible_from is None or deadline is None:
        raise InvalidAssignment("Visible-from and deadline are required.")
    if as_utc(deadline) <= as_utc(visible_from):
        raise InvalidAssignment("The deadline must come after the visible-from time.")
    if kind in TIMED_KINDS:
        if time_limit is None or time_limit <= 0:
            raise InvalidAssignment("Quizzes and exams need a time limit in minutes.")
    elif time_limit is not None:
        raise InvalidAssignment("Plain assignments do not take a time limit.")


def create_assignment(
    store,
    identity: Identity,
    title: str,
    description: str,
    kind: str,
    visible_from: datetime,
    deadline: datetime,
    time_limit: Optional[int],
    now: datetime,
) -> Assignment:
    require_role(identity, TEACHER_ROLE)
    validate_assignment(title, description, kind, visible_from, deadline, time_limit)
    assignment = Assignment(
        title=title.strip(),
        description=description.strip(),
        kind=kind,
        visible_from=as_utc(visible_from),
        deadline=as_utc(deadline),
        time_limit=time_limit if kind in TIMED_KINDS else None,
        created_at=now,
        created_by=identity.name,
    )
    store.insert_assignment(assignment)
    log.info("%s %s created by %s, due %s", kind.capitalize(), assignment.id, identity.name, assignment.deadline.isoformat())
    return assignment


def teacher_assignments(store, identity: Identity) -> List[Assignment]:
    require_role(identity, TEACHER_ROLE)
    return store.list_assignments(order="created")


def student_assignments(store, now: datetime) -> List[Assignment]:
    """Assignments already visible, soonest deadline first."""
    return store.list_assignments(visible_at=now, order="deadline")


def visible_assignment(store, assignment_id, now: datetime) -> Assignment:
    assignment = store.find_assignment(assignment_id)
    if assignment is None or as_utc(assignment.visible_from) > as_utc(now):
        raise NotFound("Assignment not found.")
    return assignment
