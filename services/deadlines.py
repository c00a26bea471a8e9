"""Temporal state of an assignment relative to "now".

Everything here is a pure function of its arguments. States are recomputed
on every read and never stored.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

URGENT_WINDOW = timedelta(hours=24)
WARNING_WINDOW = timedelta(days=3)
SOON_WINDOW = timedelta(days=7)
UPCOMING_LIMIT = 3


class TemporalState(str, enum.Enum):
    NOT_YET_VISIBLE = "not-yet-visible"
    OPEN = "open"
    URGENT = "urgent"
    WARNING = "warning"
    SOON = "soon"
    NORMAL = "normal"
    OVERDUE = "overdue"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat those as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def classify(now: datetime, visible_from: datetime, deadline: datetime) -> TemporalState:
    now, visible_from, deadline = as_utc(now), as_utc(visible_from), as_utc(deadline)
    if now < visible_from:
        return TemporalState.NOT_YET_VISIBLE
    if now >= deadline:
        return TemporalState.OVERDUE
    remaining = deadline - now
    if remaining <= URGENT_WINDOW:
        return TemporalState.URGENT
    if remaining <= WARNING_WINDOW:
        return TemporalState.WARNING
    if remaining <= SOON_WINDOW:
        return TemporalState.SOON
    return TemporalState.NORMAL


def is_visible(now: datetime, visible_from: datetime) -> bool:
    return as_utc(now) >= as_utc(visible_from)


def is_open(now: datetime, visible_from: datetime, deadline: datetime) -> bool:
    return classify(now, visible_from, deadline) not in (
        TemporalState.NOT_YET_VISIBLE,
        TemporalState.OVERDUE,
    )


def remaining_label(now: datetime, deadline: datetime) -> str:
    remaining = as_utc(deadline) - as_utc(now)
    if remaining <= timedelta(0):
        return "Overdue"
    seconds = remaining.total_seconds()
    if remaining <= URGENT_WINDOW:
        return f"{math.ceil(seconds / 3600)}h left"
    return f"{math.ceil(seconds / 86400)}d left"


@dataclass(frozen=True)
class Countdown:
    days: int
    hours: int
    minutes: int
    seconds: int

    @property
    def expired(self) -> bool:
        return not (self.days or self.hours or self.minutes or self.seconds)


def countdown_parts(now: datetime, deadline: datetime) -> Countdown:
    total = int((as_utc(deadline) - as_utc(now)).total_seconds())
    if total <= 0:
        return Countdown(0, 0, 0, 0)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return Countdown(days, hours, minutes, seconds)


@dataclass
class ProgressSummary:
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    upcoming: List = field(default_factory=list)


def summarise_progress(assignments: Iterable, submitted_ids, now: datetime) -> ProgressSummary:
    """Dashboard counts for the assignments a student can currently see.

    ``upcoming`` holds at most three unsubmitted assignments due within the
    next seven days, in the order given (callers pass them sorted by deadline).
    """
    now = as_utc(now)
    submitted_ids = set(submitted_ids)
    summary = ProgressSummary()
    for assignment in assignments:
        summary.total += 1
        deadline = as_utc(assignment.deadline)
        if assignment.id in submitted_ids:
            summary.completed += 1
            continue
        if deadline <= now:
            summary.overdue += 1
        elif deadline <= now + SOON_WINDOW and len(summary.upcoming) < UPCOMING_LIMIT:
            summary.upcoming.append(assignment)
    summary.pending = summary.total - summary.completed
    return summary
