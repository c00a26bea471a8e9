from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from services.deadlines import (
    TemporalState,
    classify,
    countdown_parts,
    is_open,
    remaining_label,
    summarise_progress,
)

NOW = datetime(2025, 3, 3, 12, 0, tzinfo=timezone.utc)
VISIBLE = NOW - timedelta(days=1)


@pytest.mark.parametrize(
    "remaining, expected",
    [
        (timedelta(seconds=1), TemporalState.URGENT),
        (timedelta(hours=24), TemporalState.URGENT),
        (timedelta(hours=24, seconds=1), TemporalState.WARNING),
        (timedelta(days=3), TemporalState.WARNING),
        (timedelta(days=3, seconds=1), TemporalState.SOON),
        (timedelta(days=7), TemporalState.SOON),
        (timedelta(days=7, seconds=1), TemporalState.NORMAL),
        (timedelta(days=30), TemporalState.NORMAL),
    ],
)
def test_classify_boundaries_favour_the_more_urgent_state(remaining, expected):
    assert classify(NOW, VISIBLE, NOW + remaining) is expected


def test_classify_overdue_at_and_after_deadline():
    assert classify(NOW, VISIBLE, NOW) is TemporalState.OVERDUE
    assert classify(NOW, VISIBLE, NOW - timedelta(minutes=5)) is TemporalState.OVERDUE


def test_classify_not_yet_visible_wins_over_everything():
    visible_from = NOW + timedelta(seconds=1)
    assert classify(NOW, visible_from, NOW + timedelta(days=2)) is TemporalState.NOT_YET_VISIBLE
    assert classify(NOW, NOW, NOW + timedelta(days=2)) is TemporalState.WARNING


def test_classify_treats_naive_timestamps_as_utc():
    naive_deadline = (NOW + timedelta(hours=2)).replace(tzinfo=None)
    assert classify(NOW, VISIBLE.replace(tzinfo=None), naive_deadline) is TemporalState.URGENT


def test_is_open():
    assert is_open(NOW, VISIBLE, NOW + timedelta(hours=1))
    assert not is_open(NOW, VISIBLE, NOW)
    assert not is_open(NOW, NOW + timedelta(hours=1), NOW + timedelta(days=1))


def test_remaining_label_rounds_up():
    assert remaining_label(NOW, NOW - timedelta(seconds=1)) == "Overdue"
    assert remaining_label(NOW, NOW + timedelta(hours=4, minutes=10)) == "5h left"
    assert remaining_label(NOW, NOW + timedelta(hours=24)) == "24h left"
    assert remaining_label(NOW, NOW + timedelta(days=2, hours=1)) == "3d left"


def test_countdown_parts():
    parts = countdown_parts(NOW, NOW + timedelta(days=1, hours=2, minutes=3, seconds=4))
    assert (parts.days, parts.hours, parts.minutes, parts.seconds) == (1, 2, 3, 4)
    assert not parts.expired
    assert countdown_parts(NOW, NOW - timedelta(hours=1)).expired


def test_summarise_progress_counts_and_upcoming():
    def assignment(ident, deadline):
        return SimpleNamespace(id=ident, deadline=deadline)

    assignments = [
        assignment(1, NOW - timedelta(days=1)),   # overdue, unsubmitted
        assignment(2, NOW - timedelta(hours=1)),  # submitted
        assignment(3, NOW + timedelta(hours=5)),
        assignment(4, NOW + timedelta(days=2)),
        assignment(5, NOW + timedelta(days=6)),
        assignment(6, NOW + timedelta(days=6, hours=1)),
        assignment(7, NOW + timedelta(days=10)),
    ]
    summary = summarise_progress(assignments, {2}, NOW)

    assert summary.total == 7
    assert summary.completed == 1
    assert summary.pending == 6
    assert summary.overdue == 1
    assert [a.id for a in summary.upcoming] == [3, 4, 5]
