"""Derived views over already-fetched tasks and tests.

Pure functions: no I/O, no mutation of their inputs, safe to call on every
render.  ``now`` may be a date or a datetime; tests are compared by calendar
date, so a test ending today is still upcoming.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Union

Moment = Union[date, datetime]


def _as_date(now: Moment) -> date:
    return now.date() if isinstance(now, datetime) else now


def group_by_calendar_day(tasks: Iterable) -> dict[str, list]:
    """Map ``YYYY-MM-DD`` to that day's tasks, days ascending, tasks by time."""
    ordered = sorted(tasks, key=lambda t: t.scheduled_at)
    groups: dict[str, list] = {}
    for task in ordered:
        groups.setdefault(task.scheduled_at.date().isoformat(), []).append(task)
    return groups


def tasks_for_day(tasks: Iterable, day: Moment) -> list:
    day = _as_date(day)
    return sorted(
        (t for t in tasks if t.scheduled_at.date() == day),
        key=lambda t: t.scheduled_at,
    )


def partition_by_completion(tasks: Iterable) -> tuple[list, list]:
    """Split into (incomplete, completed), keeping the input order."""
    incomplete, completed = [], []
    for task in tasks:
        (completed if task.completed else incomplete).append(task)
    return incomplete, completed


def partition_by_test_end(tests: Iterable, now: Moment) -> tuple[list, list]:
    """Split into (upcoming, ended); upcoming means ``end_date >= now``."""
    today = _as_date(now)
    upcoming, ended = [], []
    for test in tests:
        (upcoming if test.end_date >= today else ended).append(test)
    return upcoming, ended


def find_upcoming(tests: Iterable, now: Moment) -> Optional[object]:
    """The earliest-starting test that has not ended yet, or None."""
    upcoming, _ = partition_by_test_end(tests, now)
    if not upcoming:
        return None
    return min(upcoming, key=lambda t: (t.start_date, t.end_date))
