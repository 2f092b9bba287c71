# tests/test_views.py

from __future__ import annotations

from datetime import date, datetime

from exams.schemas import Test
from planner.views import (
    find_upcoming, group_by_calendar_day, partition_by_completion, partition_by_test_end,
    tasks_for_day,
)
from tasks.schemas import Task


def make_task(task_id: str, when: datetime, completed: bool = False) -> Task:
    return Task(
        id=task_id, owner="alice", subject="Maths", topic=f"topic {task_id}",
        scheduled_at=when, duration_minutes=30, completed=completed,
    )


def make_test(test_id: str, start: date, end: date) -> Test:
    return Test(id=test_id, owner="alice", test_name=f"Test {test_id}", start_date=start, end_date=end)


def test_group_by_calendar_day_counts() -> None:
    tasks = [
        make_task("b", datetime(2025, 7, 15, 18)),
        make_task("c", datetime(2025, 7, 16, 9)),
        make_task("a", datetime(2025, 7, 15, 8)),
    ]

    groups = group_by_calendar_day(tasks)

    assert list(groups) == ["2025-07-15", "2025-07-16"]
    assert [t.id for t in groups["2025-07-15"]] == ["a", "b"]
    assert [t.id for t in groups["2025-07-16"]] == ["c"]


def test_group_by_calendar_day_empty() -> None:
    assert group_by_calendar_day([]) == {}


def test_tasks_for_day_accepts_date_or_datetime() -> None:
    tasks = [
        make_task("late", datetime(2025, 7, 15, 21)),
        make_task("other", datetime(2025, 7, 14, 23, 59)),
        make_task("early", datetime(2025, 7, 15, 0, 0)),
    ]

    assert [t.id for t in tasks_for_day(tasks, date(2025, 7, 15))] == ["early", "late"]
    assert [t.id for t in tasks_for_day(tasks, datetime(2025, 7, 15, 12))] == ["early", "late"]


def test_partition_by_completion_keeps_order() -> None:
    tasks = [
        make_task("1", datetime(2025, 7, 15, 8), completed=True),
        make_task("2", datetime(2025, 7, 15, 9)),
        make_task("3", datetime(2025, 7, 15, 10), completed=True),
    ]

    incomplete, completed = partition_by_completion(tasks)

    assert [t.id for t in incomplete] == ["2"]
    assert [t.id for t in completed] == ["1", "3"]


def test_partition_by_test_end_counts_today_as_upcoming() -> None:
    tests = [
        make_test("past", date(2025, 5, 1), date(2025, 5, 3)),
        make_test("today", date(2025, 5, 30), date(2025, 6, 1)),
        make_test("future", date(2025, 7, 1), date(2025, 7, 2)),
    ]

    upcoming, ended = partition_by_test_end(tests, datetime(2025, 6, 1, 23, 30))

    assert [t.id for t in upcoming] == ["today", "future"]
    assert [t.id for t in ended] == ["past"]


def test_find_upcoming_skips_ended_tests() -> None:
    tests = [
        make_test("ended", date(2025, 1, 1), date(2025, 1, 1)),
        make_test("later", date(2025, 12, 31), date(2025, 12, 31)),
    ]

    assert find_upcoming(tests, date(2025, 6, 1)).id == "later"


def test_find_upcoming_picks_earliest_start() -> None:
    tests = [
        make_test("finals", date(2025, 9, 1), date(2025, 9, 20)),
        make_test("midterm", date(2025, 7, 1), date(2025, 7, 5)),
        make_test("quiz", date(2025, 8, 1), date(2025, 8, 1)),
    ]

    assert find_upcoming(tests, date(2025, 6, 1)).id == "midterm"


def test_find_upcoming_none_when_all_ended() -> None:
    tests = [make_test("ended", date(2025, 1, 1), date(2025, 1, 2))]

    assert find_upcoming(tests, date(2025, 6, 1)) is None
    assert find_upcoming([], date(2025, 6, 1)) is None


def test_views_do_not_mutate_inputs() -> None:
    tasks = [make_task("b", datetime(2025, 7, 16)), make_task("a", datetime(2025, 7, 15))]
    snapshot = list(tasks)

    group_by_calendar_day(tasks)
    tasks_for_day(tasks, date(2025, 7, 15))

    assert tasks == snapshot
