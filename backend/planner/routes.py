"""Planner + dashboard read routes, built from the synchronized collections."""

from datetime import date
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Dict, List, Optional
from server.container import Planner, get_planner
from auth.utils import get_owner_key
from exams.schemas import Test
from tasks.schemas import Task
from planner.views import (
    find_upcoming, group_by_calendar_day, partition_by_completion,
    partition_by_test_end, tasks_for_day,
)

router = APIRouter()


class PlannerView(BaseModel):
    days: Dict[str, List[Task]]


class Dashboard(BaseModel):
    today: date
    next_test: Optional[Test]
    today_tasks: List[Task]
    pending_count: int
    completed_count: int
    upcoming_tests: List[Test]
    ended_tests: List[Test]


@router.get("/planner", response_model=PlannerView)
async def get_planner_view(
    include_completed: bool = True,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    tasks = await planner.tasks.list(owner_key)
    if not include_completed:
        tasks, _ = partition_by_completion(tasks)
    return PlannerView(days=group_by_calendar_day(tasks))


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(
    today: Optional[date] = None,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    today = today or date.today()
    tasks = await planner.tasks.list(owner_key)
    tests = await planner.tests.list(owner_key)

    pending, completed = partition_by_completion(tasks)
    upcoming, ended = partition_by_test_end(tests, today)
    return Dashboard(
        today=today,
        next_test=find_upcoming(tests, today),
        today_tasks=tasks_for_day(tasks, today),
        pending_count=len(pending),
        completed_count=len(completed),
        upcoming_tests=upcoming,
        ended_tests=ended,
    )
