"""Task routes."""

from fastapi import APIRouter, Depends
from typing import List
from server.container import Planner, get_planner
from auth.utils import get_owner_key
from tasks.schemas import Task, TaskDraft, TaskUpdate, ToggleResponse

router = APIRouter()


@router.get("/tasks", response_model=List[Task])
async def get_tasks(
    force: bool = False,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    return list(await planner.tasks.list(owner_key, force=force))


@router.post("/tasks", response_model=Task, status_code=201)
async def create_task(
    body: TaskDraft,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    task_id = await planner.tasks.create(owner_key, body)
    return await planner.tasks.get(owner_key, task_id)


@router.get("/tasks/{task_id}", response_model=Task)
async def get_task(task_id: str, owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    return await planner.tasks.get(owner_key, task_id)


@router.put("/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    task = Task(id=task_id, owner=owner_key, **body.model_dump())
    await planner.tasks.update(owner_key, task)
    return await planner.tasks.get(owner_key, task_id)


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    await planner.tasks.delete(owner_key, task_id)
    return {"message": "Task deleted"}


@router.patch("/tasks/{task_id}/toggle", response_model=ToggleResponse)
async def toggle_task(task_id: str, owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    completed = await planner.tasks.toggle_completion(owner_key, task_id)
    return ToggleResponse(id=task_id, completed=completed)
