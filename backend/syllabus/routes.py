"""Syllabus topic routes."""

from fastapi import APIRouter, Depends
from server.container import Planner, get_planner
from auth.utils import get_owner_key
from syllabus.schemas import SyllabusTopics, SyllabusUpdate

router = APIRouter()


@router.get("/syllabus", response_model=SyllabusTopics)
async def get_syllabus(owner_key: str = Depends(get_owner_key), planner: Planner = Depends(get_planner)):
    syllabus = await planner.syllabus.get(owner_key)
    if syllabus is None:
        return SyllabusTopics(id=owner_key, owner=owner_key, topics=[])
    return syllabus


@router.put("/syllabus", response_model=SyllabusTopics)
async def put_syllabus(
    body: SyllabusUpdate,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
):
    return await planner.syllabus.set_topics(owner_key, body.topics)
