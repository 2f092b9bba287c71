"""Brain routes: syllabus analysis, datesheet analysis, topic suggestions."""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import List, Optional
from server.container import Planner, get_planner
from auth.utils import get_owner_key
from brain.extraction import get_ai_client
from brain.datesheet_parser import analyze_datesheet
from brain.syllabus_parser import analyze_syllabus
from brain.topic_suggester import suggest_topics
from brain.schemas import (
    DatesheetAnalysis, SourceFile, SyllabusAnalysis, TopicSuggestionRequest, TopicSuggestions,
)

router = APIRouter(prefix="/brain")


async def _read_upload(upload: UploadFile) -> SourceFile:
    return SourceFile(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        data=await upload.read(),
    )


@router.post("/syllabus", response_model=SyllabusAnalysis)
async def analyze_syllabus_route(
    text: Optional[str] = Form(default=None),
    file: Optional[UploadFile] = File(default=None),
    owner_key: str = Depends(get_owner_key),
    client=Depends(get_ai_client),
):
    source = await _read_upload(file) if file is not None else None
    tasks = await analyze_syllabus(client, text=text, source=source)
    return SyllabusAnalysis(study_tasks=tasks)


@router.post("/datesheet", response_model=DatesheetAnalysis)
async def analyze_datesheet_route(
    files: List[UploadFile] = File(...),
    save: bool = Form(default=False),
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
    client=Depends(get_ai_client),
):
    """Extract tests from the datesheet; with save=true they are imported in one batch."""
    sources = [await _read_upload(f) for f in files]
    drafts = await analyze_datesheet(client, sources)
    saved_ids = await planner.tests.import_batch(owner_key, drafts) if save else []
    return DatesheetAnalysis(tests=drafts, saved_ids=saved_ids)


@router.post("/suggest-topics", response_model=TopicSuggestions)
async def suggest_topics_route(
    body: TopicSuggestionRequest,
    owner_key: str = Depends(get_owner_key),
    planner: Planner = Depends(get_planner),
    client=Depends(get_ai_client),
):
    topics = body.syllabus_topics
    if topics is None:
        syllabus = await planner.syllabus.get(owner_key)
        topics = syllabus.topics if syllabus else []
    return TopicSuggestions(suggested_topics=await suggest_topics(client, body.subject, topics))
