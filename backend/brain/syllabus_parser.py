"""Syllabus Parser — turns a syllabus (text, PDF or photo) into suggested study tasks."""
from __future__ import annotations

import logging

from pydantic import ValidationError

from server.errors import DraftValidationError
from brain.extraction import ask_for_json, content_blocks, text_block
from brain.schemas import SourceFile, SuggestedTask

logger = logging.getLogger(__name__)

PROMPT = """You are an AI study assistant that helps students create a study plan.
Read the syllabus above and break it into concrete study tasks, each with a
recommended duration in minutes (between 15 and 240).

Return ONLY valid JSON — no explanation, no markdown:
{"studyTasks": [{"topic": "<string>", "durationMinutes": <int>}]}"""


def _to_tasks(payload: dict) -> list[SuggestedTask]:
    tasks = []
    for item in payload.get("studyTasks") or []:
        if not isinstance(item, dict):
            continue
        try:
            tasks.append(SuggestedTask(topic=item.get("topic") or "", duration_minutes=item.get("durationMinutes")))
        except ValidationError as e:
            logger.warning(f"Dropping malformed study task {item!r}: {e.error_count()} error(s)")
    return tasks


async def analyze_syllabus(client, text: str = None, source: SourceFile = None) -> list[SuggestedTask]:
    if not (text and text.strip()) and source is None:
        raise DraftValidationError("No syllabus content provided.")

    blocks = content_blocks(source) if source is not None else []
    if text and text.strip():
        blocks.append(text_block(text.strip(), "SYLLABUS"))

    payload = await ask_for_json(client, PROMPT, blocks)
    tasks = _to_tasks(payload)
    logger.info(f"Syllabus analysis produced {len(tasks)} study task(s)")
    return tasks
