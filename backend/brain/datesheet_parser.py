"""Datesheet Parser — extracts test events from photos/PDFs of a test schedule."""
from __future__ import annotations

import logging
from datetime import date

from pydantic import ValidationError

from server.errors import DraftValidationError
from brain.extraction import ask_for_json, content_blocks
from brain.schemas import SourceFile
from exams.schemas import TestDraft

logger = logging.getLogger(__name__)


def build_prompt(today: date) -> str:
    return f"""You are an AI assistant specializing in accurately extracting structured data from test datesheets.

Instructions:

1. Group subjects into a single test event. Datesheets often list several subjects
   for one event (e.g. "Unit Test 1", "Term End Exam"). Create ONE entry per event,
   e.g. testName "Unit Test 1" — never "Unit Test 1 - Physics", "Unit Test 1 - Chemistry".

2. Combine all syllabus topics of an event into one syllabus string, e.g.
   "Physics: Chapters 1-3, Chemistry: Organic Compounds". Omit it if none is given.

3. Date range: startDate is the earliest date of the event's subjects, endDate the latest.
   Format all dates as YYYY-MM-DD. Infer missing years from today's date: {today.strftime("%a %b %d %Y")}.

Return ONLY valid JSON — no explanation, no markdown:
{{"tests": [{{"testName": "<string>", "startDate": "YYYY-MM-DD", "endDate": "YYYY-MM-DD", "syllabus": "<string or null>"}}]}}"""


def _to_drafts(payload: dict) -> list[TestDraft]:
    drafts = []
    for item in payload.get("tests") or []:
        if not isinstance(item, dict):
            continue
        try:
            drafts.append(TestDraft(
                test_name=item.get("testName") or "",
                start_date=item.get("startDate"),
                end_date=item.get("endDate") or item.get("startDate"),
                syllabus=item.get("syllabus"),
            ))
        except ValidationError as e:
            logger.warning(f"Dropping malformed test record {item!r}: {e.error_count()} error(s)")
    return drafts


async def analyze_datesheet(client, sources: list[SourceFile], today: date = None) -> list[TestDraft]:
    """Dates are returned exactly as extracted; no shifting is applied."""
    if not sources:
        raise DraftValidationError("No datesheet provided.")

    blocks = []
    for source in sources:
        blocks.extend(content_blocks(source))

    payload = await ask_for_json(client, build_prompt(today or date.today()), blocks)
    drafts = _to_drafts(payload)
    logger.info(f"Datesheet analysis produced {len(drafts)} test(s) from {len(sources)} file(s)")
    return drafts
