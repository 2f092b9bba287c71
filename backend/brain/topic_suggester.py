"""Topic Suggester — picks the syllabus topics that belong to one subject."""
from __future__ import annotations

import logging

from server.errors import DraftValidationError
from brain.extraction import ask_for_json

logger = logging.getLogger(__name__)


def build_prompt(subject: str, syllabus_topics: list[str]) -> str:
    listing = "\n".join(f"- {t}" for t in syllabus_topics)
    return f"""You are an expert curriculum assistant. The student wants to study the subject: '{subject}'.

From the syllabus topics below, return ONLY the topics directly related to '{subject}',
copied exactly as written.

Syllabus Topics List:
{listing}

Return ONLY valid JSON — no explanation, no markdown:
{{"suggestedTopics": ["<topic>"]}}"""


async def suggest_topics(client, subject: str, syllabus_topics: list[str]) -> list[str]:
    subject = (subject or "").strip()
    if not subject:
        raise DraftValidationError("Subject is required.")
    if not syllabus_topics:
        return []

    payload = await ask_for_json(client, build_prompt(subject, syllabus_topics), max_tokens=1500)
    known = set(syllabus_topics)
    suggested = []
    for topic in payload.get("suggestedTopics") or []:
        # Only topics that really are on the syllabus, once each.
        if isinstance(topic, str) and topic in known and topic not in suggested:
            suggested.append(topic)
    logger.info(f"Suggested {len(suggested)} topic(s) for '{subject}'")
    return suggested
