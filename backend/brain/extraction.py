"""Shared plumbing for the Claude-backed extraction flows.

Turns uploaded files into message content blocks (PDF text via PyMuPDF,
images as base64), sends one prompt, and parses the JSON reply.
"""
from __future__ import annotations

import base64
import json
import logging
import mimetypes

import anthropic
import fitz  # PyMuPDF

from server import config
from server.errors import DraftValidationError, NotConfiguredError, TransientIOError
from brain.schemas import SourceFile

logger = logging.getLogger(__name__)

IMAGE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}
CHAR_LIMIT = 60_000
MIN_PDF_TEXT = 50  # fewer characters than this means a scanned PDF
MAX_RENDERED_PAGES = 5


def get_ai_client() -> anthropic.AsyncAnthropic:
    """FastAPI dependency: the Claude client, or NotConfigured without an API key."""
    if not config.ANTHROPIC_API_KEY:
        raise NotConfiguredError("AI features require ANTHROPIC_API_KEY")
    return anthropic.AsyncAnthropic(api_key=config.ANTHROPIC_API_KEY, timeout=config.AI_TIMEOUT_SECONDS)


def media_type_of(source: SourceFile) -> str:
    media_type = (source.content_type or "").split(";")[0].strip().lower()
    if not media_type or media_type == "application/octet-stream":
        media_type = mimetypes.guess_type(source.filename or "")[0] or ""
    return media_type


def extract_text_from_pdf(pdf_bytes: bytes) -> str:
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    text = ""
    for page in doc:
        text += page.get_text() + "\n"
    doc.close()
    return text.strip()


def render_pdf_pages(pdf_bytes: bytes, max_pages: int = MAX_RENDERED_PAGES) -> list[bytes]:
    """PNG renderings of the first pages, for scanned PDFs without a text layer."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    images = []
    for i, page in enumerate(doc):
        if i >= max_pages:
            break
        images.append(page.get_pixmap(dpi=150).tobytes("png"))
    doc.close()
    return images


def image_block(data: bytes, media_type: str) -> dict:
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": base64.b64encode(data).decode("ascii"),
        },
    }


def text_block(text: str, label: str = None) -> dict:
    if len(text) > CHAR_LIMIT:
        text = text[:CHAR_LIMIT] + "\n[TRUNCATED]"
    if label:
        text = f"[{label}]\n{text}"
    return {"type": "text", "text": text}


def content_blocks(source: SourceFile) -> list[dict]:
    media_type = media_type_of(source)
    if not source.data:
        raise DraftValidationError(f"File '{source.filename}' is empty")

    if media_type in IMAGE_TYPES:
        return [image_block(source.data, media_type)]

    if media_type == "application/pdf":
        try:
            text = extract_text_from_pdf(source.data)
            if len(text) >= MIN_PDF_TEXT:
                return [text_block(text, source.filename)]
            return [image_block(png, "image/png") for png in render_pdf_pages(source.data)]
        except (fitz.FileDataError, RuntimeError) as exc:
            raise DraftValidationError(f"Could not read PDF '{source.filename}'") from exc

    if media_type.startswith("text/"):
        return [text_block(source.data.decode("utf-8", errors="replace"), source.filename)]

    raise DraftValidationError(
        f"Unsupported file type '{media_type or 'unknown'}' for '{source.filename}'"
    )


def parse_json_reply(raw: str):
    """Strip markdown fences / preamble and decode the JSON object in the reply."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        text = text.rsplit("```", 1)[0]

    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        text = text[first_brace: last_brace + 1]
    return json.loads(text)


async def ask_for_json(client, prompt: str, blocks: list[dict] = None, max_tokens: int = 4000) -> dict:
    """Send one user turn (attachments first, instructions last) and return the decoded JSON."""
    content = list(blocks or []) + [{"type": "text", "text": prompt}]
    try:
        message = await client.messages.create(
            model=config.ANTHROPIC_MODEL,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": content}],
        )
    except anthropic.APIError as exc:
        logger.error(f"Claude request failed: {type(exc).__name__}: {exc}")
        raise TransientIOError("The AI service is unavailable. Please try again.") from exc

    raw = "".join(getattr(block, "text", "") for block in message.content)
    try:
        result = parse_json_reply(raw)
    except json.JSONDecodeError as exc:
        logger.warning(f"Could not parse Claude reply: {exc}\nRaw: {raw[:500]}")
        raise TransientIOError("The AI reply could not be understood. Please try again.") from exc
    if not isinstance(result, dict):
        raise TransientIOError("The AI reply could not be understood. Please try again.")
    return result
