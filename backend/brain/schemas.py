"""AI extraction schemas."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from exams.schemas import TestDraft


class SourceFile(BaseModel):
    filename: str = ""
    content_type: str = ""
    data: bytes


class SuggestedTask(BaseModel):
    topic: str
    duration_minutes: int = Field(ge=1)

    @field_validator("topic")
    @classmethod
    def _topic_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class SyllabusAnalysis(BaseModel):
    study_tasks: List[SuggestedTask]


class DatesheetAnalysis(BaseModel):
    tests: List[TestDraft]
    saved_ids: List[str] = []


class TopicSuggestionRequest(BaseModel):
    subject: str
    # Defaults to the owner's saved syllabus topics.
    syllabus_topics: Optional[List[str]] = None


class TopicSuggestions(BaseModel):
    suggested_topics: List[str]
