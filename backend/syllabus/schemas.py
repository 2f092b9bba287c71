"""Syllabus topic set schemas."""

from pydantic import BaseModel, field_validator
from typing import List


class SyllabusTopics(BaseModel):
    id: str
    owner: str
    topics: List[str] = []


class SyllabusUpdate(BaseModel):
    topics: List[str]

    @field_validator("topics")
    @classmethod
    def _drop_blank(cls, topics: List[str]) -> List[str]:
        return [t.strip() for t in topics if t and t.strip()]
