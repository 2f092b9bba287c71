"""Task schemas."""

from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class ActivityType(str, Enum):
    LEARN_CONCEPT = "Learn Concept"
    PRACTICE_QUESTIONS = "Practice Questions"
    REVISE = "Revise"
    WATCH_LECTURE = "Watch Lecture"
    TAKE_NOTES = "Take Notes"


class TaskDraft(BaseModel):
    subject: str
    topic: str
    activity_type: ActivityType = ActivityType.LEARN_CONCEPT
    scheduled_at: datetime
    duration_minutes: int = Field(ge=1)
    notes: Optional[str] = None

    @field_validator("subject", "topic")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("activity_type", mode="before")
    @classmethod
    def _default_activity(cls, value):
        return value or ActivityType.LEARN_CONCEPT

    @field_validator("scheduled_at")
    @classmethod
    def _wall_clock(cls, value: datetime) -> datetime:
        # Stored as naive wall-clock time; aware inputs are normalised to UTC.
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class TaskUpdate(TaskDraft):
    completed: bool = False


class Task(TaskUpdate):
    id: str
    owner: str


class ToggleResponse(BaseModel):
    id: str
    completed: bool
