"""Test (exam event) schemas."""

import re
from datetime import date
from pydantic import BaseModel, computed_field, field_validator, model_validator
from typing import List, Optional


class TestDraft(BaseModel):
    __test__ = False  # not a pytest test class

    test_name: str
    start_date: date
    end_date: date
    syllabus: Optional[str] = None

    @field_validator("test_name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("syllabus")
    @classmethod
    def _blank_syllabus(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @model_validator(mode="after")
    def _date_order(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class Test(TestDraft):
    id: str
    owner: str

    @computed_field
    @property
    def syllabus_items(self) -> List[str]:
        """The combined syllabus split into its subjects/topics."""
        if not self.syllabus:
            return []
        return [s.strip() for s in re.split(r",\s?|\n", self.syllabus) if s.strip()]


class TestImport(BaseModel):
    __test__ = False

    tests: List[TestDraft]


class ImportResult(BaseModel):
    ids: List[str]
    count: int
