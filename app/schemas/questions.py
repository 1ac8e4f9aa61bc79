"""
Dynamic (AI-generated) questionnaire items.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class QuestionOption(BaseModel):
    text: str = Field(min_length=1)
    value: float = Field(ge=0.0, le=1.0, description="Responsibility weight, 1.0 = most responsible")


class Question(BaseModel):
    id: str = ""
    question: str = Field(min_length=1)
    options: list[QuestionOption]
    language: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v) -> str:
        # ids are renumbered after parsing; whatever the model sent is only kept as text
        return "" if v is None else str(v)


class GenerateQuestionsRequest(BaseModel):
    core_question_ids: list[str] = Field(default_factory=list, description="Topics the new items must avoid")
    language: Optional[str] = None
    persist: bool = False


class SummaryRequest(BaseModel):
    message: str


class SummaryResponse(BaseModel):
    text: str
