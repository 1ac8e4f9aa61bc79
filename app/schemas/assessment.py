"""
Assessment payloads exchanged with the questionnaire client and the bank
dashboard.

``answers`` and ``breakdown`` are owned by the client-side questionnaire;
the service only checks their shape (JSON objects, answers non-empty)
before anything is persisted.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.followup import DocumentResponse, MessageResponse

DEFAULT_LANGUAGE = "en"


class AssessmentStatus(str, Enum):
    APPROVED = "Approved"
    MANUAL_REVIEW = "Manual Review"
    REJECTED = "Rejected"


class AssessmentSubmitRequest(BaseModel):
    customer_id: int
    score: int
    answers: dict[str, Any] = Field(description="Questionnaire answers keyed by question id")
    breakdown: Optional[dict[str, Any]] = Field(None, description="Explanatory score breakdown")
    language: Optional[str] = Field(None, max_length=8, validate_default=True)

    @field_validator("answers")
    @classmethod
    def answers_not_empty(cls, v: dict[str, Any]) -> dict[str, Any]:
        if not v:
            raise ValueError("answers must not be empty")
        return v

    @field_validator("language")
    @classmethod
    def default_language(cls, v: Optional[str]) -> str:
        v = (v or "").strip().lower()
        return v or DEFAULT_LANGUAGE


class StatusUpdateRequest(BaseModel):
    status: AssessmentStatus


class AssessmentFilter(BaseModel):
    status: Optional[AssessmentStatus] = None
    customer_id: Optional[int] = None


class AssessmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    score: int
    status: AssessmentStatus
    answers: dict[str, Any]
    breakdown: Optional[dict[str, Any]] = None
    language: str
    created_at: datetime
    updated_at: datetime


class AssessmentDetail(AssessmentResponse):
    """Assessment plus its follow-up thread, as shown to the customer."""
    messages: list[MessageResponse] = []
    documents: list[DocumentResponse] = []

    @classmethod
    def from_assessment(cls, assessment) -> "AssessmentDetail":
        base = AssessmentResponse.model_validate(assessment).model_dump()
        return cls(
            **base,
            messages=[MessageResponse.from_message(m) for m in assessment.messages],
            documents=[DocumentResponse.model_validate(d) for d in assessment.documents],
        )


class AssessmentListItem(AssessmentResponse):
    """Dashboard row, enriched with the owning customer's display name."""
    customer_name: str
    documents: list[DocumentResponse] = []

    @classmethod
    def from_assessment(cls, assessment) -> "AssessmentListItem":
        base = AssessmentResponse.model_validate(assessment).model_dump()
        return cls(
            **base,
            customer_name=assessment.customer.display_name,
            documents=[DocumentResponse.model_validate(d) for d in assessment.documents],
        )


class LatestAssessmentResponse(BaseModel):
    assessment: Optional[AssessmentDetail] = None


class CustomerProfile(BaseModel):
    """Registration data handed over by the auth layer (password already hashed)."""
    fname: str = Field(min_length=1)
    lname: str = Field(min_length=1)
    gender: str
    age: int = Field(ge=0)
    mobile: str = Field(min_length=1)
    email: str = Field(min_length=3)
    pan: str = Field(min_length=1)
    account_number: str = Field(min_length=1)


class CustomerRegistration(CustomerProfile):
    password_hash: str = Field(min_length=1, description="Credential hash produced by the auth layer")


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fname: str
    lname: str
    gender: str
    age: int
    mobile: str
    email: str
    pan: str
    account_number: str
    last_accessed: Optional[datetime] = None
    created_at: datetime


class StatusChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assessment_id: int
    old_status: str
    new_status: str
    changed_by: str
    changed_at: datetime
