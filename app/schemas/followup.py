"""
Follow-up thread payloads: plain messages, document requests and uploads.

A document request is stored as a regular message whose text is the JSON
payload ``{"type": "document_request", "docTypes": [...]}``; the ``type``
tag is what tells it apart from chat text.
"""
from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DOCUMENT_REQUEST_TAG = "document_request"


class MessageKind(str, Enum):
    TEXT = "text"
    DOCUMENT_REQUEST = "document_request"


def encode_document_request(doc_types: list[str]) -> str:
    return json.dumps({"type": DOCUMENT_REQUEST_TAG, "docTypes": doc_types})


def decode_document_request(text: str) -> Optional[list[str]]:
    """Return the requested document types, or None for plain chat text."""
    if not text.lstrip().startswith("{"):
        return None
    try:
        payload = json.loads(text)
    except ValueError:
        return None
    if not isinstance(payload, dict) or payload.get("type") != DOCUMENT_REQUEST_TAG:
        return None
    doc_types = payload.get("docTypes") or []
    return [str(d) for d in doc_types] if isinstance(doc_types, list) else []


class MessageCreate(BaseModel):
    sender: str = Field(min_length=1, max_length=100)
    text: str = Field(min_length=1)


class DocumentRequestCreate(BaseModel):
    doc_types: list[str] = Field(min_length=1)

    @field_validator("doc_types")
    @classmethod
    def strip_blank(cls, v: list[str]) -> list[str]:
        cleaned = [d.strip() for d in v if d and d.strip()]
        if not cleaned:
            raise ValueError("at least one document type is required")
        return cleaned


class MessageResponse(BaseModel):
    id: int
    assessment_id: int
    sender: str
    text: str
    created_at: datetime
    kind: MessageKind = MessageKind.TEXT
    doc_types: list[str] = []

    @classmethod
    def from_message(cls, message) -> "MessageResponse":
        doc_types = decode_document_request(message.text)
        return cls(
            id=message.id,
            assessment_id=message.assessment_id,
            sender=message.sender,
            text=message.text,
            created_at=message.created_at,
            kind=MessageKind.TEXT if doc_types is None else MessageKind.DOCUMENT_REQUEST,
            doc_types=doc_types or [],
        )


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assessment_id: int
    file_name: str
    original_name: str
    file_path: str
    doc_type: Optional[str] = None
    upload_date: datetime
