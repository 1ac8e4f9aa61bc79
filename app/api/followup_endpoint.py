"""
Follow-up thread endpoints (document requests, uploads, messages).

Messages are poll-based: clients re-read GET .../messages.
"""
from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_document_storage
from app.core.auth import require_reviewer, verify_token
from app.core.errors import AppError, InvalidInput
from app.models.database import get_db
from app.schemas.followup import (
    DocumentRequestCreate,
    DocumentResponse,
    MessageCreate,
    MessageResponse,
)
from app.services.document_storage import LocalDocumentStorage
from app.services.followup import BANK_SENDER, FollowUpCoordinator

logger = structlog.get_logger()
router = APIRouter(prefix="/v1", tags=["follow-up"])


@router.post(
    "/assessments/{assessment_id}/document-requests",
    response_model=MessageResponse,
    status_code=201,
)
async def request_documents(
    assessment_id: int,
    request: DocumentRequestCreate,
    token: dict = Depends(require_reviewer),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    message = await FollowUpCoordinator(db).request_documents(assessment_id, request.doc_types, sender=BANK_SENDER)
    return MessageResponse.from_message(message)


@router.post("/documents", response_model=DocumentResponse, status_code=201)
async def upload_document(
    document: Optional[UploadFile] = File(None),
    assessment_id: Optional[int] = Form(None),
    doc_type: Optional[str] = Form(None),
    token: dict = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
    storage: LocalDocumentStorage = Depends(get_document_storage),
) -> DocumentResponse:
    if document is None or not document.filename or assessment_id is None:
        raise InvalidInput("No file or assessment ID provided.")

    coordinator = FollowUpCoordinator(db)
    await coordinator.ensure_assessment(assessment_id)

    stored = await storage.save(document)
    try:
        record = await coordinator.record_upload(assessment_id, stored, doc_type)
    except AppError:
        storage.discard(stored)
        raise
    return DocumentResponse.model_validate(record)


@router.post(
    "/assessments/{assessment_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
async def post_message(
    assessment_id: int,
    request: MessageCreate,
    token: dict = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    message = await FollowUpCoordinator(db).post_message(assessment_id, request.sender, request.text)
    return MessageResponse.from_message(message)


@router.get("/assessments/{assessment_id}/messages", response_model=list[MessageResponse])
async def get_messages(
    assessment_id: int,
    token: dict = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> list[MessageResponse]:
    messages = await FollowUpCoordinator(db).get_messages(assessment_id)
    return [MessageResponse.from_message(m) for m in messages]
