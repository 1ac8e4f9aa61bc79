"""
Follow-up thread of an assessment.

The thread is an append-only log of messages ordered by creation time.
Three producers write into it:
  - reviewers requesting documents (tagged JSON payload, status untouched)
  - document uploads (Document row + a System message, written together)
  - plain chat messages from either side
"""
from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidInput, NotFound
from app.models.assessment import Assessment, Document, Message
from app.schemas.followup import decode_document_request, encode_document_request
from app.services.document_storage import StoredFile
from app.services.persistence import unit_of_work

logger = structlog.get_logger()

BANK_SENDER = "Bank Manager"
SYSTEM_SENDER = "System"


def upload_notice(original_name: str, doc_type: Optional[str]) -> str:
    return f'Customer uploaded a document: "{original_name}" ({doc_type or "unspecified type"}).'


class FollowUpCoordinator:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def ensure_assessment(self, assessment_id: int) -> None:
        async with unit_of_work(self.session, "lookup_assessment", commit=False):
            exists = await self.session.scalar(
                select(Assessment.id).where(Assessment.id == assessment_id)
            )
        if exists is None:
            raise NotFound(f"Assessment {assessment_id} not found")

    async def request_documents(
        self,
        assessment_id: int,
        doc_types: list[str],
        sender: str = BANK_SENDER,
    ) -> Message:
        if not doc_types:
            raise InvalidInput("At least one document type must be requested.")

        await self.ensure_assessment(assessment_id)
        message = Message(
            assessment_id=assessment_id,
            sender=sender,
            text=encode_document_request(doc_types),
        )
        async with unit_of_work(self.session, "request_documents", assessment_id=assessment_id):
            self.session.add(message)
            await self.session.flush()

        logger.info("documents_requested", assessment_id=assessment_id, doc_types=doc_types, sender=sender)
        return message

    async def record_upload(
        self,
        assessment_id: Optional[int],
        stored_file: Optional[StoredFile],
        doc_type: Optional[str] = None,
    ) -> Document:
        """Create the Document row and its System message in one transaction."""
        if stored_file is None or assessment_id is None:
            raise InvalidInput("No file or assessment ID provided.")

        await self.ensure_assessment(assessment_id)
        doc_type = (doc_type or "").strip() or None

        document = Document(
            assessment_id=assessment_id,
            file_name=stored_file.stored_name,
            original_name=stored_file.original_name,
            file_path=stored_file.storage_path,
            doc_type=doc_type,
        )
        notice = Message(
            assessment_id=assessment_id,
            sender=SYSTEM_SENDER,
            text=upload_notice(stored_file.original_name, doc_type),
        )
        async with unit_of_work(self.session, "record_document_upload", assessment_id=assessment_id):
            self.session.add(document)
            self.session.add(notice)
            await self.session.flush()

        logger.info(
            "document_uploaded",
            assessment_id=assessment_id,
            document_id=document.id,
            doc_type=doc_type,
            stored_name=stored_file.stored_name,
        )
        return document

    async def post_message(self, assessment_id: int, sender: str, text: str) -> Message:
        if not sender or not text:
            raise InvalidInput("Both sender and text are required.")
        if decode_document_request(text) is not None:
            raise InvalidInput("Document requests must be sent through the document-request endpoint.")

        await self.ensure_assessment(assessment_id)
        message = Message(assessment_id=assessment_id, sender=sender, text=text)
        async with unit_of_work(self.session, "post_message", assessment_id=assessment_id):
            self.session.add(message)
            await self.session.flush()

        logger.info("message_posted", assessment_id=assessment_id, message_id=message.id, sender=sender)
        return message

    async def get_messages(self, assessment_id: int) -> list[Message]:
        await self.ensure_assessment(assessment_id)
        stmt = (
            select(Message)
            .where(Message.assessment_id == assessment_id)
            .order_by(Message.created_at, Message.id)
        )
        async with unit_of_work(self.session, "get_messages", commit=False):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
