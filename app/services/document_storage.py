"""
Local-disk storage for uploaded documents.

Only produces (stored name, original name, path); the assessment core never
reads file bytes.
"""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from pathlib import Path

import structlog
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.core.errors import InvalidInput, StorageFailure

logger = structlog.get_logger()

MAX_EXTENSION_LENGTH = 10


@dataclass(frozen=True)
class StoredFile:
    stored_name: str
    original_name: str
    storage_path: str


class LocalDocumentStorage:
    def __init__(self, root: str, field_name: str = "document"):
        self.root = Path(root)
        self.field_name = field_name

    def _unique_name(self, original_name: str) -> str:
        extension = Path(original_name).suffix
        if len(extension) > MAX_EXTENSION_LENGTH or not extension[1:].isalnum():
            extension = ""
        return f"{self.field_name}-{int(time.time() * 1000)}-{uuid.uuid4()}{extension.lower()}"

    async def save(self, upload: UploadFile) -> StoredFile:
        if upload is None or not upload.filename:
            raise InvalidInput("No file provided.")

        original_name = Path(upload.filename).name[:255]
        stored_name = self._unique_name(original_name)
        target = self.root / stored_name
        try:
            content = await upload.read()
            await run_in_threadpool(self.root.mkdir, parents=True, exist_ok=True)
            await run_in_threadpool(target.write_bytes, content)
        except OSError as e:
            logger.error("document_store_failed", stored_name=stored_name, error=str(e))
            raise StorageFailure(f"Could not store uploaded file: {e}", original_error=e) from e

        logger.info("document_stored", stored_name=stored_name, size=len(content))
        return StoredFile(
            stored_name=stored_name,
            original_name=original_name,
            storage_path=target.as_posix(),
        )

    def discard(self, stored: StoredFile) -> None:
        """Remove a stored file whose database record was not written."""
        try:
            Path(stored.storage_path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("document_discard_failed", stored_name=stored.stored_name, error=str(e))
