"""
Unit-of-work helper shared by the stores.

Everything written inside one ``unit_of_work`` block is committed together
or rolled back together; database failures surface as StorageFailure
(or Conflict, when the caller marks unique-key violations as such).
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppError, Conflict, StorageFailure

logger = structlog.get_logger()


@asynccontextmanager
async def unit_of_work(
    session: AsyncSession,
    operation: str,
    conflict_message: Optional[str] = None,
    commit: bool = True,
    **context,
) -> AsyncIterator[AsyncSession]:
    try:
        yield session
        if commit:
            await session.commit()
    except AppError:
        await session.rollback()
        raise
    except IntegrityError as e:
        await session.rollback()
        if conflict_message:
            logger.info("storage_conflict", operation=operation, **context)
            raise Conflict(conflict_message, original_error=e) from e
        logger.error("storage_failure", operation=operation, error=str(e.orig), **context)
        raise StorageFailure(f"{operation} failed: {e.orig}", original_error=e) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("storage_failure", operation=operation, error=str(e), **context)
        raise StorageFailure(f"{operation} failed: {e}", original_error=e) from e
