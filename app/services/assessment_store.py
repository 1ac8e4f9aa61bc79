"""
Assessment persistence.

  submit        → decide status from score, persist, touch customer.last_accessed
  get_latest    → newest assessment of a customer (+ ordered thread), or None
  list_all      → dashboard listing, newest first, with customer names
  update_status → reviewer override, audit-logged
  delete        → refused while messages / documents / audit rows exist

"Latest" is the maximum created_at for the customer; ties go to the
higher id (the later insert).
"""
from __future__ import annotations

from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import Conflict, NotFound
from app.models.assessment import (
    Assessment,
    AssessmentStatusAudit,
    Customer,
    Document,
    Message,
    utcnow,
)
from app.schemas.assessment import (
    AssessmentFilter,
    AssessmentStatus,
    AssessmentSubmitRequest,
)
from app.scoring.decision import decide
from app.services.metrics import ASSESSMENTS_SUBMITTED, STATUS_OVERRIDES
from app.services.persistence import unit_of_work

logger = structlog.get_logger()


class AssessmentStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def submit(self, request: AssessmentSubmitRequest) -> Assessment:
        status = decide(request.score)

        async with unit_of_work(self.session, "submit_assessment", customer_id=request.customer_id):
            customer = await self.session.get(Customer, request.customer_id)
            if customer is None:
                raise NotFound(f"Customer {request.customer_id} not found")

            now = utcnow()
            if customer.last_accessed is not None and now <= customer.last_accessed:
                now = customer.last_accessed + timedelta(microseconds=1)

            assessment = Assessment(
                customer_id=customer.id,
                score=request.score,
                status=status.value,
                answers=request.answers,
                breakdown=request.breakdown,
                language=request.language,
                created_at=now,
                updated_at=now,
            )
            self.session.add(assessment)
            customer.last_accessed = now
            await self.session.flush()

        ASSESSMENTS_SUBMITTED.labels(status=status.value).inc()
        logger.info(
            "assessment_submitted",
            assessment_id=assessment.id,
            customer_id=customer.id,
            score=request.score,
            status=status.value,
            language=request.language,
        )
        return assessment

    async def get(self, assessment_id: int) -> Assessment:
        async with unit_of_work(self.session, "get_assessment", commit=False):
            assessment = await self.session.get(Assessment, assessment_id)
        if assessment is None:
            raise NotFound(f"Assessment {assessment_id} not found")
        return assessment

    async def get_latest(self, customer_id: int) -> Optional[Assessment]:
        stmt = (
            select(Assessment)
            .where(Assessment.customer_id == customer_id)
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
            .limit(1)
            .options(selectinload(Assessment.messages), selectinload(Assessment.documents))
            .execution_options(populate_existing=True)
        )
        async with unit_of_work(self.session, "get_latest_assessment", commit=False, customer_id=customer_id):
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

    async def list_all(self, filter: Optional[AssessmentFilter] = None) -> list[Assessment]:
        stmt = (
            select(Assessment)
            .options(selectinload(Assessment.customer), selectinload(Assessment.documents))
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
            .execution_options(populate_existing=True)
        )
        if filter is not None:
            if filter.status is not None:
                stmt = stmt.where(Assessment.status == filter.status.value)
            if filter.customer_id is not None:
                stmt = stmt.where(Assessment.customer_id == filter.customer_id)

        async with unit_of_work(self.session, "list_assessments", commit=False):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def update_status(
        self,
        assessment_id: int,
        new_status: AssessmentStatus,
        changed_by: str = "unknown",
    ) -> Assessment:
        """Unconditional overwrite; the score is not re-checked."""
        async with unit_of_work(self.session, "update_assessment_status", assessment_id=assessment_id):
            assessment = await self.session.get(Assessment, assessment_id)
            if assessment is None:
                raise NotFound(f"Assessment {assessment_id} not found")

            old_status = assessment.status
            assessment.status = new_status.value
            assessment.updated_at = utcnow()
            self.session.add(AssessmentStatusAudit(
                assessment_id=assessment_id,
                old_status=old_status,
                new_status=new_status.value,
                changed_by=changed_by,
            ))
            await self.session.flush()

        STATUS_OVERRIDES.labels(status=new_status.value).inc()
        logger.info(
            "assessment_status_updated",
            assessment_id=assessment_id,
            old_status=old_status,
            new_status=new_status.value,
            changed_by=changed_by,
        )
        return assessment

    async def status_history(self, assessment_id: int) -> list[AssessmentStatusAudit]:
        stmt = (
            select(AssessmentStatusAudit)
            .where(AssessmentStatusAudit.assessment_id == assessment_id)
            .order_by(AssessmentStatusAudit.changed_at, AssessmentStatusAudit.id)
        )
        async with unit_of_work(self.session, "assessment_status_history", commit=False):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def delete(self, assessment_id: int) -> None:
        async with unit_of_work(self.session, "delete_assessment", assessment_id=assessment_id):
            assessment = await self.session.get(Assessment, assessment_id)
            if assessment is None:
                raise NotFound(f"Assessment {assessment_id} not found")

            dependents = {}
            for label, model in (
                ("messages", Message),
                ("documents", Document),
                ("status changes", AssessmentStatusAudit),
            ):
                count = await self.session.scalar(
                    select(func.count()).select_from(model).where(model.assessment_id == assessment_id)
                )
                if count:
                    dependents[label] = count

            if dependents:
                detail = ", ".join(f"{n} {label}" for label, n in dependents.items())
                raise Conflict(f"Assessment {assessment_id} still has {detail}; deletion is blocked")

            await self.session.delete(assessment)
            await self.session.flush()

        logger.info("assessment_deleted", assessment_id=assessment_id)
