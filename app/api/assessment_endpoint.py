"""
Assessment lifecycle endpoints.

POST   /v1/assessments                                → submit (score → status)
GET    /v1/assessments                                → reviewer dashboard
GET    /v1/customers/{customer_id}/assessments/latest → latest assessment + thread
PATCH  /v1/assessments/{assessment_id}/status         → reviewer override (audit-logged)
GET    /v1/assessments/{assessment_id}/status-history → audit trail of overrides
DELETE /v1/assessments/{assessment_id}                → blocked while the thread is non-empty
"""
from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import caller_identity, require_reviewer, verify_token
from app.models.database import get_db
from app.schemas.assessment import (
    AssessmentDetail,
    AssessmentFilter,
    AssessmentListItem,
    AssessmentResponse,
    AssessmentStatus,
    AssessmentSubmitRequest,
    LatestAssessmentResponse,
    StatusChangeResponse,
    StatusUpdateRequest,
)
from app.services.assessment_store import AssessmentStore

logger = structlog.get_logger()
router = APIRouter(prefix="/v1", tags=["assessments"])


@router.post(
    "/assessments",
    response_model=AssessmentResponse,
    status_code=201,
    summary="Submit a completed questionnaire",
)
async def submit_assessment(
    request: AssessmentSubmitRequest,
    token: dict = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> AssessmentResponse:
    assessment = await AssessmentStore(db).submit(request)
    return AssessmentResponse.model_validate(assessment)


@router.get("/assessments", response_model=list[AssessmentListItem])
async def list_assessments(
    status: Optional[AssessmentStatus] = None,
    customer_id: Optional[int] = None,
    token: dict = Depends(require_reviewer),
    db: AsyncSession = Depends(get_db),
) -> list[AssessmentListItem]:
    assessments = await AssessmentStore(db).list_all(AssessmentFilter(status=status, customer_id=customer_id))
    return [AssessmentListItem.from_assessment(a) for a in assessments]


@router.get("/customers/{customer_id}/assessments/latest", response_model=LatestAssessmentResponse)
async def latest_assessment(
    customer_id: int,
    token: dict = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> LatestAssessmentResponse:
    assessment = await AssessmentStore(db).get_latest(customer_id)
    if assessment is None:
        return LatestAssessmentResponse(assessment=None)
    return LatestAssessmentResponse(assessment=AssessmentDetail.from_assessment(assessment))


@router.patch("/assessments/{assessment_id}/status", response_model=AssessmentResponse)
async def update_status(
    assessment_id: int,
    update: StatusUpdateRequest,
    token: dict = Depends(require_reviewer),
    db: AsyncSession = Depends(get_db),
) -> AssessmentResponse:
    assessment = await AssessmentStore(db).update_status(
        assessment_id, update.status, changed_by=caller_identity(token),
    )
    return AssessmentResponse.model_validate(assessment)


@router.get("/assessments/{assessment_id}/status-history", response_model=list[StatusChangeResponse])
async def status_history(
    assessment_id: int,
    token: dict = Depends(require_reviewer),
    db: AsyncSession = Depends(get_db),
) -> list[StatusChangeResponse]:
    store = AssessmentStore(db)
    await store.get(assessment_id)
    return [StatusChangeResponse.model_validate(row) for row in await store.status_history(assessment_id)]


@router.delete("/assessments/{assessment_id}", status_code=204)
async def delete_assessment(
    assessment_id: int,
    token: dict = Depends(require_reviewer),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await AssessmentStore(db).delete(assessment_id)
    return Response(status_code=204)


@router.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "service": "credit-assessment-service"}
