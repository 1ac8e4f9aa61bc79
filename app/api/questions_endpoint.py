"""
POST /v1/questions/generate → 7 AI-generated questions in the requested language
POST /v1/questions/summary  → free-text completion for the result summary

Upstream failures come back with a stable error kind
(RATE_LIMITED / UPSTREAM_UNAVAILABLE / UPSTREAM_TIMEOUT / UPSTREAM_FORMAT_ERROR).
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_question_generator
from app.core.auth import verify_token
from app.models.database import get_db
from app.schemas.questions import (
    GenerateQuestionsRequest,
    Question,
    SummaryRequest,
    SummaryResponse,
)
from app.services.question_generator import QuestionGenerator, resolve_language
from app.services.question_store import QuestionStore

router = APIRouter(prefix="/v1/questions", tags=["questions"])


@router.post("/generate", response_model=list[Question])
async def generate_questions(
    request: GenerateQuestionsRequest,
    token: dict = Depends(verify_token),
    generator: QuestionGenerator = Depends(get_question_generator),
    db: AsyncSession = Depends(get_db),
) -> list[Question]:
    questions = await generator.generate(request.core_question_ids, request.language)
    if request.persist:
        language, _ = resolve_language(request.language)
        await QuestionStore(db).save_batch(questions, language)
    return questions


@router.post("/summary", response_model=SummaryResponse)
async def summarize(
    request: SummaryRequest,
    token: dict = Depends(verify_token),
    generator: QuestionGenerator = Depends(get_question_generator),
) -> SummaryResponse:
    return SummaryResponse(text=await generator.summarize(request.message))
