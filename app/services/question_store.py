"""
Optional persistence of generated questions (dynamic_question table).
"""
from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assessment import DynamicQuestion
from app.schemas.questions import Question
from app.services.persistence import unit_of_work

logger = structlog.get_logger()


class QuestionStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_batch(self, questions: list[Question], language: str) -> list[DynamicQuestion]:
        rows = [
            DynamicQuestion(
                id=str(uuid.uuid4()),
                question_key=q.id,
                question=q.question,
                language=language,
                options=[o.model_dump() for o in q.options],
            )
            for q in questions
        ]
        async with unit_of_work(self.session, "save_dynamic_questions"):
            self.session.add_all(rows)
            await self.session.flush()

        logger.info("dynamic_questions_saved", count=len(rows), language=language)
        return rows
