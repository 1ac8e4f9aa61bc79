"""
Dynamic behavioural-finance questions.

Builds the generation prompt (language, excluded topics, fixed item shape),
calls the completion service, and hands the raw text to the sanitizer.
The result is exactly QUESTION_COUNT items with OPTIONS_PER_QUESTION options
each, ids renumbered dynamic_question_1..N; anything else is an
UpstreamFormatError, never a partial list.
"""
from __future__ import annotations

from typing import Optional

import structlog

from app.core.errors import AppError, InvalidInput, UpstreamFormatError
from app.schemas.questions import Question
from app.services.completion_client import CompletionClient
from app.services.metrics import QUESTION_GENERATION_FAILURES
from app.services.question_sanitizer import parse_questions

logger = structlog.get_logger()

LANGUAGES = {"en": "English", "hi": "Hindi", "te": "Telugu"}
DEFAULT_LANGUAGE = "en"

QUESTION_COUNT = 7
OPTIONS_PER_QUESTION = 4

# (behaviour described by the option, weight), most to least responsible
RESPONSIBILITY_SCALE = [
    ("very responsible behavior", 1.0),
    ("moderately responsible behavior", 0.7),
    ("slightly risky behavior", 0.4),
    ("high-risk or impulsive behavior", 0.1),
]


def resolve_language(code: Optional[str]) -> tuple[str, str]:
    """Unknown or missing codes fall back to English."""
    code = (code or "").strip().lower()
    if code in LANGUAGES:
        return code, LANGUAGES[code]
    return DEFAULT_LANGUAGE, LANGUAGES[DEFAULT_LANGUAGE]


def build_prompt(excluded_topic_ids: list[str], language_name: str) -> str:
    excluded = ", ".join(excluded_topic_ids) if excluded_topic_ids else "none"
    options = ",\n".join(
        f'      {{ "text": "An option indicating a {behaviour} in {language_name}.", "value": {value} }}'
        for behaviour, value in RESPONSIBILITY_SCALE
    )
    return f"""
You are an AI assistant for a financial credit assessment tool.
Your task is to generate exactly {QUESTION_COUNT} unique, insightful, behavioral finance questions for a user.

IMPORTANT: The user's primary language is {language_name}. You MUST generate the "question" and the "text" for all options in {language_name}.

The questions must NOT be about these specific topics: {excluded}.
The questions should help understand the user's attitude towards financial planning, risk, and discipline.

Provide the output in a single, clean JSON array of objects. Each object must have this exact structure (with the text translated to {language_name}):
{{
  "id": "dynamic_question_N",
  "question": "The text of the question in {language_name}.",
  "options": [
{options}
  ]
}}
""".strip()


class QuestionGenerator:
    def __init__(self, client: CompletionClient, summary_temperature: float = 0.5):
        self.client = client
        self.summary_temperature = summary_temperature

    async def generate(
        self,
        excluded_topic_ids: list[str],
        language: Optional[str] = None,
    ) -> list[Question]:
        code, language_name = resolve_language(language)
        prompt = build_prompt(excluded_topic_ids, language_name)

        try:
            raw = await self.client.complete(prompt, language=code)
            questions = parse_questions(raw)
            self._check_shape(questions)
        except AppError as e:
            QUESTION_GENERATION_FAILURES.labels(kind=e.kind.value).inc()
            logger.warning("question_generation_failed", kind=e.kind.value, language=code, error=e.message)
            raise

        for question in questions:
            question.language = code

        logger.info("questions_generated", count=len(questions), language=code, excluded=len(excluded_topic_ids))
        return questions

    @staticmethod
    def _check_shape(questions: list[Question]) -> None:
        if len(questions) != QUESTION_COUNT:
            raise UpstreamFormatError(
                f"Expected {QUESTION_COUNT} questions from the completion service, got {len(questions)}"
            )
        for question in questions:
            if len(question.options) != OPTIONS_PER_QUESTION:
                raise UpstreamFormatError(
                    f"{question.id} has {len(question.options)} options, expected {OPTIONS_PER_QUESTION}"
                )

    async def summarize(self, message: str) -> str:
        if not message or not message.strip():
            raise InvalidInput("Request body must contain a 'message' field")

        text = await self.client.complete(message, temperature=self.summary_temperature)
        logger.info("summary_generated", prompt_chars=len(message), response_chars=len(text))
        return text
