"""
Recovers the question array from free-form completion text.

Models tend to wrap the JSON payload in prose or ``` fences. The recovery
is deliberately simple: take everything from the first "[" to the last "]"
and parse that. Anything that still fails to parse is reported as
MalformedUpstreamResponse; there is no partial-array salvage.
"""
from __future__ import annotations

import json

from pydantic import TypeAdapter, ValidationError

from app.core.errors import MalformedUpstreamResponse
from app.schemas.questions import Question

QUESTION_ID_PREFIX = "dynamic_question_"

_question_list = TypeAdapter(list[Question])


def extract_json_array(raw: str) -> str:
    if not isinstance(raw, str):
        raise MalformedUpstreamResponse("AI response was not text.")

    start = raw.find("[")
    end = raw.rfind("]")
    if start == -1 or end == -1 or end < start:
        raise MalformedUpstreamResponse("AI response did not contain a valid JSON array.")
    return raw[start:end + 1]


def parse_questions(raw: str) -> list[Question]:
    candidate = extract_json_array(raw)
    try:
        payload = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        raise MalformedUpstreamResponse(f"AI response JSON could not be parsed: {e}", original_error=e) from e

    if not isinstance(payload, list):
        raise MalformedUpstreamResponse("AI response JSON is not an array.")

    try:
        questions = _question_list.validate_python(payload)
    except ValidationError as e:
        raise MalformedUpstreamResponse(
            f"AI response items do not match the question schema: {e.error_count()} error(s)",
            original_error=e,
        ) from e

    for index, question in enumerate(questions, start=1):
        question.id = f"{QUESTION_ID_PREFIX}{index}"
    return questions
