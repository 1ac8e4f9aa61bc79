"""
Question generator tests with a fake completion client.
"""
import json
from typing import Optional

import pytest

from app.core.errors import (
    InvalidInput,
    MalformedUpstreamResponse,
    RateLimited,
    UpstreamFormatError,
    UpstreamUnavailable,
)
from app.services.question_generator import (
    QUESTION_COUNT,
    QuestionGenerator,
    build_prompt,
    resolve_language,
)


class FakeCompletionClient:
    def __init__(self, text: str = "", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls = []

    async def complete(self, prompt, language="en", temperature=None):
        self.calls.append({"prompt": prompt, "language": language, "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.text


def _items(count=QUESTION_COUNT, options=4):
    scale = [1.0, 0.7, 0.4, 0.1, 0.05]
    return [
        {
            "id": f"model_id_{i}",
            "question": f"प्रश्न {i}",
            "options": [{"text": f"विकल्प {j}", "value": scale[j]} for j in range(options)],
        }
        for i in range(count)
    ]


def _wrapped(items) -> str:
    return "Sure! Here are your questions:\n```json\n" + json.dumps(items, ensure_ascii=False) + "\n```"


class TestPrompt:
    def test_language_and_exclusions(self):
        prompt = build_prompt(["savings_habit", "emergency_fund"], "Telugu")
        assert "exactly 7" in prompt
        assert "savings_habit, emergency_fund" in prompt
        assert "in Telugu" in prompt
        for value in ("1.0", "0.7", "0.4", "0.1"):
            assert f'"value": {value}' in prompt

    def test_resolve_language(self):
        assert resolve_language("hi") == ("hi", "Hindi")
        assert resolve_language("TE") == ("te", "Telugu")
        assert resolve_language("fr") == ("en", "English")
        assert resolve_language(None) == ("en", "English")


class TestGenerate:
    @pytest.mark.asyncio
    async def test_success_renumbers_and_tags_language(self):
        client = FakeCompletionClient(_wrapped(_items()))
        questions = await QuestionGenerator(client).generate(["q_core_1"], "hi")

        assert len(questions) == 7
        assert [q.id for q in questions] == [f"dynamic_question_{i}" for i in range(1, 8)]
        assert all(q.language == "hi" for q in questions)
        assert client.calls[0]["language"] == "hi"
        assert "Hindi" in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_unknown_language_prompts_in_english(self):
        client = FakeCompletionClient(_wrapped(_items()))
        questions = await QuestionGenerator(client).generate([], "xx")
        assert questions[0].language == "en"
        assert "English" in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_no_array_is_malformed(self):
        client = FakeCompletionClient("I'm sorry, I can't do that.")
        with pytest.raises(MalformedUpstreamResponse):
            await QuestionGenerator(client).generate([], "en")

    @pytest.mark.asyncio
    async def test_wrong_count_is_format_error(self):
        client = FakeCompletionClient(_wrapped(_items(count=5)))
        with pytest.raises(UpstreamFormatError) as exc:
            await QuestionGenerator(client).generate([], "en")
        assert exc.value.kind.value == "UPSTREAM_FORMAT_ERROR"

    @pytest.mark.asyncio
    async def test_wrong_option_count_is_format_error(self):
        client = FakeCompletionClient(_wrapped(_items(options=5)))
        with pytest.raises(UpstreamFormatError):
            await QuestionGenerator(client).generate([], "en")

    @pytest.mark.asyncio
    async def test_upstream_errors_propagate_without_retry(self):
        client = FakeCompletionClient(error=RateLimited("quota"))
        with pytest.raises(RateLimited):
            await QuestionGenerator(client).generate([], "en")
        assert len(client.calls) == 1

        client = FakeCompletionClient(error=UpstreamUnavailable("down"))
        with pytest.raises(UpstreamUnavailable):
            await QuestionGenerator(client).generate([], "en")
        assert len(client.calls) == 1


class TestSummary:
    @pytest.mark.asyncio
    async def test_summary_uses_configured_temperature(self):
        client = FakeCompletionClient("You are a disciplined saver.")
        text = await QuestionGenerator(client, summary_temperature=0.5).summarize("Summarise my result")
        assert text == "You are a disciplined saver."
        assert client.calls[0]["temperature"] == 0.5

    @pytest.mark.asyncio
    async def test_empty_message(self):
        with pytest.raises(InvalidInput):
            await QuestionGenerator(FakeCompletionClient()).summarize("   ")
