"""
Gemini text-completion client.

One-shot request → raw text. No retries here: quota / throttling is
reported as RateLimited, an expired deadline as UpstreamTimeout and every
other failure as UpstreamUnavailable. Retry policy belongs to the caller.
"""
from __future__ import annotations

import asyncio
import re
from typing import Optional, Protocol

import structlog
from google import genai
from google.genai import types

from app.core.errors import RateLimited, UpstreamTimeout, UpstreamUnavailable

logger = structlog.get_logger()


class CompletionClient(Protocol):
    async def complete(
        self,
        prompt: str,
        language: str = "en",
        temperature: Optional[float] = None,
    ) -> str:
        ...


_RATE_LIMIT_MESSAGE = re.compile(r"(?<!\d)429(?!\d)|\bRESOURCE_EXHAUSTED\b")


def is_rate_limit_error(error: Exception) -> bool:
    if getattr(error, "code", None) == 429:
        return True
    if getattr(error, "status", None) in (429, "RESOURCE_EXHAUSTED"):
        return True
    return _RATE_LIMIT_MESSAGE.search(str(error)) is not None


class GeminiCompletionClient:
    """Wrapper for the google-genai async client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        timeout_seconds: float = 30.0,
        client=None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client = client

    @property
    def client(self):
        if self._client is None:
            try:
                self._client = genai.Client(api_key=self.api_key)
            except Exception as e:
                logger.error("gemini_client_init_failed", error=str(e))
                raise UpstreamUnavailable(f"Completion service is not configured: {e}", original_error=e) from e
        return self._client

    async def complete(
        self,
        prompt: str,
        language: str = "en",
        temperature: Optional[float] = None,
    ) -> str:
        config = types.GenerateContentConfig(temperature=temperature) if temperature is not None else None
        logger.debug("completion_requested", model=self.model, language=language, prompt_chars=len(prompt))

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(model=self.model, contents=prompt, config=config),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.warning("completion_timeout", model=self.model, timeout_s=self.timeout_seconds)
            raise UpstreamTimeout(
                f"Completion service did not answer within {self.timeout_seconds}s", original_error=e,
            ) from e
        except UpstreamUnavailable:
            raise
        except Exception as e:
            if is_rate_limit_error(e):
                logger.warning("completion_rate_limited", model=self.model, error=str(e))
                raise RateLimited(
                    "Could not complete request due to high traffic (API rate limit exceeded). "
                    "Please try again later.",
                    original_error=e,
                ) from e
            logger.error("completion_failed", model=self.model, error=str(e))
            raise UpstreamUnavailable(f"Completion service failed: {e}", original_error=e) from e

        return response.text or ""
