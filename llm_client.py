"""LLM-call collaborator: sends a prompt, returns raw text plus token usage."""

import functools
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from config import DEFAULT_MODEL, LLM_TIMEOUT, USE_MOCK, with_retry
from mock_data import MOCK_RESPONSE

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results & errors
# ---------------------------------------------------------------------------
@dataclass
class LLMResponse:
    """Raw provider answer for one prompt."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""


class LLMError(Exception):
    """Base class for LLM collaborator failures."""


class LLMUnavailableError(LLMError):
    """Provider not configured or not reachable; the AI layer should be skipped."""


class LLMCallError(LLMError):
    """The request reached the provider but failed."""


class LLMTimeoutError(LLMCallError):
    """No answer within the per-call deadline."""


LLMCall = Callable[[str], LLMResponse]


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------
@functools.lru_cache(maxsize=1)
def get_gemini_client() -> genai.Client:
    """Return a cached Gemini client (created once per process)."""
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise LLMUnavailableError("GEMINI_API_KEY not found. Set it in .env file.")
    return genai.Client(
        api_key=api_key,
        http_options=genai_types.HttpOptions(timeout=int(LLM_TIMEOUT * 1000)),
    )


def _is_transient(exc: Exception) -> bool:
    """Server-side failures and rate limits are worth retrying."""
    return isinstance(exc, genai_errors.ServerError) or getattr(exc, "code", None) == 429


@with_retry(
    max_retries=3,
    base_delay=2.0,
    retryable=(genai_errors.APIError,),
    should_retry=_is_transient,
)
def _generate(client: genai.Client, model: str, prompt: str):
    return client.models.generate_content(
        model=model,
        contents=prompt,
        config={"response_mime_type": "application/json"},
    )


class GeminiLLM:
    """Calls Gemini; retries transient errors, classifies the rest."""

    def __init__(self, model: str = DEFAULT_MODEL):
        self.model = model

    def __call__(self, prompt: str) -> LLMResponse:
        client = get_gemini_client()
        try:
            response = _generate(client, self.model, prompt)
        except genai_errors.APIError as e:
            if _is_transient(e) or e.code in (401, 403):
                raise LLMUnavailableError(f"Gemini unavailable ({e.code}): {e}") from e
            raise LLMCallError(f"Gemini request failed ({e.code}): {e}") from e

        usage = response.usage_metadata
        return LLMResponse(
            text=response.text or "",
            input_tokens=(usage.prompt_token_count or 0) if usage else 0,
            output_tokens=(usage.candidates_token_count or 0) if usage else 0,
            model=response.model_version or self.model,
        )


# ---------------------------------------------------------------------------
# Mock
# ---------------------------------------------------------------------------
class MockLLM:
    """Returns a canned response; no API call is made."""

    model = "mock"

    def __init__(self, response: str = MOCK_RESPONSE):
        self.response = response

    def __call__(self, prompt: str) -> LLMResponse:
        logger.debug("[MOCK MODE - No API call made]")
        return LLMResponse(
            text=self.response,
            input_tokens=len(prompt) // 4,
            output_tokens=len(self.response) // 4,
            model=self.model,
        )


def default_llm(model: str = DEFAULT_MODEL) -> LLMCall:
    """Mock client when USE_MOCK is set, Gemini otherwise."""
    if USE_MOCK:
        logger.info("USE_MOCK enabled - LLM responses are canned")
        return MockLLM()
    return GeminiLLM(model)
