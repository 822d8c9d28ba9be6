"""Shared configuration and utilities for the review pipeline."""

import functools
import logging
import os
import time

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Environment & logging (initialised once on first import)
# ---------------------------------------------------------------------------
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
USE_MOCK: bool = os.getenv("USE_MOCK", "false").lower() == "true"
DEFAULT_MODEL: str = os.getenv("REVIEW_MODEL", "gemini-2.5-flash-lite")

# Bound on concurrent file analyses; sized for the provider's rate limits.
MAX_WORKERS: int = int(os.getenv("REVIEW_MAX_WORKERS", "4"))

# Hard timeout (seconds) for a single LLM call.
LLM_TIMEOUT: float = float(os.getenv("REVIEW_LLM_TIMEOUT", "120"))

CUSTOM_PRICING_JSON: str | None = os.getenv("CUSTOM_PRICING_JSON")

SUPPORTED_LANGUAGES: frozenset[str] = frozenset(
    {"pyspark", "python", "scala", "sql", "terraform"}
)

_LANGUAGE_ALIASES: dict[str, str] = {
    "tf": "terraform",
    "hcl": "terraform",
    "py": "python",
    "spark": "pyspark",
}


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------
def validate_language(language: str) -> str:
    """Return the canonical tag for *language*.

    Accepts the supported tags case-insensitively plus a few aliases
    (``tf`` -> ``terraform``); raises ``ValueError`` otherwise.
    """
    tag = (language or "").strip().lower()
    tag = _LANGUAGE_ALIASES.get(tag, tag)
    if tag not in SUPPORTED_LANGUAGES:
        raise ValueError(
            f"Unsupported language: {language!r}. Expected one of "
            f"{', '.join(sorted(SUPPORTED_LANGUAGES))}."
        )
    return tag


# ---------------------------------------------------------------------------
# Retry decorator
# ---------------------------------------------------------------------------
def with_retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    retryable: tuple[type[Exception], ...] = (Exception,),
    should_retry=None,
):
    """Decorator: retry a function with exponential back-off.

    *should_retry*, when given, is called with the caught exception and
    can veto a retry for errors that match *retryable* but are permanent.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            last_exc: Exception | None = None
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except retryable as exc:
                    if should_retry is not None and not should_retry(exc):
                        raise
                    last_exc = exc
                    if attempt < max_retries - 1:
                        delay = base_delay * (2**attempt)
                        logger.warning(
                            "Attempt %d/%d for %s failed: %s. Retrying in %.1fs...",
                            attempt + 1,
                            max_retries,
                            func.__name__,
                            exc,
                            delay,
                        )
                        time.sleep(delay)
            raise last_exc  # type: ignore[misc]

        return wrapper

    return decorator
