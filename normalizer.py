"""LLM response normalization.

Models are asked for a bare JSON object, but routinely wrap it in prose or a
fenced block, leave trailing commas, put raw newlines or unescaped quotes
inside string values, or dump a whole refactored file into one field. The
repair ladder below tries progressively more invasive fixes and stops at the
first one that yields a JSON object with an ``issues`` list.
"""

import json
import logging
import re
from collections.abc import Callable

from pydantic import ValidationError

from models import AIIssue, AIReview

logger = logging.getLogger(__name__)

FALLBACK_RECOMMENDATION = "AI analysis returned non-standard format. Please try again."

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_LEADING_COMMA = re.compile(r"{\s*,")
_REFACTORED_KEY = re.compile(r'"refactoredCode"\s*:\s*"')

_CONTROL_ESCAPES: dict[str, str] = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}
# Characters that may legally follow the closing quote of a JSON string
_STRING_TERMINATORS = frozenset({":", ",", "}", "]", ""})

_ARRAY_KEYS: tuple[str, ...] = ("issues", "strengths", "recommendations")


# ---------------------------------------------------------------------------
# Pre-processing
# ---------------------------------------------------------------------------
def extract_fenced(text: str) -> str:
    """Return the body of the first fenced code block, or *text* itself."""
    match = _FENCED_BLOCK.search(text)
    return match.group(1).strip() if match else text.strip()


def slice_object(text: str) -> str:
    """Trim everything before the first ``{`` and after the last ``}``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return text
    return text[start : end + 1]


# ---------------------------------------------------------------------------
# Text repairs
# ---------------------------------------------------------------------------
def _next_significant(text: str, start: int) -> str:
    for ch in text[start:]:
        if not ch.isspace():
            return ch
    return ""


def escape_control_chars(text: str) -> str:
    """Escape raw newlines/tabs/CRs inside string literals; drop other controls."""
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch < " ":
                out.append(_CONTROL_ESCAPES.get(ch, ""))
                continue
        elif ch == '"':
            in_string = True
        out.append(ch)
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def escape_inner_quotes(text: str) -> str:
    """
    Escape quotes that sit inside a string literal.

    A quote closes the current string only when the next non-blank character
    could legally follow a JSON string; any other quote is treated as part of
    the value and escaped.
    """
    out: list[str] = []
    in_string = False
    i = 0
    length = len(text)
    while i < length:
        ch = text[i]
        if not in_string:
            if ch == '"':
                in_string = True
            out.append(ch)
        elif ch == "\\":
            out.append(text[i : i + 2])
            i += 2
            continue
        elif ch == '"':
            if _next_significant(text, i + 1) in _STRING_TERMINATORS:
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
        elif ch < " ":
            out.append(_CONTROL_ESCAPES.get(ch, ""))
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def _string_end(text: str, start: int) -> int | None:
    """Index just past the string literal opening at *start*; None if unterminated."""
    escaped = False
    for index in range(start + 1, len(text)):
        ch = text[index]
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            return index + 1
    return None


def drop_refactored_code(text: str) -> str:
    """Remove the ``refactoredCode`` member (and its leading comma)."""
    match = _REFACTORED_KEY.search(text)
    if not match:
        return text
    end = _string_end(text, match.end() - 1)
    if end is None:
        return text

    head = text[: match.start()].rstrip()
    if head.endswith(","):
        head = head[:-1]
    return _LEADING_COMMA.sub("{", head + text[end:])


def extract_array(text: str, key: str) -> str | None:
    """Return the exact ``[...]`` span of *key*'s array, tracking bracket depth."""
    match = re.search(rf'"{re.escape(key)}"\s*:\s*\[', text)
    if not match:
        return None

    start = match.end() - 1
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


# ---------------------------------------------------------------------------
# Repair ladder
# ---------------------------------------------------------------------------
def _load_object(text: str) -> dict | None:
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict) or not isinstance(parsed.get("issues"), list):
        return None
    return parsed


def _lenient(text: str) -> str:
    return strip_trailing_commas(escape_control_chars(text))


def _requoted(text: str) -> str:
    # Works on the raw text: escape_inner_quotes escapes control characters
    # with its own string tracking.
    return escape_inner_quotes(strip_trailing_commas(text))


def parse_direct(text: str) -> dict | None:
    return _load_object(text)


def parse_lenient(text: str) -> dict | None:
    return _load_object(_lenient(text))


def parse_requoted(text: str) -> dict | None:
    return _load_object(_requoted(text))


def parse_without_refactored(text: str) -> dict | None:
    return _load_object(drop_refactored_code(_requoted(text)))


def parse_arrays(text: str) -> dict | None:
    repaired = _requoted(text)
    arrays = {key: extract_array(repaired, key) for key in _ARRAY_KEYS}
    if not any(arrays.values()):
        return None
    body = ",".join(f'"{key}": {span or "[]"}' for key, span in arrays.items())
    return _load_object(strip_trailing_commas("{" + body + "}"))


REPAIR_LADDER: tuple[tuple[str, Callable[[str], dict | None]], ...] = (
    ("direct parse", parse_direct),
    ("trailing commas / control characters", parse_lenient),
    ("unescaped quotes", parse_requoted),
    ("refactoredCode removal", parse_without_refactored),
    ("array extraction", parse_arrays),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item)]


def _coerce_issues(raw_issues: list) -> list[AIIssue]:
    issues: list[AIIssue] = []
    for index, item in enumerate(raw_issues):
        if not isinstance(item, dict):
            logger.warning("Skipping AI issue #%d: not an object", index)
            continue
        try:
            issues.append(AIIssue.model_validate(item))
        except (ValidationError, ValueError, TypeError, ArithmeticError) as e:
            logger.warning("Skipping AI issue #%d: %s", index, e)
    return issues


def parse_issues_payload(text: str) -> tuple[str, dict] | None:
    """Run the repair ladder; return (step name, parsed object) or None."""
    for name, attempt in REPAIR_LADDER:
        parsed = attempt(text)
        if parsed is not None:
            return name, parsed
    return None


def normalize(raw_text: str | None) -> AIReview:
    """
    Parse a raw LLM answer into an ``AIReview``. Never raises.

    On total failure the review is empty, ``degraded`` is set and a
    human-readable advisory is placed in ``recommendations``.
    """
    text = slice_object(extract_fenced(raw_text or ""))

    outcome = parse_issues_payload(text)
    if outcome is None:
        logger.error(
            "Failed to parse LLM response as JSON. Response length: %d", len(text)
        )
        return AIReview(recommendations=[FALLBACK_RECOMMENDATION], degraded=True)

    step, parsed = outcome
    if step != "direct parse":
        logger.warning("LLM response recovered via %s", step)

    refactored = parsed.get("refactoredCode")
    return AIReview(
        issues=_coerce_issues(parsed["issues"]),
        strengths=_string_list(parsed.get("strengths")),
        recommendations=_string_list(parsed.get("recommendations")),
        refactored_code=refactored if isinstance(refactored, str) and refactored else None,
    )
