"""Data models for code review findings."""

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

Severity = Literal["critical", "high", "medium", "low", "info"]
Origin = Literal["pattern", "ai", "both"]

# Most severe first.
SEVERITIES: tuple[str, ...] = ("critical", "high", "medium", "low", "info")
SEVERITY_RANK: dict[str, int] = {name: rank for rank, name in enumerate(SEVERITIES)}


class Finding(BaseModel):
    """A single reported issue, from the rule engine, the LLM, or both."""

    severity: Severity = Field(description="critical, high, medium, low, info")
    category: str = Field(description="Free-form tag, e.g. security, performance")
    message: str = Field(description="What the issue is")
    suggestion: str = Field(default="", description="How to fix it")
    reasoning: str | None = Field(
        default=None, description="Why it matters (LLM-sourced findings only)"
    )
    line_number: int | None = Field(default=None, description="1-based line number")
    file: str = Field(default="", description="File path the finding belongs to")
    origin: Origin = Field(default="pattern", description="pattern, ai, both")
    rule_id: str | None = Field(
        default=None, description="Catalog rule id for pattern findings"
    )


class AIIssue(BaseModel):
    """One issue as reported by the LLM, after lenient coercion."""

    severity: Severity = "medium"
    category: str = "general"
    message: str
    suggestion: str = ""
    reasoning: str | None = None
    line_number: int | None = Field(
        default=None,
        validation_alias=AliasChoices("lineNumber", "line_number", "line"),
    )

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value):
        tag = str(value or "").strip().lower()
        return tag if tag in SEVERITY_RANK else "medium"

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value):
        text = str(value).strip() if value is not None else ""
        return text or "general"

    @field_validator("message")
    @classmethod
    def _require_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message must not be empty")
        return value

    @field_validator("suggestion", mode="before")
    @classmethod
    def _coerce_suggestion(cls, value):
        return "" if value is None else str(value)

    @field_validator("reasoning", mode="before")
    @classmethod
    def _coerce_reasoning(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("line_number", mode="before")
    @classmethod
    def _coerce_line(cls, value):
        if value is None or isinstance(value, bool):
            return None
        try:
            line = int(value)
        except (TypeError, ValueError, OverflowError):
            return None
        return line if line > 0 else None


class AIReview(BaseModel):
    """Normalized LLM answer for one file."""

    issues: list[AIIssue] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    refactored_code: str | None = None
    degraded: bool = Field(
        default=False, description="True when the response could not be parsed"
    )
