"""Review run orchestration - pattern rules + LLM review over a set of files."""

import logging
import time
import uuid
from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from config import CUSTOM_PRICING_JSON, DEFAULT_MODEL, LLM_TIMEOUT, MAX_WORKERS, validate_language
from llm_client import LLMCall, default_llm
from models import SEVERITIES, Finding
from normalizer import FALLBACK_RECOMMENDATION
from pipeline import analyze_file, build_file_graph
from pricing import PricingTable, calculate_cost, load_pricing
from prompts import ANALYSIS_TYPES
from rules import DEFAULT_CATALOG
from sources import SourceFile

logger = logging.getLogger(__name__)

GateStatus = Literal["pass", "fail"]
RunStatus = Literal["success", "failure", "partial"]

# Score penalty per issue, by severity
SCORE_PENALTIES: dict[str, int] = {
    "critical": 25,
    "high": 15,
    "medium": 10,
    "low": 5,
    "info": 2,
}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass
class AnalysisOptions:
    """Knobs for one review run."""

    model: str = DEFAULT_MODEL
    analysis_type: str = "review"
    max_workers: int = MAX_WORKERS
    llm_timeout: float = LLM_TIMEOUT
    enable_ai: bool = True
    disabled_rules: tuple[str, ...] = ()

    def __post_init__(self):
        if self.analysis_type not in ANALYSIS_TYPES:
            raise ValueError(
                f"Unknown analysis type: {self.analysis_type!r}. "
                f"Expected one of {', '.join(ANALYSIS_TYPES)}."
            )
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.llm_timeout <= 0:
            raise ValueError("llm_timeout must be positive")


@dataclass
class SeverityDistribution:
    """Issue counts per severity."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0

    @classmethod
    def from_findings(cls, findings: Sequence[Finding]) -> "SeverityDistribution":
        counts = Counter(finding.severity for finding in findings)
        return cls(**{severity: counts.get(severity, 0) for severity in SEVERITIES})

    @property
    def total(self) -> int:
        return sum(self.as_dict().values())

    def as_dict(self) -> dict[str, int]:
        return {severity: getattr(self, severity) for severity in SEVERITIES}


@dataclass
class TokenUsage:
    """Token counts reported by the LLM provider."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            self.input_tokens + other.input_tokens,
            self.output_tokens + other.output_tokens,
        )


@dataclass
class FileResult:
    """Review results for a single file."""

    path: str
    language: str
    pattern_count: int = 0
    ai_count: int = 0
    issues: list[Finding] = field(default_factory=list)
    error: str | None = None
    strengths: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def score(self) -> int:
        penalty = sum(SCORE_PENALTIES[issue.severity] for issue in self.issues)
        return max(0, min(100, 100 - penalty))

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "language": self.language,
            "pattern_count": self.pattern_count,
            "ai_count": self.ai_count,
            "score": self.score,
            "issues": [issue.model_dump() for issue in self.issues],
            "strengths": list(self.strengths),
            "recommendations": list(self.recommendations),
            "error": self.error,
        }


@dataclass
class RunResult:
    """Complete results for one review run.

    Severity counts and the issue total are always derived from
    ``files[*].issues`` so they cannot drift from the findings.
    """

    files: list[FileResult]
    gate_status: GateStatus
    status: RunStatus
    token_usage: TokenUsage
    model: str
    cost_usd: float
    latency_ms: int
    recommendations: list[str] = field(default_factory=list)
    run_id: str = ""
    timestamp: str = ""

    def all_findings(self) -> list[Finding]:
        return [issue for file_result in self.files for issue in file_result.issues]

    @property
    def severity_distribution(self) -> SeverityDistribution:
        return SeverityDistribution.from_findings(self.all_findings())

    @property
    def total_issues(self) -> int:
        return sum(len(file_result.issues) for file_result in self.files)

    @property
    def average_score(self) -> int:
        scored = [f.score for f in self.files if f.error is None]
        return round(sum(scored) / len(scored)) if scored else 100

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "status": self.status,
            "gate_status": self.gate_status,
            "files_reviewed": len(self.files),
            "total_issues": self.total_issues,
            "severity_breakdown": self.severity_distribution.as_dict(),
            "average_score": self.average_score,
            "files": [file_result.to_dict() for file_result in self.files],
            "token_usage": {
                "input_tokens": self.token_usage.input_tokens,
                "output_tokens": self.token_usage.output_tokens,
                "total_tokens": self.token_usage.total_tokens,
            },
            "model": self.model,
            "cost_usd": self.cost_usd,
            "latency_ms": self.latency_ms,
            "recommendations": list(self.recommendations),
        }


@dataclass
class _FileOutcome:
    """FileResult plus the per-file bookkeeping needed for aggregation."""

    result: FileResult
    tokens: TokenUsage = field(default_factory=TokenUsage)
    model: str | None = None
    ai_unavailable: bool = False
    ai_degraded: bool = False


# ---------------------------------------------------------------------------
# Gate & status
# ---------------------------------------------------------------------------
def gate_decision(files: Sequence[FileResult]) -> GateStatus:
    """
    FAIL if any pattern rule fired (any severity, including merged findings),
    or if any AI-only finding is critical. PASS otherwise.
    """
    for file_result in files:
        for issue in file_result.issues:
            if issue.origin in ("pattern", "both"):
                return "fail"
            if issue.origin == "ai" and issue.severity == "critical":
                return "fail"
    return "pass"


def run_status(files: Sequence[FileResult], gate_status: GateStatus) -> RunStatus:
    has_error = any(file_result.error for file_result in files)
    total_issues = sum(len(file_result.issues) for file_result in files)
    if has_error and total_issues == 0:
        return "partial"
    return "failure" if gate_status == "fail" else "success"


# ---------------------------------------------------------------------------
# Per-file analysis
# ---------------------------------------------------------------------------
def _analyze(graph, source: SourceFile) -> _FileOutcome:
    """Analyze one file; never raises."""
    if not source.path or not source.content or not source.language:
        logger.warning("Skipping %r - path, content and language are required", source.path)
        return _FileOutcome(
            FileResult(
                path=source.path or "",
                language=source.language or "",
                error="path, content and language are required",
            )
        )

    try:
        language = validate_language(source.language)
    except ValueError as e:
        logger.warning("Skipping %s - %s", source.path, e)
        return _FileOutcome(FileResult(source.path, source.language, error=str(e)))

    logger.info("Analyzing %s (%s, %d chars)", source.path, language, len(source.content))

    try:
        state = analyze_file(graph, source.path, source.content, language)
    except Exception as e:
        logger.error("Failed to analyze %s: %s", source.path, e)
        return _FileOutcome(FileResult(source.path, language, error=str(e) or type(e).__name__))

    tokens = TokenUsage(state.get("input_tokens", 0), state.get("output_tokens", 0))
    error = state.get("error")
    if error:
        return _FileOutcome(FileResult(source.path, language, error=error), tokens=tokens)

    ai_review = state.get("ai_review")
    pattern_findings = state.get("pattern_findings", [])
    issues = state.get("issues", [])

    result = FileResult(
        path=source.path,
        language=language,
        pattern_count=len(pattern_findings),
        ai_count=len(ai_review.issues) if ai_review else 0,
        issues=issues,
        strengths=list(ai_review.strengths) if ai_review else [],
        recommendations=list(ai_review.recommendations) if ai_review else [],
    )
    logger.info(
        "  Found %d issue(s) in %s (%d pattern, %d AI)",
        len(issues),
        source.path,
        result.pattern_count,
        result.ai_count,
    )
    return _FileOutcome(
        result,
        tokens=tokens,
        model=state.get("model"),
        ai_unavailable=bool(state.get("ai_unavailable")),
        ai_degraded=bool(ai_review and ai_review.degraded),
    )


# ---------------------------------------------------------------------------
# High-level run
# ---------------------------------------------------------------------------
def run_review(
    files: Sequence[SourceFile],
    options: AnalysisOptions | None = None,
    llm: LLMCall | None = None,
    pricing: PricingTable | None = None,
) -> RunResult:
    """
    Review a set of files with pattern rules and the LLM.

    Files are analyzed concurrently (bounded by ``options.max_workers``); the
    returned file list keeps the input order. A failure on one file is
    recorded on its FileResult and never aborts the run.

    Args:
        files: Files to review (path, content, language)
        options: Run options; defaults from config
        llm: LLM collaborator; defaults to Gemini (or the mock under USE_MOCK)
        pricing: Pricing table for the cost figure; defaults to load_pricing()

    Returns:
        RunResult with per-file results, gate decision, usage and cost

    Raises:
        ValueError: if *files* is empty
    """
    if not files:
        raise ValueError("files must not be empty")

    options = options or AnalysisOptions()
    pricing = pricing or load_pricing(CUSTOM_PRICING_JSON)
    if options.enable_ai and llm is None:
        llm = default_llm(options.model)
    catalog = (
        DEFAULT_CATALOG.without(*options.disabled_rules)
        if options.disabled_rules
        else DEFAULT_CATALOG
    )

    run_id = uuid.uuid4().hex[:12]
    start = time.monotonic()
    logger.info(
        "Run %s: %d file(s), analysis_type=%s, model=%s, ai=%s",
        run_id,
        len(files),
        options.analysis_type,
        options.model,
        "on" if options.enable_ai else "off",
    )

    graph = build_file_graph(
        llm if options.enable_ai else None,
        catalog,
        analysis_type=options.analysis_type,
        llm_timeout=options.llm_timeout,
    )

    workers = min(options.max_workers, len(files))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="review") as pool:
        outcomes = list(pool.map(lambda source: _analyze(graph, source), files))

    # Single aggregation pass, in input order
    file_results = [outcome.result for outcome in outcomes]
    token_usage = sum((outcome.tokens for outcome in outcomes), TokenUsage())
    model = options.model
    for outcome in outcomes:
        if outcome.model:
            model = outcome.model

    recommendations: list[str] = []
    unavailable = sum(1 for outcome in outcomes if outcome.ai_unavailable)
    if unavailable:
        recommendations.append(
            f"AI analysis was unavailable for {unavailable} file(s); "
            "results include pattern rules only."
        )
    for outcome in outcomes:
        if outcome.ai_degraded:
            recommendations.append(f"{outcome.result.path}: {FALLBACK_RECOMMENDATION}")

    gate_status = gate_decision(file_results)
    status = run_status(file_results, gate_status)
    latency_ms = int((time.monotonic() - start) * 1000)
    cost_usd = calculate_cost(
        pricing, model, token_usage.input_tokens, token_usage.output_tokens
    )

    result = RunResult(
        files=file_results,
        gate_status=gate_status,
        status=status,
        token_usage=token_usage,
        model=model,
        cost_usd=cost_usd,
        latency_ms=latency_ms,
        recommendations=recommendations,
        run_id=run_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )

    distribution = result.severity_distribution
    logger.info(
        "Run %s complete: gate=%s, issues=%d (%dC/%dH), tokens=%d, cost=$%.6f, latency=%dms",
        run_id,
        gate_status,
        result.total_issues,
        distribution.critical,
        distribution.high,
        token_usage.total_tokens,
        cost_usd,
        latency_ms,
    )
    return result


def print_review(result: RunResult) -> None:
    """Pretty print a review run."""
    print(f"\n{'=' * 60}")
    print(f"CODE REVIEW: run {result.run_id}")
    print(f"{'=' * 60}")
    print(f"Gate: {result.gate_status.upper()} ({result.status})")
    print(f"Files reviewed: {len(result.files)}")
    print(f"Total issues: {result.total_issues}")
    counts = ", ".join(
        f"{severity}={count}"
        for severity, count in result.severity_distribution.as_dict().items()
        if count
    )
    if counts:
        print(f"By severity: {counts}")

    for file_result in result.files:
        print(f"\n{'-' * 60}")
        print(
            f"{file_result.path} ({file_result.language}, "
            f"{file_result.pattern_count} pattern / {file_result.ai_count} AI, "
            f"score {file_result.score})"
        )
        print(f"{'-' * 60}")

        if file_result.error:
            print(f"  Error: {file_result.error}")
            continue

        if not file_result.issues:
            print("  No issues found")
            continue

        for issue in file_result.issues:
            line_str = f"Line {issue.line_number}" if issue.line_number else "General"
            print(f"\n  [{issue.severity.upper()}] {line_str} ({issue.category}, {issue.origin})")
            print(f"     {issue.message}")
            if issue.suggestion:
                print(f"     Fix: {issue.suggestion}")

    for note in result.recommendations:
        print(f"\nNote: {note}")

    print(f"\n{'=' * 60}")
    print(
        f"Model: {result.model} | tokens: {result.token_usage.total_tokens} | "
        f"cost: ${result.cost_usd:.6f} | {result.latency_ms}ms"
    )
    print(f"{'=' * 60}\n")
