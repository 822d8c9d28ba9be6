"""Merge pattern findings with LLM findings for one file.

The similarity test is deliberately loose: two findings that merely share a
domain keyword are treated as the same issue. This keeps the reviewer-facing
list short at the cost of occasionally folding related issues together.
"""

import logging

from models import AIIssue, Finding

logger = logging.getLogger(__name__)

SIMILARITY_KEYWORDS: tuple[str, ...] = (
    "collect",
    "cache",
    "broadcast",
    "join",
    "schema",
    "password",
    "credentials",
    "udf",
    "rdd",
    "partition",
    "count",
    "null",
    "hardcoded",
)
WORD_OVERLAP_THRESHOLD = 0.6


def _word_overlap(message_a: str, message_b: str) -> float:
    words_a = set(message_a.split())
    words_b = set(message_b.split())
    largest = max(len(words_a), len(words_b))
    if not largest:
        return 0.0
    return len(words_a & words_b) / largest


def is_similar(a: Finding | AIIssue, b: Finding | AIIssue) -> bool:
    """
    Decide whether two findings describe the same issue.

    Checked in order:
    1. Both have a line number and the numbers are equal.
    2. Both messages mention the same keyword from SIMILARITY_KEYWORDS.
    3. Same category and word overlap above WORD_OVERLAP_THRESHOLD.
    """
    if a.line_number is not None and a.line_number == b.line_number:
        return True

    message_a = a.message.lower()
    message_b = b.message.lower()

    if any(kw in message_a and kw in message_b for kw in SIMILARITY_KEYWORDS):
        return True

    return (
        a.category == b.category
        and _word_overlap(message_a, message_b) > WORD_OVERLAP_THRESHOLD
    )


def merge(
    pattern_findings: list[Finding],
    ai_issues: list[AIIssue],
    file: str = "",
) -> list[Finding]:
    """
    Combine pattern findings and AI issues into one deduplicated list.

    Pattern findings are always kept. Each AI issue either enriches the first
    similar entry already in the list (which becomes origin="both" and gains
    the AI reasoning) or is appended with origin="ai". Inputs are not mutated.
    """
    merged: list[Finding] = [
        finding.model_copy(update={"origin": "pattern"}) for finding in pattern_findings
    ]

    folded = 0
    for issue in ai_issues:
        duplicate = next((existing for existing in merged if is_similar(existing, issue)), None)

        if duplicate is None:
            merged.append(
                Finding(
                    severity=issue.severity,
                    category=issue.category,
                    message=issue.message,
                    suggestion=issue.suggestion,
                    reasoning=issue.reasoning,
                    line_number=issue.line_number,
                    file=file,
                    origin="ai",
                )
            )
            continue

        folded += 1
        if duplicate.origin == "pattern":
            duplicate.origin = "both"
        if issue.reasoning:
            duplicate.reasoning = issue.reasoning
            duplicate.suggestion = f"{duplicate.suggestion}\n\nAI Analysis: {issue.reasoning}"

    if folded:
        logger.debug("Folded %d AI issue(s) into existing findings for %s", folded, file)
    return merged
