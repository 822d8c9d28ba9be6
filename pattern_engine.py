"""Deterministic pattern layer: evaluates the rule catalog against one file."""

import logging

from models import Finding
from rules import DEFAULT_CATALOG, Rule, RuleCatalog

logger = logging.getLogger(__name__)


def evaluate_rule(rule: Rule, text: str, path: str = "") -> Finding | None:
    """Return the finding *rule* produces for *text*, or None if it does not fire."""
    matched, line_number = rule.matcher.scan(text)
    if not matched:
        return None
    return Finding(
        severity=rule.severity,
        category=rule.category,
        message=rule.message,
        suggestion=rule.suggestion,
        line_number=line_number,
        file=path,
        origin="pattern",
        rule_id=rule.id,
    )


def evaluate(
    text: str,
    language: str,
    catalog: RuleCatalog = DEFAULT_CATALOG,
    path: str = "",
) -> list[Finding]:
    """
    Run every enabled rule for *language* over *text*.

    Each rule contributes at most one finding, in catalog order. Rules are
    independent of each other, so the result does not depend on evaluation
    order.

    Args:
        text: Full file content
        language: Canonical language tag (e.g. "python", "sql")
        catalog: Rule catalog to evaluate
        path: File path stamped on each finding

    Returns:
        List of pattern findings (origin="pattern")
    """
    findings: list[Finding] = []
    for rule in catalog.rules_for(language):
        finding = evaluate_rule(rule, text, path)
        if finding is not None:
            findings.append(finding)

    logger.debug(
        "Pattern rules found %d issue(s) in %s (%s)",
        len(findings),
        path or "<inline>",
        language,
    )
    return findings
