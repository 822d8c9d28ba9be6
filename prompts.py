"""Prompt templates for the LLM review layer."""

# =============================================================================
# SHARED PREAMBLE: injected into every review prompt
# =============================================================================

_SEVERITY_GUIDE = (
    "Severity definitions (use these exactly):\n"
    "- critical: Exploitable in production right now"
    " (data breach, RCE, data loss, auth bypass)\n"
    "- high: Will cause bugs, crashes or severe slowdowns under normal use\n"
    "- medium: Code smell, maintainability concern,"
    " or edge-case bug unlikely to hit in practice\n"
    "- low: Nit, stylistic preference, minor improvement\n"
    "- info: Observation with no action required\n"
)

_PATTERN_EXCLUSION = (
    "Pattern-based checks (hardcoded secrets, print statements, SELECT *, "
    "collect() calls and similar regex-detectable issues) are handled by a "
    "separate rule engine. Do NOT repeat those.\n"
)

_CONFIDENCE = (
    "Only report issues you are CONFIDENT about. "
    "Do NOT speculate or report theoretical issues "
    "that require unlikely conditions.\n"
)

_OUTPUT_FORMAT = (
    "Return ONLY valid JSON in this exact format:\n"
    "{\n"
    '  "issues": [\n'
    "    {\n"
    '      "severity": "critical" | "high" | "medium" | "low" | "info",\n'
    '      "category": "Security" | "Performance" | "Logic" | "Architecture"'
    ' | "Complexity" | "Quality" | "Data Flow" | "Best Practice",\n'
    '      "message": "Concise description of the issue",\n'
    '      "lineNumber": 42,\n'
    '      "suggestion": "Specific actionable fix",\n'
    '      "reasoning": "Why this matters and what the impact is"\n'
    "    }\n"
    "  ],\n"
    '  "strengths": ["Things done well in the code"],\n'
    '  "recommendations": ["Additional suggestions for improvement"]\n'
    "}\n"
    "\n"
    'If there are no issues in scope, return: {"issues": []}\n'
    "Return ONLY the JSON object. No markdown, no explanation.\n"
)


# =============================================================================
# LANGUAGE ROLES
# =============================================================================

LANGUAGE_CONTEXT: dict[str, str] = {
    "pyspark": (
        "PySpark engineer specializing in big data, Spark optimization, "
        "and distributed processing"
    ),
    "python": (
        "Python engineer specializing in clean code, performance, security, "
        "and best practices"
    ),
    "scala": (
        "Scala engineer specializing in functional programming, type safety, "
        "and Spark optimization"
    ),
    "sql": (
        "SQL engineer specializing in query optimization, indexing, "
        "and database performance"
    ),
    "terraform": (
        "Terraform engineer specializing in Infrastructure as Code, "
        "cloud security, and best practices"
    ),
}

_DEFAULT_CONTEXT = (
    "software engineer specializing in code quality, security, and best practices"
)


# =============================================================================
# FOCUS BY ANALYSIS TYPE
# =============================================================================

ANALYSIS_FOCUS: dict[str, str] = {
    "review": (
        "Focus on semantic issues that require code understanding:\n"
        "1. Logic errors and semantic bugs\n"
        "2. Incorrect algorithm implementations or off-by-one errors\n"
        "3. Performance problems (N+1 queries, blocking I/O in hot paths, "
        "memory leaks)\n"
        "4. Race conditions, concurrency bugs, or incorrect async usage\n"
        "5. Missing or incorrect error handling\n"
        "6. Data flow issues (null dereferences, type mismatches)\n"
    ),
    "security": (
        "Focus EXCLUSIVELY on security vulnerabilities:\n"
        "1. Injection flaws (SQL, command, LDAP, XPath injection)\n"
        "2. Authentication and authorization bypass\n"
        "3. Insecure data handling (plaintext secrets, unencrypted sensitive data)\n"
        "4. Insecure deserialization or unsafe eval/exec usage\n"
        "5. Missing input validation or output encoding\n"
        "6. Insecure cryptography or weak hashing algorithms\n"
        "7. Path traversal or arbitrary file access vulnerabilities\n"
    ),
    "quality": (
        "Focus EXCLUSIVELY on code quality and maintainability:\n"
        "1. Violations of SOLID principles\n"
        "2. Missing or inadequate error handling\n"
        "3. Poor naming conventions or misleading names\n"
        "4. Lack of input validation at system boundaries\n"
        "5. Overly coupled code with poor separation of concerns\n"
        "6. Dead code, unreachable branches, or unused variables\n"
    ),
    "complexity": (
        "Focus EXCLUSIVELY on code complexity issues:\n"
        "1. Functions or methods that are too long or do too many things\n"
        "2. Deeply nested conditionals or loops (high cyclomatic complexity)\n"
        "3. Hard-to-follow control flow or excessive early returns\n"
        "4. Large classes or modules that should be decomposed\n"
        "5. Duplicated logic that increases maintenance burden\n"
    ),
}

ANALYSIS_TYPES: tuple[str, ...] = tuple(ANALYSIS_FOCUS)


def build_review_prompt(
    code: str,
    language: str,
    path: str,
    analysis_type: str = "review",
) -> str:
    """
    Build the per-file review prompt.

    Args:
        code: Full file content
        language: Canonical language tag
        path: File path, quoted in the prompt so the model can refer to it
        analysis_type: One of ANALYSIS_TYPES

    Returns:
        Prompt text asking for a JSON object with an "issues" array
    """
    if analysis_type not in ANALYSIS_FOCUS:
        raise ValueError(
            f"Unknown analysis type: {analysis_type!r}. "
            f"Expected one of {', '.join(ANALYSIS_TYPES)}."
        )

    context = LANGUAGE_CONTEXT.get(language.lower(), _DEFAULT_CONTEXT)

    return (
        f"You are an expert {context}.\n"
        "\n"
        f"You are performing a **{analysis_type.upper()} ANALYSIS** of `{path}` "
        "as part of an automated code review pipeline.\n"
        "\n"
        + ANALYSIS_FOCUS[analysis_type]
        + "\n"
        + _PATTERN_EXCLUSION
        + _CONFIDENCE
        + "\n"
        + _SEVERITY_GUIDE
        + "\n"
        f"CODE TO ANALYZE ({path}):\n"
        f"```{language}\n"
        f"{code}\n"
        "```\n"
        "\n" + _OUTPUT_FORMAT
    )
