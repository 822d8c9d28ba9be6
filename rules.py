"""Static rule catalog for the deterministic review layer.

Every rule carries exactly one matcher:

- ``PatternMatcher`` wraps a case-insensitive regular expression; a rule fires
  when the expression matches anywhere in the file, and the first line that
  matches on its own is reported.
- ``PredicateMatcher`` wraps a ``fn(text) -> bool`` check over the whole file
  for conditions a single regex cannot express (counts, absences, adjacency).
  No line number is produced for these.

The catalog is built once at import and never mutated; ``RuleCatalog.without``
returns a new catalog instead.
"""

import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field, replace

from models import Severity


# =============================================================================
# MATCHERS
# =============================================================================
@dataclass(frozen=True)
class PatternMatcher:
    """Regex matcher. Line attribution is best-effort."""

    regex: re.Pattern

    def scan(self, text: str) -> tuple[bool, int | None]:
        if not self.regex.search(text):
            return False, None
        for index, line in enumerate(text.split("\n"), start=1):
            if self.regex.search(line):
                return True, index
        # Matched only across lines (e.g. a multi-line construct)
        return True, None


@dataclass(frozen=True)
class PredicateMatcher:
    """Whole-file predicate matcher."""

    check: Callable[[str], bool]

    def scan(self, text: str) -> tuple[bool, int | None]:
        return bool(self.check(text)), None


def pattern(expression: str) -> PatternMatcher:
    return PatternMatcher(re.compile(expression, re.IGNORECASE))


def predicate(check: Callable[[str], bool]) -> PredicateMatcher:
    return PredicateMatcher(check)


@dataclass(frozen=True)
class Rule:
    """Immutable catalog entry."""

    id: str
    name: str
    severity: Severity
    category: str
    message: str
    suggestion: str
    languages: frozenset[str]
    matcher: PatternMatcher | PredicateMatcher = field(compare=False)
    enabled: bool = True

    def applies_to(self, language: str) -> bool:
        return self.enabled and language in self.languages


def _langs(*names: str) -> frozenset[str]:
    return frozenset(names)


_DATA_LANGS = _langs("pyspark", "python", "scala", "sql")
_CODE_LANGS = _langs("pyspark", "python", "scala")


# =============================================================================
# PREDICATES
# =============================================================================
def _missing_docstrings(code: str) -> bool:
    return '"""' not in code and "'''" not in code


def _consecutive_repartitions(code: str) -> bool:
    lines = code.split("\n")
    return any(
        ".repartition(" in current and ".repartition(" in following
        for current, following in zip(lines, lines[1:])
    )


def _many_separate_filters(code: str) -> bool:
    return len(re.findall(r"\.filter\(", code)) >= 3


def _missing_persist(code: str) -> bool:
    has_joins = len(re.findall(r"\.join\(", code)) >= 2
    has_actions = len(re.findall(r"\.(count|agg|collect|show|write)\(", code)) >= 2
    has_persist = ".persist(" in code or ".cache()" in code
    return has_joins and has_actions and not has_persist


def _unpartitioned_write(code: str) -> bool:
    return ".write" in code and ".parquet(" in code and ".partitionBy(" not in code


def _read_without_schema(code: str) -> bool:
    reads = ".read.json(" in code or ".read.csv(" in code
    return reads and ".schema(" not in code


def _missing_type_hints(code: str) -> bool:
    has_functions = re.search(r"def\s+\w+\s*\(", code) is not None
    has_hints = (
        re.search(r"def\s+\w+\s*\([^)]*:\s*\w+", code) is not None
        or re.search(r"\)\s*->\s*\w+", code) is not None
    )
    return has_functions and not has_hints


def _string_concat_in_loop(code: str) -> bool:
    has_loop = "for " in code or "while " in code
    return has_loop and re.search(r"\+\s*[\"']", code) is not None


def _unpinned_provider(code: str) -> bool:
    return 'provider "' in code and "required_providers" not in code


def _no_backend(code: str) -> bool:
    return "terraform {" in code and "backend" not in code


def _untagged_resources(code: str) -> bool:
    return 'resource "' in code and "tags " not in code


def _unencrypted_bucket(code: str) -> bool:
    return "aws_s3_bucket" in code and "server_side_encryption" not in code


def _undescribed_variables(code: str) -> bool:
    return 'variable "' in code and "description " not in code


# =============================================================================
# RULE TABLES
# =============================================================================
PYSPARK_RULES: tuple[Rule, ...] = (
    Rule(
        id="pyspark-001",
        name="Missing Docstrings",
        severity="medium",
        category="code-structure",
        message="Missing docstrings for documentation and troubleshooting",
        suggestion='Add docstrings: """Process data pipeline."""',
        languages=_langs("pyspark", "python"),
        matcher=predicate(_missing_docstrings),
    ),
    Rule(
        id="pyspark-002",
        name="Schema Inference",
        severity="critical",
        category="performance",
        message="Schema inference instead of explicit schemas",
        suggestion="Use explicit schemas: spark.read.schema(mySchema).csv(path)",
        languages=_langs("pyspark"),
        matcher=pattern(r"inferSchema\s*=\s*True"),
    ),
    Rule(
        id="pyspark-003",
        name="Collect Usage",
        severity="high",
        category="performance",
        message=(
            "Using collect() brings all data to driver - "
            "can cause OOM on large datasets"
        ),
        suggestion="Use .take(n) for sampling or write to storage",
        languages=_langs("pyspark"),
        matcher=pattern(r"\.collect\(\)"),
    ),
    Rule(
        id="pyspark-004",
        name="ToPandas Usage",
        severity="high",
        category="performance",
        message="toPandas() collects all data to driver memory",
        suggestion="Process data with Spark operations instead",
        languages=_langs("pyspark"),
        matcher=pattern(r"\.toPandas\(\)"),
    ),
    Rule(
        id="pyspark-005",
        name="RDD API Usage",
        severity="medium",
        category="best-practice",
        message="Using RDD API instead of DataFrame/Dataset",
        suggestion="Use DataFrame operations instead of RDD transformations",
        languages=_langs("pyspark"),
        matcher=pattern(r"\.rdd|RDD\["),
    ),
    Rule(
        id="pyspark-006",
        name="UDF Usage",
        severity="medium",
        category="performance",
        message="UDF usage detected - prefer built-in Spark functions",
        suggestion="Replace UDF with built-in functions like when/otherwise",
        languages=_langs("pyspark"),
        matcher=pattern(r"@udf|udf\("),
    ),
    Rule(
        id="pyspark-007",
        name="System Exit",
        severity="high",
        category="exception-handling",
        message="System.exit() usage in Spark jobs",
        suggestion='Throw exceptions instead: raise RuntimeError("Error message")',
        languages=_langs("pyspark", "python"),
        matcher=pattern(r"sys\.exit|exit\("),
    ),
    Rule(
        id="pyspark-008",
        name="Print Statements",
        severity="low",
        category="logging",
        message="Using print() instead of proper logging",
        suggestion='Use loggers: logger.info("Processing data")',
        languages=_langs("pyspark", "python"),
        matcher=pattern(r"\bprint\(|println\("),
    ),
    Rule(
        id="pyspark-009",
        name="Debug Statements",
        severity="low",
        category="logging",
        message="Debug statements left in code",
        suggestion="Remove .show(), .printSchema() calls",
        languages=_langs("pyspark"),
        matcher=pattern(r"\.show\(\)|\.printSchema\(\)"),
    ),
    Rule(
        id="pyspark-010",
        name="Missing Broadcast Join",
        severity="low",
        category="performance",
        message="Consider broadcast joins for small dimension tables",
        suggestion='Use broadcast: df1.join(broadcast(df2), "key")',
        languages=_langs("pyspark"),
        matcher=pattern(r"\.join\("),
    ),
    Rule(
        id="pyspark-011",
        name="Select All Columns",
        severity="low",
        category="performance",
        message="Selecting all columns unnecessarily",
        suggestion='Specify columns: df.select("col1", "col2")',
        languages=_langs("pyspark"),
        matcher=pattern(r'select\("\*"\)|\.select\(\)'),
    ),
    Rule(
        id="pyspark-012",
        name="Missing Repartition",
        severity="low",
        category="performance",
        message="Potential small file creation",
        suggestion="Use coalesce() or repartition() before writing",
        languages=_langs("pyspark"),
        matcher=pattern(r"\.write\."),
    ),
)

PYTHON_RULES: tuple[Rule, ...] = (
    Rule(
        id="python-001",
        name="Missing Type Hints",
        severity="low",
        category="code-structure",
        message="Missing type hints for function parameters and return values",
        suggestion="Add type hints: def process_data(input: str) -> Dict[str, Any]:",
        languages=_langs("python"),
        matcher=predicate(_missing_type_hints),
    ),
    Rule(
        id="python-002",
        name="Bare Except",
        severity="medium",
        category="exception-handling",
        message="Bare except clause catches all exceptions including system exits",
        suggestion="Specify exceptions: except (ValueError, TypeError) as e:",
        languages=_langs("python"),
        matcher=pattern(r"except\s*:"),
    ),
    Rule(
        id="python-003",
        name="Mutable Default Arguments",
        severity="high",
        category="best-practice",
        message="Mutable default arguments can cause unexpected behavior",
        suggestion="Use None as default: def func(items=None): items = items or []",
        languages=_langs("python"),
        matcher=pattern(r"def\s+\w+\([^)]*=\s*\[|def\s+\w+\([^)]*=\s*\{"),
    ),
    Rule(
        id="python-004",
        name="Print for Logging",
        severity="low",
        category="logging",
        message="Using print() instead of proper logging",
        suggestion='Use logging module: logging.info("Message")',
        languages=_langs("python"),
        matcher=pattern(r"\bprint\("),
    ),
    Rule(
        id="python-005",
        name="Global Variables",
        severity="medium",
        category="best-practice",
        message="Global variables make code harder to test and maintain",
        suggestion="Pass variables as parameters or use class attributes",
        languages=_langs("python"),
        matcher=pattern(r"\bglobal\s+\w+"),
    ),
    Rule(
        id="python-006",
        name="String Concatenation in Loops",
        severity="medium",
        category="performance",
        message="String concatenation in loops is inefficient",
        suggestion=(
            'Use list and join: parts = []; parts.append(x); result = "".join(parts)'
        ),
        languages=_langs("python"),
        matcher=predicate(_string_concat_in_loop),
    ),
)

SCALA_RULES: tuple[Rule, ...] = (
    Rule(
        id="scala-001",
        name="Mutable Variables",
        severity="low",
        category="best-practice",
        message="Prefer val over var for immutability",
        suggestion="Use val instead of var where possible",
        languages=_langs("scala"),
        matcher=pattern(r"\bvar\s+"),
    ),
    Rule(
        id="scala-002",
        name="Unsafe Option Handling",
        severity="medium",
        category="exception-handling",
        message="Using .get without checking if Option is defined",
        suggestion="Use .getOrElse() or pattern matching",
        languages=_langs("scala"),
        matcher=pattern(r"\.get\b(?!\()"),
    ),
    Rule(
        id="scala-003",
        name="Null Checks",
        severity="medium",
        category="best-practice",
        message="Using null checks instead of Option",
        suggestion="Use Option type: Option(value).map(...).getOrElse(...)",
        languages=_langs("scala"),
        matcher=pattern(r"!=\s*null|==\s*null"),
    ),
    Rule(
        id="scala-004",
        name="Resource Leak",
        severity="high",
        category="exception-handling",
        message="Potential resource leak - connection not closed",
        suggestion="Use try-with-resources or ensure .close() is called",
        languages=_langs("scala"),
        matcher=pattern(r"DriverManager\.getConnection"),
    ),
    Rule(
        id="scala-005",
        name="Generic Exception Catch",
        severity="medium",
        category="exception-handling",
        message="Catching generic Exception - too broad",
        suggestion="Catch specific exceptions",
        languages=_langs("scala"),
        matcher=pattern(r"catch\s*\{\s*case\s+e:\s*Exception"),
    ),
    Rule(
        id="scala-006",
        name="System Exit",
        severity="high",
        category="exception-handling",
        message="System.exit() usage in Spark jobs",
        suggestion='Throw exceptions instead: throw new RuntimeException("Error")',
        languages=_langs("scala"),
        matcher=pattern(r"System\.exit"),
    ),
    Rule(
        id="scala-007",
        name="Collect on Large DataFrame",
        severity="high",
        category="performance",
        message="Using .collect() can cause OutOfMemoryError on large DataFrames",
        suggestion="Use .take(n), .head(n), or .foreach() instead of .collect()",
        languages=_langs("scala"),
        matcher=pattern(r"\.collect\(\)"),
    ),
    Rule(
        id="scala-008",
        name="SQL Injection Risk",
        severity="critical",
        category="security",
        message="String interpolation in spark.sql() - SQL injection vulnerability",
        suggestion="Use parameterized queries or sanitize inputs before interpolation",
        languages=_langs("scala"),
        matcher=pattern(r'spark\.sql\(s"'),
    ),
    Rule(
        id="scala-009",
        name="Redundant Repartition",
        severity="high",
        category="performance",
        message=(
            "Redundant repartition - multiple consecutive repartitions "
            "cause unnecessary shuffles"
        ),
        suggestion="Keep only the final repartition call",
        languages=_langs("scala"),
        matcher=predicate(_consecutive_repartitions),
    ),
    Rule(
        id="scala-010",
        name="Multiple Separate Filters",
        severity="medium",
        category="performance",
        message=(
            "Multiple separate .filter() calls - "
            "consider combining for better performance"
        ),
        suggestion="Combine filters: .filter(cond1 && cond2 && cond3)",
        languages=_langs("scala"),
        matcher=predicate(_many_separate_filters),
    ),
    Rule(
        id="scala-011",
        name="Blocking Operation in Transformation",
        severity="critical",
        category="performance",
        message="Blocking HTTP call inside Spark transformation",
        suggestion=(
            "Use mapPartitions with connection pooling, "
            "or pre-fetch data and broadcast"
        ),
        languages=_langs("scala"),
        matcher=pattern(r"scala\.io\.Source\.fromURL"),
    ),
    Rule(
        id="scala-012",
        name="Memory Leak",
        severity="high",
        category="performance",
        message="Accumulating DataFrames in a collection causes memory leak",
        suggestion="Process and release DataFrames in each iteration",
        languages=_langs("scala"),
        matcher=pattern(r"dataFrames\s*=\s*dataFrames\s*:\+"),
    ),
    Rule(
        id="scala-013",
        name="Missing Persist",
        severity="high",
        category="performance",
        message="Expensive computation reused multiple times without persist/cache",
        suggestion=(
            "Call .persist(StorageLevel.MEMORY_AND_DISK) on expensive "
            "DataFrames reused across actions"
        ),
        languages=_langs("scala"),
        matcher=predicate(_missing_persist),
    ),
    Rule(
        id="scala-014",
        name="Unpartitioned Write",
        severity="medium",
        category="performance",
        message="Writing large dataset without partitioning",
        suggestion=(
            'Use .partitionBy("date", "region") for better query performance on reads'
        ),
        languages=_langs("scala"),
        matcher=predicate(_unpartitioned_write),
    ),
    Rule(
        id="scala-015",
        name="Hardcoded S3 Path",
        severity="medium",
        category="maintainability",
        message="Hardcoded S3 path with date",
        suggestion="Use config files or environment variables for paths",
        languages=_langs("scala"),
        matcher=pattern(r'"s3://[^"]*\d{4}[^"]*"'),
    ),
    Rule(
        id="scala-016",
        name="Println Usage",
        severity="low",
        category="logging",
        message="Using println instead of structured logging",
        suggestion="Use SLF4J Logger: logger.info(...)",
        languages=_langs("scala"),
        matcher=pattern(r"println\("),
    ),
    Rule(
        id="scala-017",
        name="Missing Schema Definition",
        severity="medium",
        category="data-quality",
        message="Reading data without explicit schema",
        suggestion="Define explicit StructType schema for type safety and performance",
        languages=_langs("scala"),
        matcher=predicate(_read_without_schema),
    ),
)

SQL_RULES: tuple[Rule, ...] = (
    Rule(
        id="sql-001",
        name="Select All Columns",
        severity="medium",
        category="best-practice",
        message="SELECT * retrieves all columns - specify only needed columns",
        suggestion="Specify columns: SELECT id, name, date",
        languages=_langs("sql"),
        matcher=pattern(r"SELECT\s+\*"),
    ),
    Rule(
        id="sql-002",
        name="Delete Without Where",
        severity="critical",
        category="security",
        message="DELETE without WHERE clause will remove all rows!",
        suggestion="Add WHERE clause or use TRUNCATE if intentional",
        languages=_langs("sql"),
        matcher=pattern(r"DELETE\s+FROM\s+\w+\s*;"),
    ),
    Rule(
        id="sql-003",
        name="Function on Indexed Column",
        severity="high",
        category="performance",
        message="Function on date column in WHERE clause prevents index usage",
        suggestion="Use range: WHERE date >= '2024-01-01' AND date < '2025-01-01'",
        languages=_langs("sql"),
        matcher=pattern(r"YEAR\(|MONTH\(|DAY\("),
    ),
    Rule(
        id="sql-004",
        name="Not In With Nulls",
        severity="medium",
        category="data-quality",
        message="NOT IN can cause unexpected results with NULL values",
        suggestion="Use NOT EXISTS or LEFT JOIN with NULL check",
        languages=_langs("sql"),
        matcher=pattern(r"NOT\s+IN\s*\("),
    ),
    Rule(
        id="sql-005",
        name="Correlated Subquery",
        severity="medium",
        category="performance",
        message="Correlated subquery detected - can cause performance issues",
        suggestion="Use JOIN or EXISTS instead",
        languages=_langs("sql"),
        matcher=pattern(r"\bIN\s*\(\s*SELECT"),
    ),
    Rule(
        id="sql-006",
        name="Raw Table Access",
        severity="medium",
        category="maintainability",
        message="Direct access to raw tables detected",
        suggestion="Use processed/cleaned tables or views",
        languages=_langs("sql"),
        matcher=pattern(r"\b(FROM|JOIN)\s+raw_\w+"),
    ),
    Rule(
        id="sql-007",
        name="Hardcoded Values",
        severity="medium",
        category="maintainability",
        message="Hardcoded values in SQL - should use parameters",
        suggestion="Use parameters: @start_date, @segment_type",
        languages=_langs("sql"),
        matcher=pattern(
            r"WHERE.*=\s*['\"](?!NULL)[^'\"]+['\"]|VALUES\s*\([^)]*['\"][^'\"]+['\"]"
        ),
    ),
    Rule(
        id="sql-008",
        name="Missing Partitioning",
        severity="low",
        category="performance",
        message="No partitioning strategy mentioned - consider for large datasets",
        suggestion="Add partitioning: PARTITION BY date",
        languages=_langs("sql"),
        matcher=pattern(r"GROUP BY|ORDER BY"),
    ),
    Rule(
        id="sql-009",
        name="Missing Limit",
        severity="low",
        category="performance",
        message="No LIMIT clause - query may return millions of rows",
        suggestion="Add LIMIT for testing: LIMIT 1000",
        languages=_langs("sql"),
        matcher=pattern(r"SELECT\s+.*\s+FROM"),
    ),
    Rule(
        id="sql-010",
        name="Cartesian Join",
        severity="critical",
        category="performance",
        message="Cartesian join detected - missing JOIN condition",
        suggestion="Add JOIN condition: FROM t1 JOIN t2 ON t1.id = t2.id",
        languages=_langs("sql"),
        matcher=pattern(r"FROM\s+\w+\s*,\s*\w+(?!\s+ON)"),
    ),
)

TERRAFORM_RULES: tuple[Rule, ...] = (
    Rule(
        id="terraform-001",
        name="Hardcoded Credentials",
        severity="critical",
        category="security",
        message="Hardcoded credentials in Terraform code!",
        suggestion="Use variables or AWS Secrets Manager: var.db_password",
        languages=_langs("terraform"),
        matcher=pattern(r"(access_key|secret_key|password|token)\s*=\s*[\"'][^\"']+[\"']"),
    ),
    Rule(
        id="terraform-002",
        name="Missing Provider Version",
        severity="high",
        category="best-practice",
        message="Provider version not specified",
        suggestion=(
            'Specify provider version: required_providers { aws = { version = "~> 4.0" } }'
        ),
        languages=_langs("terraform"),
        matcher=predicate(_unpinned_provider),
    ),
    Rule(
        id="terraform-003",
        name="No Backend Configuration",
        severity="medium",
        category="best-practice",
        message="No remote backend configured - state stored locally",
        suggestion='Configure remote backend: terraform { backend "s3" { bucket = "..." } }',
        languages=_langs("terraform"),
        matcher=predicate(_no_backend),
    ),
    Rule(
        id="terraform-004",
        name="Public S3 Bucket",
        severity="critical",
        category="security",
        message="S3 bucket configured with public read access!",
        suggestion='Use private ACL: acl = "private"',
        languages=_langs("terraform"),
        matcher=pattern(r"acl\s*=\s*[\"']public-read[\"']"),
    ),
    Rule(
        id="terraform-005",
        name="Missing Resource Tags",
        severity="low",
        category="best-practice",
        message="Resources missing tags for cost tracking",
        suggestion="Add tags: tags = { Environment = var.environment }",
        languages=_langs("terraform"),
        matcher=predicate(_untagged_resources),
    ),
    Rule(
        id="terraform-006",
        name="Unencrypted Storage",
        severity="high",
        category="security",
        message="Storage resource without encryption enabled",
        suggestion="Enable encryption: server_side_encryption_configuration { ... }",
        languages=_langs("terraform"),
        matcher=predicate(_unencrypted_bucket),
    ),
    Rule(
        id="terraform-007",
        name="Wide Security Group Rules",
        severity="high",
        category="security",
        message="Security group rule allows access from anywhere (0.0.0.0/0)",
        suggestion="Restrict to specific CIDR blocks",
        languages=_langs("terraform"),
        matcher=pattern(r"cidr_blocks\s*=\s*\[[\"']0\.0\.0\.0/0[\"']\]"),
    ),
    Rule(
        id="terraform-008",
        name="Missing Variables Description",
        severity="low",
        category="maintainability",
        message="Variable missing description",
        suggestion='Add description: variable "name" { description = "..." }',
        languages=_langs("terraform"),
        matcher=predicate(_undescribed_variables),
    ),
    Rule(
        id="terraform-009",
        name="Default VPC Usage",
        severity="medium",
        category="security",
        message="Using default VPC which may have insecure settings",
        suggestion="Create custom VPC with explicit security settings",
        languages=_langs("terraform"),
        matcher=pattern(r"default\s*=\s*true"),
    ),
)

SECURITY_RULES: tuple[Rule, ...] = (
    Rule(
        id="security-001",
        name="Hardcoded Password",
        severity="critical",
        category="security",
        message="Hardcoded password detected!",
        suggestion="Use environment variables, secrets manager, or Databricks secrets",
        languages=_DATA_LANGS,
        matcher=pattern(r"password\s*=\s*['\"][^'\"]+['\"]"),
    ),
    Rule(
        id="security-002",
        name="Hardcoded Credentials",
        severity="critical",
        category="security",
        message="Hardcoded credentials detected!",
        suggestion="Use environment variables or secrets manager",
        languages=_DATA_LANGS,
        matcher=pattern(
            r"(api_key|apikey|secret|token|access_key)\s*=\s*['\"][^'\"]+['\"]"
        ),
    ),
    Rule(
        id="security-003",
        name="SQL Injection Risk",
        severity="critical",
        category="security",
        message="Potential SQL injection vulnerability",
        suggestion="Use parameterized queries or prepared statements",
        languages=_DATA_LANGS,
        matcher=pattern(
            r"spark\.sql\([^)]*\+|execute\([^)]*\+|executeQuery\([^)]*\+"
        ),
    ),
    Rule(
        id="security-004",
        name="Unencrypted Connection",
        severity="high",
        category="security",
        message="Unencrypted HTTP connection detected",
        suggestion="Use HTTPS for secure communication",
        languages=_DATA_LANGS,
        matcher=pattern(r"http://(?!localhost|127\.0\.0\.1)"),
    ),
    Rule(
        id="security-005",
        name="AWS Keys in Code",
        severity="critical",
        category="security",
        message="AWS Access Key detected in code!",
        suggestion="Remove immediately and use IAM roles or AWS Secrets Manager",
        languages=_DATA_LANGS,
        matcher=pattern(r"AKIA[0-9A-Z]{16}"),
    ),
    Rule(
        id="security-006",
        name="Private Key",
        severity="critical",
        category="security",
        message="Private key detected in code!",
        suggestion="Remove immediately and use proper key management",
        languages=_DATA_LANGS,
        matcher=pattern(r"-----BEGIN (RSA |EC |OPENSSH )?PRIVATE KEY-----"),
    ),
    Rule(
        id="security-007",
        name="Database Credentials",
        severity="high",
        category="security",
        message="Database credentials in connection string",
        suggestion="Use secrets management or connection pooling",
        languages=_CODE_LANGS,
        matcher=pattern(r"jdbc:[^\"']*//[^\"']*:[^\"']*@"),
    ),
)

COMMON_RULES: tuple[Rule, ...] = (
    Rule(
        id="common-001",
        name="Hardcoded File Paths",
        severity="medium",
        category="maintainability",
        message="Hardcoded file paths detected",
        suggestion='Use configuration files: config.get("input.path")',
        languages=_CODE_LANGS,
        matcher=pattern(r"[\"']/[a-zA-Z0-9_/-]+[\"']|[\"'][A-Z]:\\[^\"']+[\"']"),
    ),
    Rule(
        id="common-002",
        name="Hardcoded Dates",
        severity="medium",
        category="maintainability",
        message="Hardcoded dates detected",
        suggestion="Use date parameters or configuration",
        languages=_DATA_LANGS,
        matcher=pattern(r"\b\d{4}-\d{2}-\d{2}\b"),
    ),
    Rule(
        id="common-003",
        name="Magic Numbers",
        severity="low",
        category="maintainability",
        message="Magic numbers detected - use named constants",
        suggestion="Define constants: MAX_RETRIES = 100",
        languages=_CODE_LANGS,
        matcher=pattern(r"[^a-zA-Z_]\d{3,}[^a-zA-Z_]"),
    ),
)


# =============================================================================
# CATALOG
# =============================================================================
class RuleCatalog:
    """Read-only, ordered collection of rules."""

    def __init__(self, rules: Iterable[Rule]):
        self._rules: tuple[Rule, ...] = tuple(rules)
        ids = [rule.id for rule in self._rules]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate rule ids in catalog")
        self._by_id: dict[str, Rule] = {rule.id: rule for rule in self._rules}

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def get(self, rule_id: str) -> Rule:
        return self._by_id[rule_id]

    def rules_for(self, language: str) -> list[Rule]:
        """Enabled rules applicable to *language*, in catalog order."""
        return [rule for rule in self._rules if rule.applies_to(language)]

    def languages(self) -> frozenset[str]:
        return frozenset().union(*(rule.languages for rule in self._rules))

    def without(self, *rule_ids: str) -> "RuleCatalog":
        """Return a copy of this catalog with *rule_ids* disabled."""
        unknown = sorted(set(rule_ids) - set(self._by_id))
        if unknown:
            raise ValueError(f"Unknown rule id(s): {', '.join(unknown)}")
        disabled = set(rule_ids)
        return RuleCatalog(
            replace(rule, enabled=False) if rule.id in disabled else rule
            for rule in self._rules
        )


DEFAULT_CATALOG = RuleCatalog(
    PYSPARK_RULES
    + PYTHON_RULES
    + SCALA_RULES
    + SQL_RULES
    + TERRAFORM_RULES
    + SECURITY_RULES
    + COMMON_RULES
)
