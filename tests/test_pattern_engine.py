"""Tests for the deterministic pattern layer (pattern_engine.py)."""

from pattern_engine import evaluate, evaluate_rule
from rules import DEFAULT_CATALOG

from conftest import CLEAN_SOURCE, PASSWORD_SOURCE

TERRAFORM_BUCKET = 'resource "aws_s3_bucket" "b" {\n  acl = "public-read"\n}\n'


def _ids(findings):
    return [finding.rule_id for finding in findings]


class TestEvaluate:
    def test_hardcoded_password(self):
        findings = evaluate(PASSWORD_SOURCE, "python", path="app/settings.py")

        assert len(findings) == 1
        finding = findings[0]
        assert finding.rule_id == "security-001"
        assert finding.severity == "critical"
        assert finding.category == "security"
        assert finding.line_number == 2
        assert finding.file == "app/settings.py"
        assert finding.origin == "pattern"

    def test_clean_file_has_no_findings(self):
        assert evaluate(CLEAN_SOURCE, "python") == []

    def test_sql_delete_without_where(self):
        findings = evaluate("DELETE FROM users;\n", "sql")
        assert _ids(findings) == ["sql-002"]
        assert findings[0].line_number == 1

    def test_terraform_findings_in_catalog_order(self):
        findings = evaluate(TERRAFORM_BUCKET, "terraform")
        assert _ids(findings) == ["terraform-004", "terraform-005", "terraform-006"]
        assert findings[0].line_number == 2

    def test_predicate_rule_has_no_line(self):
        findings = evaluate("x = 1\n", "python")
        assert _ids(findings) == ["pyspark-001"]
        assert findings[0].line_number is None

    def test_one_finding_per_rule(self):
        text = '"""Job."""\nrows = df.collect()\nmore = df.collect()\n'
        findings = evaluate(text, "pyspark")
        assert _ids(findings).count("pyspark-003") == 1

    def test_only_language_rules_apply(self):
        findings = evaluate(TERRAFORM_BUCKET, "sql")
        assert all(not rule_id.startswith("terraform-") for rule_id in _ids(findings))

    def test_unknown_language_yields_nothing(self):
        assert evaluate(PASSWORD_SOURCE, "cobol") == []


class TestDeterminism:
    def test_same_input_same_output(self):
        text = '"""Job."""\ndf = spark.read.csv("in", inferSchema=True)\ndf.show()\n'
        assert evaluate(text, "pyspark") == evaluate(text, "pyspark")

    def test_disabling_a_rule_removes_only_that_rule(self):
        text = '"""Job."""\ndf = spark.read.csv("in", inferSchema=True)\ndf.show()\n'
        full = _ids(evaluate(text, "pyspark"))
        assert "pyspark-002" in full

        reduced = _ids(evaluate(text, "pyspark", DEFAULT_CATALOG.without("pyspark-002")))
        assert reduced == [rule_id for rule_id in full if rule_id != "pyspark-002"]


def test_evaluate_rule_no_match():
    assert evaluate_rule(DEFAULT_CATALOG.get("sql-002"), "SELECT 1;") is None
