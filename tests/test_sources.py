"""Tests for source collection (sources.py)."""

import pytest

from sources import (
    changed_paths,
    detect_language,
    load_sources,
    resolve_language,
    should_review_file,
)

SAMPLE_DIFF = """\
diff --git a/jobs/etl.py b/jobs/etl.py
index 83db48f..bf269f4 100644
--- a/jobs/etl.py
+++ b/jobs/etl.py
@@ -1,2 +1,3 @@
 import os
+import sys
 print("x")
diff --git a/old.sql b/old.sql
deleted file mode 100644
index 1111111..0000000
--- a/old.sql
+++ /dev/null
@@ -1 +0,0 @@
-SELECT 1;
diff --git a/infra/main.tf b/infra/main.tf
new file mode 100644
index 0000000..2222222
--- /dev/null
+++ b/infra/main.tf
@@ -0,0 +1 @@
+resource "x" "y" {}
"""


class TestDetectLanguage:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("jobs/etl.py", "python"),
            ("src/Main.scala", "scala"),
            ("queries/report.SQL", "sql"),
            ("infra/main.tf", "terraform"),
            ("infra/vars.hcl", "terraform"),
            ("README", "text"),
            ("app.rb", "text"),
        ],
    )
    def test_by_extension(self, path, expected):
        assert detect_language(path) == expected


class TestResolveLanguage:
    def test_pyspark_promotion(self):
        assert resolve_language("from pyspark.sql import SparkSession\n", "python") == "pyspark"

    def test_plain_python(self):
        assert resolve_language("import os\n", "python") == "python"

    def test_other_languages_untouched(self):
        assert resolve_language("spark.sql('x')", "scala") == "scala"


class TestShouldReviewFile:
    @pytest.mark.parametrize(
        "filename",
        [
            "README.md",
            "poetry.lock",
            "node_modules/lib/index.py",
            "src/vendor/pkg/mod.py",
            "assets/logo.png",
            "config/settings.yaml",
        ],
    )
    def test_skipped(self, filename):
        assert should_review_file(filename) is False

    def test_reviewed(self):
        assert should_review_file("jobs/etl.py") is True

    def test_skip_patterns(self):
        assert should_review_file("tests/test_etl.py", ["tests/*"]) is False
        assert should_review_file("jobs/etl.py", ["tests/*"]) is True


class TestChangedPaths:
    def test_excludes_removed_files(self):
        assert changed_paths(SAMPLE_DIFF) == ["jobs/etl.py", "infra/main.tf"]

    def test_empty_diff(self):
        assert changed_paths("") == []


class TestLoadSources:
    def test_walks_directories_and_filters(self, tmp_path):
        (tmp_path / "jobs").mkdir()
        (tmp_path / "jobs" / "etl.py").write_text("from pyspark.sql import SparkSession\n")
        (tmp_path / "jobs" / "util.py").write_text("import os\n")
        (tmp_path / "jobs" / "notes.md").write_text("# notes\n")
        (tmp_path / "jobs" / "script.rb").write_text("puts 1\n")
        (tmp_path / "report.sql").write_text("SELECT 1;\n")

        sources = load_sources([str(tmp_path)])

        by_name = {source.path.rsplit("/", 1)[-1]: source for source in sources}
        assert set(by_name) == {"etl.py", "util.py", "report.sql"}
        assert by_name["etl.py"].language == "pyspark"
        assert by_name["util.py"].language == "python"
        assert by_name["report.sql"].content == "SELECT 1;\n"

    def test_duplicates_loaded_once(self, tmp_path):
        target = tmp_path / "a.sql"
        target.write_text("SELECT 1;\n")
        assert len(load_sources([str(target), str(target)])) == 1

    def test_missing_file_skipped(self, tmp_path):
        assert load_sources([str(tmp_path / "missing.py")]) == []

    def test_skip_patterns(self, tmp_path):
        (tmp_path / "a.sql").write_text("SELECT 1;\n")
        assert load_sources([str(tmp_path)], skip_patterns=["*.sql"]) == []
