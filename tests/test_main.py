"""Tests for the command-line entry point (main.py)."""

import json

import pytest

from main import EXIT_FAIL, EXIT_PASS, EXIT_USAGE, main

from conftest import CLEAN_SOURCE, PASSWORD_SOURCE


@pytest.fixture
def project(tmp_path):
    (tmp_path / "settings.py").write_text(PASSWORD_SOURCE)
    (tmp_path / "constants.py").write_text(CLEAN_SOURCE)
    return tmp_path


def test_gate_fail_exit_code(project):
    assert main(["--no-ai", str(project / "settings.py")]) == EXIT_FAIL


def test_gate_pass_exit_code(project):
    assert main(["--no-ai", str(project / "constants.py")]) == EXIT_PASS


def test_disable_rule(project):
    argv = ["--no-ai", "--disable-rule", "security-001", str(project / "settings.py")]
    assert main(argv) == EXIT_PASS


def test_unknown_rule_is_usage_error(project):
    argv = ["--no-ai", "--disable-rule", "nope-001", str(project / "settings.py")]
    assert main(argv) == EXIT_USAGE


def test_no_files(tmp_path):
    assert main(["--no-ai", str(tmp_path)]) == EXIT_USAGE


def test_json_output(project, capsys):
    assert main(["--no-ai", "--json", str(project)]) == EXIT_FAIL

    data = json.loads(capsys.readouterr().out)
    assert data["files_reviewed"] == 2
    assert data["gate_status"] == "fail"
    assert data["total_issues"] == 1


def test_diff_input(project, monkeypatch):
    monkeypatch.chdir(project)
    diff = project / "change.diff"
    diff.write_text(
        "diff --git a/settings.py b/settings.py\n"
        "--- a/settings.py\n"
        "+++ b/settings.py\n"
        "@@ -1 +1,2 @@\n"
        ' """Settings."""\n'
        '+password = "hunter2"\n'
    )
    assert main(["--no-ai", "--diff", str(diff)]) == EXIT_FAIL


def test_missing_diff_file(tmp_path):
    assert main(["--no-ai", "--diff", str(tmp_path / "missing.diff")]) == EXIT_USAGE
