"""Tests for coverage_reporter/cli.py"""

import json

import pytest
from click.testing import CliRunner

from coverage_reporter.cli import cli

LCOV = "SF:src/a.ts\nDA:1,1\nDA:2,1\nDA:3,0\nDA:4,1\nend_of_record\n"

CLEAN_ENV = {
    "GITHUB_TOKEN": None,
    "GITHUB_EVENT_NAME": None,
    "GITHUB_EVENT_PATH": None,
    "GITHUB_REPOSITORY": None,
    "GITHUB_SHA": None,
    "GITHUB_REF": None,
    "GITHUB_OUTPUT": None,
    "COVERAGE_ARTIFACT_PATHS": None,
    "COVERAGE_BASE_BRANCH": None,
    "COVERAGE_THRESHOLD": None,
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "lcov.info").write_text(LCOV, encoding="utf-8")
    return tmp_path


def invoke(runner, args, **env):
    return runner.invoke(cli, args, env={**CLEAN_ENV, **env})


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

def test_init_writes_template(runner, workdir):
    result = invoke(runner, ["init"])
    assert result.exit_code == 0
    assert (workdir / "coverage-config.yaml").exists()


def test_init_refuses_to_overwrite(runner, workdir):
    (workdir / "coverage-config.yaml").write_text("x")
    result = invoke(runner, ["init"])
    assert result.exit_code == 1
    assert "already exists" in result.output


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------

def test_parse_emits_records(runner, workdir):
    result = invoke(runner, ["parse", "bun", "lcov.info", "--output", "records.json"])
    assert result.exit_code == 0
    records = json.loads((workdir / "records.json").read_text(encoding="utf-8"))
    assert records == [{"file": "src/a.ts", "coveredLines": 3, "totalLines": 4, "percent": 75.0}]


def test_parse_missing_file_fails(runner, workdir):
    result = invoke(runner, ["parse", "go", "missing.out"])
    assert result.exit_code == 1
    assert "Artifact file not found" in result.output


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------

def test_report_writes_outputs(runner, workdir):
    result = invoke(
        runner,
        ["report", "--artifacts", "bun:lcov.info", "--markdown-output", "report.md",
         "--output", "summary.json"],
        GITHUB_OUTPUT=str(workdir / "gh-output"),
    )
    assert result.exit_code == 0, result.output

    summary = json.loads((workdir / "summary.json").read_text(encoding="utf-8"))
    assert summary["overall-coverage"] == "75.00"
    assert summary["coverage-decreased"] == "false"
    assert summary["report"]["overall"]["percent"] == 75.0

    markdown = (workdir / "report.md").read_text(encoding="utf-8")
    assert "Bun Coverage: 75.00%" in markdown

    outputs = (workdir / "gh-output").read_text(encoding="utf-8")
    assert "overall-coverage=75.00\n" in outputs
    assert "coverage-decreased=false\n" in outputs


def test_report_saves_snapshot_for_next_run(runner, workdir):
    invoke(runner, ["report", "--artifacts", "bun:lcov.info", "--output", "s.json"],
           GITHUB_SHA="abc", GITHUB_REF="refs/heads/main")
    assert any((workdir / ".coverage-reporter-cache").iterdir())

    (workdir / "lcov.info").write_text("SF:src/a.ts\nDA:1,1\nDA:2,0\nend_of_record\n")
    result = invoke(runner, ["report", "--artifacts", "bun:lcov.info", "--no-color",
                             "--output", "s.json"],
                    GITHUB_SHA="def", GITHUB_REF="refs/heads/main")
    summary = json.loads((workdir / "s.json").read_text(encoding="utf-8"))
    assert summary["coverage-decreased"] == "true"
    assert "(-25.00%)" in result.output


def test_report_threshold_failure(runner, workdir):
    result = invoke(runner, ["report", "--artifacts", "bun:lcov.info", "--threshold", "90",
                             "--output", "s.json"])
    assert result.exit_code == 1
    assert "below threshold 90%" in result.output


def test_report_invalid_artifact_entry(runner, workdir):
    result = invoke(runner, ["report", "--artifacts", "lcov.info"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_report_missing_config_file(runner, workdir):
    result = invoke(runner, ["--config", "nope.yaml", "report"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_version(runner):
    result = invoke(runner, ["--version"])
    assert result.exit_code == 0
    assert "coverage-reporter" in result.output
