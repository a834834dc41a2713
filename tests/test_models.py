"""Tests for coverage_reporter/models.py"""

import dataclasses

import pytest

from coverage_reporter.models import CoverageArtifact, FileCoverage, percent_of, round2


@pytest.mark.parametrize("value, expected", [
    (0.125, 0.13),
    (-0.125, -0.13),
    (63.6363, 63.64),
    (9.090000000000003, 9.09),
    (-0.001, 0.0),
    (100.0, 100.0),
])
def test_round2(value, expected):
    assert round2(value) == expected


def test_round2_never_returns_negative_zero():
    assert str(round2(-0.0001)) == "0.0"


def test_percent_of_zero_total_is_100():
    assert percent_of(0, 0) == 100.0


def test_percent_of_rounds():
    assert percent_of(1, 3) == 33.33
    assert percent_of(2, 3) == 66.67


def test_file_coverage_is_immutable():
    record = FileCoverage.from_counts("a.ts", 1, 2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.percent = 10  # type: ignore[misc]


def test_artifact_json_keys():
    artifact = CoverageArtifact("bun", (FileCoverage.from_counts("a.ts", 1, 2),), "sha1", "main", "t")
    assert artifact.to_dict() == {
        "tool": "bun",
        "files": [{"file": "a.ts", "coveredLines": 1, "totalLines": 2, "percent": 50.0}],
        "commitSha": "sha1",
        "branch": "main",
        "timestamp": "t",
    }


def test_artifact_from_dict_recomputes_missing_percent():
    artifact = CoverageArtifact.from_dict({
        "tool": "go",
        "files": [{"file": "a.go", "coveredLines": 3, "totalLines": 4}],
    })
    assert artifact.files[0].percent == 75.0
    assert artifact.commit_sha == ""


def test_artifact_from_dict_rejects_non_mapping():
    with pytest.raises(TypeError):
        CoverageArtifact.from_dict(["not", "a", "dict"])  # type: ignore[arg-type]
