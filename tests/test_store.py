"""Tests for coverage_reporter/store.py"""

import json
import os

import pytest

from coverage_reporter.models import FileCoverage
from coverage_reporter.store import SnapshotStore, restore_keys, save_key, silent

PREFIX = "coverage-reporter"


@pytest.fixture
def messages():
    return []


@pytest.fixture
def store(tmp_path, messages):
    return SnapshotStore(tmp_path / "cache", echo=messages.append)


def records():
    return [FileCoverage.from_counts("a.ts", 3, 4), FileCoverage.from_counts("b.ts", 1, 1)]


def _set_mtime(store: SnapshotStore, key: str, mtime: int) -> None:
    path = store._path(key)
    os.utime(path, ns=(mtime, mtime))


# ---------------------------------------------------------------------------
# Key scheme
# ---------------------------------------------------------------------------

def test_save_key_format():
    assert save_key(PREFIX, "bun", "main", "abc123") == "coverage-reporter-bun-main-abc123"


def test_restore_keys_format():
    assert restore_keys(PREFIX, "go", "main") == (
        "coverage-reporter-go-main",
        "coverage-reporter-go-main-",
    )


# ---------------------------------------------------------------------------
# save()
# ---------------------------------------------------------------------------

def test_save_writes_artifact_json(store):
    key = store.save("bun", records(), "abc123", "main", PREFIX)
    assert key == "coverage-reporter-bun-main-abc123"
    raw = json.loads(store._path(key).read_text(encoding="utf-8"))
    assert raw["tool"] == "bun"
    assert raw["commitSha"] == "abc123"
    assert raw["branch"] == "main"
    assert raw["files"][0] == {"file": "a.ts", "coveredLines": 3, "totalLines": 4, "percent": 75.0}
    assert raw["timestamp"]


def test_branch_with_slash_stays_in_store_directory(store):
    key = store.save("bun", records(), "sha", "feature/login", PREFIX)
    assert store._path(key).parent == store.directory
    assert store.keys() == ["coverage-reporter-bun-feature/login-sha"]


def test_save_failure_is_swallowed(tmp_path, messages):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    store = SnapshotStore(blocker, echo=messages.append)
    assert store.save("bun", records(), "sha", "main", PREFIX) is None
    assert any(m.startswith("Warning: cache save for bun") for m in messages)


# ---------------------------------------------------------------------------
# restore()
# ---------------------------------------------------------------------------

def test_restore_missing_returns_none(store):
    assert store.restore("bun", PREFIX, "main") is None


def test_restore_latest_saved_for_branch(store):
    store.save("bun", [FileCoverage.from_counts("a.ts", 1, 4)], "old", "main", PREFIX)
    store.save("bun", [FileCoverage.from_counts("a.ts", 4, 4)], "new", "main", PREFIX)
    _set_mtime(store, "coverage-reporter-bun-main-old", 1_000_000_000)
    _set_mtime(store, "coverage-reporter-bun-main-new", 2_000_000_000)

    artifact = store.restore("bun", PREFIX, "main")
    assert artifact.commit_sha == "new"
    assert artifact.files[0].percent == 100.0


def test_restore_prefers_exact_key(store):
    store.save("bun", records(), "sha", "main", PREFIX)
    exact = store._path("coverage-reporter-bun-main")
    exact.write_text(json.dumps({"tool": "bun", "files": [], "commitSha": "exact"}))
    _set_mtime(store, "coverage-reporter-bun-main", 1)

    assert store.restore("bun", PREFIX, "main").commit_sha == "exact"


def test_restore_ignores_other_tools_and_branches(store):
    store.save("go", records(), "sha1", "main", PREFIX)
    store.save("bun", records(), "sha2", "develop", PREFIX)
    assert store.restore("bun", PREFIX, "main") is None


def test_restore_corrupt_snapshot_returns_none(store, messages):
    store.directory.mkdir(parents=True)
    store._path("coverage-reporter-bun-main-sha").write_text("{not json")
    assert store.restore("bun", PREFIX, "main") is None
    assert any(m.startswith("Warning: failed to restore cache for bun") for m in messages)


def test_restore_snapshot_missing_fields_returns_none(store):
    store.directory.mkdir(parents=True)
    store._path("coverage-reporter-bun-main-sha").write_text(json.dumps({"files": []}))
    assert store.restore("bun", PREFIX, "main") is None


def test_round_trip_preserves_records(store):
    store.save("bun", records(), "sha", "main", PREFIX)
    assert list(store.restore("bun", PREFIX, "main").files) == records()


def test_restore_overlong_branch_name_returns_none(store, messages):
    store.directory.mkdir(parents=True)
    assert store.restore("bun", PREFIX, "b" * 250) is None
    assert not any(m.startswith("Cache hit") for m in messages)


def test_store_without_echo_uses_silent(tmp_path):
    quiet = SnapshotStore(tmp_path / "cache")
    assert quiet._echo is silent
    assert quiet.save("bun", records(), "sha", "main", PREFIX) == save_key(PREFIX, "bun", "main", "sha")
