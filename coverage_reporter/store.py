"""Baseline snapshot store.

Usage:
    store = SnapshotStore(".coverage-reporter-cache", echo=click.echo)
    store.save("bun", records, sha, "feature/x", "coverage-reporter")
    base = store.restore("bun", "coverage-reporter", "main")   # or None

Snapshots are kept as one JSON file per key. Keys follow
``{prefix}-{tool}-{branch}-{sha}``; restoring tries ``{prefix}-{tool}-{branch}``
first and then the most recently saved key starting with
``{prefix}-{tool}-{branch}-``.
"""

import json
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote, unquote

from coverage_reporter.models import CoverageArtifact, FileCoverage

_SUFFIX = ".json"


def save_key(prefix: str, tool: str, branch: str, sha: str) -> str:
    return f"{prefix}-{tool}-{branch}-{sha}"


def restore_keys(prefix: str, tool: str, base_branch: str) -> tuple[str, str]:
    """Return ``(exact_key, fallback_prefix)`` for a restore."""
    return f"{prefix}-{tool}-{base_branch}", f"{prefix}-{tool}-{base_branch}-"


Echo = Callable[[str], None]


def silent(message: str) -> None:
    """Echo that discards everything."""


class SnapshotStore:
    """Directory-backed key/value store of CoverageArtifact snapshots."""

    def __init__(self, directory: str | Path,
                 echo: Echo | None = None) -> None:
        self.directory = Path(directory)
        self._echo = echo or silent

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def save(
        self,
        tool: str,
        files: Sequence[FileCoverage],
        commit_sha: str,
        branch: str,
        key_prefix: str,
    ) -> str | None:
        """Persist a snapshot and return its key, or ``None`` if saving failed.

        Failures are reported through ``echo`` and never raised.
        """
        artifact = CoverageArtifact(
            tool=tool,
            files=tuple(files),
            commit_sha=commit_sha,
            branch=branch,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        key = save_key(key_prefix, tool, branch, commit_sha)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(
                json.dumps(artifact.to_dict(), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            self._echo(f"Warning: cache save for {tool} (non-fatal): {exc}")
            return None

        self._echo(f"Saved cache for {tool} (key={key})")
        return key

    def restore(self, tool: str, key_prefix: str, base_branch: str) -> CoverageArtifact | None:
        """Return the baseline for *tool* on *base_branch*, or ``None``."""
        exact, prefix = restore_keys(key_prefix, tool, base_branch)
        try:
            key = exact if self._path(exact).is_file() else self._latest(prefix)
            if key is None:
                return None
            raw = json.loads(self._path(key).read_text(encoding="utf-8"))
            artifact = CoverageArtifact.from_dict(raw)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            self._echo(f"Warning: failed to restore cache for {tool}: {exc}")
            return None

        self._echo(f"Cache hit for {tool} base artifact (key={key})")
        return artifact

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            unquote(p.name[:-len(_SUFFIX)])
            for p in self.directory.iterdir()
            if p.name.endswith(_SUFFIX)
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _path(self, key: str) -> Path:
        # Branch names contain "/", which must not create subdirectories.
        return self.directory / (quote(key, safe="") + _SUFFIX)

    def _latest(self, prefix: str) -> str | None:
        candidates = [k for k in self.keys() if k.startswith(prefix)]
        if not candidates:
            return None
        return max(candidates, key=lambda k: (self._path(k).stat().st_mtime_ns, k))
