"""Data models for coverage reports.

Contains dataclasses shared by the parsers, the diff engine and the renderer:
    - FileCoverage        one file at one point in time
    - FileCoverageDelta   FileCoverage plus base values and delta
    - CoverageSummary     per-tool aggregate
    - ToolCoverageReport  one tool's files, summary and warnings
    - OverallSummary      cross-tool aggregate
    - CoverageReport      all tools plus generation timestamp
    - CoverageArtifact    persisted baseline snapshot

All objects are frozen; the diff engine always builds new ones.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def round2(value: float) -> float:
    """Round to two decimals, half away from zero (``round2(0.125) == 0.13``).

    Never returns ``-0.0``.
    """
    scaled = math.floor(abs(value) * 100 + 0.5)
    if scaled == 0:
        return 0.0
    return math.copysign(scaled / 100, value)


def percent_of(covered: int, total: int) -> float:
    """Return ``covered / total`` as a rounded percentage, 100 when total is 0."""
    if total > 0:
        return round2(covered / total * 100)
    return 100.0


# ---------------------------------------------------------------------------
# Per-file records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileCoverage:
    file: str
    covered_lines: int
    total_lines: int
    percent: float

    @classmethod
    def from_counts(cls, file: str, covered: int, total: int) -> "FileCoverage":
        return cls(file, covered, total, percent_of(covered, total))

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "coveredLines": self.covered_lines,
            "totalLines": self.total_lines,
            "percent": self.percent,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FileCoverage":
        covered = int(raw["coveredLines"])
        total = int(raw["totalLines"])
        percent = raw.get("percent")
        if percent is None:
            percent = percent_of(covered, total)
        return cls(str(raw["file"]), covered, total, float(percent))


@dataclass(frozen=True)
class FileCoverageDelta(FileCoverage):
    base_covered_lines: int | None = None
    base_total_lines: int | None = None
    base_percent: float | None = None
    # Signed percentage points, head minus base (positive = improvement)
    delta: float | None = None


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CoverageSummary:
    covered_lines: int
    total_lines: int
    percent: float
    base_covered_lines: int | None = None
    base_total_lines: int | None = None
    base_percent: float | None = None
    delta: float | None = None


@dataclass(frozen=True)
class ToolCoverageReport:
    tool: str
    files: tuple[FileCoverageDelta, ...]
    summary: CoverageSummary
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class OverallSummary:
    covered_lines: int
    total_lines: int
    percent: float
    base_percent: float | None = None
    delta: float | None = None


@dataclass(frozen=True)
class CoverageReport:
    tools: tuple[ToolCoverageReport, ...]
    overall: OverallSummary
    generated_at: str

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form used for JSON output."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Persisted baseline
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CoverageArtifact:
    tool: str
    files: tuple[FileCoverage, ...] = field(default_factory=tuple)
    commit_sha: str = ""
    branch: str = ""
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "files": [f.to_dict() for f in self.files],
            "commitSha": self.commit_sha,
            "branch": self.branch,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "CoverageArtifact":
        """Build an artifact from its JSON form.

        Raises:
            KeyError, TypeError, ValueError: when the snapshot is malformed.
        """
        if not isinstance(raw, dict):
            raise TypeError(f"expected a JSON object, got {type(raw).__name__}")
        return cls(
            tool=str(raw["tool"]),
            files=tuple(FileCoverage.from_dict(f) for f in raw.get("files") or []),
            commit_sha=str(raw.get("commitSha", "")),
            branch=str(raw.get("branch", "")),
            timestamp=str(raw.get("timestamp", "")),
        )
