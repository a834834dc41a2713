"""Coverage diffing and aggregation.

Functions:
    compute_file_diffs(head, base)                         -> list[FileCoverageDelta]
    build_tool_report(tool, head, base_artifact, warnings) -> ToolCoverageReport
    build_full_report(tool_reports)                        -> CoverageReport

Aggregates are always recomputed from summed raw counts, never by averaging
per-file percentages.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from coverage_reporter.models import (
    CoverageArtifact,
    CoverageReport,
    CoverageSummary,
    FileCoverage,
    FileCoverageDelta,
    OverallSummary,
    ToolCoverageReport,
    percent_of,
    round2,
)


# ---------------------------------------------------------------------------
# Per-file deltas
# ---------------------------------------------------------------------------

def compute_file_diffs(
    head: Sequence[FileCoverage],
    base: Sequence[FileCoverage] | None,
) -> list[FileCoverageDelta]:
    """Compare *head* records against *base* by exact path, sorted by path.

    Files only present in *base* are reported as deleted: zero coverage and
    ``delta = -base_percent``. With ``base=None`` every delta is ``None``.
    """
    base_by_file = {f.file: f for f in base or ()}
    result: list[FileCoverageDelta] = []

    for h in head:
        b = base_by_file.get(h.file)
        if b is None:
            result.append(FileCoverageDelta(h.file, h.covered_lines, h.total_lines, h.percent))
            continue
        result.append(FileCoverageDelta(
            h.file, h.covered_lines, h.total_lines, h.percent,
            base_covered_lines=b.covered_lines,
            base_total_lines=b.total_lines,
            base_percent=b.percent,
            delta=round2(h.percent - b.percent),
        ))

    if base:
        head_files = {h.file for h in head}
        for b in base:
            if b.file in head_files:
                continue
            result.append(FileCoverageDelta(
                b.file, 0, 0, 0.0,
                base_covered_lines=b.covered_lines,
                base_total_lines=b.total_lines,
                base_percent=b.percent,
                delta=0.0 - b.percent,
            ))

    result.sort(key=lambda d: d.file)
    return result


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _sum_counts(records: Iterable[FileCoverage]) -> tuple[int, int]:
    covered = total = 0
    for r in records:
        covered += r.covered_lines
        total += r.total_lines
    return covered, total


def build_tool_report(
    tool: str,
    head: Sequence[FileCoverage],
    base_artifact: CoverageArtifact | None,
    warnings: Iterable[str] = (),
) -> ToolCoverageReport:
    """Build one tool's report from its head records and optional baseline."""
    base = base_artifact.files if base_artifact is not None else None
    files = compute_file_diffs(head, base)

    # Summed over head only; deleted-file entries carry no head counts.
    covered, total = _sum_counts(head)
    percent = percent_of(covered, total)

    summary = CoverageSummary(covered, total, percent)
    if base:
        base_covered, base_total = _sum_counts(base)
        base_percent = percent_of(base_covered, base_total)
        summary = CoverageSummary(
            covered, total, percent,
            base_covered_lines=base_covered,
            base_total_lines=base_total,
            base_percent=base_percent,
            delta=round2(percent - base_percent),
        )

    return ToolCoverageReport(tool, tuple(files), summary, tuple(warnings))


def build_full_report(
    tool_reports: Sequence[ToolCoverageReport],
    generated_at: str | None = None,
) -> CoverageReport:
    """Aggregate all tool reports into one, stamped with *generated_at* (UTC now by default)."""
    covered = sum(t.summary.covered_lines for t in tool_reports)
    total = sum(t.summary.total_lines for t in tool_reports)
    percent = percent_of(covered, total)

    base_covered = sum(t.summary.base_covered_lines or 0 for t in tool_reports)
    base_total = sum(t.summary.base_total_lines or 0 for t in tool_reports)

    overall = OverallSummary(covered, total, percent)
    if base_total > 0:
        base_percent = percent_of(base_covered, base_total)
        overall = OverallSummary(
            covered, total, percent,
            base_percent=base_percent,
            delta=round2(percent - base_percent),
        )

    if generated_at is None:
        generated_at = (
            datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        )

    return CoverageReport(tuple(tool_reports), overall, generated_at)
