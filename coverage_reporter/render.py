"""Markdown rendering of a CoverageReport.

The output is byte-identical for identical input; only the footer carries
the generation timestamp. The marker is written verbatim on the first line
so the comment sink can find the comment again.
"""

from dataclasses import dataclass

from coverage_reporter.models import CoverageReport, ToolCoverageReport

HEADING = "## Coverage Report"
PROJECT_URL = "https://github.com/xseman/coverage"


@dataclass(frozen=True)
class CommitInfo:
    sha: str
    owner: str
    repo: str

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/commit/{self.sha}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_delta(delta: float | None, colorize: bool) -> str:
    """Return the suffix appended after a percentage, possibly empty."""
    if delta is None:
        return ""
    sign = "+" if delta >= 0 else ""
    pct = f"{sign}{delta:.2f}%"
    if not colorize:
        return f" ({pct})"
    if delta > 0:
        return f" [+] {pct}"
    if delta < 0:
        return f" [-] {pct}"
    return ""


def _tool_label(tool: str) -> str:
    return tool[:1].upper() + tool[1:]


def render_tool_section(report: ToolCoverageReport, colorize: bool) -> str:
    lines = [f"WARNING: {w}" for w in report.warnings]

    if not report.files and report.warnings:
        lines.append("")
        return "\n".join(lines)

    covered_width = max((len(str(f.covered_lines)) for f in report.files), default=1)
    total_width = max((len(str(f.total_lines)) for f in report.files), default=1)

    for f in report.files:
        pct = f"{f.percent:.2f}%".rjust(7)
        covered = str(f.covered_lines).rjust(covered_width)
        total = str(f.total_lines).rjust(total_width)
        lines.append(f"{pct} ({covered}/{total}) {f.file}{format_delta(f.delta, colorize)}")

    s = report.summary
    lines.append("")
    lines.append(
        f"{_tool_label(report.tool)} Coverage: {s.percent:.2f}%{format_delta(s.delta, colorize)}"
    )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def render_report(
    report: CoverageReport,
    marker: str,
    colorize: bool,
    commit: CommitInfo | None = None,
) -> str:
    parts = [marker, HEADING + "\n"]

    for tool in report.tools:
        parts.append("```")
        parts.append(render_tool_section(tool, colorize))
        parts.append("```\n")

    if len(report.tools) > 1:
        o = report.overall
        parts.append(f"**Total Coverage: {o.percent:.2f}%{format_delta(o.delta, colorize)}**\n")

    footer = f'Generated at {report.generated_at} by <a href="{PROJECT_URL}">coverage</a>'
    if commit is not None:
        footer = f"[Commit {commit.sha[:7]}]({commit.url}) | {footer}"

    parts.append("---")
    parts.append(f"<sub>{footer}</sub>")
    return "\n".join(parts)
