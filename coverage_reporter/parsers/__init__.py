"""Coverage artifact parsers.

Usage:
    records, warnings = parse_artifact("bun", "coverage/lcov.info")
    records = parse_text(Tool.GO, profile_text)

Tool identifiers ``bun``/``lcov`` select the LCOV parser, ``go``/``gocover``
the Go cover profile parser.
"""

from enum import Enum
from pathlib import Path

from coverage_reporter.models import FileCoverage
from coverage_reporter.parsers.gocover import parse_go_cover
from coverage_reporter.parsers.lcov import parse_lcov

__all__ = ["Tool", "parse_artifact", "parse_go_cover", "parse_lcov", "parse_text"]


class Tool(Enum):
    LCOV = "lcov"
    GO = "go"

    @classmethod
    def from_identifier(cls, identifier: str) -> "Tool | None":
        """Map a user-facing tool identifier to a parser, ``None`` if unknown."""
        return _ALIASES.get(identifier.strip().lower())


_ALIASES: dict[str, Tool] = {
    "bun": Tool.LCOV,
    "lcov": Tool.LCOV,
    "go": Tool.GO,
    "gocover": Tool.GO,
}

SUPPORTED_TOOLS = ", ".join(_ALIASES)


def parse_text(tool: Tool, content: str) -> list[FileCoverage]:
    if tool is Tool.LCOV:
        return parse_lcov(content)
    return parse_go_cover(content)


def parse_artifact(tool: str, path: str) -> tuple[list[FileCoverage], list[str]]:
    """Read and parse one artifact file.

    Problems with the file or the tool identifier are returned as warning
    strings, never raised.
    """
    warnings: list[str] = []
    artifact = Path(path)

    if not artifact.exists():
        warnings.append(f"Artifact file not found: `{path}`")
        return [], warnings

    try:
        content = artifact.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        warnings.append(f"Could not read `{path}`: {exc}")
        return [], warnings

    if not content.strip():
        warnings.append(f"Artifact file is empty: `{path}`")
        return [], warnings

    parser = Tool.from_identifier(tool)
    if parser is None:
        warnings.append(f'Unknown tool "{tool}". Supported: {SUPPORTED_TOOLS}.')
        return [], warnings

    return parse_text(parser, content), warnings
