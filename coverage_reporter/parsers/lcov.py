"""LCOV parser (``bun test --coverage --coverage-reporter=lcov``, genhtml, c8...).

Record structure::

    SF:<source file>
    DA:<line number>,<execution count>[,<checksum>]
    LH:<lines hit>
    LF:<lines found>
    end_of_record

Per-file counts come from the DA lines; LH/LF are only used when a record
has no DA line at all (some emitters write branch data only).
"""

import re

from coverage_reporter.models import FileCoverage

_RECORD_END = "end_of_record"
_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d+")


def _leading_int(text: str) -> int | None:
    """Parse the integer prefix of *text*, ``None`` when there is none."""
    match = _LEADING_INT_RE.match(text)
    return int(match.group()) if match else None


def parse_lcov(content: str) -> list[FileCoverage]:
    """Return one record per LCOV block, in input order.

    Repeated SF blocks for the same path are not merged. Blocks without an
    SF line are dropped. Never raises on malformed input.
    """
    results: list[FileCoverage] = []

    for record in content.split(_RECORD_END):
        record = record.strip()
        if not record:
            continue

        file: str | None = None
        covered = 0
        total = 0
        lines_hit: int | None = None
        lines_found: int | None = None

        for line in record.split("\n"):
            line = line.strip()
            if line.startswith("SF:"):
                file = line[3:].strip()
            elif line.startswith("DA:"):
                parts = line[3:].split(",")
                if len(parts) < 2:
                    continue
                total += 1
                count = _leading_int(parts[1])
                if count is not None and count > 0:
                    covered += 1
            elif line.startswith("LH:"):
                lines_hit = _leading_int(line[3:])
            elif line.startswith("LF:"):
                lines_found = _leading_int(line[3:])

        if not file:
            continue

        if total == 0 and lines_found is not None:
            total = lines_found
            covered = lines_hit or 0

        results.append(FileCoverage.from_counts(file, covered, total))

    return results
