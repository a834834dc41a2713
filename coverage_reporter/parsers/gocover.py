"""Go cover profile parser.

Input is the text profile written by ``go test -coverprofile=coverage.out``
(or ``go tool covdata textfmt``)::

    mode: set|count|atomic
    <file>:<startLine>.<startCol>,<endLine>.<endCol> <numStmts> <count>

A block counts as covered as a whole: its statements are added to the
covered total when ``count > 0``.
"""

import re

from coverage_reporter.models import FileCoverage

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def _to_int(token: str) -> int | None:
    match = _LEADING_INT_RE.match(token)
    return int(match.group()) if match else None


def parse_go_cover(content: str) -> list[FileCoverage]:
    """Return one record per file, sorted by path.

    Unparseable lines are skipped.
    """
    totals: dict[str, list[int]] = {}

    for raw in content.split("\n"):
        line = raw.strip()
        if not line or line.startswith("mode:"):
            continue

        # Tokenise from the right: the path itself may contain spaces.
        tokens = line.rsplit(None, 2)
        if len(tokens) != 3:
            continue
        file_range, stmts_token, count_token = tokens

        colon = file_range.find(":")
        if colon == -1:
            continue
        file = file_range[:colon]

        num_stmts = _to_int(stmts_token)
        count = _to_int(count_token)
        if num_stmts is None or count is None:
            continue

        entry = totals.setdefault(file, [0, 0])
        entry[1] += num_stmts
        if count > 0:
            entry[0] += num_stmts

    return [
        FileCoverage.from_counts(file, covered, total)
        for file, (covered, total) in sorted(totals.items())
    ]
