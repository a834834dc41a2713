"""CI event context and the identifiers derived from it.

Usage:
    ctx = EventContext.from_env(os.environ)
    resolve_head_sha(ctx)                 # commit to attach the snapshot to
    resolve_current_branch(ctx)           # branch the snapshot is saved under
    resolve_base_branch("", ctx)          # branch whose snapshot is compared
    resolve_pr_number("", ctx, client)    # where to post the comment

Every resolver takes the context explicitly, so nothing here reads the
environment except ``from_env``.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from coverage_reporter.client import GitHubClient, GitHubClientError

_PR_EVENTS = ("pull_request", "pull_request_target")
_WORKFLOW_RUN = "workflow_run"
_DEFAULT_BRANCH = "main"


@dataclass(frozen=True)
class EventContext:
    event_name: str = ""
    sha: str = ""
    ref: str = ""
    repository: str = ""
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "EventContext":
        """Build a context from GitHub Actions environment variables.

        An unreadable or malformed event payload is treated as empty.
        """
        payload: dict[str, Any] = {}
        event_path = environ.get("GITHUB_EVENT_PATH")
        if event_path:
            try:
                loaded = json.loads(Path(event_path).read_text(encoding="utf-8"))
            except (OSError, ValueError):
                loaded = None
            if isinstance(loaded, dict):
                payload = loaded

        return cls(
            event_name=environ.get("GITHUB_EVENT_NAME", ""),
            sha=environ.get("GITHUB_SHA", ""),
            ref=environ.get("GITHUB_REF", ""),
            repository=environ.get("GITHUB_REPOSITORY", ""),
            payload=payload,
        )

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]

    @property
    def ref_branch(self) -> str:
        return self.ref.replace("refs/heads/", "", 1)

    def _section(self, key: str) -> dict[str, Any]:
        value = self.payload.get(key)
        return value if isinstance(value, dict) else {}

    @property
    def pull_request(self) -> dict[str, Any]:
        return self._section("pull_request")

    @property
    def workflow_run(self) -> dict[str, Any]:
        return self._section(_WORKFLOW_RUN)


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------

def resolve_head_sha(ctx: EventContext) -> str:
    """Head commit SHA; under ``workflow_run`` the triggering run's SHA."""
    if ctx.event_name == _WORKFLOW_RUN:
        return ctx.workflow_run.get("head_sha") or ctx.sha
    return ctx.sha


def resolve_current_branch(ctx: EventContext) -> str:
    """Branch the current snapshot is saved under."""
    if ctx.event_name in _PR_EVENTS:
        return (ctx.pull_request.get("head") or {}).get("ref") or ctx.ref_branch
    if ctx.event_name == _WORKFLOW_RUN:
        return ctx.workflow_run.get("head_branch") or ctx.ref_branch
    return ctx.ref_branch


def resolve_base_branch(override: str, ctx: EventContext) -> str:
    """Branch whose snapshot is used as baseline.

    Priority: explicit override, PR base ref, ``workflow_run`` head branch,
    the pushed ref, ``main``.
    """
    if override:
        return override
    if ctx.event_name in _PR_EVENTS:
        return (ctx.pull_request.get("base") or {}).get("ref") or _DEFAULT_BRANCH
    if ctx.event_name == _WORKFLOW_RUN:
        return ctx.workflow_run.get("head_branch") or _DEFAULT_BRANCH
    return ctx.ref_branch or _DEFAULT_BRANCH


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def resolve_pr_number(
    override: str | int | None,
    ctx: EventContext,
    client: GitHubClient | None = None,
) -> int | None:
    """Find the pull request to comment on.

    Priority: explicit override, PR event payload, first PR attached to a
    ``workflow_run``, then an API lookup of open PRs by head branch.
    Returns ``None`` when nothing matches; API errors are ignored.
    """
    if override not in (None, ""):
        number = _positive_int(override)
        if number is not None:
            return number

    if ctx.event_name in _PR_EVENTS:
        number = ctx.pull_request.get("number")
        if isinstance(number, int) and not isinstance(number, bool):
            return number

    if ctx.event_name != _WORKFLOW_RUN:
        return None

    run = ctx.workflow_run
    prs = run.get("pull_requests")
    if isinstance(prs, list) and prs and isinstance(prs[0], dict):
        number = prs[0].get("number")
        if isinstance(number, int) and not isinstance(number, bool):
            return number

    head_branch = run.get("head_branch")
    if client is None or not head_branch:
        return None

    head_owner = ((run.get("head_repository") or {}).get("owner") or {}).get("login")
    owner = head_owner or client.owner  # forks: head lives in the contributor's repo
    try:
        open_prs = client.get(
            f"{client.repo_path}/pulls",
            {"head": f"{owner}:{head_branch}", "state": "open"},
        )
    except GitHubClientError:
        return None

    if isinstance(open_prs, list) and open_prs:
        return _positive_int(open_prs[0].get("number"))
    return None
