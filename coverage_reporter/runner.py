"""One pipeline run: parse, compare, render, publish.

Usage:
    result = run(config, EventContext.from_env(os.environ), store, client, echo=click.echo)
    result.overall_coverage      # "81.25"
    result.coverage_decreased    # True if any tool's summary delta is negative
    result.failure               # message when the run should fail, else None

Only configuration errors raise; every other problem becomes a warning.
"""

from dataclasses import dataclass

from coverage_reporter.client import GitHubClient, GitHubClientError
from coverage_reporter.comment import upsert_comment
from coverage_reporter.config import Config
from coverage_reporter.context import (
    EventContext,
    resolve_base_branch,
    resolve_current_branch,
    resolve_head_sha,
    resolve_pr_number,
)
from coverage_reporter.diff import build_full_report, build_tool_report
from coverage_reporter.models import CoverageReport
from coverage_reporter.parsers import parse_artifact
from coverage_reporter.render import CommitInfo, render_report
from coverage_reporter.store import Echo, SnapshotStore, silent


@dataclass
class RunResult:
    report: CoverageReport
    markdown: str
    overall_coverage: str
    coverage_decreased: bool
    comment_id: int | None = None
    failure: str | None = None

    def outputs(self) -> dict[str, str]:
        """Values exposed to the calling workflow."""
        outputs = {
            "overall-coverage": self.overall_coverage,
            "coverage-decreased": "true" if self.coverage_decreased else "false",
        }
        if self.comment_id is not None:
            outputs["comment-id"] = str(self.comment_id)
        return outputs


def run(
    config: Config,
    context: EventContext,
    store: SnapshotStore,
    client: GitHubClient | None = None,
    echo: Echo | None = None,
) -> RunResult:
    echo = echo or silent

    def warn(message: str) -> None:
        echo(f"Warning: {message}")

    base_branch = resolve_base_branch(config.base_branch, context)
    commit_sha = resolve_head_sha(context)
    current_branch = resolve_current_branch(context)

    if not config.artifacts:
        warn("No coverage artifacts found.")

    tool_reports = []
    any_decrease = False

    for artifact in config.artifacts:
        echo(f"Processing {artifact.tool} coverage from {artifact.path}")
        head, warnings = parse_artifact(artifact.tool, artifact.path)

        base = store.restore(artifact.tool, config.cache_key, base_branch)
        report = build_tool_report(artifact.tool, head, base, warnings)
        tool_reports.append(report)

        if report.summary.delta is not None and report.summary.delta < 0:
            any_decrease = True

        if head:
            store.save(artifact.tool, head, commit_sha, current_branch, config.cache_key)

    full_report = build_full_report(tool_reports)

    commit = None
    if config.show_commit_link and commit_sha and context.owner and context.repo:
        commit = CommitInfo(sha=commit_sha, owner=context.owner, repo=context.repo)
    markdown = render_report(full_report, config.marker, config.colorize, commit)

    result = RunResult(
        report=full_report,
        markdown=markdown,
        overall_coverage=f"{full_report.overall.percent:.2f}",
        coverage_decreased=any_decrease,
    )

    pr_number = resolve_pr_number(config.pull_request, context, client)
    if pr_number is not None and client is not None:
        try:
            echo(f"Upserting comment on PR #{pr_number}")
            posted = upsert_comment(client, config.marker, markdown, pr_number)
        except GitHubClientError as exc:
            warn(f"Could not upsert PR comment: {exc}")
            _echo_markdown(echo, markdown)
        else:
            result.comment_id = posted.comment_id
            verb = "Created" if posted.created else "Updated"
            echo(f"{verb} comment {posted.comment_id}")
    else:
        if pr_number is None:
            warn(
                "Could not determine PR number. Set the pull request number "
                "or run on pull_request / workflow_run events."
            )
        _echo_markdown(echo, markdown)

    overall = full_report.overall.percent
    if config.threshold > 0 and overall < config.threshold:
        result.failure = (
            f"Overall coverage {overall:.2f}% is below threshold {config.threshold:g}%"
        )
    elif config.fail_on_decrease and any_decrease:
        result.failure = "Coverage decreased compared to base branch."

    return result


def _echo_markdown(echo: Echo, markdown: str) -> None:
    echo("--- Coverage Report ---")
    echo(markdown)
