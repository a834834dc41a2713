"""CLI entry point — command definitions using Click.

Commands:
    init      Generate a template config file
    parse     Parse one coverage artifact and print its records as JSON
    report    Compare coverage against the baseline, render and post the report
"""

import json
import os
import sys
from typing import Any

import click

from coverage_reporter import __version__


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _log(message: str) -> None:
    """Run log: everything goes to stderr so stdout stays valid JSON."""
    click.echo(message, err=True)


def _load_config(ctx: click.Context):
    """Load config. Exits on error."""
    from coverage_reporter.config import ConfigError, load

    try:
        return load(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


def _emit_json(data: Any, pretty: bool, output_path: str | None) -> None:
    """Write JSON to stdout or to *output_path*."""
    indent = 2 if pretty else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _write_action_outputs(outputs: dict[str, str]) -> None:
    """Append ``name=value`` lines to $GITHUB_OUTPUT when running in Actions."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        return
    with open(output_file, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(f"{name}={value}\n")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file [default: coverage-config.yaml if present].")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="coverage-reporter")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Coverage reporter — diff LCOV / Go coverage against a baseline and report it."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="coverage-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template coverage-config.yaml file."""
    from coverage_reporter.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your coverage artifact paths.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------

@cli.command("parse")
@click.argument("tool")
@click.argument("path", type=click.Path())
@click.option("--pretty", is_flag=True, default=False, help="Pretty-print the JSON output.")
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
def parse_command(tool: str, path: str, pretty: bool, output_path: str | None) -> None:
    """Parse the coverage artifact at PATH produced by TOOL."""
    from coverage_reporter.parsers import parse_artifact

    records, warnings = parse_artifact(tool, path)
    for w in warnings:
        click.echo(f"Warning: {w}", err=True)
    _emit_json([r.to_dict() for r in records], pretty, output_path)
    if warnings:
        sys.exit(1)


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------

@cli.command("report")
@click.option("--artifacts", default=None,
              help="Comma/newline separated tool:path entries (overrides config).")
@click.option("--base-branch", default=None, help="Branch whose snapshot is the baseline.")
@click.option("--pr", "pr_number", default=None, help="Pull request number to comment on.")
@click.option("--threshold", type=float, default=None,
              help="Fail when overall coverage is below this percentage.")
@click.option("--fail-on-decrease", is_flag=True, default=False,
              help="Fail when any tool's coverage decreased.")
@click.option("--no-color", is_flag=True, default=False,
              help="Render deltas as (+X.XX%) instead of [+]/[-] markers.")
@click.option("--no-comment", is_flag=True, default=False,
              help="Do not post the report as a pull-request comment.")
@click.option("--markdown-output", default=None,
              help="Also write the rendered report to this file.")
@click.option("--pretty", is_flag=True, default=False, help="Pretty-print the JSON output.")
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
@click.pass_context
def report_command(ctx: click.Context, artifacts: str | None, base_branch: str | None,
                   pr_number: str | None, threshold: float | None, fail_on_decrease: bool,
                   no_color: bool, no_comment: bool, markdown_output: str | None,
                   pretty: bool, output_path: str | None) -> None:
    """Compare coverage artifacts against the stored baseline and report the deltas."""
    from coverage_reporter.client import GitHubClient, GitHubClientError
    from coverage_reporter.config import ConfigError, parse_artifact_inputs
    from coverage_reporter.context import EventContext
    from coverage_reporter.runner import run
    from coverage_reporter.store import SnapshotStore

    config = _load_config(ctx)
    try:
        if artifacts is not None:
            config.artifacts = parse_artifact_inputs(artifacts)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)
    if base_branch is not None:
        config.base_branch = base_branch
    if pr_number is not None:
        config.pull_request = pr_number
    if threshold is not None:
        config.threshold = threshold
    config.fail_on_decrease = config.fail_on_decrease or fail_on_decrease
    config.colorize = config.colorize and not no_color

    context = EventContext.from_env(os.environ)
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] Event '{context.event_name or 'local'}' on "
                   f"'{context.repository or 'unknown repository'}'", err=True)
        click.echo(f"[verbose] Snapshot directory: {config.cache_dir}", err=True)

    client = None
    if config.token and context.repository and not no_comment:
        try:
            client = GitHubClient(config.token, context.repository)
        except GitHubClientError as exc:
            click.echo(f"Warning: {exc}", err=True)
    elif ctx.obj["verbose"]:
        click.echo("[verbose] No GitHub client; the report will only be logged", err=True)

    store = SnapshotStore(config.cache_dir, echo=_log)
    result = run(config, context, store, client, echo=_log)

    if markdown_output:
        with open(markdown_output, "w", encoding="utf-8") as f:
            f.write(result.markdown)

    _write_action_outputs(result.outputs())
    _emit_json({**result.outputs(), "report": result.report.to_dict()}, pretty, output_path)

    if result.failure:
        click.echo(f"Coverage check failed: {result.failure}", err=True)
        sys.exit(1)
