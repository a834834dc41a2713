"""Configuration loading and validation.

Usage:
    config = load("coverage-config.yaml")     # raises ConfigError on bad config
    config.artifacts                          # [ArtifactInput(tool="bun", path="...")]
    generate_template("coverage-config.yaml") # writes example file to disk
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = "coverage-config.yaml"
DEFAULT_CACHE_KEY = "coverage-reporter"
DEFAULT_CACHE_DIR = ".coverage-reporter-cache"
DEFAULT_MARKER = "<!-- coverage-reporter-sticky -->"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ArtifactInput:
    tool: str
    path: str


@dataclass
class Config:
    artifacts: list[ArtifactInput] = field(default_factory=list)
    base_branch: str = ""
    cache_key: str = DEFAULT_CACHE_KEY
    cache_dir: str = DEFAULT_CACHE_DIR
    marker: str = DEFAULT_MARKER
    colorize: bool = True
    show_commit_link: bool = True
    fail_on_decrease: bool = False
    threshold: float = 0.0
    token: str = ""
    pull_request: str = ""


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def parse_artifact_inputs(raw: str | list | None) -> list[ArtifactInput]:
    """Parse ``tool:path`` entries separated by commas or newlines.

    A list is accepted too (one or more entries per item). Tool names are
    lower-cased.

    Raises:
        ConfigError: if an entry has no ``:`` separator.
    """
    if raw is None:
        return []
    chunks = [str(item) for item in raw] if isinstance(raw, list) else [str(raw)]

    entries: list[ArtifactInput] = []
    for chunk in chunks:
        for entry in chunk.replace(",", "\n").split("\n"):
            entry = entry.strip()
            if not entry:
                continue
            tool, sep, path = entry.partition(":")
            if not sep:
                raise ConfigError(
                    f'Invalid artifact entry "{entry}". Expected format: <tool>:<path> '
                    "(e.g. bun:coverage/lcov.info)"
                )
            entries.append(ArtifactInput(tool=tool.strip().lower(), path=path.strip()))
    return entries


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "on", "yes", "1"):
        return True
    if text in ("false", "off", "no", "0", ""):
        return False
    raise ConfigError(f"'{name}' must be a boolean, got '{value}'")


def _as_float(value: Any, name: str) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{name}' must be a number, got '{value}'") from exc


def _section(raw: dict, key: str) -> dict:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping.")
    return value


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | None = None,
         environ: Mapping[str, str] | None = None) -> Config:
    """Load and validate configuration.

    *config_path* is optional: when omitted, ``coverage-config.yaml`` is read
    if present. An explicitly named file must exist.

    Environment variables COVERAGE_ARTIFACT_PATHS, COVERAGE_BASE_BRANCH,
    COVERAGE_THRESHOLD and GITHUB_TOKEN override file values.

    Raises:
        ConfigError: if the file is missing, malformed, or a value is invalid.
    """
    env = os.environ if environ is None else environ
    raw: dict = {}

    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if path.exists():
        try:
            with path.open(encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse '{path}': {exc}") from exc
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")
        raw = loaded or {}
    elif config_path:
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `coverage-reporter init` to generate a template."
        )

    cache = _section(raw, "cache")
    comment = _section(raw, "comment")

    artifacts = env.get("COVERAGE_ARTIFACT_PATHS") or raw.get("artifacts")
    threshold = env.get("COVERAGE_THRESHOLD") or raw.get("threshold")
    pull_request = comment.get("pull_request")

    return Config(
        artifacts=parse_artifact_inputs(artifacts),
        base_branch=str(env.get("COVERAGE_BASE_BRANCH") or raw.get("base_branch") or ""),
        cache_key=str(cache.get("key") or DEFAULT_CACHE_KEY),
        cache_dir=str(cache.get("dir") or DEFAULT_CACHE_DIR),
        marker=str(comment.get("marker") or DEFAULT_MARKER),
        colorize=_as_bool(comment.get("colorize", True), "comment.colorize"),
        show_commit_link=_as_bool(comment.get("show_commit_link", True),
                                  "comment.show_commit_link"),
        fail_on_decrease=_as_bool(raw.get("fail_on_decrease", False), "fail_on_decrease"),
        threshold=_as_float(threshold, "threshold"),
        token=str(env.get("GITHUB_TOKEN") or ""),
        pull_request="" if pull_request is None else str(pull_request),
    )


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
# tool:path pairs. Tools: bun, lcov (LCOV) and go, gocover (Go cover profile)
artifacts:
  - bun:coverage/lcov.info
  - go:coverage.out

base_branch: ""          # empty: derived from the CI event (falls back to main)
fail_on_decrease: false
threshold: 0             # minimum overall coverage in percent, 0 disables

cache:
  key: coverage-reporter
  dir: .coverage-reporter-cache

comment:
  marker: "<!-- coverage-reporter-sticky -->"
  colorize: true
  show_commit_link: true
  pull_request: null     # override the PR number derived from the event
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template coverage-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
