"""Sticky pull-request comment.

Usage:
    result = upsert_comment(client, "<!-- coverage-reporter-sticky -->", body, 42)
    result.comment_id, result.created
"""

from collections.abc import Iterable
from dataclasses import dataclass

from coverage_reporter.client import GitHubClient


@dataclass(frozen=True)
class CommentResult:
    comment_id: int
    created: bool


def find_marked_comment(comments: Iterable[dict], marker: str) -> dict | None:
    """Return the first comment whose body contains *marker*.

    *comments* may be a lazy sequence; iteration stops at the first match.
    """
    for comment in comments:
        if marker in (comment.get("body") or ""):
            return comment
    return None


def upsert_comment(client: GitHubClient, marker: str, body: str, pr_number: int) -> CommentResult:
    """Update the comment carrying *marker* on *pr_number*, or create one.

    Raises:
        GitHubClientError: on any API failure.
    """
    issue = f"{client.repo_path}/issues/{pr_number}/comments"
    existing = find_marked_comment(client.iter_paginated(issue), marker)

    if existing is not None:
        client.patch(f"{client.repo_path}/issues/comments/{existing['id']}", {"body": body})
        return CommentResult(comment_id=existing["id"], created=False)

    data = client.post(issue, {"body": body})
    return CommentResult(comment_id=data["id"], created=True)
