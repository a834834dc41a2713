"""GitHub REST API client.

Usage:
    client   = GitHubClient(token="ghp_xxx", repository="octo/app")
    pr       = client.get("/repos/octo/app/pulls/1")
    comments = client.iter_paginated("/repos/octo/app/issues/1/comments")
"""

import warnings
from collections.abc import Iterator
from typing import Any

import requests

API_URL = "https://api.github.com"
PAGE_SIZE = 100
PAGINATION_WARNING_THRESHOLD = 50


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class GitHubClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(GitHubClientError):
    """Raised on HTTP 401/403 — invalid token or missing permission."""


class NotFoundError(GitHubClientError):
    """Raised on HTTP 404 — repository, pull request or comment not found."""


class NetworkError(GitHubClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class GitHubClient:
    """Thin wrapper around the GitHub REST API."""

    def __init__(self, token: str, repository: str, api_url: str = API_URL,
                 timeout: int = 30) -> None:
        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            raise GitHubClientError(
                f"Repository must be given as 'owner/repo', got '{repository}'"
            )
        self.owner = owner
        self.repo = repo
        self.base_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Perform a single GET request and return the parsed JSON response.

        Raises:
            AuthenticationError: HTTP 401 / 403
            NotFoundError:       HTTP 404
            GitHubClientError:   Any other non-2xx response
            NetworkError:        Timeout or connection failure
        """
        return self._request("GET", endpoint, params=params or {}).json()

    def post(self, endpoint: str, payload: dict[str, Any]) -> Any:
        return self._request("POST", endpoint, json=payload).json()

    def patch(self, endpoint: str, payload: dict[str, Any]) -> Any:
        return self._request("PATCH", endpoint, json=payload).json()

    def iter_paginated(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Iterator[dict]:
        """Yield items from a list endpoint, fetching pages lazily.

        Follows the ``Link: <...>; rel="next"`` header until it disappears,
        so callers that stop early never fetch the remaining pages.

        Emits a warning once more than PAGINATION_WARNING_THRESHOLD (50)
        pages have been fetched.
        """
        url: str | None = f"{self.base_url}{endpoint}"
        page_params: dict[str, Any] | None = {**(params or {}), "per_page": PAGE_SIZE}
        pages = 0

        while url:
            response = self._send("GET", url, params=page_params)
            pages += 1
            if pages == PAGINATION_WARNING_THRESHOLD + 1:
                warnings.warn(
                    f"Listing {endpoint} spans more than {PAGINATION_WARNING_THRESHOLD} pages; "
                    "this may hit the API rate limit.",
                    UserWarning,
                    stacklevel=2,
                )

            yield from response.json()

            # The next link already carries the query string.
            url = response.links.get("next", {}).get("url")
            page_params = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        return self._send(method, f"{self.base_url}{endpoint}", **kwargs)

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach GitHub API at '{self.base_url}'"
            ) from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed ({response.status_code}) — check that the token "
                "is valid and has pull-request write permission."
            )
        if response.status_code == 404:
            raise NotFoundError(
                f"Resource not found: {url}"
            )
        if not response.ok:
            raise GitHubClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        return response
