"""HTTP access to the GitHub REST API and the raw-content host.

A repository that lacks a file, a 5xx, a dropped connection and a malformed
body all look the same to the scanner: "nothing here". ``Fetcher`` therefore
returns ``None`` for every failure instead of raising, and logs at debug so
the per-file noise of an org-wide scan stays out of normal output.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from appregistry.config import FetcherSettings

if TYPE_CHECKING:
    from appregistry.config import GitHubSettings

log = structlog.get_logger()

GITHUB_ACCEPT = "application/vnd.github.v3+json"


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Create the shared AsyncClient used for every scan request."""
    settings = settings or FetcherSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    )


def raw_file_url(raw_url: str, org: str, repo: str, branch: str, path: str) -> str:
    return f"{raw_url.rstrip('/')}/{org}/{repo}/{branch}/{path.lstrip('/')}"


class Fetcher:
    """Thin wrapper over ``httpx.AsyncClient`` with not-found semantics."""

    def __init__(self, client: httpx.AsyncClient, github: GitHubSettings | None = None) -> None:
        self._client = client
        self._api_headers: dict[str, str] = {"Accept": GITHUB_ACCEPT}
        if github is not None and github.token:
            self._api_headers["Authorization"] = f"Bearer {github.token}"

    async def get(
        self, url: str, params: dict[str, Any] | None = None, *, api: bool = False
    ) -> httpx.Response | None:
        """Issue a GET. Returns ``None`` only on transport failure.

        ``api=True`` sends the GitHub API headers (and token, if configured).
        The token is never sent to the raw-content host.
        """
        headers = self._api_headers if api else None
        try:
            return await self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            log.debug("fetch_transport_error", url=url, error=str(exc))
            return None

    async def get_text(self, url: str) -> str | None:
        response = await self.get(url)
        if response is None:
            return None
        if not response.is_success:
            log.debug("fetch_not_found", url=url, status=response.status_code)
            return None
        return response.text

    async def get_json(self, url: str) -> Any | None:
        text = await self.get_text(url)
        if text is None:
            return None
        try:
            return json.loads(text)
        except ValueError:
            log.debug("fetch_invalid_json", url=url)
            return None
