"""Enumerates the repositories worth scanning.

Paging stops at the first sign of trouble (non-2xx, rate limit, transport
error, unexpected body) and the partial list is kept: a half-scanned org is
still more useful than none.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from appregistry.models.registry import RepoRef

if TYPE_CHECKING:
    from appregistry.config import GitHubSettings
    from appregistry.fetcher import Fetcher

log = structlog.get_logger()

ProgressCallback = Callable[[str], None]


def is_scannable(repo: Any, excluded_markers: list[str]) -> bool:
    """Whether an org listing item should be scanned."""
    if not isinstance(repo, dict):
        return False
    name = repo.get("name")
    if not name or not isinstance(name, str):
        return False
    if repo.get("archived") is True:
        return False
    lowered = name.lower()
    return not any(marker in lowered for marker in excluded_markers)


class RepositoryLister:
    def __init__(self, fetcher: Fetcher, github: GitHubSettings) -> None:
        self._fetcher = fetcher
        self._github = github

    async def list_repositories(self, progress: ProgressCallback | None = None) -> list[RepoRef]:
        """Org repositories in listing order, followed by the extra repos. Never raises."""
        org = self._github.org
        per_page = self._github.per_page
        url = f"{self._github.api_url.rstrip('/')}/orgs/{org}/repos"

        repos: list[RepoRef] = []
        page = 1
        while True:
            response = await self._fetcher.get(
                url, params={"per_page": per_page, "page": page}, api=True
            )
            if response is None:
                log.warning("repo_list_request_failed", org=org, page=page)
                break
            if not response.is_success:
                if response.status_code == 403:
                    log.warning("repo_list_rate_limited", org=org, page=page)
                    if progress is not None:
                        progress("Rate limited - using partial results")
                else:
                    log.warning(
                        "repo_list_bad_status", org=org, page=page, status=response.status_code
                    )
                break

            try:
                data = response.json()
            except ValueError:
                log.warning("repo_list_invalid_json", org=org, page=page)
                break
            if not isinstance(data, list) or not data:
                break

            for item in data:
                if is_scannable(item, self._github.excluded_name_markers):
                    repos.append(RepoRef(org=org, name=item["name"]))

            if len(data) < per_page:
                break
            page += 1

        repos.extend(RepoRef(org=extra.org, name=extra.name) for extra in self._github.extra_repos)
        log.info("repo_list_complete", org=org, count=len(repos), pages=page)
        return repos
