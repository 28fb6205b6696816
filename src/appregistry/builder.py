"""Builds the registry by scanning every enumerated repository.

Repositories are processed in fixed-size batches: every repo in a batch is
scanned concurrently, and the next batch starts only once the whole batch
has finished. This caps in-flight requests against the rate-limited GitHub
endpoints. Results are merged strictly after each batch, in enumeration
order, so the first repository to claim a key keeps it.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from appregistry.models.registry import (
    RegistryEntry,
    RepoScanResult,
    appname_key,
    path_key,
)

if TYPE_CHECKING:
    from appregistry.descriptors import DescriptorReader
    from appregistry.models.registry import RepoRef
    from appregistry.repositories import ProgressCallback, RepositoryLister

log = structlog.get_logger()


def merge_scan_result(registry: dict[str, RegistryEntry], result: RepoScanResult) -> int:
    """Register a repo's app name and module paths. Returns the number of new keys.

    Existing keys are never overwritten.
    """
    github_repo = result.repo.full_name
    added = 0

    if result.app_name:
        key = appname_key(result.app_name)
        if key not in registry:
            registry[key] = RegistryEntry(app_id=result.app_name, github_repo=github_repo)
            added += 1

    for module in result.modules:
        for pathname in module.pathnames:
            key = path_key(pathname)
            if key not in registry:
                registry[key] = RegistryEntry(app_id=module.module_id, github_repo=github_repo)
                added += 1

    return added


class RegistryBuilder:
    def __init__(
        self,
        lister: RepositoryLister,
        reader: DescriptorReader,
        batch_size: int = 20,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._lister = lister
        self._reader = reader
        self._batch_size = batch_size

    async def _scan_repo(self, repo: RepoRef) -> RepoScanResult:
        try:
            app_name, modules = await asyncio.gather(
                self._reader.fetch_app_name(repo),
                self._reader.fetch_modules_with_routes(repo),
            )
        except Exception:
            # One repository's bad data must not stop the scan
            log.warning("repo_scan_failed", repo=repo.full_name, exc_info=True)
            return RepoScanResult(repo=repo)
        return RepoScanResult(repo=repo, app_name=app_name, modules=modules)

    async def build(self, progress: ProgressCallback | None = None) -> dict[str, RegistryEntry]:
        """Scan the org and return a freshly merged registry.

        Only a failure of the enumeration step itself propagates.
        """

        def report(status: str) -> None:
            if progress is not None:
                progress(status)

        report("Fetching repo list...")
        repos = await self._lister.list_repositories(progress)
        log.info("registry_build_started", repos=len(repos), batch_size=self._batch_size)

        registry: dict[str, RegistryEntry] = {}
        scanned = 0
        found = 0
        for start in range(0, len(repos), self._batch_size):
            batch = repos[start : start + self._batch_size]
            results = await asyncio.gather(*(self._scan_repo(repo) for repo in batch))

            for result in results:
                found += merge_scan_result(registry, result)

            scanned += len(batch)
            report(f"Scanning: {scanned}/{len(repos)} (found {found} apps)")

        report(f"Done! Found {found} apps")
        log.info("registry_build_complete", repos=len(repos), found=found)
        return registry
