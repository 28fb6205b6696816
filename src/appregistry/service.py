"""Consumer-facing API over a RegistryCache."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from appregistry.models.registry import RegistryEntry
    from appregistry.registry import RegistryCache
    from appregistry.repositories import ProgressCallback


class AppRegistry:
    """What a UI needs: list apps, resolve the active one, force a rescan.

    The progress callback is per instance and is handed to each build as an
    observer; it never affects results.
    """

    def __init__(self, cache: RegistryCache, progress: ProgressCallback | None = None) -> None:
        self._cache = cache
        self._progress = progress

    def set_progress_callback(self, callback: ProgressCallback | None) -> None:
        self._progress = callback

    @staticmethod
    def is_configured() -> bool:
        # Public GitHub needs no credentials
        return True

    async def fetch_registry(self) -> list[RegistryEntry]:
        return await self._cache.get_registry(self._progress)

    async def resolve(self, app_id: str, pathname: str | None = None) -> RegistryEntry | None:
        return await self._cache.resolve(app_id, pathname, self._progress)

    async def refresh(self) -> None:
        await self._cache.refresh(self._progress)
