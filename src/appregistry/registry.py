"""Two-tier registry cache: in-memory map over a durable SQLite snapshot.

Resolution order on every read:

1. in-memory registry younger than the TTL
2. durable snapshot younger than the TTL
3. a fresh build, with the durable snapshot (even an expired one) as the
   fallback when the build fails or comes back empty

An empty build is treated as a transient scan failure (typically rate
limiting) rather than proof that the org has no apps, so stale data is
preferred over nothing.

Only one build runs at a time; concurrent callers await the same task. A
``clear()`` detaches any running load, which then finishes without touching
either tier.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from appregistry.errors import AppRegistryError, ErrorCode
from appregistry.lookup import resolve
from appregistry.models.cache import CacheRecord
from appregistry.models.registry import RegistryEntry, unique_entries

if TYPE_CHECKING:
    from appregistry.builder import RegistryBuilder
    from appregistry.cache import RegistryStore
    from appregistry.repositories import ProgressCallback

log = structlog.get_logger()

DEFAULT_TTL = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CacheState(StrEnum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    STALE = "stale"


class RegistryCache:
    """Owns the process-wide registry; construct once and pass it around."""

    def __init__(
        self,
        store: RegistryStore,
        builder: RegistryBuilder,
        cache_key: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._builder = builder
        self._cache_key = cache_key
        self._ttl = ttl
        self._clock = clock

        self._registry: dict[str, RegistryEntry] | None = None
        self._timestamp: datetime | None = None
        self._stale = False
        self._inflight: asyncio.Future[dict[str, RegistryEntry]] | None = None
        # Bumped by clear(); a load only commits results for the generation it began in
        self._generation = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> CacheState:
        if self._inflight is not None and not self._inflight.done():
            return CacheState.LOADING
        if self._registry is None:
            return CacheState.EMPTY
        if self._stale or not self._is_fresh():
            return CacheState.STALE
        return CacheState.READY

    @property
    def timestamp(self) -> datetime | None:
        return self._timestamp

    def _is_fresh(self) -> bool:
        if self._registry is None or self._timestamp is None:
            return False
        return self._clock() - self._timestamp < self._ttl

    def _adopt(
        self, registry: dict[str, RegistryEntry], timestamp: datetime | None, stale: bool = False
    ) -> dict[str, RegistryEntry]:
        # Swapped by reference; readers never see a partially merged map
        self._registry = registry
        self._timestamp = timestamp
        self._stale = stale
        return registry

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_map(self, progress: ProgressCallback | None = None) -> dict[str, RegistryEntry]:
        """Return the keyed registry, loading or rebuilding it as needed."""
        if self._registry is not None and self._is_fresh():
            if progress is not None:
                progress("Using cached data")
            return self._registry

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._load(progress, self._generation))
            self._inflight.add_done_callback(self._clear_inflight)
        # A cancelled caller must not cancel the build other callers share
        return await asyncio.shield(self._inflight)

    async def get_registry(self, progress: ProgressCallback | None = None) -> list[RegistryEntry]:
        """Return one entry per app id."""
        registry = await self.get_map(progress)
        return unique_entries(list(registry.values()))

    async def resolve(
        self,
        app_id: str,
        pathname: str | None = None,
        progress: ProgressCallback | None = None,
    ) -> RegistryEntry | None:
        registry = await self.get_map(progress)
        return resolve(registry, app_id, pathname)

    def _clear_inflight(self, future: asyncio.Future[dict[str, RegistryEntry]]) -> None:
        if not future.cancelled():
            # Every awaiting caller may have been cancelled; mark the error retrieved
            future.exception()
        if self._inflight is future:
            self._inflight = None

    async def _load(
        self, progress: ProgressCallback | None, generation: int
    ) -> dict[str, RegistryEntry]:
        def current() -> bool:
            return generation == self._generation

        def adopt(
            registry: dict[str, RegistryEntry], timestamp: datetime | None, stale: bool = False
        ) -> dict[str, RegistryEntry]:
            if current():
                self._adopt(registry, timestamp, stale)
            return registry

        def report(status: str) -> None:
            if progress is not None:
                progress(status)

        stored = await self._store.get(self._cache_key)
        if stored is not None and stored.is_fresh(self._ttl, self._clock()):
            log.info("registry_loaded_from_cache", entries=len(stored.data))
            report("Loaded from cache")
            return adopt(stored.to_registry(), stored.timestamp)

        try:
            built = await self._builder.build(progress)
        except Exception as exc:
            if stored is not None:
                log.warning("registry_build_failed_using_stale", exc_info=True)
                report("Using stale cache (API error)")
                return adopt(stored.to_registry(), stored.timestamp, stale=True)
            log.error("registry_build_failed", exc_info=True)
            raise AppRegistryError(
                ErrorCode.REGISTRY_UNAVAILABLE,
                f"Could not build the app registry: {exc}",
                recoverable=True,
            ) from exc

        if not built:
            if stored is not None:
                log.info("registry_build_empty_using_stale", entries=len(stored.data))
                report("Using stale cache (no API results)")
                return adopt(stored.to_registry(), stored.timestamp, stale=True)
            # Nothing to fall back on; return it but leave it unpersisted so the
            # next read scans again.
            log.warning("registry_build_empty")
            return adopt(built, None)

        now = self._clock()
        adopt(built, now)
        if current():
            await self._store.put(self._cache_key, CacheRecord.from_registry(built, now))
        else:
            log.info("registry_load_superseded", entries=len(built))
        return built

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    async def clear(self) -> None:
        """Drop both cache tiers and detach any load still in flight."""
        self._generation += 1
        self._inflight = None
        self._registry = None
        self._timestamp = None
        self._stale = False
        await self._store.delete(self._cache_key)

    async def refresh(self, progress: ProgressCallback | None = None) -> list[RegistryEntry]:
        """Clear both tiers and rebuild before returning."""
        await self.clear()
        return await self.get_registry(progress)
