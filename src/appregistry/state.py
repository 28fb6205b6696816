"""Application wiring: one place that owns the long-lived resources."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import aiosqlite
import httpx
import structlog

from appregistry.builder import RegistryBuilder
from appregistry.cache import RegistryStore
from appregistry.config import Settings
from appregistry.descriptors import DescriptorReader
from appregistry.errors import AppRegistryError, ErrorCode
from appregistry.fetcher import Fetcher, build_http_client
from appregistry.registry import RegistryCache
from appregistry.repositories import RepositoryLister

log = structlog.get_logger()


@dataclass
class AppState:
    settings: Settings
    http_client: httpx.AsyncClient
    store: RegistryStore
    cache: RegistryCache


def build_registry_cache(
    settings: Settings, http_client: httpx.AsyncClient, store: RegistryStore
) -> RegistryCache:
    """Assemble fetcher → lister/reader → builder → cache from settings."""
    fetcher = Fetcher(http_client, settings.github)
    builder = RegistryBuilder(
        RepositoryLister(fetcher, settings.github),
        DescriptorReader(fetcher, settings.github, settings.scan),
        batch_size=settings.scan.batch_size,
    )
    return RegistryCache(
        store,
        builder,
        cache_key=settings.cache.key,
        ttl=timedelta(days=settings.cache.ttl_days),
    )


@asynccontextmanager
async def open_app_state(settings: Settings | None = None) -> AsyncIterator[AppState]:
    """Open the SQLite store and HTTP client; close both on exit."""
    settings = settings or Settings()
    db_path = settings.cache.db_path
    if db_path != ":memory:":
        path = Path(db_path).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AppRegistryError(
                ErrorCode.CACHE_UNAVAILABLE,
                f"Cannot create cache directory {path.parent}: {exc}",
            ) from exc
        db_path = str(path)

    async with aiosqlite.connect(db_path) as db:
        store = RegistryStore(db)
        await store.init_db()
        async with build_http_client(settings.fetcher) as client:
            cache = build_registry_cache(settings, client, store)
            log.debug("app_state_ready", db_path=db_path, org=settings.github.org)
            yield AppState(settings=settings, http_client=client, store=store, cache=cache)
