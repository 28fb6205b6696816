"""SQLite store for durable registry snapshots.

All store operations catch ``aiosqlite.Error`` (and undecodable rows)
internally and degrade gracefully: read failures return ``None`` (treated as
a cache miss by callers), write and delete failures are logged and ignored.
Infrastructure errors never cross the RegistryStore class boundary; a broken
disk cache costs a rescan, never a failed lookup. Errors are still logged
with ``exc_info=True`` so they remain observable via stderr.
"""

from __future__ import annotations

import aiosqlite
import structlog
from pydantic import ValidationError

from appregistry.models.cache import CacheRecord

log = structlog.get_logger()

_CREATE_REGISTRY_TABLE = """
CREATE TABLE IF NOT EXISTS registry_cache (
    cache_key  TEXT PRIMARY KEY,
    payload    TEXT NOT NULL,
    built_at   INTEGER NOT NULL
)
"""


class RegistryStore:
    """Key/value store holding one serialized CacheRecord per key."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_REGISTRY_TABLE)
        await self._db.commit()

    async def get(self, key: str) -> CacheRecord | None:
        """Read a snapshot. Returns ``None`` on miss, read failure, or corrupt payload."""
        try:
            cursor = await self._db.execute(
                "SELECT payload FROM registry_cache WHERE cache_key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error:
            log.warning("cache_read_error", key=key, exc_info=True)
            return None
        if row is None:
            return None

        try:
            return CacheRecord.model_validate_json(row[0])
        except ValidationError:
            log.warning("cache_payload_invalid", key=key, exc_info=True)
            return None

    async def put(self, key: str, record: CacheRecord) -> None:
        """Write a snapshot, replacing any existing one. Non-fatal on failure."""
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO registry_cache (cache_key, payload, built_at) "
                "VALUES (?, ?, ?)",
                (key, record.to_json(), int(record.timestamp.timestamp() * 1000)),
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_write_error", key=key, exc_info=True)

    async def delete(self, key: str) -> None:
        """Remove a snapshot. Non-fatal on failure."""
        try:
            await self._db.execute("DELETE FROM registry_cache WHERE cache_key = ?", (key,))
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_delete_error", key=key, exc_info=True)
