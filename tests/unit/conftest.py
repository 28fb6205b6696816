"""Unit-specific fixtures (no I/O beyond in-memory SQLite)."""

from __future__ import annotations

import aiosqlite
import pytest

from appregistry.cache import RegistryStore


@pytest.fixture()
async def store():
    """In-memory SQLite registry store for unit tests."""
    async with aiosqlite.connect(":memory:") as db:
        s = RegistryStore(db)
        await s.init_db()
        yield s
