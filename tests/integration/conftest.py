"""Integration test fixtures.

Provides a fully wired AppState (in-memory SQLite, real httpx client) and an
AppRegistry facade on top of it. Network traffic is answered by the
FakeGitHub from tests/conftest.py through respx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from appregistry.service import AppRegistry
from appregistry.state import AppState, open_app_state

if TYPE_CHECKING:
    from appregistry.config import Settings


@pytest.fixture()
async def app_state(settings: Settings) -> AppState:
    async with open_app_state(settings) as state:
        yield state


@pytest.fixture()
def app_registry(app_state: AppState) -> AppRegistry:
    return AppRegistry(app_state.cache)
