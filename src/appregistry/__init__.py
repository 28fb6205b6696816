from __future__ import annotations

from appregistry.errors import AppRegistryError, ErrorCode
from appregistry.models.registry import RegistryEntry, RepoRef
from appregistry.registry import CacheState, RegistryCache
from appregistry.service import AppRegistry
from appregistry.state import AppState, open_app_state

__all__ = [
    "AppRegistry",
    "AppRegistryError",
    "AppState",
    "CacheState",
    "ErrorCode",
    "RegistryCache",
    "RegistryEntry",
    "RepoRef",
    "open_app_state",
]
