from __future__ import annotations

from appregistry.models.cache import CacheRecord
from appregistry.models.descriptor import FrontendDescriptor, PackageManifest
from appregistry.models.registry import (
    APPNAME_PREFIX,
    PATH_PREFIX,
    ModuleRoute,
    RegistryEntry,
    RepoRef,
    RepoScanResult,
    appname_key,
    path_key,
    unique_entries,
)

__all__ = [
    # registry
    "RepoRef",
    "RegistryEntry",
    "ModuleRoute",
    "RepoScanResult",
    "APPNAME_PREFIX",
    "PATH_PREFIX",
    "appname_key",
    "path_key",
    "unique_entries",
    # cache
    "CacheRecord",
    # descriptor
    "PackageManifest",
    "FrontendDescriptor",
]
