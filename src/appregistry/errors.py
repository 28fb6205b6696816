from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    REGISTRY_UNAVAILABLE = "REGISTRY_UNAVAILABLE"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"


class AppRegistryError(Exception):
    """Error surfaced to consumers of the registry.

    ``recoverable`` tells the caller whether retrying later may succeed
    (e.g. the scan was rate limited).
    """

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable
