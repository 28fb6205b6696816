"""Resolves an (app id, pathname) pair against a built registry.

Order, first hit wins:

1. exact ``path:<pathname>`` key
2. longest registered path that is a segment-boundary prefix of the pathname
   (``/insights/advisor`` matches ``/insights/advisor/systems`` and
   ``/insights/advisor?tab=1`` but not ``/insights/advisorXYZ``)
3. ``appname:<app_id>`` key
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from appregistry.models.registry import PATH_PREFIX, appname_key, path_key

if TYPE_CHECKING:
    from collections.abc import Mapping

    from appregistry.models.registry import RegistryEntry

_BOUNDARY_CHARS = ("/", "?")


def is_boundary_prefix(path: str, pathname: str) -> bool:
    """True when ``path`` equals ``pathname`` or prefixes it at a segment boundary."""
    if pathname == path:
        return True
    if not pathname.startswith(path):
        return False
    return pathname[len(path)] in _BOUNDARY_CHARS


def longest_prefix_match(
    registry: Mapping[str, RegistryEntry], pathname: str
) -> RegistryEntry | None:
    best: RegistryEntry | None = None
    best_length = 0
    for key, entry in registry.items():
        if not key.startswith(PATH_PREFIX):
            continue
        path = key[len(PATH_PREFIX) :]
        # Strictly longer only, so the first of equal-length candidates is kept
        if is_boundary_prefix(path, pathname) and len(path) > best_length:
            best = entry
            best_length = len(path)
    return best


def resolve(
    registry: Mapping[str, RegistryEntry], app_id: str, pathname: str | None = None
) -> RegistryEntry | None:
    """Find the entry for an app. ``None`` means "no known repository", not an error."""
    if pathname:
        exact = registry.get(path_key(pathname))
        if exact is not None:
            return exact

        match = longest_prefix_match(registry, pathname)
        if match is not None:
            return match

    return registry.get(appname_key(app_id))
