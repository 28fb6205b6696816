"""Per-repository manifest and deployment-descriptor extraction.

Two independent reads happen for each repository:

* ``package.json`` → the declared ``insights.appname``
* the deployment descriptor (``deploy/frontend.yaml`` unless ``fec.config.js``
  points elsewhere) → module ids and the route pathnames they serve

Each read walks the configured branches in order and stops at the first
branch that produces something. Nothing here raises for missing or malformed
files; the result is simply empty.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from appregistry.fetcher import raw_file_url
from appregistry.models.descriptor import (
    DescriptorModule,
    DescriptorObject,
    DescriptorRoute,
    FrontendDescriptor,
    PackageManifest,
)
from appregistry.models.registry import ModuleRoute

if TYPE_CHECKING:
    from appregistry.config import GitHubSettings, ScanSettings
    from appregistry.fetcher import Fetcher
    from appregistry.models.registry import RepoRef

log = structlog.get_logger()

_M = TypeVar("_M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Pure parsing
# ---------------------------------------------------------------------------


class PathExtractor(Protocol):
    """Finds the descriptor path declared in a build-config file."""

    def extract(self, content: str) -> str | None: ...


class RegexPathExtractor:
    """Best-effort textual match for ``frontendCRDPath``.

    Handles the common forms::

        frontendCRDPath: path.resolve(__dirname, './deploy/frontend.yaml')
        frontendCRDPath: './frontend.yml'
    """

    _PATTERN = re.compile(r"""frontendCRDPath[^'"]*['"]([^'"]+)['"]""")

    def extract(self, content: str) -> str | None:
        match = self._PATTERN.search(content)
        if match is None or not match.group(1):
            return None
        return match.group(1).removeprefix("./")


def parse_app_name(data: Any) -> str | None:
    """Return ``insights.appname`` from a decoded ``package.json``."""
    if not isinstance(data, dict):
        return None
    try:
        manifest = PackageManifest.model_validate(data)
    except ValidationError:
        return None
    if manifest.insights is None or not manifest.insights.appname:
        return None
    return manifest.insights.appname


def _validate_item(model: type[_M], raw: Any) -> _M | None:
    """Validate one descriptor list item; ``None`` if it is malformed."""
    try:
        return model.model_validate(raw)
    except ValidationError:
        return None


def parse_module_routes(text: str) -> list[ModuleRoute]:
    """Extract modules with at least one routed pathname from descriptor YAML.

    Objects, modules and routes are validated individually; a malformed one
    is skipped without affecting its siblings. Raises ``yaml.YAMLError`` when
    the text is not YAML at all.
    """
    data = yaml.safe_load(text)
    descriptor = _validate_item(FrontendDescriptor, data)
    if descriptor is None:
        return []

    modules: list[ModuleRoute] = []
    for raw_obj in descriptor.objects or []:
        obj = _validate_item(DescriptorObject, raw_obj)
        if obj is None or obj.spec is None or obj.spec.module is None:
            continue
        for raw_mod in obj.spec.module.modules or []:
            mod = _validate_item(DescriptorModule, raw_mod)
            if mod is None or not mod.id or not mod.routes:
                continue
            pathnames: list[str] = []
            for raw_route in mod.routes:
                route = _validate_item(DescriptorRoute, raw_route)
                if route is None or not route.pathname:
                    continue
                # Registry path keys must be absolute
                if route.pathname.startswith("/") and route.pathname not in pathnames:
                    pathnames.append(route.pathname)
            if pathnames:
                modules.append(ModuleRoute(module_id=mod.id, pathnames=pathnames))
    return modules


# ---------------------------------------------------------------------------
# Remote reads
# ---------------------------------------------------------------------------


class DescriptorReader:
    """Reads manifests and descriptors for one repository at a time."""

    def __init__(
        self,
        fetcher: Fetcher,
        github: GitHubSettings,
        scan: ScanSettings,
        path_extractor: PathExtractor | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._github = github
        self._scan = scan
        self._path_extractor = path_extractor or RegexPathExtractor()

    def _url(self, repo: RepoRef, branch: str, path: str) -> str:
        return raw_file_url(self._github.raw_url, repo.org, repo.name, branch, path)

    async def fetch_app_name(self, repo: RepoRef) -> str | None:
        for branch in self._github.branches:
            data = await self._fetcher.get_json(self._url(repo, branch, self._scan.manifest_path))
            app_name = parse_app_name(data)
            if app_name:
                return app_name
        return None

    async def fetch_descriptor_path(self, repo: RepoRef) -> str | None:
        """Return the descriptor path declared in the build config, if any."""
        for branch in self._github.branches:
            content = await self._fetcher.get_text(
                self._url(repo, branch, self._scan.build_config_path)
            )
            if content is None:
                continue
            path = self._path_extractor.extract(content)
            if path:
                return path
        return None

    async def fetch_modules_with_routes(self, repo: RepoRef) -> list[ModuleRoute]:
        custom_path = await self.fetch_descriptor_path(repo)
        candidates = [custom_path] if custom_path else list(self._scan.descriptor_paths)

        for branch in self._github.branches:
            for path in candidates:
                text = await self._fetcher.get_text(self._url(repo, branch, path))
                if text is None:
                    continue
                try:
                    modules = parse_module_routes(text)
                except yaml.YAMLError as exc:
                    log.debug(
                        "descriptor_parse_failed",
                        repo=repo.full_name,
                        branch=branch,
                        path=path,
                        error=str(exc),
                    )
                    continue
                if modules:
                    return modules
        return []
