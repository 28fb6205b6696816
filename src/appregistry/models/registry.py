from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

APPNAME_PREFIX = "appname:"
PATH_PREFIX = "path:"


class RepoRef(BaseModel):
    """A repository that can be scanned."""

    model_config = ConfigDict(frozen=True)

    org: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.org}/{self.name}"


class RegistryEntry(BaseModel):
    """Resolved app → repository mapping.

    Serialized with camelCase aliases so the durable snapshot keeps the
    ``{"appId": ..., "githubRepo": ...}`` shape.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    app_id: str = Field(alias="appId")
    github_repo: str = Field(alias="githubRepo")

    @field_validator("app_id")
    @classmethod
    def validate_app_id(cls, v: str) -> str:
        if not v:
            raise ValueError("app_id must not be empty")
        return v


class ModuleRoute(BaseModel):
    """A deployment-descriptor module and the pathnames it serves."""

    module_id: str
    pathnames: list[str]


class RepoScanResult(BaseModel):
    """Everything one repository contributed during a build."""

    repo: RepoRef
    app_name: str | None = None
    modules: list[ModuleRoute] = []


def appname_key(app_id: str) -> str:
    return f"{APPNAME_PREFIX}{app_id}"


def path_key(pathname: str) -> str:
    return f"{PATH_PREFIX}{pathname}"


def unique_entries(entries: list[RegistryEntry]) -> list[RegistryEntry]:
    """Collapse entries that share an ``app_id``; the last one seen wins."""
    by_app_id: dict[str, RegistryEntry] = {}
    for entry in entries:
        by_app_id[entry.app_id] = entry
    return list(by_app_id.values())
