"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (APPREGISTRY__GITHUB__ORG=MyOrg)
  2. appregistry.yaml       (searched in cwd, then the platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR: str = platformdirs.user_data_dir("appregistry")
_DEFAULT_CONFIG_DIR: str = platformdirs.user_config_dir("appregistry")
_DEFAULT_DB_PATH: str = str(Path(_DEFAULT_DATA_DIR) / "cache.db")


def _find_config_file() -> str | None:
    """Return the path of the first appregistry.yaml found, or None."""
    candidates = [
        Path("appregistry.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "appregistry.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ExtraRepo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    org: str
    name: str


class GitHubSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    org: str = "RedHatInsights"
    per_page: int = Field(default=100, ge=1, le=100)
    token: str | None = None
    # Tried in order; the first branch that yields data wins.
    branches: list[str] = ["master", "main"]
    # Repos outside the org that are still worth scanning.
    extra_repos: list[ExtraRepo] = [ExtraRepo(org="osbuild", name="image-builder-frontend")]
    # Scaffolding repos carry placeholder app ids.
    excluded_name_markers: list[str] = ["starter", "template", "boilerplate"]


class ScanSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    batch_size: int = Field(default=20, ge=1)
    manifest_path: str = "package.json"
    build_config_path: str = "fec.config.js"
    descriptor_paths: list[str] = ["deploy/frontend.yaml", "deploy/frontend.yml"]


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ttl_days: float = Field(default=7, gt=0)
    db_path: str = _DEFAULT_DB_PATH
    key: str = "hcc-debugger-app-registry-v2"


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = Field(default=15.0, gt=0)
    user_agent: str = "appregistry"


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: APPREGISTRY__SCAN__BATCH_SIZE=10
        env_prefix="APPREGISTRY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    github: GitHubSettings = GitHubSettings()
    scan: ScanSettings = ScanSettings()
    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
