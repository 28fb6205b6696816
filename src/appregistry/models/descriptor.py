"""Shapes of the files read out of each repository.

Only the fields the registry cares about are modelled; everything else in
``package.json`` and ``frontend.yaml`` is ignored. Descriptor list items are
kept raw (``list[Any]``) and validated one at a time, so a single malformed
module or route does not hide its well-formed siblings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InsightsSection(BaseModel):
    appname: str | None = None


class PackageManifest(BaseModel):
    insights: InsightsSection | None = None


class DescriptorRoute(BaseModel):
    pathname: str | None = None


class DescriptorModule(BaseModel):
    id: str | None = None
    routes: list[Any] | None = None


class DescriptorModuleSection(BaseModel):
    modules: list[Any] | None = None


class DescriptorSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Parsed for completeness; lookups never consult it.
    deployment_repo: str | None = Field(default=None, alias="deploymentRepo")
    module: DescriptorModuleSection | None = None


class DescriptorObject(BaseModel):
    spec: DescriptorSpec | None = None


class FrontendDescriptor(BaseModel):
    objects: list[Any] | None = None
