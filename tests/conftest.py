"""Shared fixtures: sample org data and a respx-backed fake GitHub."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from appregistry.config import Settings

ORG = "RedHatInsights"

ADVISOR_YAML = """
objects:
  - spec:
      deploymentRepo: https://github.com/RedHatInsights/insights-advisor-frontend
      module:
        modules:
          - id: advisor
            routes:
              - pathname: /insights/advisor
              - pathname: /insights/advisor/recommendations
          - id: advisor-systems
            routes:
              - pathname: /insights/advisor/systems
"""

RBAC_YAML = """
objects:
  - spec:
      module:
        modules:
          - id: my-user-access
            routes:
              - pathname: /iam/my-user-access
          - id: iam-user-access
            routes:
              - pathname: /iam/user-access
              - pathname: /iam/user-access/users
"""

STARTER_YAML = """
objects:
  - spec:
      module:
        modules:
          - id: starter
            routes:
              - pathname: /staging/starter
"""


class FakeGitHub:
    """Answers org listing and raw-file requests from in-memory data.

    ``files`` maps ``"org/repo/branch/path"`` to a body; dicts are served as
    JSON. Anything not listed is a 404.
    """

    def __init__(
        self,
        listing: list[dict[str, Any]],
        files: dict[str, Any],
        list_status: int = 200,
        per_page: int = 100,
    ) -> None:
        self.listing = listing
        self.files = files
        self.list_status = list_status
        self.per_page = per_page
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = request.url
        if url.host == "api.github.com":
            if self.list_status != 200:
                return httpx.Response(self.list_status, json={"message": "rate limited"})
            page = int(url.params.get("page", "1"))
            per_page = int(url.params.get("per_page", str(self.per_page)))
            start = (page - 1) * per_page
            return httpx.Response(200, json=self.listing[start : start + per_page])

        key = url.path.lstrip("/")
        if key not in self.files:
            return httpx.Response(404, text="404: Not Found")
        body = self.files[key]
        if isinstance(body, dict):
            return httpx.Response(200, text=json.dumps(body))
        return httpx.Response(200, text=body)

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.github.com"]


@pytest.fixture()
def sample_listing() -> list[dict[str, Any]]:
    return [
        {"name": "insights-advisor-frontend", "archived": False},
        {"name": "insights-rbac-ui", "archived": False},
        {"name": "learning-resources", "archived": False},
        {"name": "frontend-starter-app", "archived": False},
        {"name": "template-repo", "archived": False},
        {"name": "archived-app", "archived": True},
    ]


@pytest.fixture()
def sample_files() -> dict[str, Any]:
    return {
        f"{ORG}/insights-advisor-frontend/master/package.json": {
            "name": "advisor",
            "insights": {"appname": "advisor"},
        },
        f"{ORG}/insights-advisor-frontend/master/deploy/frontend.yaml": ADVISOR_YAML,
        # rbac has moved to main and keeps its descriptor at a custom path
        f"{ORG}/insights-rbac-ui/main/package.json": {"insights": {"appname": "rbac"}},
        f"{ORG}/insights-rbac-ui/main/fec.config.js": (
            "module.exports = {\n"
            "  appUrl: '/iam',\n"
            "  frontendCRDPath: path.resolve(__dirname, './deploy/frontend-crd.yaml'),\n"
            "};\n"
        ),
        f"{ORG}/insights-rbac-ui/main/deploy/frontend-crd.yaml": RBAC_YAML,
        f"{ORG}/learning-resources/master/package.json": {
            "insights": {"appname": "learning-resources"}
        },
        f"{ORG}/frontend-starter-app/master/package.json": {"insights": {"appname": "starter"}},
        f"{ORG}/frontend-starter-app/master/deploy/frontend.yaml": STARTER_YAML,
    }


@pytest.fixture()
def fake_github(sample_listing: list[dict[str, Any]], sample_files: dict[str, Any]) -> FakeGitHub:
    return FakeGitHub(sample_listing, sample_files)


@pytest.fixture()
def settings() -> Settings:
    return Settings(cache={"db_path": ":memory:"}, logging={"level": "WARNING"})


@pytest.fixture()
def make_fake_github() -> type[FakeGitHub]:
    """For tests that need a listing or file set other than the samples."""
    return FakeGitHub
