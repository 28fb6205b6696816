"""Click CLI: list, resolve, and refresh the app registry."""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from appregistry.config import Settings
from appregistry.errors import AppRegistryError
from appregistry.logging_config import setup_logging
from appregistry.service import AppRegistry
from appregistry.state import open_app_state

T = TypeVar("T")


def _progress(status: str) -> None:
    click.echo(status, err=True)


def _run(settings: Settings, action: Callable[[AppRegistry], Awaitable[T]]) -> T:
    async def main() -> T:
        async with open_app_state(settings) as state:
            return await action(AppRegistry(state.cache, progress=_progress))

    try:
        return asyncio.run(main())
    except AppRegistryError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(2)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Discover which repository implements a frontend app."""
    settings = Settings()
    setup_logging(settings.logging)
    ctx.obj = settings


@cli.command("list")
@click.option("--json", "json_output", is_flag=True, help="Print entries as JSON.")
@click.pass_obj
def list_entries(settings: Settings, json_output: bool) -> None:
    """Print every known app and its repository."""
    entries = _run(settings, lambda registry: registry.fetch_registry())
    if json_output:
        click.echo(json.dumps([entry.model_dump(by_alias=True) for entry in entries], indent=2))
        return
    for entry in sorted(entries, key=lambda e: e.app_id):
        click.echo(f"{entry.app_id}\t{entry.github_repo}")


@cli.command()
@click.argument("app_id")
@click.argument("pathname", required=False)
@click.pass_obj
def resolve(settings: Settings, app_id: str, pathname: str | None) -> None:
    """Find the repository for APP_ID, preferring a match on PATHNAME."""
    entry = _run(settings, lambda registry: registry.resolve(app_id, pathname))
    if entry is None:
        click.echo(f"No known repository for {app_id!r}", err=True)
        sys.exit(1)
    click.echo(f"https://github.com/{entry.github_repo}")


@cli.command()
@click.pass_obj
def refresh(settings: Settings) -> None:
    """Discard cached data and rescan the organization."""
    _run(settings, lambda registry: registry.refresh())
    click.echo("Registry refreshed", err=True)
