"""Command: list configured registries and available builders."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from zonectl.commands._base import ZoneCommand

if TYPE_CHECKING:
    from zonectl.commands._context import AppContext


@click.command(
    cls=ZoneCommand,
    examples="""\
  zonectl registries
  zonectl --json registries""",
)
@click.pass_obj
def registries(app: AppContext) -> None:
    """List registries from zonectl.toml and whether their builder is available."""
    from zonectl.services.registry import RegistryService

    app.emit(RegistryService(app.context).list_registries())
