"""Command: dry-run a batch of record operations."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from zonectl.commands._base import ZoneCommand
from zonectl.commands._payload import read_operations

if TYPE_CHECKING:
    from zonectl.commands._context import AppContext


@click.command(
    cls=ZoneCommand,
    examples="""\
  zonectl validate changes.json --role ops
  zonectl --json validate - --role ops < changes.json""",
)
@click.argument("source", type=click.File("r"), default="-")
@click.option("-r", "--role", "role_name", required=True, help="Role to authorize the batch.")
@click.pass_obj
def validate(app: AppContext, source: IO[str], role_name: str) -> None:
    """Authorize and normalize SOURCE without touching any registry."""
    from zonectl.services.operate import OperationService

    payload = read_operations(source)
    app.emit(OperationService(app.context).validate(role_name, payload))
