"""Command: apply a batch of record operations."""

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
  zonectl apply changes.json --role ops
  cat changes.json | zonectl apply - --role ops
  zonectl --json apply changes.json --role ops""",
)
@click.argument("source", type=click.File("r"), default="-")
@click.option("-r", "--role", "role_name", required=True, help="Role to authorize the batch.")
@click.pass_obj
def apply(app: AppContext, source: IO[str], role_name: str) -> None:
    """Authorize and apply the operations in SOURCE (JSON, '-' for stdin).

    Updates replace every record under the name; deletes remove one record.
    Nothing is applied if any operation fails authorization or validation.
    """
    from zonectl.services.operate import OperationService

    payload = read_operations(source)
    app.emit(OperationService(app.context).apply(role_name, payload))
