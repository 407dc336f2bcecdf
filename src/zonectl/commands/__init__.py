"""Subcommand modules for zonectl.

Provides register_commands() which uses deferred imports to keep
``zonectl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from zonectl.commands.apply import apply
    from zonectl.commands.registries import registries
    from zonectl.commands.validate import validate

    cli.add_command(apply)
    cli.add_command(validate)
    cli.add_command(registries)
