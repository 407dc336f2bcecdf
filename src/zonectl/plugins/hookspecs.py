"""Pluggy hook specifications for zonectl.

Plugins contribute registry backends by returning builder functions
keyed by builder identifier. The builder table is assembled once at
startup from these contributions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from zonectl.infrastructure.registries.base import Builder

hookspec = pluggy.HookspecMarker("zonectl")
hookimpl = pluggy.HookimplMarker("zonectl")


class ZonectlHookSpec:
    """Hook specifications for the zonectl plugin system."""

    @hookspec
    def register_registry_builders(self) -> dict[str, Builder] | None:
        """Return builder-id -> builder mappings to extend the builder table."""
