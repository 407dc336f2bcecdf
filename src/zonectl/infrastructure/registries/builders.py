"""Builder table — builder identifier to registry factory.

The table is assembled once at process start and is read-only afterwards.
:data:`REGISTRY_BUILDERS` holds the built-in backends; the CLI replaces it
with :func:`load_registry_builders`, which adds plugin contributions.
Plugins may not shadow a built-in identifier.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from zonectl.infrastructure.registries.memory import build_memory_registry
from zonectl.infrastructure.registries.sqlite import build_sqlite_registry

if TYPE_CHECKING:
    from zonectl.infrastructure.registries.base import Builder
    from zonectl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

BUILTIN_BUILDERS: Mapping[str, Builder] = MappingProxyType(
    {
        "memory": build_memory_registry,
        "sqlite": build_sqlite_registry,
    }
)

REGISTRY_BUILDERS: Mapping[str, Builder] = BUILTIN_BUILDERS


def load_registry_builders(plugin_manager: PluginManager | None = None) -> Mapping[str, Builder]:
    """Return a frozen table of built-in builders plus plugin contributions."""
    table: dict[str, Builder] = dict(BUILTIN_BUILDERS)
    if plugin_manager is None:
        return MappingProxyType(table)

    for builder_id, (plugin_name, builder) in plugin_manager.collect_registry_builders().items():
        if builder_id in BUILTIN_BUILDERS:
            logger.warning(
                "Plugin %s may not override built-in registry builder %r",
                plugin_name,
                builder_id,
            )
            continue
        table[builder_id] = builder
        logger.debug("Registered registry builder %r from plugin %s", builder_id, plugin_name)
    return MappingProxyType(table)
