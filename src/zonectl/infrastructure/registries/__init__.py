"""Registry backends and the builder table that constructs them.

Backends are swapped by builder identifier, never by subclassing:
every backend satisfies the :class:`Registry` protocol structurally.
"""

from zonectl.infrastructure.registries.base import Builder, Registry, RegistryDef
from zonectl.infrastructure.registries.builders import (
    BUILTIN_BUILDERS,
    REGISTRY_BUILDERS,
    load_registry_builders,
)

__all__ = [
    "BUILTIN_BUILDERS",
    "REGISTRY_BUILDERS",
    "Builder",
    "Registry",
    "RegistryDef",
    "load_registry_builders",
]
