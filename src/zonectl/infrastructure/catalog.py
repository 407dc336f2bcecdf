"""Registry catalog — registry name to :class:`RegistryDef`.

:class:`ConfigCatalog` serves the ``[registries.<name>]`` tables of
``zonectl.toml``. Other catalogs (a database, a control-plane API) only
need to satisfy :class:`RegistryCatalog`.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from zonectl.domain.errors import NotFoundError

if TYPE_CHECKING:
    from zonectl.infrastructure.context import ExecutionContext
    from zonectl.infrastructure.registries.base import RegistryDef


class RegistryCatalog(Protocol):
    """Looks up registry definitions by name."""

    def lookup(self, context: ExecutionContext, name: str) -> RegistryDef:
        """Return the definition or raise :class:`NotFoundError`."""
        ...

    def names(self) -> list[str]:
        """Names of every known registry."""
        ...


class ConfigCatalog:
    """In-memory catalog built from configuration."""

    def __init__(self, definitions: Iterable[RegistryDef] = ()) -> None:
        self._defs: dict[str, RegistryDef] = {d.name: d for d in definitions}

    def lookup(self, context: ExecutionContext, name: str) -> RegistryDef:
        registry_def = self._defs.get(name)
        if registry_def is None:
            msg = f"registry [{name}] is not defined"
            raise NotFoundError(msg, registry=name)
        return registry_def

    def names(self) -> list[str]:
        return sorted(self._defs)
