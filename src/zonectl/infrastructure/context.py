"""ExecutionContext — the single dependency injected into every service.

It bundles the collaborators the executor consumes: the registry catalog,
the builder table, the authorizer, the configured roles, and the worker
pool size. It also carries a request-scoped cancellation flag that the
registry resolver honours between lookups.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from zonectl.domain.errors import OperationCancelled, UnknownRoleError
from zonectl.domain.roles import Authorizer, GrantAuthorizer, RoleDef
from zonectl.infrastructure.catalog import ConfigCatalog, RegistryCatalog
from zonectl.infrastructure.registries.base import RegistryDef
from zonectl.infrastructure.registries.builders import REGISTRY_BUILDERS

if TYPE_CHECKING:
    from zonectl.config.settings import ZoneSettings
    from zonectl.infrastructure.registries.base import Builder


@dataclass
class ExecutionContext:
    """Collaborators and request scope for one or more batch executions."""

    catalog: RegistryCatalog
    authorizer: Authorizer = field(default_factory=GrantAuthorizer)
    builders: Mapping[str, Builder] = field(default_factory=lambda: REGISTRY_BUILDERS)
    roles: Mapping[str, RoleDef] = field(default_factory=dict)
    max_workers: int = 8
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: ZoneSettings,
        *,
        builders: Mapping[str, Builder] | None = None,
    ) -> ExecutionContext:
        """Build a context from the ``[registries]``, ``[roles]`` and ``[executor]`` tables."""
        catalog = ConfigCatalog(
            RegistryDef(name=name, builder=cfg.builder, builder_params=dict(cfg.params))
            for name, cfg in settings.registries.items()
        )
        roles = {
            name: RoleDef(name=name, grants=list(cfg.grants))
            for name, cfg in settings.roles.items()
        }
        return cls(
            catalog=catalog,
            builders=builders if builders is not None else REGISTRY_BUILDERS,
            roles=roles,
            max_workers=settings.executor.max_workers,
        )

    def role(self, name: str) -> RoleDef:
        """Return the named role or raise :class:`UnknownRoleError`."""
        role = self.roles.get(name)
        if role is None:
            msg = f"role [{name}] is not defined"
            raise UnknownRoleError(msg, role=name)
        return role

    def cancel(self) -> None:
        """Stop further registry lookups for work using this context."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            msg = "execution context was cancelled"
            raise OperationCancelled(msg)
