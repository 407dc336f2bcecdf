"""RegistryService — inspection of configured registries and builders."""

from __future__ import annotations

from zonectl.services.base import BaseService
from zonectl.services.result import ServiceResult
from zonectl.services.telemetry import traced


class RegistryService(BaseService):
    """Reports which registries are defined and whether they can be built."""

    @traced
    def list_registries(self) -> ServiceResult:
        catalog = self._context.catalog
        builders = self._context.builders
        items = []
        warnings: list[str] = []
        for name in catalog.names():
            registry_def = catalog.lookup(self._context, name)
            available = registry_def.builder in builders
            if not available:
                warnings.append(f"registry [{name}] uses unknown builder [{registry_def.builder}]")
            items.append(
                {
                    "name": name,
                    "builder": registry_def.builder,
                    "available": available,
                    "params": sorted(registry_def.builder_params),
                }
            )
        return ServiceResult(
            ok=True,
            op="list_registries",
            data={"items": items, "count": len(items), "builders": sorted(builders)},
            warnings=warnings,
        )
