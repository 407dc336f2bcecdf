"""Registry capability protocol and registry definitions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from zonectl.domain.operations import Record


@runtime_checkable
class Registry(Protocol):
    """A live handle on a record store.

    Implementations must be safe to call from several threads at once:
    one handle is shared by every unit of work that targets it.
    """

    def append_record(self, record: Record) -> None:
        """Store one record under ``record.canonical_name``."""
        ...

    def delete_record(self, record: Record) -> None:
        """Remove the record matching ``record.identity``."""
        ...

    def delete_all_records_with_domain(self, canonical_name: str) -> None:
        """Remove every record owned by *canonical_name*."""
        ...


Builder = Callable[[dict[str, Any]], Registry]


class RegistryDef(BaseModel):
    """How to construct a registry: builder identifier plus its parameters."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str
    builder: str
    builder_params: dict[str, Any] = Field(default_factory=dict, alias="params")
