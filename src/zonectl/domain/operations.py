"""Operation and Record models — the unit of work of a batch.

Transport payloads carry the record fields flat beside the envelope::

    {"op": "update", "domain": "example.com", "subdomain": "www",
     "type": "A", "content": "192.0.2.10", "ttl": 300}

A nested ``"record"`` object is accepted as well.

Operations are mutable: validation replaces ``domain``/``subdomain`` with
their normalized forms and fills in ``registry`` and the canonical name.
Downstream stages read only those validated fields.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from zonectl.domain.types import OpKind

_ENVELOPE_FIELDS = frozenset({"op", "kind", "domain", "subdomain", "registry"})


class Record(BaseModel):
    """Record payload passed through to a registry backend.

    Backend-specific extra fields are preserved.
    """

    model_config = {"extra": "allow"}

    canonical_name: str = ""
    type: str
    content: str
    ttl: int = Field(default=300, ge=0)
    priority: int | None = None

    @field_validator("type")
    @classmethod
    def _upper_type(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def identity(self) -> tuple[str, str, str]:
        """Key matched by ``delete_record``: owner name, type, and content."""
        return self.canonical_name, self.type, self.content


class Operation(BaseModel):
    """A single requested record mutation."""

    model_config = {"populate_by_name": True}

    kind: OpKind = Field(alias="op")
    domain: str
    subdomain: str = ""
    registry: str | None = None
    record: Record

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_record(cls, data: Any) -> Any:
        """Collect flat record fields into the nested ``record`` object."""
        if not isinstance(data, dict) or "record" in data:
            return data
        envelope = {k: v for k, v in data.items() if k in _ENVELOPE_FIELDS}
        envelope["record"] = {k: v for k, v in data.items() if k not in _ENVELOPE_FIELDS}
        return envelope

    @property
    def canonical_name(self) -> str:
        """Normalized owner name; empty until the operation is validated."""
        return self.record.canonical_name

    @property
    def validated(self) -> bool:
        return self.registry is not None and bool(self.record.canonical_name)

    def describe(self) -> dict[str, Any]:
        """Flat summary used in service results and logs."""
        return {
            "op": self.kind.value,
            "domain": self.domain,
            "subdomain": self.subdomain,
            "canonical_name": self.canonical_name,
            "registry": self.registry,
            "type": self.record.type,
            "content": self.record.content,
        }


_OPERATIONS_ADAPTER: TypeAdapter[list[Operation]] = TypeAdapter(list[Operation])


def parse_operations(payload: Iterable[Any]) -> list[Operation]:
    """Build operations from transport payloads.

    Already-constructed :class:`Operation` instances pass through unchanged.

    Raises:
        pydantic.ValidationError: If any payload is malformed.
    """
    items = list(payload)
    if all(isinstance(item, Operation) for item in items):
        return items
    return _OPERATIONS_ADAPTER.validate_python(items)
