"""In-process registry backend guarded by a lock.

Records live only as long as the handle. Useful for dry runs and tests;
seed it with ``params = { records = [...] }``.
"""

from __future__ import annotations

import threading
from typing import Any

from zonectl.domain.errors import RegistryOperationError
from zonectl.domain.operations import Record


class MemoryRegistry:
    """Thread-safe list of records."""

    def __init__(self, records: list[Record] | None = None) -> None:
        self._lock = threading.Lock()
        self._records: list[Record] = list(records or [])

    def append_record(self, record: Record) -> None:
        with self._lock:
            self._records.append(record.model_copy())

    def delete_record(self, record: Record) -> None:
        with self._lock:
            for index, existing in enumerate(self._records):
                if existing.identity == record.identity:
                    del self._records[index]
                    return
        msg = f"no record {record.type} {record.content!r} under [{record.canonical_name}]"
        raise RegistryOperationError(msg, canonical_name=record.canonical_name)

    def delete_all_records_with_domain(self, canonical_name: str) -> None:
        with self._lock:
            self._records = [r for r in self._records if r.canonical_name != canonical_name]

    def records(self, canonical_name: str | None = None) -> list[Record]:
        """Snapshot of stored records, optionally for one owner name."""
        with self._lock:
            return [
                r.model_copy()
                for r in self._records
                if canonical_name is None or r.canonical_name == canonical_name
            ]


def build_memory_registry(params: dict[str, Any]) -> MemoryRegistry:
    """Builder for ``builder = "memory"``."""
    seed = [Record.model_validate(raw) for raw in params.get("records", [])]
    return MemoryRegistry(seed)
