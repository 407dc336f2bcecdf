"""SQLite-backed registry using SQLAlchemy Core.

Every call runs in its own ``engine.begin()`` transaction on a pooled
connection, so one handle can be shared across worker threads.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select

from zonectl.domain.errors import RegistryOperationError
from zonectl.domain.operations import Record
from zonectl.infrastructure.database.engine import init_database
from zonectl.infrastructure.database.schema import records

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_CORE_FIELDS = frozenset({"canonical_name", "type", "content", "ttl", "priority"})


class SqliteRegistry:
    """Registry persisted in a single ``records`` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def append_record(self, record: Record) -> None:
        extra = {k: v for k, v in record.model_dump().items() if k not in _CORE_FIELDS}
        with self._engine.begin() as conn:
            conn.execute(
                insert(records).values(
                    name=record.canonical_name,
                    type=record.type,
                    content=record.content,
                    ttl=record.ttl,
                    priority=record.priority,
                    extra=json.dumps(extra) if extra else None,
                )
            )

    def delete_record(self, record: Record) -> None:
        name, rtype, content = record.identity
        with self._engine.begin() as conn:
            result = conn.execute(
                delete(records).where(
                    records.c.name == name,
                    records.c.type == rtype,
                    records.c.content == content,
                )
            )
        if result.rowcount == 0:
            msg = f"no record {rtype} {content!r} under [{name}]"
            raise RegistryOperationError(msg, canonical_name=name)

    def delete_all_records_with_domain(self, canonical_name: str) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(delete(records).where(records.c.name == canonical_name))
        logger.debug("Removed %d records under %s", result.rowcount, canonical_name)

    def records(self, canonical_name: str | None = None) -> list[Record]:
        """Stored records in insertion order, optionally for one owner name."""
        stmt = select(records).order_by(records.c.id)
        if canonical_name is not None:
            stmt = stmt.where(records.c.name == canonical_name)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [
            Record(
                canonical_name=row.name,
                type=row.type,
                content=row.content,
                ttl=row.ttl,
                priority=row.priority,
                **(json.loads(row.extra) if row.extra else {}),
            )
            for row in rows
        ]

    def close(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()


def build_sqlite_registry(params: dict[str, Any]) -> SqliteRegistry:
    """Builder for ``builder = "sqlite"``; requires ``params.path``."""
    raw_path = params.get("path")
    if not raw_path:
        msg = "sqlite registry requires a 'path' parameter"
        raise ValueError(msg)
    return SqliteRegistry(init_database(Path(str(raw_path)).expanduser()))
