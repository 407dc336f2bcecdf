"""Database engine setup for SQLite with WAL mode.

WAL mode lets concurrent units of work read while one writes; the busy
timeout serializes competing writers instead of failing them outright.
SQLAlchemy Core (not ORM) is used: the registry issues a handful of
single-statement transactions per batch.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from zonectl.infrastructure.database.schema import metadata

BUSY_TIMEOUT_SECONDS = 30


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode, shareable across threads."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": BUSY_TIMEOUT_SECONDS},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    return engine


def init_database(db_path: Path) -> Engine:
    """Create the parent directory and tables if needed.

    Idempotent — safe to call on an existing database.

    Returns the engine ready for use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    return engine
