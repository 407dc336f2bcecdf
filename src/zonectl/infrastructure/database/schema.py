"""SQLAlchemy Core table definitions for the sqlite registry backend.

One table holds every record of a registry. ``name`` is the canonical
owner name; (name, type, content) is the identity matched on delete.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text, text

metadata = MetaData()

records = Table(
    "records",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("ttl", Integer, nullable=False, default=300, server_default="300"),
    Column("priority", Integer),
    Column("extra", Text),  # JSON object of backend-specific fields
    Column("created", Text, server_default=text("CURRENT_TIMESTAMP")),
)

Index("ix_records_name", records.c.name)
Index("ix_records_identity", records.c.name, records.c.type, records.c.content)
