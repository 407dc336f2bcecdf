"""Operation kinds accepted by the batch executor."""

from __future__ import annotations

from enum import StrEnum


class OpKind(StrEnum):
    """Requested record mutation.

    ``update`` replaces every record under the canonical name with the
    supplied record; ``delete`` removes one matching record.
    """

    UPDATE = "update"
    DELETE = "delete"
