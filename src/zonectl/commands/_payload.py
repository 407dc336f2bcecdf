"""Reading operation batches from JSON files or stdin."""

from __future__ import annotations

import json
from typing import IO, Any

import click


def read_operations(source: IO[str]) -> list[Any]:
    """Load a JSON array of operations, or an object with an ``operations`` array."""
    name = getattr(source, "name", "<stdin>")
    try:
        data = json.load(source)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {name}: {exc}"
        raise click.ClickException(msg) from exc

    if isinstance(data, dict) and "operations" in data:
        data = data["operations"]
    if not isinstance(data, list):
        msg = f"{name} must contain a JSON array of operations"
        raise click.ClickException(msg)
    return data
