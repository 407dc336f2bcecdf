"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from zonectl.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from zonectl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "apply":
        return f"OK: apply dispatched={result.data['dispatched']} failed={result.data['failed']}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("name", "")) for item in items)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="zone.ok")
    op = Text(f"  {result.op}", style="zone.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="zone.key")
    if key in ("registry", "registries"):
        v = Text(str(value), style="zone.registry")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = Text.assemble(prefix, (f"{duration:>8.2f}ms", style), f"  {name}")
    annotations = span_data.get("annotations") or {}
    if annotations:
        extras = ", ".join(f"{ak}={av}" for ak, av in annotations.items())
        line.append(f"  ({extras})")
    error = span_data.get("error")
    if error:
        line.append(f"  {error}", style="zone.error")
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 2)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="zone.error")
    op = Text(f"  {result.op}", style="zone.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


def _operation_table(operations: list[dict[str, Any]], *, outcome: bool) -> Table:
    """Build a table of operations, optionally with their outcome column."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Op")
    table.add_column("Name", style="zone.name")
    table.add_column("Type")
    table.add_column("Content")
    table.add_column("Registry", style="zone.registry")
    if outcome:
        table.add_column("Result")

    for item in operations:
        kind = str(item.get("op", ""))
        row: list[Any] = [
            str(item.get("index", "")),
            Text(kind, style=style_for_kind(kind)),
            str(item.get("canonical_name", "")),
            str(item.get("type", "")),
            str(item.get("content", "")),
            str(item.get("registry", "")),
        ]
        if outcome:
            if item.get("ok"):
                row.append(Text("ok", style="zone.ok"))
            else:
                row.append(Text("; ".join(item.get("errors", [])), style="zone.error"))
        table.add_row(*row)
    return table


# ── Operation renderers ───────────────────────────────────────────────


def _render_apply(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render apply results: summary fields plus the per-operation table."""
    _status_line(console, result)
    d = result.data
    _field(console, "role", d.get("role", ""))
    _field(console, "registries", ", ".join(d.get("registries", [])))
    _field(console, "dispatched", d.get("dispatched", 0))
    _field(console, "failed", d.get("failed", 0))
    if verbose and d.get("purged"):
        _field(console, "purged", ", ".join(d["purged"]))

    operations = d.get("operations", [])
    if operations:
        console.print()
        console.print(_operation_table(operations, outcome=True))
    if verbose:
        _render_meta(console, result)


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render dry-run results."""
    _status_line(console, result)
    d = result.data
    _field(console, "role", d.get("role", ""))
    _field(console, "registries", ", ".join(d.get("registries", [])))
    _field(console, "count", d.get("count", 0))

    operations = d.get("operations", [])
    if operations:
        console.print()
        console.print(_operation_table(operations, outcome=False))
    if verbose:
        _render_meta(console, result)


def _render_registries(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the registry catalog as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Registry", style="zone.registry", no_wrap=True)
    table.add_column("Builder")
    table.add_column("Available")
    table.add_column("Params", style="dim")
    for item in items:
        available = item.get("available", False)
        table.add_row(
            str(item.get("name", "")),
            str(item.get("builder", "")),
            Text("yes" if available else "no", style="zone.ok" if available else "zone.error"),
            ", ".join(item.get("params", [])),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} registries")
    console.print(f"builders: {', '.join(result.data.get('builders', []))}")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "apply": _render_apply,
    "validate": _render_validate,
    "list_registries": _render_registries,
}
