"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from hsxctl.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from hsxctl.services.result import ServiceResult


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
    if result.op == "load" and "html" in result.data:
        return str(result.data["html"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="hsx.ok")
    op = Text(f"  {result.op}", style="hsx.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="hsx.key")
    if key in ("source", "base_dir", "html", "output") or key.endswith("_path"):
        v = Text(str(value), style="hsx.path")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


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

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    if span_data.get("notes"):
        extras = [f"{ak}={av}" for ak, av in span_data["notes"].items()]
        line += f"  ({', '.join(extras)})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 2)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="hsx.error")
    op = Text(f"  {result.op}", style="hsx.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("source", "base_dir", "commands"):
        if key in d:
            _field(console, key, d[key])
    if d.get("targets"):
        _field(console, "targets", ", ".join(d["targets"]))
    if d.get("frameworks"):
        loaded = [f"{fw['name']} {fw['version']}" for fw in d["frameworks"]]
        _field(console, "frameworks", ", ".join(loaded))
    if d.get("copies"):
        _field(console, "copies", len(d["copies"]))
        if verbose:
            for copy in d["copies"]:
                console.print(f"    {copy['from']} -> {copy['to']}")
    if d.get("components"):
        _field(console, "components", ", ".join(d["components"]))
    if d.get("variables"):
        _field(console, "variables", d["variables"])
    if "html" in d:
        _field(console, "html", d["html"])
    if verbose:
        _render_meta(console, result)


def _render_load(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("url", "commands", "scripts", "cloned"):
        if key in d:
            _field(console, key, d[key])

    failures = d.get("failures", [])
    if failures:
        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
        table.add_column("Line", justify="right", style="hsx.line")
        table.add_column("Text", no_wrap=True)
        table.add_column("Error", style="hsx.error")
        for failure in failures:
            table.add_row(str(failure["line"]), Text(failure["text"]), Text(failure["error"]))
        console.print()
        console.print(table)

    if "output" in d:
        _field(console, "output", d["output"])
    elif "html" in d:
        console.print()
        console.print(Text(d["html"]))
    if verbose:
        _render_meta(console, result)


def _render_parse(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("source", "grammar", "count"):
        if key in d:
            _field(console, key, d[key])

    commands = d.get("commands", [])
    if commands:
        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
        table.add_column("Line", justify="right", style="hsx.line")
        table.add_column("Kind")
        table.add_column("Arguments")
        for cmd in commands:
            kind = str(cmd["kind"])
            args = {k: v for k, v in cmd.items() if k not in ("kind", "line")}
            table.add_row(
                str(cmd["line"]),
                Text(kind, style=style_for_kind(kind)),
                Text(", ".join(f"{k}={v!r}" for k, v in args.items())),
            )
        console.print()
        console.print(table)
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "build": _render_build,
    "load": _render_load,
    "parse": _render_parse,
}
