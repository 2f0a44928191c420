"""Shared service-layer helper functions."""

from __future__ import annotations

from pathlib import Path

from hsxctl.domain.commands import Command


def command_summary(commands: list[Command]) -> list[dict[str, object]]:
    """JSON-friendly view of a command sequence (kind, line, payload)."""
    return [{"kind": str(c.kind), "line": c.line, **c.describe()} for c in commands]


def display_path(path: Path, root: Path | None = None) -> str:
    """*path* relative to *root* when it lives underneath, else absolute."""
    if root is not None:
        try:
            return str(path.resolve().relative_to(root.resolve()))
        except ValueError:
            pass
    return str(path)
