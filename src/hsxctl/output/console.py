"""Rich Console factory and theme for hsxctl output.

Consoles render into a StringIO buffer so the renderers can return a
plain string.  Outside a TTY (tests, pipes) Rich drops color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

from hsxctl.domain.types import RUNTIME_KINDS, CommandKind

HSX_THEME = Theme(
    {
        "hsx.ok": "bold green",
        "hsx.error": "bold red",
        "hsx.warning": "bold yellow",
        "hsx.op": "bold cyan",
        "hsx.key": "dim",
        "hsx.path": "dim",
        "hsx.kind.build": "blue",
        "hsx.kind.runtime": "magenta",
        "hsx.kind.shared": "green",
        "hsx.line": "dim",
    }
)

# Kinds the build grammar never produces.
_RUNTIME_ONLY = frozenset({CommandKind.MEDIA_LOAD})
# Kinds with meaning in both passes.
_SHARED = RUNTIME_KINDS - _RUNTIME_ONLY


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width.
    """
    return Console(
        file=StringIO(),
        theme=HSX_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Rendered text of a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Rich style for a command kind, by the pass(es) that act on it."""
    if kind in _RUNTIME_ONLY:
        return "hsx.kind.runtime"
    if kind in _SHARED:
        return "hsx.kind.shared"
    return "hsx.kind.build"
