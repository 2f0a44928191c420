"""Closed expression grammar for variable values and async calls.

Values are one of:

- integer / float literals (``42``, ``-1.5``, ``1e3``)
- quoted strings (``"Ann"`` or ``'Ann'``) with ``\\n \\t \\\\ \\" \\'`` escapes
- ``true`` / ``false`` / ``null``
- a variable reference (``user``), resolved through a lookup callable

``run async`` bodies are calls into a registered function table:
``name`` or ``name(arg, arg, ...)`` where every argument is a value as above.
Nothing else is evaluated.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

_INT = re.compile(r"^[+-]?\d+$")
_FLOAT = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_STRING = re.compile(r"""^(?:"((?:[^"\\]|\\.)*)"|'((?:[^'\\]|\\.)*)')$""", re.DOTALL)
_IDENT = re.compile(r"^[A-Za-z_]\w*$")
_CALL = re.compile(r"^([A-Za-z_]\w*)\s*(?:\((.*)\))?$", re.DOTALL)
_ESCAPE = re.compile(r"\\(.)")

_ESCAPES: dict[str, str] = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "'": "'"}

KEYWORDS: dict[str, Any] = {"true": True, "false": False, "null": None}


class EvaluationError(ValueError):
    """An expression is outside the grammar or references an unknown name."""


@dataclass(frozen=True)
class Call:
    """A parsed ``run async`` body."""

    name: str
    args: tuple[str, ...] = ()


def _unescape(body: str) -> str:
    return _ESCAPE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), body)


def evaluate(expr: str, lookup: Callable[[str], Any] | None = None) -> Any:
    """Evaluate a single value expression.

    Args:
        expr: Source text of the value.
        lookup: Resolves variable references.  Must raise ``KeyError`` for
            unknown names.  Without a lookup, references are errors.

    Raises:
        EvaluationError: *expr* is not a literal or a known variable.
    """
    text = expr.strip()
    if not text:
        raise EvaluationError("Empty expression")

    m = _STRING.match(text)
    if m:
        body = m.group(1) if m.group(1) is not None else m.group(2)
        return _unescape(body)
    if _INT.match(text):
        return int(text)
    if _FLOAT.match(text):
        return float(text)
    if text in KEYWORDS:
        return KEYWORDS[text]
    if _IDENT.match(text):
        if lookup is None:
            raise EvaluationError(f"Unknown variable: {text}")
        try:
            return lookup(text)
        except KeyError:
            raise EvaluationError(f"Unknown variable: {text}") from None

    raise EvaluationError(f"Unsupported expression: {text}")


def split_arguments(text: str) -> list[str]:
    """Split a call's argument list on top-level commas (quotes respected)."""
    if not text.strip():
        return []

    args: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escaped = False
    for ch in text:
        if escaped:
            current.append(ch)
            escaped = False
            continue
        if quote is not None:
            current.append(ch)
            if ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif ch == ",":
            args.append("".join(current).strip())
            current = []
        else:
            current.append(ch)

    if quote is not None:
        raise EvaluationError(f"Unterminated string in arguments: {text}")
    args.append("".join(current).strip())
    if any(not a for a in args):
        raise EvaluationError(f"Empty argument in: {text}")
    return args


def parse_call(code: str) -> Call:
    """Parse a ``run async`` body into a :class:`Call`.

    Raises:
        EvaluationError: *code* is not ``name`` or ``name(args)``.
    """
    m = _CALL.match(code.strip())
    if m is None:
        raise EvaluationError(f"Not a function call: {code.strip()}")
    name, raw_args = m.group(1), m.group(2)
    args = tuple(split_arguments(raw_args)) if raw_args is not None else ()
    return Call(name=name, args=args)
