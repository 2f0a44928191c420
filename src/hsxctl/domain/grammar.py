"""Line-oriented HSX grammar.

One command per line.  Each command is anchored to the literal ``hsx ``
prefix followed by a fixed phrase with positional captures.  Two grammars
share the rule table:

- **build**: every non-blank, non-comment line that matches no rule is
  reported as a diagnostic and skipped.
- **runtime**: additionally recognizes ``media load``.  Lines that lack the
  ``hsx `` prefix are ignored silently; prefixed lines that match no rule
  are reported.

INVARIANT: Command order equals the order of recognized source lines.
Unrecognized lines never raise out of :func:`parse`.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from hsxctl.domain.commands import COMMAND_TYPES, Command
from hsxctl.domain.types import CommandKind, Grammar, ImportCategory

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "//"
LINE_PREFIX = "hsx "

_CATEGORIES = "|".join(re.escape(c.value) for c in ImportCategory)

# (kind, pattern, capture field names, fixed extra fields)
_Rule = tuple[CommandKind, re.Pattern[str], tuple[str, ...], dict[str, Any]]

_SHARED_RULES: list[_Rule] = [
    (
        CommandKind.EXIST_IMPORT,
        re.compile(rf"^hsx exist import ({_CATEGORIES}) file (.+)$"),
        ("category", "file"),
        {},
    ),
    (
        CommandKind.FILE_IMPORT_ALL,
        re.compile(r"^hsx file import all to (.+)$"),
        ("destination",),
        {},
    ),
    (
        CommandKind.FILE_RENAME,
        re.compile(r"^hsx file import/make/rename/(.+)-to-(.+)$"),
        ("source", "target"),
        {},
    ),
    (CommandKind.BUILD_TARGET, re.compile(r"^hsx build target (.+)$"), ("target",), {}),
    (
        CommandKind.INCLUDE_FRAMEWORK,
        re.compile(r"^hsx include framework (.+) version (.+)$"),
        ("framework", "version"),
        {},
    ),
    (CommandKind.TRANSFORM, re.compile(r"^hsx transform (.+) with (.+)$"), ("file", "plugin"), {}),
    (CommandKind.COPY, re.compile(r"^hsx copy (.+) to (.+)$"), ("source", "destination"), {}),
    (CommandKind.RUN_ASYNC, re.compile(r"^hsx run async (.+)$"), ("code",), {}),
    (
        CommandKind.DEFINE_COMPONENT,
        re.compile(r"^hsx define component (\w+) (.+)$"),
        ("name", "content"),
        {},
    ),
    (
        CommandKind.RENDER_COMPONENT,
        re.compile(r"^hsx render component (\w+) to (.+)$"),
        ("name", "selector"),
        {},
    ),
    (
        CommandKind.SET_VARIABLE,
        re.compile(r"^hsx set variable (\w+) = (.+)$"),
        ("name", "value"),
        {"reactive": False},
    ),
    (
        CommandKind.SET_VARIABLE,
        re.compile(r"^hsx reactive variable (\w+) = (.+)$"),
        ("name", "value"),
        {"reactive": True},
    ),
]

_RUNTIME_ONLY_RULES: list[_Rule] = [
    (
        CommandKind.MEDIA_LOAD,
        re.compile(r"^hsx media load (\w+) from (.+) to (.+)$"),
        ("media_type", "url", "selector"),
        {},
    ),
]

GRAMMAR_RULES: dict[Grammar, list[_Rule]] = {
    Grammar.BUILD: _SHARED_RULES,
    Grammar.RUNTIME: _SHARED_RULES + _RUNTIME_ONLY_RULES,
}


class UnknownLineError(ValueError):
    """Raised by :func:`parse_line` for a line no rule recognizes."""

    def __init__(self, text: str, line: int = 0) -> None:
        super().__init__(f"Unknown HSX line {line}: {text}" if line else f"Unknown HSX line: {text}")
        self.text = text
        self.line = line


def is_skippable(text: str) -> bool:
    """Blank and ``//`` comment lines never produce a command or a diagnostic."""
    return not text or text.startswith(COMMENT_PREFIX)


def parse_line(text: str, grammar: Grammar = Grammar.BUILD, *, line: int = 0) -> Command | None:
    """Parse a single source line.

    Returns None for lines that are skipped silently (blank, comment, and
    in the runtime grammar any line without the ``hsx `` prefix).

    Raises:
        UnknownLineError: the line should produce a command but matches no rule.
    """
    text = text.strip()
    if is_skippable(text):
        return None
    if grammar is Grammar.RUNTIME and not text.startswith(LINE_PREFIX):
        return None

    for kind, pattern, fields, extra in GRAMMAR_RULES[grammar]:
        m = pattern.match(text)
        if m is None:
            continue
        values = {name: value.strip() for name, value in zip(fields, m.groups(), strict=True)}
        return COMMAND_TYPES[kind](line=line, **values, **extra)  # type: ignore[return-value]

    raise UnknownLineError(text, line)


def parse(
    source: str,
    *,
    grammar: Grammar = Grammar.BUILD,
    warnings: list[str] | None = None,
) -> list[Command]:
    """Convert source text into the ordered command sequence.

    Unrecognized lines are logged, appended to *warnings* when given,
    and skipped.  Line numbers are 1-based.
    """
    commands: list[Command] = []
    for lineno, raw in enumerate(source.splitlines(), start=1):
        try:
            command = parse_line(raw, grammar, line=lineno)
        except UnknownLineError as exc:
            logger.warning("%s", exc)
            if warnings is not None:
                warnings.append(str(exc))
            continue
        if command is not None:
            commands.append(command)
    return commands
