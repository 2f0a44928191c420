"""Command kinds and grammar selectors.

Every parsed command carries one :class:`CommandKind` as its discriminant.
The two grammars share most kinds; ``media-load`` is runtime-only.
"""

from __future__ import annotations

from enum import StrEnum


class CommandKind(StrEnum):
    """Discriminant of a parsed HSX command."""

    EXIST_IMPORT = "exist-import"
    FILE_IMPORT_ALL = "file-import-all"
    FILE_RENAME = "file-rename"
    BUILD_TARGET = "build-target"
    INCLUDE_FRAMEWORK = "include-framework"
    TRANSFORM = "transform"
    COPY = "copy"
    RUN_ASYNC = "run-async"
    DEFINE_COMPONENT = "define-component"
    RENDER_COMPONENT = "render-component"
    SET_VARIABLE = "set-variable"
    MEDIA_LOAD = "media-load"


class Grammar(StrEnum):
    """Which line grammar a source is parsed with."""

    BUILD = "build"
    RUNTIME = "runtime"


class ImportCategory(StrEnum):
    """Categories accepted by ``hsx exist import``."""

    CORRECT = "correct"
    SIMPLE = "simple"
    NODE_MODULE = "node module"
    NODE_BUILTIN = "node built-in module"


# Kinds the runtime host can act on; the rest are build-time only.
RUNTIME_KINDS: frozenset[CommandKind] = frozenset(
    {
        CommandKind.SET_VARIABLE,
        CommandKind.DEFINE_COMPONENT,
        CommandKind.RENDER_COMPONENT,
        CommandKind.MEDIA_LOAD,
        CommandKind.RUN_ASYNC,
    }
)
