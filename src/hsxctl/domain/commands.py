"""Command models — one frozen variant per :class:`CommandKind`.

Commands are created once by the parser, consumed once by an executor,
and never mutated.  ``Command`` is the closed union of every variant,
discriminated on ``kind``; executors dispatch on ``kind`` through a
handler table that must cover every member of :class:`CommandKind`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from hsxctl.domain.types import CommandKind


class BaseCommand(BaseModel):
    """Fields shared by every command variant."""

    model_config = {"frozen": True}

    line: int = 0

    def describe(self) -> dict[str, Any]:
        """Return the payload fields (everything except ``kind`` and ``line``)."""
        return self.model_dump(mode="json", exclude={"kind", "line"})

    # ``line`` is provenance only: two commands are equal when their kind
    # and payload are.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseCommand):
            return NotImplemented
        return type(self) is type(other) and self.describe() == other.describe()

    def __hash__(self) -> int:
        return hash((type(self), tuple(self.describe().items())))


class ExistImport(BaseCommand):
    kind: Literal["exist-import"] = "exist-import"
    category: str
    file: str


class FileImportAll(BaseCommand):
    kind: Literal["file-import-all"] = "file-import-all"
    destination: str


class FileRename(BaseCommand):
    kind: Literal["file-rename"] = "file-rename"
    source: str
    target: str


class BuildTarget(BaseCommand):
    kind: Literal["build-target"] = "build-target"
    target: str


class IncludeFramework(BaseCommand):
    kind: Literal["include-framework"] = "include-framework"
    framework: str
    version: str


class Transform(BaseCommand):
    kind: Literal["transform"] = "transform"
    file: str
    plugin: str


class Copy(BaseCommand):
    kind: Literal["copy"] = "copy"
    source: str
    destination: str


class RunAsync(BaseCommand):
    kind: Literal["run-async"] = "run-async"
    code: str


class DefineComponent(BaseCommand):
    kind: Literal["define-component"] = "define-component"
    name: str = Field(min_length=1)
    content: str


class RenderComponent(BaseCommand):
    kind: Literal["render-component"] = "render-component"
    name: str = Field(min_length=1)
    selector: str


class SetVariable(BaseCommand):
    kind: Literal["set-variable"] = "set-variable"
    name: str = Field(min_length=1)
    value: str
    reactive: bool = False


class MediaLoad(BaseCommand):
    """Insert a media element (``img``, ``video``, ...) into a target."""

    kind: Literal["media-load"] = "media-load"
    media_type: str
    url: str
    selector: str


Command = Annotated[
    ExistImport
    | FileImportAll
    | FileRename
    | BuildTarget
    | IncludeFramework
    | Transform
    | Copy
    | RunAsync
    | DefineComponent
    | RenderComponent
    | SetVariable
    | MediaLoad,
    Field(discriminator="kind"),
]

COMMAND_TYPES: dict[CommandKind, type[BaseCommand]] = {
    CommandKind.EXIST_IMPORT: ExistImport,
    CommandKind.FILE_IMPORT_ALL: FileImportAll,
    CommandKind.FILE_RENAME: FileRename,
    CommandKind.BUILD_TARGET: BuildTarget,
    CommandKind.INCLUDE_FRAMEWORK: IncludeFramework,
    CommandKind.TRANSFORM: Transform,
    CommandKind.COPY: Copy,
    CommandKind.RUN_ASYNC: RunAsync,
    CommandKind.DEFINE_COMPONENT: DefineComponent,
    CommandKind.RENDER_COMPONENT: RenderComponent,
    CommandKind.SET_VARIABLE: SetVariable,
    CommandKind.MEDIA_LOAD: MediaLoad,
}

_COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)


def command_from_dict(data: dict[str, Any]) -> Command:
    """Validate a ``{"kind": ..., ...}`` mapping into its command variant."""
    return _COMMAND_ADAPTER.validate_python(data)


def require_exhaustive(handlers: Mapping[CommandKind, object], owner: str) -> None:
    """Fail at import time when *owner*'s handler table misses a kind.

    Raises:
        TypeError: a :class:`CommandKind` member has no handler.
    """
    missing = sorted(set(CommandKind) - set(handlers))
    if missing:
        msg = f"{owner} has no handler for: {', '.join(missing)}"
        raise TypeError(msg)
