"""Build pass — BuildExecutor and BuildService.

The build executor runs the build grammar's commands one at a time with
filesystem, build-backend and framework-loader access.  It fails fast:
the first hard failure (missing file on ``exist import`` / ``copy``, or a
failing ``run async``) aborts the remaining sequence.

Commands that would touch a document render into a headless document
owned by the run, which ``--emit-html`` can write out.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from hsxctl.domain.expressions import EvaluationError
from hsxctl.domain.grammar import parse
from hsxctl.domain.types import CommandKind, Grammar
from hsxctl.infrastructure.filesystem import copy_file, read_source, resolve_file, resolve_path
from hsxctl.infrastructure.frameworks import FrameworkCache, get_framework_cache
from hsxctl.infrastructure.surface import DocumentSurface
from hsxctl.services._helpers import display_path
from hsxctl.services.base import BaseService
from hsxctl.services.context import RuntimeContext
from hsxctl.services.interpreter import CommandInterpreter
from hsxctl.services.result import ServiceError, ServiceResult
from hsxctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from hsxctl.domain.commands import (
        BuildTarget,
        Command,
        Copy,
        ExistImport,
        FileImportAll,
        FileRename,
        IncludeFramework,
        SetVariable,
        Transform,
    )

log = structlog.get_logger(__name__)


class CommandFailed(Exception):
    """A command aborted the build.  ``cause`` is the original exception."""

    def __init__(self, command: Command, cause: BaseException) -> None:
        super().__init__(f"Line {command.line} ({command.kind}): {cause}")
        self.command = command
        self.cause = cause


class BuildExecutor(CommandInterpreter):
    """Build-time interpreter.

    Parameters:
        context: Runtime context (state, headless surface, async functions).
        base_dir: Directory relative file paths resolve against.
        backends: ``target -> backend`` table for ``build target``.
        frameworks: ``lowercased name -> loader`` table for ``include framework``.
        cache: Framework cache; defaults to the process-wide one.
    """

    HANDLERS: ClassVar[dict[CommandKind, str]] = {
        CommandKind.EXIST_IMPORT: "_exist_import",
        CommandKind.FILE_IMPORT_ALL: "_file_import_all",
        CommandKind.FILE_RENAME: "_file_rename",
        CommandKind.BUILD_TARGET: "_build_target",
        CommandKind.INCLUDE_FRAMEWORK: "_include_framework",
        CommandKind.TRANSFORM: "_transform",
        CommandKind.COPY: "_copy",
        CommandKind.RUN_ASYNC: "_run_async",
        CommandKind.DEFINE_COMPONENT: "_define_component",
        CommandKind.RENDER_COMPONENT: "_render_component",
        CommandKind.SET_VARIABLE: "_set_variable",
        CommandKind.MEDIA_LOAD: "_diagnose_only",
    }

    def __init__(
        self,
        context: RuntimeContext,
        *,
        base_dir: Path | None = None,
        backends: Mapping[str, Callable[..., Any]] | None = None,
        frameworks: Mapping[str, Callable[[str], Any]] | None = None,
        cache: FrameworkCache | None = None,
    ) -> None:
        super().__init__(context)
        self.base_dir = base_dir or Path.cwd()
        self.backends = dict(backends or {})
        self.frameworks = {name.lower(): loader for name, loader in (frameworks or {}).items()}
        self.cache = cache or get_framework_cache()
        self.imports: list[str] = []
        self.copies: list[dict[str, str]] = []
        self.targets: list[str] = []
        self.frameworks_loaded: list[dict[str, str]] = []

    async def run(self, commands: Iterable[Command]) -> int:
        """Run *commands* in order, stopping at the first failure.

        Raises:
            CommandFailed: wraps the exception of the failing command.
        """
        count = 0
        for command in commands:
            try:
                await self.execute(command)
            except Exception as exc:
                raise CommandFailed(command, exc) from exc
            count += 1
        return count

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _exist_import(self, command: ExistImport) -> None:
        log.info("import.check", category=command.category, file=command.file)
        path = resolve_file(command.file, self.base_dir)
        self.imports.append(str(path))

    async def _file_import_all(self, command: FileImportAll) -> None:
        log.info("import.all", destination=command.destination)

    async def _file_rename(self, command: FileRename) -> None:
        log.info("file.rename", source=command.source, target=command.target)

    async def _build_target(self, command: BuildTarget) -> None:
        backend = self.backends.get(command.target)
        if backend is None:
            self.context.diagnose(f"Unknown build target: {command.target}")
            return
        log.info("build.target", target=command.target)
        result = backend(self.base_dir)
        if inspect.isawaitable(result):
            await result
        self.targets.append(command.target)

    async def _include_framework(self, command: IncludeFramework) -> None:
        loader = self.frameworks.get(command.framework.lower())
        if loader is None:
            self.context.diagnose(f"Unknown framework: {command.framework}")
            return
        framework, fresh = await self.cache.include(command.framework, command.version, loader)
        log.info(
            "framework.include",
            framework=command.framework,
            requested=command.version,
            version=framework.version,
            loaded=fresh,
        )
        if fresh:
            self.frameworks_loaded.append({"name": framework.name, "version": framework.version})

    async def _transform(self, command: Transform) -> None:
        log.info("file.transform", file=command.file, plugin=command.plugin)

    async def _copy(self, command: Copy) -> None:
        dest = copy_file(command.source, command.destination, self.base_dir)
        log.info("file.copy", source=command.source, destination=str(dest))
        self.copies.append({"from": command.source, "to": command.destination})

    async def _set_variable(self, command: SetVariable) -> None:
        try:
            await super()._set_variable(command)
        except EvaluationError as exc:
            self.context.diagnose(f"Line {command.line}: variable {command.name} not set: {exc}")


class BuildService(BaseService):
    """Parse and execute an HSX source with the build grammar."""

    @traced
    def build(
        self,
        source: Path | None = None,
        *,
        base_dir: Path | None = None,
        emit_html: Path | None = None,
    ) -> ServiceResult:
        op = "build"
        root = self._settings.project_root
        source_path = resolve_path(source or self._settings.build.entry, root)
        if not source_path.is_file():
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="SOURCE_NOT_FOUND",
                    message=f"HSX source not found: {source_path}",
                ),
            )

        warnings: list[str] = []
        with trace_span("parse") as span:
            commands = parse(read_source(source_path), grammar=Grammar.BUILD, warnings=warnings)
            if span is not None:
                span.note(commands=len(commands), skipped=len(warnings))

        configured = self._settings.build.base_dir
        resolved_base = base_dir or (resolve_path(configured, root) if configured else None)
        resolved_base = resolved_base or source_path.parent

        context = RuntimeContext.create(
            surface=DocumentSurface(),
            functions=self._plugins.async_functions(),
        )
        executor = BuildExecutor(
            context,
            base_dir=resolved_base,
            backends=self._plugins.build_backends(),
            frameworks=self._plugins.framework_loaders(),
        )

        log.info("build.start", source=str(source_path), commands=len(commands))
        with context, trace_span("execute"):
            try:
                executed = asyncio.run(executor.run(commands))
            except CommandFailed as exc:
                warnings.extend(context.warnings)
                return ServiceResult(
                    ok=False,
                    op=op,
                    warnings=warnings,
                    error=ServiceError(
                        code=_error_code(exc.cause),
                        message=str(exc),
                        detail={
                            "line": exc.command.line,
                            "kind": str(exc.command.kind),
                            "executed": executor_progress(commands, exc.command),
                        },
                    ),
                )
            warnings.extend(context.warnings)
            variables = context.state.snapshot()
            components = context.state.components.names()

            html_path: str | None = None
            if emit_html is not None:
                with trace_span("emit"):
                    emit_html.parent.mkdir(parents=True, exist_ok=True)
                    emit_html.write_text(context.surface.to_html(), encoding="utf-8")  # type: ignore[attr-defined]
                    html_path = str(emit_html)

        log.info("build.finish", source=str(source_path), executed=executed)
        self._dispatch_event(
            "post_build",
            {"source": str(source_path), "commands_run": executed},
            warnings,
        )

        data: dict[str, Any] = {
            "source": display_path(source_path, root),
            "base_dir": str(resolved_base),
            "commands": executed,
            "imports": executor.imports,
            "copies": executor.copies,
            "targets": executor.targets,
            "frameworks": executor.frameworks_loaded,
            "variables": variables,
            "components": components,
        }
        if html_path is not None:
            data["html"] = html_path
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)


def executor_progress(commands: list[Command], failed: Command) -> int:
    """Number of commands that completed before *failed*."""
    for index, command in enumerate(commands):
        if command is failed:
            return index
    return len(commands)


def _error_code(cause: BaseException) -> str:
    if isinstance(cause, FileNotFoundError):
        return "FILE_NOT_FOUND"
    if isinstance(cause, EvaluationError):
        return "EVALUATION_FAILED"
    return "BUILD_FAILED"
