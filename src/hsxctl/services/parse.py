"""ParseService — show the command sequence a source produces."""

from __future__ import annotations

from pathlib import Path

from hsxctl.domain.grammar import parse
from hsxctl.domain.types import Grammar
from hsxctl.infrastructure.filesystem import read_source, resolve_path
from hsxctl.services._helpers import command_summary, display_path
from hsxctl.services.base import BaseService
from hsxctl.services.result import ServiceError, ServiceResult
from hsxctl.services.telemetry import traced


class ParseService(BaseService):
    """Parse without executing."""

    @traced
    def parse(self, source: Path, *, grammar: Grammar = Grammar.BUILD) -> ServiceResult:
        op = "parse"
        root = self._settings.project_root
        path = resolve_path(source, root)
        if not path.is_file():
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="SOURCE_NOT_FOUND", message=f"HSX source not found: {path}"),
            )

        warnings: list[str] = []
        commands = parse(read_source(path), grammar=grammar, warnings=warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "source": display_path(path, root),
                "grammar": str(grammar),
                "count": len(commands),
                "commands": command_summary(commands),
            },
            warnings=warnings,
        )
