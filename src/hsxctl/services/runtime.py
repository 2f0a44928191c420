"""RuntimeExecutor — interprets commands against a live document.

Runs over one :class:`RuntimeContext`; each command completes before the
next begins.  Build-only kinds are reported and skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import structlog

from hsxctl.domain.types import CommandKind
from hsxctl.services.interpreter import CommandInterpreter

if TYPE_CHECKING:
    from hsxctl.domain.commands import MediaLoad

log = structlog.get_logger(__name__)


class RuntimeExecutor(CommandInterpreter):
    """Render-time interpreter."""

    HANDLERS: ClassVar[dict[CommandKind, str]] = {
        CommandKind.SET_VARIABLE: "_set_variable",
        CommandKind.DEFINE_COMPONENT: "_define_component",
        CommandKind.RENDER_COMPONENT: "_render_component",
        CommandKind.MEDIA_LOAD: "_media_load",
        CommandKind.RUN_ASYNC: "_run_async",
        CommandKind.EXIST_IMPORT: "_diagnose_only",
        CommandKind.FILE_IMPORT_ALL: "_diagnose_only",
        CommandKind.FILE_RENAME: "_diagnose_only",
        CommandKind.BUILD_TARGET: "_diagnose_only",
        CommandKind.INCLUDE_FRAMEWORK: "_diagnose_only",
        CommandKind.TRANSFORM: "_diagnose_only",
        CommandKind.COPY: "_diagnose_only",
    }

    async def _media_load(self, command: MediaLoad) -> None:
        """Append a ``<media_type src=url>`` element; unresolved targets fall back to the root."""
        surface = self.context.surface
        target = surface.resolve(command.selector)
        if target is None:
            log.debug("media.fallback", selector=command.selector)
            target = surface.root()
        surface.append_element(target, command.media_type, {"src": command.url})
        log.info("media.load", media_type=command.media_type, url=command.url)
