"""Built-in build backends and framework loaders.

The backends are opaque collaborators: each one only announces the build.
Real tool integrations ship as separate plugins that override these names.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pluggy
import structlog

hookimpl = pluggy.HookimplMarker("hsxctl")

log = structlog.get_logger(__name__)


def _announce(tool: str) -> Callable[[Path], None]:
    def backend(base_dir: Path) -> None:
        log.info("backend.build", tool=tool, base_dir=str(base_dir))

    backend.__name__ = f"build_with_{tool.lower()}"
    return backend


def load_strike(version: str) -> dict[str, str]:
    """Placeholder handle for the Strike framework."""
    log.info("framework.load", framework="Strike", version=version)
    return {"name": "Strike", "version": version}


class BuildBackendsPlugin:
    """Provides the ``vite``, ``babel`` and ``esbuild`` targets and ``Strike``."""

    @hookimpl
    def register_build_backends(self) -> dict[str, Callable[..., Any]]:
        return {
            "vite": _announce("Vite"),
            "babel": _announce("Babel"),
            "esbuild": _announce("ESBuild"),
        }

    @hookimpl
    def register_frameworks(self) -> dict[str, Callable[[str], Any]]:
        return {"strike": load_strike}
