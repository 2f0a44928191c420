"""Pluggy hook specifications for hsxctl.

Three registration hooks feed the executors' lookup tables (build
backends, framework loaders, ``run async`` functions).  Two lifecycle
hooks are called after a build run and after a document load.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("hsxctl")


class HsxHookSpec:
    """Hook specifications for the hsxctl plugin system."""

    @hookspec
    def register_build_backends(self) -> dict[str, Callable[..., Any]] | None:
        """Return ``target name -> backend`` for ``hsx build target``.

        A backend is called with the build base directory (``Path``) and
        may be sync or async.
        """

    @hookspec
    def register_frameworks(self) -> dict[str, Callable[[str], Any]] | None:
        """Return ``framework name -> loader`` for ``hsx include framework``.

        A loader is called with the requested version and may be sync or async.
        """

    @hookspec
    def register_async_functions(self) -> dict[str, Callable[..., Any]] | None:
        """Return ``function name -> callable`` for ``hsx run async``.

        Functions receive the RuntimeContext first, then the evaluated call
        arguments, and may be sync or async.
        """

    @hookspec
    def post_build(self, source: str, commands_run: int) -> None:
        """Called after a build run completes successfully."""

    @hookspec
    def post_load(self, url: str, commands_run: int, failures: int) -> None:
        """Called after a document load completes."""
