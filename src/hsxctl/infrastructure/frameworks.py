"""Process-wide framework cache.

INVARIANT: Memoized by name only.  Once a framework name has loaded,
later includes of the same name are no-ops whatever version they ask
for (the first version wins).  Names compare case-insensitively.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

FrameworkLoader = Callable[[str], Any]


@dataclass(frozen=True)
class LoadedFramework:
    name: str
    version: str
    handle: Any = None


class FrameworkCache:
    def __init__(self) -> None:
        self._loaded: dict[str, LoadedFramework] = {}

    def get(self, name: str) -> LoadedFramework | None:
        return self._loaded.get(name.lower())

    def is_loaded(self, name: str) -> bool:
        return name.lower() in self._loaded

    def loaded(self) -> list[LoadedFramework]:
        return list(self._loaded.values())

    async def include(
        self,
        name: str,
        version: str,
        loader: FrameworkLoader,
    ) -> tuple[LoadedFramework, bool]:
        """Load *name* via *loader* unless it is already loaded.

        Returns ``(framework, newly_loaded)``.  *loader* may be sync or async;
        it receives the requested version.
        """
        key = name.lower()
        existing = self._loaded.get(key)
        if existing is not None:
            logger.debug(
                "Framework %s already loaded (v%s); ignoring v%s", name, existing.version, version
            )
            return existing, False

        handle = loader(version)
        if inspect.isawaitable(handle):
            handle = await handle
        framework = LoadedFramework(name=name, version=version, handle=handle)
        self._loaded[key] = framework
        return framework, True

    def reset(self) -> None:
        self._loaded.clear()


_default_cache = FrameworkCache()


def get_framework_cache() -> FrameworkCache:
    """The process-wide cache shared by every build run."""
    return _default_cache
