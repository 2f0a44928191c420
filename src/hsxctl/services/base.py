"""BaseService — foundation for the hsxctl services.

Every service receives the resolved :class:`HsxSettings` and a
:class:`PluginManager`.  The plugin manager supplies the executors'
lookup tables (backends, frameworks, async functions) and receives
lifecycle notifications.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from hsxctl.plugins.manager import PluginManager

if TYPE_CHECKING:
    from hsxctl.config.settings import HsxSettings

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class BuildService(BaseService):
            def build(self, source: Path | None = None) -> ServiceResult:
                functions = self._plugins.async_functions()
                ...
    """

    def __init__(self, settings: HsxSettings, plugins: PluginManager | None = None) -> None:
        self._settings = settings
        self._plugins = plugins or PluginManager()

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a lifecycle hook on every plugin.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        hook_fn = getattr(self._plugins.hook, hook_name, None)
        if hook_fn is None:
            return
        try:
            hook_fn(**payload)
        except Exception:
            logger.debug("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
