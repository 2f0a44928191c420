"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.hsx/plugins/``.
Capabilities: build backends, framework loaders, ``run async`` functions,
and post-build / post-load lifecycle hooks.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pluggy

from hsxctl.plugins.hookspecs import HsxHookSpec

PROJECT_NAME = "hsxctl"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch.

    The built-in backends and functions plugins are registered on
    construction, so a bare ``PluginManager()`` is immediately usable.
    """

    def __init__(self, *, builtins: bool = True) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(HsxHookSpec)
        self._loaded: bool = False
        if builtins:
            from hsxctl.plugins.builtins.backends import BuildBackendsPlugin
            from hsxctl.plugins.builtins.functions import FunctionsPlugin

            self.register_plugin(BuildBackendsPlugin(), name="builtin-backends")
            self.register_plugin(FunctionsPlugin(), name="builtin-functions")

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Uses pluggy's native setuptools entry_point discovery for the
        ``hsxctl.plugins`` group, then scans *local_dir* (typically
        ``.hsx/plugins/``) for single-file Python plugins.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints("hsxctl.plugins")
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching events."""
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        """Return all registered plugins."""
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Lookup tables
    # ------------------------------------------------------------------

    def build_backends(self) -> dict[str, Callable[..., Any]]:
        """Merged ``target -> backend`` table.  Later plugins override earlier ones."""
        return self._collect("register_build_backends")

    def framework_loaders(self) -> dict[str, Callable[[str], Any]]:
        """Merged ``name -> loader`` table, keyed by lowercased name."""
        loaders = self._collect("register_frameworks")
        return {name.lower(): loader for name, loader in loaders.items()}

    def async_functions(self) -> dict[str, Callable[..., Any]]:
        """Merged ``name -> function`` table for ``run async``."""
        return self._collect("register_async_functions")

    def _collect(self, hook_name: str) -> dict[str, Any]:
        """Merge dict results of a registration hook.

        ``get_hookimpls()`` lists implementations in registration order, so
        merging in that order lets later registrations win.  A plugin that
        raises or returns a non-dict is skipped with a warning.
        """
        merged: dict[str, Any] = {}
        for impl in getattr(self._pm.hook, hook_name).get_hookimpls():
            plugin_name = impl.plugin_name
            try:
                result = impl.function()
            except Exception:
                logger.warning("Plugin %s failed in %s", plugin_name, hook_name, exc_info=True)
                continue
            if result is None:
                continue
            if not isinstance(result, dict):
                logger.warning("Plugin %s returned non-dict from %s", plugin_name, hook_name)
                continue
            merged.update(result)
        return merged

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings but never raised: a broken local plugin
        must not prevent the rest of the system from starting.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"hsxctl_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    instance = obj()
                    self.register_plugin(instance, name=f"{module_name}.{obj.__name__}")
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("hsxctl")`` sets an ``hsxctl_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "hsxctl_impl", None):
                return True
        return False
