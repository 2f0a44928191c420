"""Tests for BaseService and lifecycle event dispatch."""

from __future__ import annotations

import pluggy
import pytest

from hsxctl.config.settings import HsxSettings
from hsxctl.plugins.manager import PluginManager
from hsxctl.services.base import BaseService
from hsxctl.services.build import BuildService
from hsxctl.services.loader import LoadService
from hsxctl.services.parse import ParseService

hookimpl = pluggy.HookimplMarker("hsxctl")


class _BrokenPlugin:
    @hookimpl
    def post_build(self, source: str, commands_run: int) -> None:
        raise RuntimeError("plugin crashed")


class TestBaseService:
    def test_settings_stored(self, settings: HsxSettings) -> None:
        service = BaseService(settings)
        assert service._settings is settings

    def test_default_plugin_manager_has_builtins(self, settings: HsxSettings) -> None:
        service = BaseService(settings)
        assert "builtin-functions" in service._plugins.list_plugin_names()

    def test_explicit_plugin_manager(self, settings: HsxSettings) -> None:
        pm = PluginManager(builtins=False)
        assert BaseService(settings, pm)._plugins is pm

    def test_plugin_failure_becomes_warning(self, settings: HsxSettings) -> None:
        pm = PluginManager()
        pm.register_plugin(_BrokenPlugin(), name="broken")
        warnings: list[str] = []
        BaseService(settings, pm)._dispatch_event(
            "post_build", {"source": "Mist.hsx", "commands_run": 1}, warnings
        )
        assert warnings == ["Event dispatch failed for post_build"]

    def test_unknown_hook_ignored(self, settings: HsxSettings) -> None:
        warnings: list[str] = []
        BaseService(settings)._dispatch_event("post_nothing", {}, warnings)
        assert warnings == []


ALL_SERVICES = [BuildService, LoadService, ParseService]


class TestServiceInheritance:
    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_inherits_base_service(self, service_cls: type) -> None:
        assert issubclass(service_cls, BaseService)
