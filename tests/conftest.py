"""Shared pytest fixtures and test helpers for hsxctl tests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from hsxctl.config.settings import HsxSettings
from hsxctl.domain.grammar import parse
from hsxctl.domain.types import Grammar
from hsxctl.infrastructure.frameworks import get_framework_cache
from hsxctl.plugins.manager import PluginManager
from hsxctl.services.context import RuntimeContext
from hsxctl.services.runtime import RuntimeExecutor
from hsxctl.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_frameworks() -> Generator[None]:
    """The framework cache is process-wide; every test starts empty."""
    get_framework_cache().reset()
    yield
    get_framework_cache().reset()


@pytest.fixture(autouse=True)
def _restore_global_state() -> Generator[None]:
    """CLI invocations reconfigure logging and telemetry; undo both."""
    root = logging.getLogger()
    hsx = logging.getLogger("hsxctl")
    handlers, level, hsx_level = root.handlers[:], root.level, hsx.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    hsx.setLevel(hsx_level)
    disable_telemetry()


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's HSX_* environment out of the tests."""
    for name in ("HSX_CONFIG", "HSX_QUIET", "HSX_VERBOSE", "HSX_JSON_OUTPUT", "HSX_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project directory, also the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> HsxSettings:
    """Default settings rooted at the temporary project."""
    return HsxSettings.from_cli(project_root=project_root)


@pytest.fixture
def plugins() -> PluginManager:
    """Plugin manager with only the built-in plugins."""
    return PluginManager()


@pytest.fixture
def context(plugins: PluginManager) -> Generator[RuntimeContext]:
    """Fresh runtime context over an empty headless document."""
    ctx = RuntimeContext.create(functions=plugins.async_functions())
    try:
        yield ctx
    finally:
        ctx.close()


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def run_runtime(context: RuntimeContext, source: str) -> int:
    """Parse *source* with the runtime grammar and run it on *context*."""
    commands = parse(source, grammar=Grammar.RUNTIME)
    return asyncio.run(RuntimeExecutor(context).run(commands))


def write_source(root: Path, body: str, name: str = "Mist.hsx") -> Path:
    """Write an HSX source file under *root* and return its path."""
    path = root / name
    path.write_text(body, encoding="utf-8")
    return path


def html_page(block: str, **extra: Any) -> str:
    """A minimal page wrapping *block* in an ``<hsx>`` element."""
    head = extra.get("head", "")
    return f"<html><head>{head}</head><body><hsx>\n{block}\n</hsx></body></html>"
