"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from hsxctl.config.logging import configure_logging, resolve_level


class TestResolveLevel:
    def test_default_warning(self) -> None:
        assert resolve_level() == logging.WARNING

    def test_quiet_error(self) -> None:
        assert resolve_level(quiet=True) == logging.ERROR

    def test_verbose_wins(self) -> None:
        assert resolve_level(verbose=True, quiet=True) == logging.DEBUG


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("hsxctl").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_quiet_sets_error(self) -> None:
        configure_logging(quiet=True)
        assert logging.getLogger("hsxctl").level == logging.ERROR

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("hsxctl.test").warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "hsxctl.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("hsxctl.plugins.manager").debug("Registered plugin: probe")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Registered plugin: probe"
        assert parsed["level"] == "debug"

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("urllib3").debug("connection noise")
        logging.getLogger("requests").debug("request noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=True)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1
