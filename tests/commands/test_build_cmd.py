"""Tests for the build CLI command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from hsxctl.cli import cli
from tests.conftest import write_source


class TestBuildCommand:
    def test_default_entry(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_source(project_root, "hsx build target vite\n")
        result = cli_runner.invoke(cli, ["build"])
        assert result.exit_code == 0, result.output
        assert "OK" in result.stdout
        assert "vite" in result.stdout

    def test_json_output(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_source(project_root, "hsx build target esbuild\nhsx set variable n = 1\n")
        result = cli_runner.invoke(cli, ["--json", "build", "Mist.hsx"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["op"] == "build"
        assert data["data"]["targets"] == ["esbuild"]
        assert data["data"]["variables"] == {"n": 1}

    def test_missing_source_exits_1(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "build", "nope.hsx"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "SOURCE_NOT_FOUND"

    def test_failed_command_exits_1(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_source(project_root, "hsx copy ghost.txt to out.txt\n")
        result = cli_runner.invoke(cli, ["build"])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr

    def test_warnings_on_stderr(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_source(project_root, "hsx build target webpack\n")
        result = cli_runner.invoke(cli, ["build"])
        assert result.exit_code == 0
        assert "WARNING: Unknown build target: webpack" in result.stderr
        assert "WARNING" not in result.stdout

    def test_quiet(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_source(project_root, "hsx build target vite\n")
        result = cli_runner.invoke(cli, ["-q", "build"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "OK: build"

    def test_emit_html(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_source(project_root, "hsx define component C <b>hi</b>\nhsx render component C to body\n")
        result = cli_runner.invoke(cli, ["build", "--emit-html", "dist/index.html"])
        assert result.exit_code == 0, result.output
        assert "<b>hi</b>" in (project_root / "dist" / "index.html").read_text(encoding="utf-8")

    def test_verbose_shows_telemetry(self, cli_runner: CliRunner, project_root: Path) -> None:
        write_source(project_root, "hsx build target vite\n")
        result = cli_runner.invoke(cli, ["-v", "build"])
        assert result.exit_code == 0, result.output
        assert "meta:" in result.stdout
        assert "execute" in result.stdout
