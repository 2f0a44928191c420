"""Tests for the load CLI command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from hsxctl.cli import cli
from tests.conftest import html_page


def _page(root: Path, block: str) -> Path:
    page = root / "page.html"
    page.write_text(html_page(block), encoding="utf-8")
    return page


class TestLoadCommand:
    def test_prints_html(self, cli_runner: CliRunner, project_root: Path) -> None:
        _page(project_root, "hsx media load img from a.png to #nowhere")
        result = cli_runner.invoke(cli, ["load", "page.html"])
        assert result.exit_code == 0, result.output
        assert '<img src="a.png">' in result.stdout

    def test_quiet_prints_only_html(self, cli_runner: CliRunner, project_root: Path) -> None:
        _page(project_root, "hsx set variable a = 1")
        result = cli_runner.invoke(cli, ["-q", "load", "page.html"])
        assert result.exit_code == 0
        assert result.stdout.startswith("<!DOCTYPE html>")

    def test_output_file(self, cli_runner: CliRunner, project_root: Path) -> None:
        _page(project_root, "<video src='v.mp4'></video>")
        result = cli_runner.invoke(cli, ["--json", "load", "page.html", "-o", "out.html"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["data"]["cloned"] == 1
        assert "<video" in (project_root / "out.html").read_text(encoding="utf-8")

    def test_line_failure_is_not_fatal(self, cli_runner: CliRunner, project_root: Path) -> None:
        _page(project_root, "hsx run async nowhere()\nhsx set variable a = 1")
        result = cli_runner.invoke(cli, ["--json", "load", "page.html"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["data"]["commands"] == 1
        assert len(data["data"]["failures"]) == 1

    def test_no_block_exits_1(self, cli_runner: CliRunner, project_root: Path) -> None:
        (project_root / "page.html").write_text("<html></html>", encoding="utf-8")
        result = cli_runner.invoke(cli, ["load", "page.html"])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
