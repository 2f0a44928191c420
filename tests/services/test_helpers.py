"""Tests for shared service-layer helper functions."""

from __future__ import annotations

from pathlib import Path

from hsxctl.domain.commands import BuildTarget, SetVariable
from hsxctl.services._helpers import command_summary, display_path


class TestCommandSummary:
    def test_flattens_commands(self) -> None:
        summary = command_summary(
            [BuildTarget(target="vite", line=1), SetVariable(name="a", value="1", line=2)]
        )
        assert summary == [
            {"kind": "build-target", "line": 1, "target": "vite"},
            {"kind": "set-variable", "line": 2, "name": "a", "value": "1", "reactive": False},
        ]

    def test_empty(self) -> None:
        assert command_summary([]) == []


class TestDisplayPath:
    def test_relative_under_root(self, tmp_path: Path) -> None:
        assert display_path(tmp_path / "src" / "Mist.hsx", tmp_path) == str(Path("src/Mist.hsx"))

    def test_absolute_outside_root(self, tmp_path: Path) -> None:
        outside = Path("/somewhere/else.hsx")
        assert display_path(outside, tmp_path) == str(outside)

    def test_no_root(self) -> None:
        assert display_path(Path("a.hsx")) == "a.hsx"
