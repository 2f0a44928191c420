"""Tests for config file discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from hsxctl.config.discovery import ConfigError, find_config, project_root_for


class TestFindConfig:
    def test_in_start_directory(self, tmp_path: Path) -> None:
        config = tmp_path / "hsx.toml"
        config.write_text("", encoding="utf-8")
        assert find_config(tmp_path) == config.resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "hsx.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "src" / "pages"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "hsx.toml").resolve()

    def test_hidden_directory_candidate(self, tmp_path: Path) -> None:
        hidden = tmp_path / ".hsx"
        hidden.mkdir()
        (hidden / "hsx.toml").write_text("", encoding="utf-8")
        assert find_config(tmp_path) == (hidden / "hsx.toml").resolve()

    def test_plain_file_beats_hidden(self, tmp_path: Path) -> None:
        (tmp_path / ".hsx").mkdir()
        (tmp_path / ".hsx" / "hsx.toml").write_text("", encoding="utf-8")
        (tmp_path / "hsx.toml").write_text("", encoding="utf-8")
        assert find_config(tmp_path) == (tmp_path / "hsx.toml").resolve()

    def test_env_var_pins_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        pinned = tmp_path / "custom.toml"
        pinned.write_text("", encoding="utf-8")
        monkeypatch.setenv("HSX_CONFIG", str(pinned))
        assert find_config(tmp_path / "elsewhere") == pinned

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "hsx.toml").write_text("", encoding="utf-8")
        monkeypatch.setenv("HSX_CONFIG", str(tmp_path / "gone.toml"))
        assert find_config(tmp_path) is None


class TestProjectRoot:
    def test_parent_of_config(self, tmp_path: Path) -> None:
        assert project_root_for(tmp_path / "hsx.toml") == tmp_path.resolve()

    def test_hidden_config_belongs_to_outer_directory(self, tmp_path: Path) -> None:
        assert project_root_for(tmp_path / ".hsx" / "hsx.toml") == tmp_path.resolve()

    def test_no_config_uses_cwd(self, project_root: Path) -> None:
        assert project_root_for(None).resolve() == project_root.resolve()


class TestConfigError:
    def test_message_and_path(self, tmp_path: Path) -> None:
        err = ConfigError(tmp_path / "hsx.toml", "bad key")
        assert err.path == tmp_path / "hsx.toml"
        assert "Invalid TOML" in str(err)
        assert isinstance(err, ValueError)
