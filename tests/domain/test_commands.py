"""Tests for the command models and handler-table exhaustiveness."""

from __future__ import annotations

import pydantic
import pytest

from hsxctl.domain.commands import (
    COMMAND_TYPES,
    BuildTarget,
    Copy,
    FileRename,
    MediaLoad,
    SetVariable,
    command_from_dict,
    require_exhaustive,
)
from hsxctl.domain.types import RUNTIME_KINDS, CommandKind


class TestCommandModels:
    def test_every_kind_has_a_model(self) -> None:
        assert set(COMMAND_TYPES) == set(CommandKind)

    def test_model_kind_matches_table(self) -> None:
        for kind, model in COMMAND_TYPES.items():
            assert model.model_fields["kind"].default == kind

    def test_frozen(self) -> None:
        command = SetVariable(name="x", value="1")
        with pytest.raises(pydantic.ValidationError):
            command.value = "2"  # type: ignore[misc]

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            SetVariable(name="", value="1")

    def test_describe_excludes_kind_and_line(self) -> None:
        command = MediaLoad(media_type="img", url="a.png", selector="#x", line=4)
        assert command.describe() == {"media_type": "img", "url": "a.png", "selector": "#x"}

    def test_equality_ignores_line(self) -> None:
        assert BuildTarget(target="vite", line=1) == BuildTarget(target="vite", line=9)
        assert BuildTarget(target="vite") != BuildTarget(target="babel")
        assert SetVariable(name="n", value="1") != SetVariable(name="n", value="1", reactive=True)

    def test_equal_payloads_of_different_kinds_differ(self) -> None:
        assert Copy(source="a", destination="b") != FileRename(source="a", target="b")
        assert BuildTarget(target="vite") != "vite"

    def test_hash_ignores_line(self) -> None:
        commands = {BuildTarget(target="vite", line=1), BuildTarget(target="vite", line=5)}
        assert len(commands) == 1

    def test_command_from_dict_discriminates(self) -> None:
        command = command_from_dict({"kind": "set-variable", "name": "n", "value": "2"})
        assert isinstance(command, SetVariable)
        assert command.reactive is False

    def test_command_from_dict_unknown_kind(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            command_from_dict({"kind": "teleport"})

    def test_runtime_kinds_subset(self) -> None:
        assert CommandKind.MEDIA_LOAD in RUNTIME_KINDS
        assert CommandKind.COPY not in RUNTIME_KINDS


class TestRequireExhaustive:
    def test_complete_table_passes(self) -> None:
        require_exhaustive({kind: "_h" for kind in CommandKind}, "Complete")

    def test_missing_kind_raises(self) -> None:
        table = {kind: "_h" for kind in CommandKind if kind is not CommandKind.COPY}
        with pytest.raises(TypeError, match="copy"):
            require_exhaustive(table, "Partial")
