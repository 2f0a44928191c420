"""Shared sequential interpreter for the build and runtime executors.

Both executors consume commands strictly in order, awaiting each one
before the next starts.  Handlers are looked up through a per-class
``HANDLERS`` table keyed by :class:`CommandKind`; every subclass table
must cover every kind (checked when the subclass is defined).

The handlers shared by both hosts live here: variables, components with
the reactivity binding pass, and ``run async``.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import partial
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from hsxctl.domain.commands import require_exhaustive
from hsxctl.domain.reactive import ReactiveVariable

if TYPE_CHECKING:
    from hsxctl.domain.commands import (
        Command,
        DefineComponent,
        RenderComponent,
        RunAsync,
        SetVariable,
    )
    from hsxctl.domain.surface import PlaceholderSlot
    from hsxctl.domain.types import CommandKind
    from hsxctl.services.context import RuntimeContext

log = structlog.get_logger(__name__)


def placeholder(name: str) -> str:
    """The literal ``{{name}}`` token bound to reactive variable *name*."""
    return "{{" + name + "}}"


def _substitute(slots: list[PlaceholderSlot], token: str, value: Any) -> None:
    text = "" if value is None else str(value)
    for slot in slots:
        slot.substitute(token, text)


class CommandInterpreter:
    """Base class: dispatch table, sequencing, and the host-neutral handlers."""

    HANDLERS: ClassVar[dict[CommandKind, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        require_exhaustive(cls.HANDLERS, cls.__name__)

    def __init__(self, context: RuntimeContext) -> None:
        self.context = context

    @property
    def warnings(self) -> list[str]:
        return self.context.warnings

    async def execute(self, command: Command) -> None:
        """Run one command to completion."""
        handler = getattr(self, self.HANDLERS[command.kind])
        log.debug("command.execute", kind=command.kind, line=command.line, **command.describe())
        await handler(command)

    async def run(self, commands: Iterable[Command]) -> int:
        """Run *commands* in order.  Returns the number executed."""
        count = 0
        for command in commands:
            await self.execute(command)
            count += 1
        return count

    # ------------------------------------------------------------------
    # Shared handlers
    # ------------------------------------------------------------------

    async def _set_variable(self, command: SetVariable) -> None:
        value = self.context.evaluate(command.value)
        self.context.state.set_variable(command.name, value, reactive=command.reactive)
        log.info(
            "variable.set",
            name=command.name,
            reactive=command.reactive,
            value=value,
        )

    async def _define_component(self, command: DefineComponent) -> None:
        self.context.state.components.define(command.name, command.content)
        log.info("component.define", name=command.name)

    async def _render_component(self, command: RenderComponent) -> None:
        target = self.context.state.components.render(
            command.name,
            command.selector,
            self.context.surface,
            self.context.warnings,
        )
        if target is None:
            return
        self.bind_reactivity(target)
        log.info("component.render", name=command.name, selector=command.selector)

    async def _run_async(self, command: RunAsync) -> None:
        log.info("async.run", code=command.code)
        await self.context.call(command.code)

    async def _diagnose_only(self, command: Command) -> None:
        self.context.diagnose(
            f"Line {command.line}: {command.kind} is not supported by {type(self).__name__}"
        )

    # ------------------------------------------------------------------
    # Reactivity
    # ------------------------------------------------------------------

    def bind_reactivity(self, target: Any) -> int:
        """Capture placeholder locations in *target* for every reactive variable.

        The scan happens once.  Each later ``set`` substitutes the value
        into the captured locations, consuming the token; nodes added after
        this pass are never bound.  Returns the number of slots captured.
        """
        captured = 0
        variables: dict[str, ReactiveVariable] = self.context.state.reactive_variables()
        for name, variable in variables.items():
            token = placeholder(name)
            slots = self.context.surface.placeholder_slots(target, token)
            if not slots:
                continue
            variable.subscribe(partial(_substitute, slots, token))
            captured += len(slots)
        return captured
