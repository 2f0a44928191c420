"""Runtime state — the variable store and component store of one run.

One instance per document load or build run.  Names are unique within a
state; a later binding with the same name replaces the earlier one.
"""

from __future__ import annotations

from typing import Any

from hsxctl.domain.components import ComponentRegistry
from hsxctl.domain.reactive import ReactiveVariable


class RuntimeState:
    def __init__(self) -> None:
        self.variables: dict[str, Any] = {}
        self.components = ComponentRegistry()

    def set_variable(self, name: str, value: Any, *, reactive: bool = False) -> None:
        """Bind *name* to a plain value, or to a new :class:`ReactiveVariable`."""
        if not name:
            msg = "Variable name must not be empty"
            raise ValueError(msg)
        self.variables[name] = ReactiveVariable(value) if reactive else value

    def get_variable(self, name: str) -> Any:
        """Current value of *name* (reactive variables are unwrapped).

        Raises:
            KeyError: *name* is not bound.
        """
        value = self.variables[name]
        if isinstance(value, ReactiveVariable):
            return value.get()
        return value

    def reactive(self, name: str) -> ReactiveVariable | None:
        value = self.variables.get(name)
        return value if isinstance(value, ReactiveVariable) else None

    def reactive_variables(self) -> dict[str, ReactiveVariable]:
        return {k: v for k, v in self.variables.items() if isinstance(v, ReactiveVariable)}

    def snapshot(self) -> dict[str, Any]:
        """Plain ``name -> value`` view, for reporting."""
        return {name: self.get_variable(name) for name in self.variables}

    def clear(self) -> None:
        self.variables.clear()
        self.components.clear()
