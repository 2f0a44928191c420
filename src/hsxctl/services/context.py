"""RuntimeContext — the explicit state threaded through every command.

A context owns one :class:`RuntimeState`, one render surface and the
``run async`` function table.  There is no ambient global runtime:
several contexts can live side by side, each over its own document.

Lifecycle::

    with RuntimeContext.create(functions=pm.async_functions()) as ctx:
        await RuntimeExecutor(ctx).run(commands)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Any, Self

from hsxctl.domain.expressions import EvaluationError, evaluate, parse_call
from hsxctl.domain.state import RuntimeState
from hsxctl.infrastructure.surface import DocumentSurface

if TYPE_CHECKING:
    from hsxctl.domain.surface import RenderSurface

logger = logging.getLogger(__name__)


class RuntimeContext:
    """Variable store, component store, render surface, and function table."""

    def __init__(
        self,
        surface: RenderSurface,
        *,
        functions: Mapping[str, Callable[..., Any]] | None = None,
        state: RuntimeState | None = None,
    ) -> None:
        self.surface = surface
        self.state = state or RuntimeState()
        self.functions: dict[str, Callable[..., Any]] = dict(functions or {})
        self.warnings: list[str] = []
        self._closed = False

    @classmethod
    def create(
        cls,
        *,
        surface: RenderSurface | None = None,
        functions: Mapping[str, Callable[..., Any]] | None = None,
    ) -> Self:
        """New context over *surface* (default: a fresh headless document)."""
        return cls(surface or DocumentSurface(), functions=functions)

    def close(self) -> None:
        """Dispose of the state.  The surface is left as rendered."""
        self.state.clear()
        self.functions.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def diagnose(self, message: str) -> None:
        """Record a non-fatal diagnostic."""
        logger.warning(message)
        self.warnings.append(message)

    def evaluate(self, expr: str) -> Any:
        """Evaluate a value expression against this context's variables."""
        return evaluate(expr, self.state.get_variable)

    async def call(self, code: str) -> Any:
        """Run a ``run async`` body through the function table and await it.

        Raises:
            EvaluationError: unknown function or an argument outside the grammar.
        """
        call = parse_call(code)
        fn = self.functions.get(call.name)
        if fn is None:
            msg = f"Unknown async function: {call.name}"
            raise EvaluationError(msg)
        args = [self.evaluate(arg) for arg in call.args]
        result = fn(self, *args)
        if inspect.isawaitable(result):
            result = await result
        return result
