"""Phase timing for service operations.

Off unless ``--verbose`` switches it on.  A ``@traced`` service method
opens a root :class:`Span`; each ``trace_span`` block run inside it adds a
timed child (parse, execute and emit for a build, fetch and run for a
load).  The finished tree is attached to the returned ServiceResult under
``meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from hsxctl.services.result import ServiceResult

log = structlog.get_logger("hsxctl.telemetry")

_enabled: ContextVar[bool] = ContextVar("hsx_telemetry_enabled", default=False)
_active: ContextVar[Span | None] = ContextVar("hsx_active_span", default=None)


@dataclass
class Span:
    """One timed phase and the phases nested inside it."""

    name: str
    children: list[Span] = field(default_factory=list)
    notes: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    stopped: float | None = None

    @property
    def elapsed_ms(self) -> float:
        if self.stopped is None:
            return 0.0
        return (self.stopped - self.started) * 1000

    def stop(self) -> None:
        self.stopped = time.perf_counter()

    def note(self, **values: Any) -> None:
        self.notes.update(values)

    def to_dict(self) -> dict[str, Any]:
        tree: dict[str, Any] = {"name": self.name, "duration_ms": round(self.elapsed_ms, 2)}
        if self.notes:
            tree["notes"] = dict(self.notes)
        if self.children:
            tree["children"] = [child.to_dict() for child in self.children]
        return tree


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _active.set(span)
    try:
        yield span
    finally:
        span.stop()
        _active.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time one phase of the enclosing ``@traced`` call.

    Yields None when telemetry is off or no traced call is running.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    child = Span(name)
    parent.children.append(child)
    with _activate(child):
        yield child


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time a service method; a returned ServiceResult carries the span tree."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(func.__qualname__)
        failed = True
        try:
            with _activate(root):
                result = func(*args, **kwargs)
            failed = False
        finally:
            log.debug(
                "span.complete",
                span_name=root.name,
                duration_ms=round(root.elapsed_ms, 2),
                ok=not failed,
                phases=len(root.children),
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Switch span collection on (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
