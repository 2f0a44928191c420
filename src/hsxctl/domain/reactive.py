"""Reactive variable — a value slot with synchronous ordered notification."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Subscriber = Callable[[Any], None]


class ReactiveVariable:
    """Observable value.

    INVARIANT: ``set`` delivers the new value to every subscriber registered
    at call time, synchronously and in subscription order, before returning.
    A subscriber that raises propagates straight to the caller of ``set``.
    Subscriptions cannot be removed.
    """

    def __init__(self, value: Any = None) -> None:
        self._value = value
        self._subscribers: list[Subscriber] = []

    def get(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def __repr__(self) -> str:
        return f"ReactiveVariable({self._value!r}, subscribers={len(self._subscribers)})"
