"""Render surface protocol — the only document capability the core needs.

Executors never touch a concrete document tree; they resolve selectors,
replace a target's content, append described elements, and collect
placeholder slots through this protocol.  :mod:`hsxctl.infrastructure.surface`
provides the headless implementation.
"""

from __future__ import annotations

from typing import Any, Protocol


class PlaceholderSlot(Protocol):
    """One location in the tree that held a ``{{name}}`` token at bind time."""

    def substitute(self, token: str, text: str) -> None:
        """Replace *token* with *text* in place (no-op once the token is gone)."""
        ...


class RenderSurface(Protocol):
    def root(self) -> Any:
        """The container that receives fallback appends (the document body)."""
        ...

    def resolve(self, selector: str) -> Any | None:
        """Return the first node matching *selector*, or None."""
        ...

    def set_content(self, target: Any, markup: str) -> None:
        """Replace the children of *target* with parsed *markup*."""
        ...

    def append_element(self, target: Any, tag: str, attrs: dict[str, str]) -> Any:
        """Create a ``<tag>`` carrying *attrs* and append it to *target*."""
        ...

    def placeholder_slots(self, target: Any, token: str) -> list[PlaceholderSlot]:
        """Every location in *target*'s subtree (itself included) containing *token*."""
        ...
