"""Component registry — named template fragments rendered into targets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hsxctl.domain.surface import RenderSurface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Component:
    """A named raw template.  Content is written verbatim on render."""

    name: str
    content: str


class ComponentRegistry:
    """Maps component names to templates.  Redefinition overwrites."""

    def __init__(self) -> None:
        self._components: dict[str, Component] = {}

    def define(self, name: str, content: str) -> Component:
        if not name:
            msg = "Component name must not be empty"
            raise ValueError(msg)
        component = Component(name=name, content=content)
        self._components[name] = component
        return component

    def get(self, name: str) -> Component | None:
        return self._components.get(name)

    def names(self) -> list[str]:
        return list(self._components)

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def __len__(self) -> int:
        return len(self._components)

    def clear(self) -> None:
        self._components.clear()

    def render(
        self,
        name: str,
        selector: str,
        surface: RenderSurface,
        warnings: list[str] | None = None,
    ) -> Any | None:
        """Write component *name*'s content into the node matching *selector*.

        Returns the target node, or None when the component is not
        registered or the selector resolves to nothing.  Both misses are
        diagnostics, never errors, and leave the document untouched.
        """
        component = self._components.get(name)
        if component is None:
            _diagnose(f"Component not found: {name}", warnings)
            return None

        target = surface.resolve(selector)
        if target is None:
            _diagnose(f"Render target not found: {selector}", warnings)
            return None

        surface.set_content(target, component.content)
        return target


def _diagnose(message: str, warnings: list[str] | None) -> None:
    logger.warning(message)
    if warnings is not None:
        warnings.append(message)
