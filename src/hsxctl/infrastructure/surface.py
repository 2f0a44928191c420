"""DocumentSurface — the headless render surface over :mod:`.dom`."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hsxctl.infrastructure.dom import Document, Element, Text

logger = logging.getLogger(__name__)


@dataclass
class TextSlot:
    """A text node captured at bind time."""

    node: Text

    def substitute(self, token: str, text: str) -> None:
        if token in self.node.data:
            self.node.data = self.node.data.replace(token, text)


@dataclass
class AttributeSlot:
    """An attribute value captured at bind time."""

    element: Element
    name: str

    def substitute(self, token: str, text: str) -> None:
        value = self.element.attrs.get(self.name)
        if value is not None and token in value:
            self.element.attrs[self.name] = value.replace(token, text)


class DocumentSurface:
    """Render surface backed by an in-memory :class:`Document`."""

    def __init__(self, document: Document | None = None) -> None:
        self.document = document or Document()

    def root(self) -> Element:
        return self.document.body

    def resolve(self, selector: str) -> Element | None:
        """First element matching *selector*; unsupported syntax resolves to None."""
        try:
            return self.document.query_selector(selector)
        except ValueError:
            logger.warning("Unsupported selector %r", selector)
            return None

    def set_content(self, target: Element, markup: str) -> None:
        target.inner_html = markup

    def append_element(self, target: Element, tag: str, attrs: dict[str, str]) -> Element:
        element = self.document.create_element(tag)
        element.attrs.update(attrs)
        target.append(element)
        return element

    def placeholder_slots(self, target: Element, token: str) -> list[TextSlot | AttributeSlot]:
        slots: list[TextSlot | AttributeSlot] = []
        slots.extend(_attribute_slots(target, token))
        for node in target.iter_nodes():
            if isinstance(node, Text):
                if token in node.data:
                    slots.append(TextSlot(node))
            elif isinstance(node, Element):
                slots.extend(_attribute_slots(node, token))
        return slots

    def to_html(self) -> str:
        return self.document.to_html()


def _attribute_slots(element: Element, token: str) -> list[AttributeSlot]:
    return [AttributeSlot(element, name) for name, value in element.attrs.items() if token in value]
