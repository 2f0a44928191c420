"""Headless HTML document tree.

A small element/text tree built with the stdlib :mod:`html.parser`.  It
supports exactly what the render surface needs: fragment parsing, inner
and outer HTML serialization, deep cloning, and the CSS selector subset
described in :func:`parse_selector`.
"""

from __future__ import annotations

import html
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from html.parser import HTMLParser

VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)
RAW_TEXT_TAGS = frozenset({"script", "style"})


class Node(ABC):
    """Base tree node."""

    def __init__(self) -> None:
        self.parent: Element | None = None

    @abstractmethod
    def clone(self) -> Node:
        """Deep copy, detached from any parent."""
        ...

    @abstractmethod
    def to_html(self) -> str:
        """Serialized markup for this node."""
        ...

    def detach(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None


class Text(Node):
    def __init__(self, data: str) -> None:
        super().__init__()
        self.data = data

    def clone(self) -> Text:
        return Text(self.data)

    def to_html(self) -> str:
        if self.parent is not None and self.parent.tag in RAW_TEXT_TAGS:
            return self.data
        return html.escape(self.data, quote=False)

    def __repr__(self) -> str:
        return f"Text({self.data!r})"


class Element(Node):
    def __init__(self, tag: str, attrs: dict[str, str] | None = None) -> None:
        super().__init__()
        self.tag = tag.lower()
        self.attrs: dict[str, str] = dict(attrs or {})
        self.children: list[Node] = []

    # -- tree mutation -------------------------------------------------

    def append(self, child: Node) -> Node:
        child.detach()
        child.parent = self
        self.children.append(child)
        return child

    def clear(self) -> None:
        for child in self.children:
            child.parent = None
        self.children = []

    def clone(self) -> Element:
        copy = Element(self.tag, self.attrs)
        for child in self.children:
            copy.append(child.clone())
        return copy

    # -- attributes ----------------------------------------------------

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attrs.get(name, default)

    def set(self, name: str, value: str) -> None:
        self.attrs[name] = value

    @property
    def id(self) -> str | None:
        return self.attrs.get("id")

    @property
    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()

    # -- content -------------------------------------------------------

    @property
    def inner_html(self) -> str:
        return "".join(child.to_html() for child in self.children)

    @inner_html.setter
    def inner_html(self, markup: str) -> None:
        self.clear()
        for node in parse_fragment(markup):
            self.append(node)

    @property
    def text_content(self) -> str:
        return "".join(
            node.data if isinstance(node, Text) else node.text_content for node in self.children
        )

    def to_html(self) -> str:
        attrs = "".join(
            f' {name}="{html.escape(value, quote=True)}"' for name, value in self.attrs.items()
        )
        if self.tag in VOID_TAGS:
            return f"<{self.tag}{attrs}>"
        return f"<{self.tag}{attrs}>{self.inner_html}</{self.tag}>"

    @property
    def outer_html(self) -> str:
        return self.to_html()

    # -- traversal -----------------------------------------------------

    def iter_nodes(self) -> Iterator[Node]:
        """Descendants in document order (self excluded)."""
        for child in self.children:
            yield child
            if isinstance(child, Element):
                yield from child.iter_nodes()

    def iter_elements(self) -> Iterator[Element]:
        for node in self.iter_nodes():
            if isinstance(node, Element):
                yield node

    def query_selector_all(self, selector: str) -> list[Element]:
        groups = parse_selector(selector)
        return [el for el in self.iter_elements() if any(_matches(el, g) for g in groups)]

    def query_selector(self, selector: str) -> Element | None:
        groups = parse_selector(selector)
        for el in self.iter_elements():
            if any(_matches(el, g) for g in groups):
                return el
        return None

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, {self.attrs!r}, children={len(self.children)})"


class Document:
    """An ``<html>`` tree with ``<head>`` and ``<body>``."""

    def __init__(self) -> None:
        self.document_element = Element("html")
        self.head = Element("head")
        self.body = Element("body")
        self.document_element.append(self.head)
        self.document_element.append(self.body)

    @classmethod
    def from_html(cls, markup: str) -> Document:
        """Parse a full page.  Loose content lands in ``<body>``."""
        doc = cls()
        nodes = parse_fragment(markup)
        html_el = next((n for n in nodes if isinstance(n, Element) and n.tag == "html"), None)
        top = html_el.children[:] if html_el is not None else nodes
        for node in top:
            if isinstance(node, Element) and node.tag == "head":
                for child in node.children[:]:
                    doc.head.append(child)
            elif isinstance(node, Element) and node.tag == "body":
                doc.body.attrs.update(node.attrs)
                for child in node.children[:]:
                    doc.body.append(child)
            else:
                doc.body.append(node)
        return doc

    def create_element(self, tag: str) -> Element:
        return Element(tag)

    def query_selector(self, selector: str) -> Element | None:
        return self.document_element.query_selector(selector)

    def query_selector_all(self, selector: str) -> list[Element]:
        return self.document_element.query_selector_all(selector)

    def to_html(self) -> str:
        return f"<!DOCTYPE html>\n{self.document_element.to_html()}"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Element("#fragment")
        self._stack: list[Element] = [self.root]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        el = Element(tag, {name: value or "" for name, value in attrs})
        self._stack[-1].append(el)
        if el.tag not in VOID_TAGS:
            self._stack.append(el)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._stack[-1].append(Element(tag, {name: value or "" for name, value in attrs}))

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        for i in range(len(self._stack) - 1, 0, -1):
            if self._stack[i].tag == tag:
                del self._stack[i:]
                return

    def handle_data(self, data: str) -> None:
        parent = self._stack[-1]
        if parent.children and isinstance(parent.children[-1], Text):
            parent.children[-1].data += data  # type: ignore[union-attr]
        else:
            parent.append(Text(data))


def parse_fragment(markup: str) -> list[Node]:
    """Parse *markup* into detached top-level nodes."""
    builder = _TreeBuilder()
    builder.feed(markup)
    builder.close()
    nodes = builder.root.children[:]
    for node in nodes:
        node.parent = None
    return nodes


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

_COMPOUND = re.compile(
    r"(?P<tag>[A-Za-z][\w-]*|\*)?"
    r"(?P<rest>(?:[#.][\w-]+|\[[^\]]+\]|:[\w-]+(?:\([^)]*\))?)*)"
)
_COMBINATOR = re.compile(r"\s*([>+~])\s*|\s+")
_PART = re.compile(
    r"""([#.])([\w-]+)"""
    r"""|\[\s*([\w-]+)\s*(=\s*["']?([^"'\]]*)["']?\s*)?\]"""
    r"""|:([\w-]+)(?:\(\s*([^)]*?)\s*\))?"""
)
_PSEUDO_CLASSES = frozenset({"first-child", "last-child", "only-child", "empty", "nth-child"})

DESCENDANT = " "


class _Compound:
    __slots__ = ("attrs", "classes", "id", "pseudo", "tag")

    def __init__(self) -> None:
        self.tag: str | None = None
        self.id: str | None = None
        self.classes: list[str] = []
        self.attrs: list[tuple[str, str | None]] = []
        self.pseudo: list[tuple[str, int]] = []

    def matches(self, el: Element) -> bool:
        if self.tag is not None and el.tag != self.tag:
            return False
        if self.id is not None and el.id != self.id:
            return False
        if self.classes and not set(self.classes).issubset(el.classes):
            return False
        for name, value in self.attrs:
            if name not in el.attrs:
                return False
            if value is not None and el.attrs[name] != value:
                return False
        return all(_pseudo_matches(el, name, n) for name, n in self.pseudo)


def _element_siblings(el: Element) -> list[Element]:
    if el.parent is None:
        return [el]
    return [c for c in el.parent.children if isinstance(c, Element)]


def _pseudo_matches(el: Element, name: str, n: int) -> bool:
    if name == "empty":
        return not el.children
    siblings = _element_siblings(el)
    if name == "first-child":
        return siblings[0] is el
    if name == "last-child":
        return siblings[-1] is el
    if name == "only-child":
        return len(siblings) == 1
    return len(siblings) >= n and siblings[n - 1] is el


def _unsupported(selector: str) -> ValueError:
    return ValueError(f"Unsupported selector: {selector!r}")


def _parse_compound(text: str, selector: str) -> _Compound:
    m = _COMPOUND.fullmatch(text)
    if m is None or not text:
        raise _unsupported(selector)
    compound = _Compound()
    tag = m.group("tag")
    if tag and tag != "*":
        compound.tag = tag.lower()
    for kind, name, attr, eq, value, pseudo, arg in _PART.findall(m.group("rest")):
        if kind == "#":
            compound.id = name
        elif kind == ".":
            compound.classes.append(name)
        elif attr:
            compound.attrs.append((attr, value if eq else None))
        else:
            pseudo = pseudo.lower()
            if pseudo not in _PSEUDO_CLASSES:
                raise _unsupported(selector)
            if pseudo == "nth-child":
                if not arg.isdigit() or int(arg) < 1:
                    raise _unsupported(selector)
                compound.pseudo.append((pseudo, int(arg)))
            elif arg:
                raise _unsupported(selector)
            else:
                compound.pseudo.append((pseudo, 0))
    return compound


# One step of a selector chain: the combinator joining it to the previous
# step (None for the first) and the compound it must match.
_Step = tuple[str | None, _Compound]


def _parse_chain(group: str, selector: str) -> list[_Step]:
    group = group.strip()
    if not group:
        raise _unsupported(selector)
    chain: list[_Step] = []
    combinator: str | None = None
    pos = 0
    while True:
        m = _COMPOUND.match(group, pos)
        if m is None or m.end() == pos:
            raise _unsupported(selector)
        chain.append((combinator, _parse_compound(m.group(0), selector)))
        pos = m.end()
        if pos == len(group):
            return chain
        c = _COMBINATOR.match(group, pos)
        if c is None or c.end() == len(group):
            raise _unsupported(selector)
        combinator = c.group(1) or DESCENDANT
        pos = c.end()


def parse_selector(selector: str) -> list[list[_Step]]:
    """Parse a selector list into chains of compounds joined by combinators.

    Supported: type, ``*``, ``#id``, ``.class``, ``[attr]``, ``[attr=value]``,
    the structural pseudo-classes ``:first-child``, ``:last-child``,
    ``:only-child``, ``:empty`` and ``:nth-child(n)``, the descendant,
    ``>``, ``+`` and ``~`` combinators, and ``,`` groups.

    Raises:
        ValueError: *selector* uses syntax outside the supported subset.
    """
    return [_parse_chain(group, selector) for group in selector.split(",")]


def _matches(el: Element, chain: list[_Step], index: int | None = None) -> bool:
    """Match *el* against ``chain[:index + 1]``, right to left."""
    if index is None:
        index = len(chain) - 1
    combinator, compound = chain[index]
    if not compound.matches(el):
        return False
    if index == 0:
        return True
    if combinator == ">":
        return el.parent is not None and _matches(el.parent, chain, index - 1)
    if combinator == DESCENDANT:
        node = el.parent
        while node is not None:
            if _matches(node, chain, index - 1):
                return True
            node = node.parent
        return False
    siblings = _element_siblings(el)
    before = siblings[: siblings.index(el)]
    if combinator == "+":
        return bool(before) and _matches(before[-1], chain, index - 1)
    return any(_matches(s, chain, index - 1) for s in before)
