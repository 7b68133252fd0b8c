"""
Minimal HTML element tree.

Documents are assembled as Element values and serialized once by render().
Keeping the tree around lets callers inspect structure (classes, glyphs,
text) without parsing markup back.
"""
from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Callable, Iterator, Union

_VOID_TAGS = frozenset({"meta", "br", "hr", "img", "link"})


@dataclass(frozen=True)
class Raw:
    """Trusted markup inserted verbatim (stylesheets, SVG path data)."""
    markup: str


@dataclass(frozen=True)
class Element:
    tag: str
    attrs: tuple[tuple[str, str], ...] = ()
    children: tuple["Node", ...] = ()

    def attr(self, name: str) -> str | None:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    @property
    def classes(self) -> tuple[str, ...]:
        return tuple((self.attr("class") or "").split())

    def has_class(self, name: str) -> bool:
        return name in self.classes


Node = Union[Element, Raw, str]


def element(tag: str, *children: Node | None, cls: str | None = None, style: str | None = None, **attrs: str) -> Element:
    """
    Build an Element. ``None`` children are skipped so conditional content can
    be written inline. Attribute order is class, style, then keyword order.
    """
    pairs: list[tuple[str, str]] = []
    if cls:
        pairs.append(("class", cls))
    if style:
        pairs.append(("style", style))
    for key, value in attrs.items():
        pairs.append((key.rstrip("_").replace("_", "-"), value))
    return Element(tag=tag, attrs=tuple(pairs), children=tuple(c for c in children if c is not None))


def _render_attrs(attrs: tuple[tuple[str, str], ...]) -> str:
    return "".join(f' {key}="{html.escape(value, quote=True)}"' for key, value in attrs)


def render(node: Node) -> str:
    if isinstance(node, str):
        return html.escape(node, quote=False)
    if isinstance(node, Raw):
        return node.markup
    open_tag = f"<{node.tag}{_render_attrs(node.attrs)}>"
    if node.tag in _VOID_TAGS:
        return open_tag
    inner = "".join(render(child) for child in node.children)
    return f"{open_tag}{inner}</{node.tag}>"


def render_document(root: Element) -> str:
    return "<!DOCTYPE html>\n" + render(root) + "\n"


def iter_elements(node: Node) -> Iterator[Element]:
    """Depth-first walk over every Element under (and including) node."""
    if not isinstance(node, Element):
        return
    yield node
    for child in node.children:
        yield from iter_elements(child)


def find_all(node: Node, predicate: Callable[[Element], bool]) -> list[Element]:
    return [el for el in iter_elements(node) if predicate(el)]


def text_content(node: Node) -> str:
    if isinstance(node, str):
        return node
    if isinstance(node, Raw):
        return ""
    return "".join(text_content(child) for child in node.children)
