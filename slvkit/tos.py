"""Turn Terms of Service HTML into a flat list of blocks for display."""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Dict, Iterator, List, Optional, Union

__all__ = ["TosBlock", "HEADING", "PARAGRAPH", "LINK", "render_tos_html"]

HEADING = "heading"
PARAGRAPH = "paragraph"
LINK = "link"

_KINDS = frozenset({HEADING, PARAGRAPH, LINK})
_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4"})
_ALL_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_BOLD_TAGS = frozenset({"strong", "b"})
_ITALIC_TAGS = frozenset({"em", "i"})
_DEFAULT_HREF = "#"

_VOID_TAGS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)
# Block-level tags whose start implicitly closes an open paragraph.
_CLOSES_PARAGRAPH = frozenset(
    {
        "address", "article", "aside", "blockquote", "div", "dl", "fieldset",
        "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
        "main", "nav", "ol", "p", "pre", "section", "table", "ul",
    }
)


@dataclass(frozen=True)
class TosBlock:
    """One displayable piece of a ToS document: a heading, a paragraph or a link."""

    kind: str
    text: str
    href: Optional[str] = None
    bold: bool = False
    italic: bool = False

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"unknown block kind {self.kind!r}")
        if self.kind == LINK and self.href is None:
            raise ValueError("a link block needs an href")


@dataclass
class _Element:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List[Union["_Element", str]] = field(default_factory=list)

    def iter(self) -> Iterator["_Element"]:
        """This element and its descendant elements in document order."""
        yield self
        for child in self.children:
            if isinstance(child, _Element):
                yield from child.iter()

    def text(self) -> str:
        return "".join(
            child if isinstance(child, str) else child.text() for child in self.children
        )


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = _Element("#document")
        self._stack: List[_Element] = [self.root]

    def _pop_through(self, tag: str) -> bool:
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return True
        return False

    def _open(self, tag: str, attrs: List[tuple]) -> _Element:
        if tag in _CLOSES_PARAGRAPH:
            self._pop_through("p")
        if tag in _ALL_HEADING_TAGS and self._stack[-1].tag in _ALL_HEADING_TAGS:
            self._stack.pop()
        element = _Element(tag)
        for name, value in attrs:
            element.attrs.setdefault(name, value if value is not None else "")
        self._stack[-1].children.append(element)
        return element

    def handle_starttag(self, tag: str, attrs: List[tuple]) -> None:
        element = self._open(tag, attrs)
        if tag not in _VOID_TAGS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: List[tuple]) -> None:
        self._open(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        self._pop_through(tag)

    def handle_data(self, data: str) -> None:
        self._stack[-1].children.append(data)


def _parse(html: str) -> _Element:
    builder = _TreeBuilder()
    builder.feed(html)
    builder.close()
    return builder.root


def _link_block(element: _Element) -> TosBlock:
    return TosBlock(LINK, element.text().strip(), href=element.attrs.get("href", _DEFAULT_HREF))


def _paragraph_blocks(paragraph: _Element) -> Iterator[TosBlock]:
    parts: List[str] = []
    bold = italic = False
    for child in paragraph.children:
        if isinstance(child, str):
            parts.append(child)
        elif child.tag == "a":
            yield _link_block(child)
        else:
            if child.tag in _BOLD_TAGS:
                bold = True
            elif child.tag in _ITALIC_TAGS:
                italic = True
            parts.append(child.text())
    text = "".join(parts).strip()
    if text:
        yield TosBlock(PARAGRAPH, text, bold=bold, italic=italic)


def render_tos_html(html: str) -> List[TosBlock]:
    """Lay out ToS HTML as blocks: all headings, then paragraphs, then every link.

    Links inside a paragraph come just before that paragraph's text and
    again among the links at the end. A link without an href points to "#".
    """
    root = _parse(html)
    elements = list(root.iter())
    blocks = [TosBlock(HEADING, el.text().strip()) for el in elements if el.tag in _HEADING_TAGS]
    for el in elements:
        if el.tag == "p":
            blocks.extend(_paragraph_blocks(el))
    blocks.extend(_link_block(el) for el in elements if el.tag == "a")
    return blocks