"""Minimal element tree for saved puzzle pages plus the structural queries the
extractor needs.

The tree is deliberately small: elements with a lower-cased tag, a dict of
lower-cased attributes, ordered children (elements or text) and a parent
link.  :func:`parse_markup` builds one with the standard library HTML
tokenizer; :func:`element` builds one by hand so each extraction stage can be
exercised on a few nodes instead of a whole page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Callable, Dict, Iterator, List, Optional, Union

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

_TABLE_SECTIONS = ("thead", "tbody", "tfoot")


@dataclass(eq=False)
class Element:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List[Union["Element", str]] = field(default_factory=list, repr=False)
    parent: Optional["Element"] = field(default=None, repr=False)

    def append(self, child: Union["Element", str]) -> None:
        if isinstance(child, Element):
            child.parent = self
        self.children.append(child)


def element(tag: str, attrs: Optional[Dict[str, str]] = None, *children: Union[Element, str]) -> Element:
    """Build an element by hand: ``element("td", {}, element("img", {"src": ...}))``."""

    node = Element(tag.lower(), {k.lower(): str(v) for k, v in (attrs or {}).items()})
    for child in children:
        node.append(child)
    return node


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Element("#document")
        self._stack: List[Element] = [self.root]

    def _open_index(self, tags, stop_at=("table",)) -> Optional[int]:
        for i in range(len(self._stack) - 1, 0, -1):
            tag = self._stack[i].tag
            if tag in tags:
                return i
            if tag in stop_at:
                return None
        return None

    def _close_implied(self, tag: str) -> None:
        idx = None
        if tag == "tr":
            idx = self._open_index(("tr",))
        elif tag in ("td", "th"):
            idx = self._open_index(("td", "th"), stop_at=("tr", "table"))
        elif tag in _TABLE_SECTIONS:
            idx = self._open_index(_TABLE_SECTIONS)
        if idx is not None:
            del self._stack[idx:]

    def handle_starttag(self, tag, attrs):
        self._close_implied(tag)
        node = Element(tag, {name: (value or "") for name, value in attrs})
        self._stack[-1].append(node)
        if tag not in VOID_TAGS:
            self._stack.append(node)

    def handle_startendtag(self, tag, attrs):
        self._close_implied(tag)
        self._stack[-1].append(Element(tag, {name: (value or "") for name, value in attrs}))

    def handle_endtag(self, tag):
        for i in range(len(self._stack) - 1, 0, -1):
            if self._stack[i].tag == tag:
                del self._stack[i:]
                return
        # stray end tag: ignored

    def handle_data(self, data):
        if data:
            self._stack[-1].append(data)


def parse_markup(markup: str) -> Element:
    """Parse ``markup`` into a fresh tree rooted at a ``#document`` element."""

    builder = _TreeBuilder()
    builder.feed(markup or "")
    builder.close()
    return builder.root


# ---------- queries ----------

def iter_elements(root: Element, tag: Optional[str] = None) -> Iterator[Element]:
    """Yield descendants of ``root`` in document order, optionally by tag."""

    stack = [c for c in reversed(root.children) if isinstance(c, Element)]
    while stack:
        node = stack.pop()
        if tag is None or node.tag == tag:
            yield node
        stack.extend(c for c in reversed(node.children) if isinstance(c, Element))


def find_first(
    root: Element,
    tag: Optional[str] = None,
    predicate: Optional[Callable[[Element], bool]] = None,
) -> Optional[Element]:
    for node in iter_elements(root, tag):
        if predicate is None or predicate(node):
            return node
    return None


def text_content(node: Element) -> str:
    parts: List[str] = []
    stack: List[Union[Element, str]] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        else:
            stack.extend(reversed(item.children))
    return "".join(parts)


def closest(node: Optional[Element], tag: str) -> Optional[Element]:
    while node is not None:
        if node.tag == tag:
            return node
        node = node.parent
    return None


def following_siblings(node: Element, tag: Optional[str] = None) -> List[Element]:
    parent = node.parent
    if parent is None:
        return []
    siblings = [c for c in parent.children if isinstance(c, Element)]
    after = siblings[siblings.index(node) + 1:]
    return [s for s in after if tag is None or s.tag == tag]


def table_rows(table: Element) -> List[Element]:
    """Rows belonging to ``table`` itself, never those of nested tables."""

    rows: List[Element] = []
    for child in table.children:
        if not isinstance(child, Element):
            continue
        if child.tag == "tr":
            rows.append(child)
        elif child.tag in _TABLE_SECTIONS:
            rows.extend(c for c in child.children if isinstance(c, Element) and c.tag == "tr")
    return rows


def row_cells(row: Element) -> List[Element]:
    return [c for c in row.children if isinstance(c, Element) and c.tag in ("td", "th")]


def images(node: Element) -> List[Element]:
    return list(iter_elements(node, "img"))


def get_attr(node: Element, name: str, default: Optional[str] = None) -> Optional[str]:
    return node.attrs.get(name.lower(), default)


def has_attr_value(node: Element, name: str, value: str) -> bool:
    actual = get_attr(node, name)
    if actual is None:
        return False
    return actual.strip().lower() == str(value).strip().lower()


__all__ = [
    "Element", "element", "parse_markup",
    "iter_elements", "find_first", "text_content", "closest",
    "following_siblings", "table_rows", "row_cells", "images",
    "get_attr", "has_attr_value",
]
