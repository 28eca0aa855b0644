"""
Extract paragraphs from book HTML (an EPUB content document).

Paragraphs are the elements whose children are all inline: a <p>, a heading,
or a <div> holding only text and inline markup. Each one is kept as plain
text and as sanitized HTML that only retains emphasis and line breaks.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

ALLOWED_TAGS = frozenset({"em", "i", "b", "br"})

INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "br", "cite", "code", "data", "dfn", "em", "i", "kbd",
        "mark", "q", "s", "samp", "small", "span", "strong", "sub", "sup", "time", "u", "var",
    }
)


@dataclass(frozen=True)
class ParsedParagraph:
    text: str
    html: str


def parse_html_to_paragraphs(
    html: str,
    start_anchor: str | None = None,
    end_anchor: str | None = None,
) -> list[ParsedParagraph]:
    """
    Paragraphs from the element with id `start_anchor` (the body when empty)
    up to, not including, the element with id `end_anchor`.

    A missing start anchor yields no paragraphs; a missing end anchor reads
    to the end of the document.
    """
    soup = BeautifulSoup(html, "lxml")
    start = soup.find(id=start_anchor) if start_anchor else soup.body
    if not isinstance(start, Tag):
        return []
    end = soup.find(id=end_anchor) if end_anchor else None
    return list(_paragraphs_between(start, end if isinstance(end, Tag) else None))


def document_title(html: str) -> str:
    soup = BeautifulSoup(html, "lxml")
    return soup.title.get_text() if soup.title else ""


def _child_tags(element: Tag) -> list[Tag]:
    return [c for c in element.children if isinstance(c, Tag)]


def _all_children_inline(element: Tag) -> bool:
    return all(c.name.lower() in INLINE_TAGS for c in _child_tags(element))


def _next_element_sibling(element: Tag) -> Tag | None:
    sibling = element.next_sibling
    while sibling is not None:
        if isinstance(sibling, Tag):
            return sibling
        sibling = sibling.next_sibling
    return None


def _paragraphs_between(start: Tag, end: Tag | None):
    current: Tag | None = start
    while current is not None:
        if end is not None and current is end:
            return

        text = current.get_text()
        if text.strip() and _all_children_inline(current):
            yield ParsedParagraph(text=text.strip(), html=sanitized_html(current).strip())

        # Descend into block containers; inline-only elements were consumed whole.
        children = _child_tags(current)
        if children and not _all_children_inline(current):
            current = children[0]
            continue

        nxt = _next_element_sibling(current)
        parent = current.parent
        while nxt is None and isinstance(parent, Tag) and parent.name != "[document]":
            nxt = _next_element_sibling(parent)
            parent = parent.parent
        current = nxt


def sanitized_html(element: Tag, *, keep_tag: bool = False) -> str:
    """Inner HTML of `element` with every tag except em, i, b and br replaced by its text."""
    name = element.name.lower()
    if keep_tag and name not in ALLOWED_TAGS:
        return escape(element.get_text(), quote=False)
    if name == "br":
        return "<br>"

    parts: list[str] = [f"<{name}>"] if keep_tag else []
    for child in element.children:
        if isinstance(child, Tag):
            parts.append(sanitized_html(child, keep_tag=True))
        elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
            parts.append(escape(str(child), quote=False))
    if keep_tag:
        parts.append(f"</{name}>")
    return "".join(parts)
