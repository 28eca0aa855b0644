"""
Text trees: the only view of a document the segmenter needs.

A tree enumerates its text-bearing leaves in document order. Every call walks
the underlying structure again, so leaves (and the spans built on them) reflect
the tree as it is at that moment and go stale if it is modified afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString


@dataclass(frozen=True)
class TextLeaf:
    index: int
    node: Any = field(compare=False, repr=False)
    parent: Any = field(default=None, compare=False, repr=False)

    @property
    def text(self) -> str:
        return str(self.node)


class TextTree(Protocol):
    def leaves(self) -> list[TextLeaf]: ...


class SoupTextTree:
    """Text tree over a BeautifulSoup element (a paragraph, a chapter body, ...)."""

    def __init__(self, root: Tag) -> None:
        self.root = root

    @classmethod
    def from_html(cls, html: str, *, parser: str = "lxml") -> "SoupTextTree":
        soup = BeautifulSoup(html, parser)
        root = soup.body if isinstance(soup.body, Tag) else soup
        return cls(root)

    def leaves(self) -> list[TextLeaf]:
        out: list[TextLeaf] = []
        for node in self.root.descendants:
            # Comments, CDATA, doctypes etc. are not rendered text.
            if not isinstance(node, NavigableString) or isinstance(node, PreformattedString):
                continue
            if not str(node):
                continue
            out.append(TextLeaf(index=len(out), node=node, parent=node.parent))
        return out


class PlainTextTree:
    """Text tree over literal strings; each non-empty string is one leaf."""

    def __init__(self, *parts: str) -> None:
        self.parts = parts

    def leaves(self) -> list[TextLeaf]:
        return [TextLeaf(index=i, node=part) for i, part in enumerate(p for p in self.parts if p)]


def tree_text(tree: TextTree) -> str:
    return "".join(leaf.text for leaf in tree.leaves())
