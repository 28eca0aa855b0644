from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, NamedTuple

from interlinea_segmenter.tree import TextLeaf, TextTree


class InvalidSpanError(ValueError):
    pass


class Boundary(NamedTuple):
    leaf: TextLeaf
    offset: int

    @property
    def key(self) -> tuple[int, int]:
        return (self.leaf.index, self.offset)


@dataclass(frozen=True)
class TextSpan:
    """
    A contiguous run of text between two (leaf, offset) boundaries.

    The run may cross any number of leaves, e.g. a sentence that continues
    into an <em> element and out of it again.
    """

    tree: TextTree = field(compare=False, repr=False)
    start: Boundary
    end: Boundary

    @classmethod
    def create(
        cls,
        tree: TextTree,
        start_leaf: TextLeaf,
        start_offset: int,
        end_leaf: TextLeaf,
        end_offset: int,
    ) -> "TextSpan":
        for leaf, offset in ((start_leaf, start_offset), (end_leaf, end_offset)):
            if not 0 <= offset <= len(leaf.text):
                raise InvalidSpanError(
                    f"offset {offset} outside leaf {leaf.index} of length {len(leaf.text)}"
                )
        start = Boundary(start_leaf, start_offset)
        end = Boundary(end_leaf, end_offset)
        if start.key > end.key:
            raise InvalidSpanError(f"span start {start.key} is after its end {end.key}")
        return cls(tree=tree, start=start, end=end)

    @property
    def collapsed(self) -> bool:
        return self.start.key == self.end.key

    def intersects(self, leaf: TextLeaf) -> bool:
        return self.start.leaf.index <= leaf.index <= self.end.leaf.index

    def contains(self, other: "TextSpan") -> bool:
        # Non-strict on both ends: a span equal to this one is contained.
        return self.start.key <= other.start.key and self.end.key >= other.end.key

    def slices(self) -> Iterator[tuple[TextLeaf, int, int]]:
        """Yield (leaf, local start, local end) for every leaf the span touches."""
        for leaf in self.tree.leaves():
            if not self.intersects(leaf):
                continue
            local_start = self.start.offset if leaf.index == self.start.leaf.index else 0
            local_end = self.end.offset if leaf.index == self.end.leaf.index else len(leaf.text)
            yield leaf, local_start, local_end

    def __str__(self) -> str:
        return "".join(leaf.text[a:b] for leaf, a, b in self.slices())
