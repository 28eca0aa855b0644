from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable

from interlinea_segmenter.tree import TextLeaf


@dataclass(frozen=True)
class OffsetEntry:
    leaf: TextLeaf
    start: int
    end: int
    local_start: int = 0

    def to_local(self, offset: int) -> int:
        return offset - self.start + self.local_start


class OffsetIndex:
    """
    Aggregated text of a sequence of leaf slices, plus the map from
    aggregate offsets back to (leaf, local offset).
    """

    def __init__(self) -> None:
        self.entries: list[OffsetEntry] = []
        self._starts: list[int] = []
        self._parts: list[str] = []
        self._length = 0

    @classmethod
    def from_leaves(cls, leaves: Iterable[TextLeaf]) -> "OffsetIndex":
        index = cls()
        for leaf in leaves:
            index.append(leaf, leaf.text)
        return index

    def append(self, leaf: TextLeaf, text: str, *, local_start: int = 0) -> None:
        if not text:
            return
        entry = OffsetEntry(leaf=leaf, start=self._length, end=self._length + len(text), local_start=local_start)
        self.entries.append(entry)
        self._starts.append(entry.start)
        self._parts.append(text)
        self._length = entry.end

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def __len__(self) -> int:
        return self._length

    def locate(self, offset: int) -> OffsetEntry | None:
        """Entry whose range holds the character at `offset`, if any."""
        i = bisect_right(self._starts, offset) - 1
        if i < 0:
            return None
        entry = self.entries[i]
        return entry if entry.start <= offset < entry.end else None
