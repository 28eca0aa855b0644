from __future__ import annotations

from interlinea_segmenter.offsets import OffsetIndex
from interlinea_segmenter.segment import iter_sentences, iter_words
from interlinea_segmenter.span import InvalidSpanError, TextSpan
from interlinea_segmenter.tree import TextTree


def find_sentence(tree: TextTree, target: TextSpan) -> tuple[int, TextSpan] | None:
    """First sentence (with its index) that contains `target`."""
    for i, sentence in enumerate(iter_sentences(tree)):
        if sentence.contains(target):
            return i, sentence
    return None


def find_word(sentence: TextSpan, target: TextSpan) -> tuple[int, TextSpan] | None:
    """First word of `sentence` (with its position) that contains `target`."""
    for position, word in enumerate(iter_words(sentence)):
        if word.contains(target):
            return position, word
    return None


def span_for_text_offsets(tree: TextTree, start: int, end: int) -> TextSpan:
    """
    Span covering characters [start, end) of the tree's concatenated text.

    This is how a click or a selection expressed as plain-text offsets is
    turned into a span that can be compared with sentences and words.
    """
    index = OffsetIndex.from_leaves(tree.leaves())
    if not 0 <= start <= end <= len(index):
        raise InvalidSpanError(f"offsets [{start}, {end}) outside text of length {len(index)}")
    if not index.entries:
        raise InvalidSpanError("tree has no text")

    first = index.locate(start)
    if first is None:
        # Collapsed at the very end of the text.
        first = index.entries[-1]
    start_leaf, start_offset = first.leaf, first.to_local(start)

    if end == start:
        return TextSpan.create(tree, start_leaf, start_offset, start_leaf, start_offset)

    last = index.locate(end - 1)
    if last is None:
        raise InvalidSpanError(f"offset {end - 1} not mapped to any leaf")
    return TextSpan.create(tree, start_leaf, start_offset, last.leaf, last.to_local(end - 1) + 1)
