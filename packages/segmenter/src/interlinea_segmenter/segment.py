from __future__ import annotations

import logging
import re
from typing import Iterator

from interlinea_segmenter.offsets import OffsetIndex
from interlinea_segmenter.span import InvalidSpanError, TextSpan
from interlinea_segmenter.tree import TextTree

logger = logging.getLogger(__name__)

# A run without terminators followed by terminators, or the unterminated tail.
SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|\Z)")

# Letters, optionally joined into one token by hyphens and apostrophes
# ("well-known", "don't", "l’homme").
WORD_RE = re.compile(r"[^\W\d_]+(?:[-'’][^\W\d_]+)*")


def iter_sentences(tree: TextTree) -> Iterator[TextSpan]:
    """
    Yield one span per sentence under `tree`, in document order.

    Sentences are carved out of the concatenated text of all leaves, so a
    sentence may start in one element and end in another. Sentences whose
    boundaries cannot be mapped back onto the tree are logged and skipped.
    """
    index = OffsetIndex.from_leaves(tree.leaves())
    for match in SENTENCE_RE.finditer(index.text):
        if not match.group(0).strip():
            continue
        span = _span_for_match(tree, index, match, kind="sentence")
        if span is not None:
            yield span


def iter_words(sentence: TextSpan) -> Iterator[TextSpan]:
    """
    Yield one span per word inside `sentence`, in document order.

    The n-th yielded span is the word at position n of the sentence.
    """
    index = OffsetIndex()
    for leaf, start, end in sentence.slices():
        index.append(leaf, leaf.text[start:end], local_start=start)
    for match in WORD_RE.finditer(index.text):
        span = _span_for_match(sentence.tree, index, match, kind="word")
        if span is not None:
            yield span


def _span_for_match(tree: TextTree, index: OffsetIndex, match: re.Match[str], *, kind: str) -> TextSpan | None:
    start, end = match.start(), match.end()
    first = index.locate(start)
    # end - 1 is the last character of the match, so this finds the leaf that holds it.
    last = index.locate(end - 1)
    if first is None or last is None:
        logger.warning("Skipping %s %r at offset %d: offsets not mapped to any leaf", kind, match.group(0), start)
        return None
    try:
        return TextSpan.create(tree, first.leaf, first.to_local(start), last.leaf, last.to_local(end - 1) + 1)
    except InvalidSpanError as exc:
        logger.warning("Skipping %s %r at offset %d: %s", kind, match.group(0), start, exc)
        return None
