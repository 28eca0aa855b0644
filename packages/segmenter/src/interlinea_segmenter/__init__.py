from interlinea_segmenter.segment import iter_sentences, iter_words
from interlinea_segmenter.selection import find_sentence, find_word, span_for_text_offsets
from interlinea_segmenter.span import Boundary, InvalidSpanError, TextSpan
from interlinea_segmenter.tree import PlainTextTree, SoupTextTree, TextLeaf, TextTree, tree_text

__all__ = [
    "Boundary",
    "InvalidSpanError",
    "PlainTextTree",
    "SoupTextTree",
    "TextLeaf",
    "TextSpan",
    "TextTree",
    "find_sentence",
    "find_word",
    "iter_sentences",
    "iter_words",
    "span_for_text_offsets",
    "tree_text",
]
