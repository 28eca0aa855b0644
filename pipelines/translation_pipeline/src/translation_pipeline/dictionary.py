"""Turn a selection inside a paragraph into a word-lookup request."""

from __future__ import annotations

from interlinea_contracts.models import DictionaryRequest, WordLookup, WordRef
from interlinea_contracts.validate import ValidationError, assert_word_position_in_range
from interlinea_segmenter import (
    PlainTextTree,
    TextSpan,
    TextTree,
    find_sentence,
    find_word,
    iter_words,
    span_for_text_offsets,
    tree_text,
)

from translation_pipeline.translator import CachingTranslator


def build_dictionary_request(tree: TextTree, target: TextSpan) -> DictionaryRequest | None:
    """
    Describe `target` by its paragraph, its sentence and its word.

    Returns None when no sentence contains the target. The word is left out
    when the target is not inside a single word (a selection across words,
    or a point outside any word).
    """
    found = find_sentence(tree, target)
    if found is None:
        return None
    _, sentence = found

    word: WordRef | None = None
    hit = find_word(sentence, target)
    if hit is not None:
        position, span = hit
        word = WordRef(position=position, value=str(span))

    return DictionaryRequest(
        paragraph=tree_text(tree).strip(),
        sentence=str(sentence).strip(),
        word=word,
    )


def check_lookup_request(request: DictionaryRequest) -> None:
    """Raise ValidationError unless the request names a word that exists in its sentence."""
    if request.word is None or not request.sentence:
        raise ValidationError("word lookup needs a sentence and a word")
    assert_word_position_in_range(request.word.position, count_words(request.sentence))


async def lookup_word(
    translator: CachingTranslator[WordLookup],
    request: DictionaryRequest,
    *,
    use_cache: bool = True,
) -> WordLookup:
    check_lookup_request(request)
    return await translator.translate(request, use_cache=use_cache)


def count_words(sentence: str) -> int:
    tree = PlainTextTree(sentence)
    whole = span_for_text_offsets(tree, 0, len(sentence))
    return sum(1 for _ in iter_words(whole))
