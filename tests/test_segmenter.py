import logging

import pytest

from interlinea_segmenter import (
    InvalidSpanError,
    PlainTextTree,
    SoupTextTree,
    TextSpan,
    find_sentence,
    find_word,
    iter_sentences,
    iter_words,
    span_for_text_offsets,
    tree_text,
)


def _texts(spans) -> list[str]:
    return [str(s) for s in spans]


def test_sentences_keep_terminator_runs_and_tail() -> None:
    tree = PlainTextTree("Wait?! Ok. And the rest")
    assert [s.strip() for s in _texts(iter_sentences(tree))] == ["Wait?!", "Ok.", "And the rest"]


def test_sentence_after_the_first_keeps_leading_whitespace() -> None:
    tree = PlainTextTree("Hello world. How are you?")
    assert _texts(iter_sentences(tree)) == ["Hello world.", " How are you?"]


def test_whitespace_only_matches_are_dropped() -> None:
    assert _texts(iter_sentences(PlainTextTree("Hi.   "))) == ["Hi."]
    assert _texts(iter_sentences(PlainTextTree("..."))) == []
    assert _texts(iter_sentences(PlainTextTree(""))) == []


def test_sentence_crosses_element_boundaries() -> None:
    tree = SoupTextTree.from_html("<p>Hello <em>big</em> world. Bye!</p>")
    sentences = list(iter_sentences(tree))
    assert _texts(sentences) == ["Hello big world.", " Bye!"]
    first = sentences[0]
    assert first.start.leaf.index == 0
    assert first.end.leaf.index == 2
    assert first.end.offset == 7


def test_words_of_a_sentence_spanning_elements() -> None:
    tree = SoupTextTree.from_html("<p>Hello <em>big</em> world. Bye!</p>")
    first, second = iter_sentences(tree)
    words = list(iter_words(first))
    assert _texts(words) == ["Hello", "big", "world"]
    assert words[1].start.leaf.index == 1
    assert (words[1].start.offset, words[1].end.offset) == (0, 3)

    (bye,) = iter_words(second)
    assert str(bye) == "Bye"
    assert (bye.start.offset, bye.end.offset) == (8, 11)


def test_word_pattern_joins_hyphens_and_apostrophes_and_skips_digits() -> None:
    (sentence,) = iter_sentences(PlainTextTree("don't stop well-known 42 café l’homme"))
    assert _texts(iter_words(sentence)) == ["don't", "stop", "well-known", "café", "l’homme"]


def test_sentence_without_words_yields_nothing() -> None:
    (sentence,) = iter_sentences(PlainTextTree("42 - 7!"))
    assert list(iter_words(sentence)) == []


def test_each_call_returns_a_fresh_generator() -> None:
    tree = PlainTextTree("One. Two. Three.")
    gen = iter_sentences(tree)
    assert next(gen) is not None
    assert len(list(iter_sentences(tree))) == 3
    assert len(list(gen)) == 2
    assert list(iter_sentences(tree)) == list(iter_sentences(tree))


def test_comments_are_not_text() -> None:
    tree = SoupTextTree.from_html("<p>Hi<!-- hidden. --> there.</p>")
    assert tree_text(tree) == "Hi there."
    assert _texts(iter_sentences(tree)) == ["Hi there."]


def test_span_construction_is_validated() -> None:
    tree = PlainTextTree("abc", "def")
    first, second = tree.leaves()
    with pytest.raises(InvalidSpanError):
        TextSpan.create(tree, first, 4, second, 1)
    with pytest.raises(InvalidSpanError):
        TextSpan.create(tree, second, 0, first, 1)
    with pytest.raises(InvalidSpanError):
        TextSpan.create(tree, first, 2, first, 1)

    span = TextSpan.create(tree, first, 1, second, 2)
    assert str(span) == "bcde"
    assert span.intersects(first) and span.intersects(second)
    assert span.contains(span)
    assert not span.collapsed


def test_sentences_and_words_of_a_short_paragraph() -> None:
    tree = PlainTextTree("Hello world! How are you?")
    first, second = iter_sentences(tree)
    assert (str(first), str(second)) == ("Hello world!", " How are you?")
    assert [(p, str(w)) for p, w in enumerate(iter_words(first))] == [(0, "Hello"), (1, "world")]

    click = span_for_text_offsets(tree, 8, 8)  # inside "world"
    index, sentence = find_sentence(tree, click)
    assert index == 0
    position, word = find_word(sentence, click)
    assert (position, str(word)) == (1, "world")


def test_quoted_word_inside_an_element() -> None:
    tree = SoupTextTree.from_html('<p>He said <em>"hello"</em> to her.</p>')
    (sentence,) = iter_sentences(tree)
    assert str(sentence) == 'He said "hello" to her.'

    words = list(iter_words(sentence))
    assert _texts(words) == ["He", "said", "hello", "to", "her"]
    hello = words[2]
    assert hello.start.leaf.index == hello.end.leaf.index == 1
    assert (hello.start.offset, hello.end.offset) == (1, 6)


def _failing_at(monkeypatch, bad_offset: int) -> None:
    create = TextSpan.create

    def flaky(tree, start_leaf, start_offset, end_leaf, end_offset):
        if start_offset == bad_offset:
            raise InvalidSpanError("leaf changed")
        return create(tree, start_leaf, start_offset, end_leaf, end_offset)

    monkeypatch.setattr(TextSpan, "create", staticmethod(flaky))


def test_unmappable_sentence_is_logged_and_skipped(monkeypatch, caplog) -> None:
    tree = PlainTextTree("One. Two. Three.")
    _failing_at(monkeypatch, 4)  # " Two."

    with caplog.at_level(logging.WARNING, logger="interlinea_segmenter.segment"):
        sentences = _texts(iter_sentences(tree))

    assert sentences == ["One.", " Three."]
    assert "Skipping sentence ' Two.'" in caplog.text


def test_unmappable_word_is_logged_and_skipped(monkeypatch, caplog) -> None:
    (sentence,) = iter_sentences(PlainTextTree("alpha beta gamma"))
    _failing_at(monkeypatch, 6)  # "beta"

    with caplog.at_level(logging.WARNING, logger="interlinea_segmenter.segment"):
        words = _texts(iter_words(sentence))

    assert words == ["alpha", "gamma"]
    assert "Skipping word 'beta'" in caplog.text
