"""
Rebuild readable text from a word-by-word translation.

The translator marks every punctuation token with flags saying how it
attaches to its neighbours; spacing is reconstructed from those flags
alone, never from the characters themselves.
"""

from __future__ import annotations

import html
from typing import Iterable

from interlinea_contracts.models import ParagraphTranslation, WordTranslation

_LINE_BREAKS = {"<br>", "<br/>", "<br />"}


def decode_original(word: WordTranslation) -> str:
    return html.unescape(word.original)


def render_sentence(words: Iterable[WordTranslation]) -> str:
    out: list[str] = []
    glue_next = True  # nothing before the first token
    for word in words:
        token = decode_original(word)
        if word.is_punctuation and token.strip().lower() in _LINE_BREAKS:
            out.append("\n")
            glue_next = True
            continue

        if not word.is_punctuation:
            space_before, glue_after = not glue_next, False
        elif word.is_opening_parenthesis:
            space_before, glue_after = not glue_next, True
        elif word.is_standalone_punctuation and not word.is_closing_parenthesis:
            space_before, glue_after = not glue_next, False
        else:
            # attached punctuation and closing brackets stick to what precedes them
            space_before, glue_after = False, False

        if space_before:
            out.append(" ")
        out.append(token)
        glue_next = glue_after
    return "".join(out)


def render_paragraph(translation: ParagraphTranslation) -> str:
    return " ".join(render_sentence(s.words) for s in translation.sentences)


def render_full_translation(translation: ParagraphTranslation) -> str:
    return " ".join(s.full_translation.strip() for s in translation.sentences if s.full_translation.strip())
