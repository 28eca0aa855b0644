from __future__ import annotations

from dataclasses import dataclass

from interlinea_contracts.models import ParagraphTranslation
from interlinea_contracts.render import decode_original


@dataclass(frozen=True)
class AlignedChunk:
    text: str
    offset: int
    sentence_index: int | None = None
    word_index: int | None = None

    @property
    def is_word(self) -> bool:
        return self.word_index is not None


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + (ca != cb)))
        previous = current
    return previous[-1]


def _matches(word: str, candidate: str) -> bool:
    w, c = word.lower(), candidate.lower()
    if len(w) <= 2:
        return w == c
    return levenshtein(w, c) < 2


def align_translation(original_text: str, translation: ParagraphTranslation) -> list[AlignedChunk]:
    """
    Split `original_text` into chunks, tagging each chunk that corresponds
    to a translated (non-punctuation) word with its sentence and word index.

    Words are searched forward from the end of the previous match, tolerating
    one edit for words longer than two characters. A word that cannot be
    found is left untagged and the search position does not move.
    """
    chunks: list[AlignedChunk] = []
    pos = 0
    for s_idx, sentence in enumerate(translation.sentences):
        for w_idx, word in enumerate(sentence.words):
            if word.is_punctuation:
                continue
            value = decode_original(word)
            if not value:
                continue
            n = len(value)
            found = next(
                (i for i in range(pos, len(original_text) - n + 1) if _matches(value, original_text[i : i + n])),
                None,
            )
            if found is None:
                continue
            if found > pos:
                chunks.append(AlignedChunk(text=original_text[pos:found], offset=pos))
            chunks.append(
                AlignedChunk(text=original_text[found : found + n], offset=found, sentence_index=s_idx, word_index=w_idx)
            )
            pos = found + n
    if pos < len(original_text):
        chunks.append(AlignedChunk(text=original_text[pos:], offset=pos))
    return chunks
