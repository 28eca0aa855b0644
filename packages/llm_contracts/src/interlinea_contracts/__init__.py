from interlinea_contracts.models import (
    DictionaryRequest,
    Grammar,
    ParagraphTranslation,
    SentenceTranslation,
    WordLookup,
    WordRef,
    WordTranslation,
)

__all__ = [
    "DictionaryRequest",
    "Grammar",
    "ParagraphTranslation",
    "SentenceTranslation",
    "WordLookup",
    "WordRef",
    "WordTranslation",
]
