from __future__ import annotations

import enum


class BookSourceType(str, enum.Enum):
    plain_text = "plain_text"
    epub = "epub"


class TranslationProvider(str, enum.Enum):
    google = "google"
    openai = "openai"
