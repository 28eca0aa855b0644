"""
Wire models exchanged with the translating LLM.

Field names on the wire are camelCase (`isPunctuation`, `fullTranslation`);
the Python attributes are snake_case. Dump with `to_wire()` to get the
exact JSON shape the prompts and schemas describe.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Strict-schema providers send null for fields they leave out.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class WordRef(WireModel):
    position: int = Field(..., ge=0, description="0-based index of the word within its sentence")
    value: str


class DictionaryRequest(WireModel):
    paragraph: str
    sentence: str | None = None
    word: WordRef | None = None


class Grammar(WireModel):
    original_initial_form: str = ""
    target_initial_form: str = ""
    part_of_speech: str
    tense: str | None = None
    person: str | None = None
    case: str | None = None
    plurality: str | None = None
    other: str | None = None


class WordTranslation(WireModel):
    original: str = Field(..., description="Word as written; punctuation HTML-entity encoded")
    is_punctuation: bool = False
    is_standalone_punctuation: bool | None = None
    is_opening_parenthesis: bool | None = None
    is_closing_parenthesis: bool | None = None
    translations: list[str] = Field(default_factory=list)
    note: str = ""
    grammar: Grammar | None = None


class SentenceTranslation(WireModel):
    words: list[WordTranslation] = Field(default_factory=list)
    full_translation: str = ""


class ParagraphTranslation(WireModel):
    sentences: list[SentenceTranslation] = Field(default_factory=list)
    source_language: str = ""
    target_language: str = ""


class WordLookup(WireModel):
    original: str
    sentence_translation: str
    translations: list[str] = Field(default_factory=list)
    note: str = ""
    grammar: Grammar
