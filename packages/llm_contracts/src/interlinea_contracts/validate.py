from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files
from typing import Any

import jsonschema

from interlinea_contracts import schemas as contract_schemas

PARAGRAPH_TRANSLATION_SCHEMA = "paragraph_translation.json"
WORD_LOOKUP_SCHEMA = "word_lookup.json"


class ValidationError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@lru_cache(maxsize=None)
def _load_schema_text(name: str) -> str:
    return (files(contract_schemas) / name).read_text(encoding="utf-8")


def load_schema(name: str) -> dict[str, Any]:
    # Fresh copy per call; callers may rewrite it for a provider.
    return json.loads(_load_schema_text(name))


def validate_json(instance: dict[str, Any], schema: dict[str, Any]) -> None:
    try:
        jsonschema.validate(instance=instance, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ValidationError(str(exc)) from exc


def assert_word_position_in_range(position: int, word_count: int) -> None:
    if position < 0 or position >= word_count:
        raise ValidationError(f"word position {position} out of range for sentence with {word_count} words")
