import pytest

from interlinea_contracts.models import DictionaryRequest, ParagraphTranslation, WordLookup, WordRef
from interlinea_contracts.validate import (
    PARAGRAPH_TRANSLATION_SCHEMA,
    WORD_LOOKUP_SCHEMA,
    ValidationError,
    assert_word_position_in_range,
    load_schema,
    validate_json,
)
from translation_pipeline.llm.client import extract_json_object
from translation_pipeline.llm.openai_client import to_strict_schema

from conftest import paragraph_answer, word_answer


def test_schemas_load_as_fresh_copies() -> None:
    schema = load_schema(WORD_LOOKUP_SCHEMA)
    schema["required"].append("bogus")
    assert "bogus" not in load_schema(WORD_LOOKUP_SCHEMA)["required"]


def test_valid_answers_pass_validation() -> None:
    validate_json(paragraph_answer("Hello world"), load_schema(PARAGRAPH_TRANSLATION_SCHEMA))
    validate_json(word_answer("Hello"), load_schema(WORD_LOOKUP_SCHEMA))


def test_missing_required_field_is_a_validation_error() -> None:
    answer = paragraph_answer("Hello")
    del answer["sentences"][0]["fullTranslation"]
    with pytest.raises(ValidationError):
        validate_json(answer, load_schema(PARAGRAPH_TRANSLATION_SCHEMA))


def test_wire_names_are_camel_case() -> None:
    parsed = ParagraphTranslation.model_validate(paragraph_answer("Hello"))
    word = parsed.sentences[0].words[0]
    assert word.grammar is not None
    assert word.grammar.original_initial_form == "Hello"
    wire = parsed.to_wire()
    assert wire["sentences"][0]["fullTranslation"] == "translated"
    assert "isStandalonePunctuation" not in wire["sentences"][0]["words"][0]


def test_nulls_from_strict_providers_fall_back_to_defaults() -> None:
    answer = word_answer("Hello")
    answer["note"] = None
    answer["grammar"]["tense"] = None
    lookup = WordLookup.model_validate(answer)
    assert lookup.note == ""
    assert lookup.grammar.tense is None


def test_paragraph_only_request_serializes_without_optional_fields() -> None:
    assert DictionaryRequest(paragraph="Über alles").to_wire() == {"paragraph": "Über alles"}
    with pytest.raises(ValueError):
        WordRef(position=-1, value="x")


def test_word_position_range() -> None:
    assert_word_position_in_range(0, 1)
    with pytest.raises(ValidationError):
        assert_word_position_in_range(3, 3)


def test_strict_schema_makes_optional_fields_nullable_and_required() -> None:
    strict = to_strict_schema(load_schema(WORD_LOOKUP_SCHEMA))
    assert set(strict["required"]) == set(strict["properties"])
    assert strict["additionalProperties"] is False
    assert strict["properties"]["note"]["type"] == ["string", "null"]
    assert strict["properties"]["original"]["type"] == "string"
    grammar = strict["properties"]["grammar"]
    assert grammar["properties"]["tense"]["type"] == ["string", "null"]
    assert "tense" in grammar["required"]

    answer = word_answer("Hello")
    answer["note"] = None
    for field in ("tense", "person", "case", "plurality", "other"):
        answer["grammar"][field] = None
    validate_json(answer, strict)


def test_strict_schema_recurses_into_array_items() -> None:
    strict = to_strict_schema(load_schema(PARAGRAPH_TRANSLATION_SCHEMA))
    word = strict["properties"]["sentences"]["items"]["properties"]["words"]["items"]
    assert word["additionalProperties"] is False
    assert word["properties"]["isOpeningParenthesis"]["type"] == ["boolean", "null"]


def test_extract_json_object() -> None:
    assert extract_json_object('{"a": 1}') == {"a": 1}
    assert extract_json_object('```json\n{"a": "}"}\n```') == {"a": "}"}
    assert extract_json_object('Sure! {"a": 1}') is None
    assert extract_json_object("") is None
    assert extract_json_object("[1, 2]") is None
    assert extract_json_object("no json") is None
