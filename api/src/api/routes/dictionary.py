"""Dictionary (word lookup) endpoints."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from api.deps import WordTranslator
from interlinea_contracts.models import DictionaryRequest, WordLookup
from interlinea_contracts.validate import ValidationError
from interlinea_segmenter import InvalidSpanError, PlainTextTree, span_for_text_offsets
from translation_pipeline.dictionary import build_dictionary_request, check_lookup_request, lookup_word
from translation_pipeline.llm.client import TranslationError

router = APIRouter()


class SelectionRequest(BaseModel):
    """A click or selection inside a paragraph, as character offsets."""

    text: str
    start: int = Field(..., ge=0)
    end: int | None = Field(None, ge=0)


@router.post("/request", response_model=DictionaryRequest, response_model_exclude_none=True, response_model_by_alias=True)
def build_request(body: SelectionRequest) -> DictionaryRequest:
    """Describe the selected word by its paragraph, sentence and position."""
    tree = PlainTextTree(body.text)
    try:
        target = span_for_text_offsets(tree, body.start, body.start if body.end is None else body.end)
    except InvalidSpanError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    request = build_dictionary_request(tree, target)
    if request is None:
        raise HTTPException(status_code=404, detail="No sentence at the selection")
    return request


@router.post("/lookup", response_model=WordLookup, response_model_by_alias=True)
async def lookup(body: DictionaryRequest, translator: WordTranslator, use_cache: bool = True) -> WordLookup:
    """Translate one word in the context of its sentence; cached lookups are served without an LLM call."""
    try:
        check_lookup_request(body)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    try:
        return await lookup_word(translator, body, use_cache=use_cache)
    except (TranslationError, ValidationError) as exc:
        raise HTTPException(status_code=502, detail=f"Translator returned an unusable answer: {exc}") from exc
