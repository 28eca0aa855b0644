"""Paragraph endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from sqlalchemy import select

from api.deps import DbSession, ParagraphTranslator, SessionFactory
from interlinea_contracts.align import align_translation
from interlinea_contracts.models import ParagraphTranslation
from interlinea_contracts.render import render_full_translation
from interlinea_contracts.validate import ValidationError
from interlinea_core.db.models import Paragraph, ParagraphTranslationRecord
from interlinea_segmenter import PlainTextTree, SoupTextTree, TextTree, iter_sentences, iter_words
from translation_pipeline.llm.client import TranslationError
from translation_pipeline.run import ParagraphNotFoundError, translate_paragraph

router = APIRouter()


class WordInfo(BaseModel):
    """Word of a sentence, by position."""

    position: int
    text: str


class SentenceInfo(BaseModel):
    """Sentence with its words."""

    index: int
    text: str
    words: list[WordInfo]


class ChunkInfo(BaseModel):
    """Piece of the original text, tagged with the translated word it belongs to."""

    text: str
    offset: int
    sentence_index: int | None
    word_index: int | None


class ParagraphResponse(BaseModel):
    """Paragraph text, segmentation and stored translation."""

    paragraph_id: UUID
    order_index: int
    text: str
    html: str | None
    sentences: list[SentenceInfo]
    target_language: str | None = None
    model_name: str | None = None
    translation: dict[str, Any] | None = None
    full_translation: str | None = None
    chunks: list[ChunkInfo] | None = None


def paragraph_tree(paragraph: Paragraph) -> TextTree:
    if paragraph.original_html:
        return SoupTextTree.from_html(paragraph.original_html)
    return PlainTextTree(paragraph.original_text)


@router.get("/{paragraph_id}", response_model=ParagraphResponse)
def get_paragraph(db: DbSession, paragraph_id: UUID, target_language: str | None = None) -> ParagraphResponse:
    """Get a paragraph split into sentences and words, with its translation if one is stored."""
    paragraph = db.get(Paragraph, paragraph_id)
    if not paragraph:
        raise HTTPException(status_code=404, detail="Paragraph not found")

    sentences = [
        SentenceInfo(
            index=i,
            text=str(sentence).strip(),
            words=[WordInfo(position=p, text=str(w)) for p, w in enumerate(iter_words(sentence))],
        )
        for i, sentence in enumerate(iter_sentences(paragraph_tree(paragraph)))
    ]
    response = ParagraphResponse(
        paragraph_id=paragraph.para_id,
        order_index=paragraph.order_index,
        text=paragraph.original_text,
        html=paragraph.original_html,
        sentences=sentences,
    )
    if not target_language:
        return response

    record = db.scalar(
        select(ParagraphTranslationRecord)
        .where(ParagraphTranslationRecord.para_id == paragraph_id)
        .where(ParagraphTranslationRecord.target_language == target_language)
    )
    response.target_language = target_language
    if record is None:
        return response

    translation = ParagraphTranslation.model_validate(record.translation_json)
    response.model_name = record.model_name
    response.translation = translation.to_wire()
    response.full_translation = render_full_translation(translation)
    response.chunks = [
        ChunkInfo(text=c.text, offset=c.offset, sentence_index=c.sentence_index, word_index=c.word_index)
        for c in align_translation(paragraph.original_text, translation)
    ]
    return response


@router.post("/{paragraph_id}/translate", response_model=ParagraphResponse)
async def translate(
    db: DbSession,
    session_factory: SessionFactory,
    translator: ParagraphTranslator,
    paragraph_id: UUID,
    use_cache: bool = True,
) -> ParagraphResponse:
    """
    Translate a paragraph and store the result.

    With use_cache=false the LLM is asked again and the stored translation
    is replaced.
    """
    try:
        await translate_paragraph(paragraph_id, translator, use_cache=use_cache, session_factory=session_factory)
    except ParagraphNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Paragraph not found") from exc
    except (TranslationError, ValidationError) as exc:
        raise HTTPException(status_code=502, detail=f"Translator returned an unusable answer: {exc}") from exc
    return get_paragraph(db, paragraph_id, target_language=translator.target_language)
