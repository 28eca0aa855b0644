from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from interlinea_contracts.models import DictionaryRequest, ParagraphTranslation
from interlinea_core.db.models import Book, Chapter, Paragraph, ParagraphTranslationRecord
from interlinea_core.db.session import SessionLocal

from translation_pipeline.translator import CachingTranslator

logger = logging.getLogger(__name__)


class ParagraphNotFoundError(LookupError):
    pass


@dataclass
class RunStats:
    total: int = 0
    translated: int = 0
    cached: int = 0
    skipped: int = 0
    failed: int = 0


def save_translation(
    session_factory: sessionmaker[Session],
    *,
    para_id: uuid.UUID,
    target_language: str,
    model_name: str,
    request_hash: str,
    translation: ParagraphTranslation,
) -> None:
    """Insert or replace the stored translation of a paragraph into one language."""
    values = {
        "model_name": model_name,
        "request_hash": request_hash,
        "translation_json": translation.to_wire(),
    }

    def _find(session: Session) -> ParagraphTranslationRecord | None:
        return session.scalar(
            select(ParagraphTranslationRecord)
            .where(ParagraphTranslationRecord.para_id == para_id)
            .where(ParagraphTranslationRecord.target_language == target_language)
        )

    with session_factory() as session:
        record = _find(session)
        if record is None:
            session.add(ParagraphTranslationRecord(para_id=para_id, target_language=target_language, **values))
            try:
                session.commit()
                return
            except IntegrityError:
                # Another writer stored the same paragraph first; overwrite its row.
                session.rollback()
                record = _find(session)
                if record is None:
                    raise
        for name, value in values.items():
            setattr(record, name, value)
        session.commit()


async def translate_paragraph(
    para_id: uuid.UUID,
    translator: CachingTranslator[ParagraphTranslation],
    *,
    use_cache: bool = True,
    session_factory: sessionmaker[Session] = SessionLocal,
) -> ParagraphTranslation:
    """
    Translate one paragraph and store the result, replacing any earlier one.

    With `use_cache` a cached translation is reused; without it the LLM is
    asked again and both the cache entry and the stored record are replaced.
    """
    with session_factory() as session:
        paragraph = session.get(Paragraph, para_id)
        if paragraph is None:
            raise ParagraphNotFoundError(f"Paragraph not found: {para_id}")
        request = DictionaryRequest(paragraph=paragraph.original_text)

    result = await translator.translate(request, use_cache=use_cache)
    await asyncio.to_thread(
        save_translation,
        session_factory,
        para_id=para_id,
        target_language=translator.target_language,
        model_name=translator.model,
        request_hash=translator.cache_key(request),
        translation=result,
    )
    logger.info(
        "para_id=%s target=%s model=%s use_cache=%s",
        para_id,
        translator.target_language,
        translator.model,
        use_cache,
    )
    return result


async def translate_book(
    book_id: uuid.UUID,
    translator: CachingTranslator[ParagraphTranslation],
    *,
    n_parallel: int = 4,
    use_cache: bool = True,
    session_factory: sessionmaker[Session] = SessionLocal,
    progress_every: int = 10,
) -> RunStats:
    """
    Translate every paragraph of a book into the translator's target language.

    Paragraphs that already have a stored translation for that language are
    skipped. At most `n_parallel` LLM requests are in flight. A paragraph that
    fails (in the LLM call or while storing its result) is logged and counted,
    and the run goes on with the others.
    """
    target_language = translator.target_language
    with session_factory() as session:
        book = session.get(Book, book_id)
        if book is None:
            raise RuntimeError(f"Book not found: {book_id}")
        rows = session.execute(
            select(Paragraph.para_id, Paragraph.original_text)
            .join(Chapter, Chapter.chapter_id == Paragraph.chapter_id)
            .where(Paragraph.book_id == book_id)
            .order_by(Chapter.order_index, Paragraph.order_index)
        ).all()
        done = set(
            session.scalars(
                select(ParagraphTranslationRecord.para_id)
                .join(Paragraph, Paragraph.para_id == ParagraphTranslationRecord.para_id)
                .where(Paragraph.book_id == book_id)
                .where(ParagraphTranslationRecord.target_language == target_language)
            ).all()
        )

    stats = RunStats(total=len(rows))
    todo = [(para_id, text) for para_id, text in rows if para_id not in done]
    stats.skipped = stats.total - len(todo)
    logger.info(
        "book_id=%s paragraphs=%d already_translated=%d target=%s model=%s",
        book_id,
        stats.total,
        stats.skipped,
        target_language,
        translator.model,
    )

    semaphore = asyncio.Semaphore(max(1, n_parallel))

    async def one(para_id: uuid.UUID, text: str) -> None:
        request = DictionaryRequest(paragraph=text)
        async with semaphore:
            try:
                result = await translator.get_cached_translation(request) if use_cache else None
                from_cache = result is not None
                if result is None:
                    result = await translator.get_translation(request)
                await asyncio.to_thread(
                    save_translation,
                    session_factory,
                    para_id=para_id,
                    target_language=target_language,
                    model_name=translator.model,
                    request_hash=translator.cache_key(request),
                    translation=result,
                )
            except Exception:
                stats.failed += 1
                logger.exception("Paragraph %s failed", para_id)
                return

        if from_cache:
            stats.cached += 1
        else:
            stats.translated += 1
        finished = stats.cached + stats.translated + stats.failed
        if progress_every > 0 and finished % progress_every == 0:
            logger.info("progress %d/%d", finished, len(todo))

    await asyncio.gather(*(one(para_id, text) for para_id, text in todo))
    logger.info(
        "done translated=%d cached=%d skipped=%d failed=%d",
        stats.translated,
        stats.cached,
        stats.skipped,
        stats.failed,
    )
    return stats
