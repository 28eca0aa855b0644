"""Persist parsed books with deterministic ids."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from interlinea_core.db.enums import BookSourceType
from interlinea_core.db.models import Book, Chapter, Paragraph, ParagraphTranslationRecord
from interlinea_core.hashing import sha256_parts
from interlinea_core.identity import book_id_for, chapter_id_for, paragraph_id_for

from import_service.epub.loader import load_epub
from import_service.parse.html_to_paragraphs import ParsedParagraph
from import_service.parse.plain_text import split_paragraphs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChapterInput:
    title: str | None
    paragraphs: list[ParsedParagraph]


def _content_hash(chapters: list[ChapterInput]) -> str:
    def parts():
        for chapter in chapters:
            yield f"\x1e{chapter.title or ''}"
            for p in chapter.paragraphs:
                yield f"\x1f{p.text}"

    return sha256_parts(parts())


def create_book(
    session: Session,
    *,
    title: str,
    chapters: list[ChapterInput],
    source_type: BookSourceType,
    language: str | None = None,
    source_path: str | None = None,
) -> Book:
    """
    Add a book with its chapters and paragraphs to the session and flush.

    Importing the same content under the same title again returns the
    existing book instead of creating a duplicate.
    """
    content_hash = _content_hash(chapters)
    book_id = book_id_for(title=title, content_hash=content_hash)
    existing = session.get(Book, book_id)
    if existing is not None:
        logger.info("Book %r already imported as %s", title, book_id)
        return existing

    book = Book(
        book_id=book_id,
        title=title,
        language=language,
        source_type=source_type,
        source_path=source_path,
        content_hash=content_hash,
    )
    session.add(book)

    paragraph_count = 0
    for c_idx, chapter_in in enumerate(chapters):
        chapter_id = chapter_id_for(book_id=book_id, order_index=c_idx)
        chapter = Chapter(chapter_id=chapter_id, book_id=book_id, order_index=c_idx, title=chapter_in.title)
        book.chapters.append(chapter)
        for p_idx, para in enumerate(chapter_in.paragraphs):
            chapter.paragraphs.append(
                Paragraph(
                    para_id=paragraph_id_for(chapter_id=chapter_id, order_index=p_idx),
                    book_id=book_id,
                    order_index=p_idx,
                    original_text=para.text,
                    original_html=para.html if source_type == BookSourceType.epub else None,
                )
            )
            paragraph_count += 1

    book.chapter_count = len(chapters)
    book.paragraph_count = paragraph_count
    session.flush()
    logger.info("Imported %r: chapters=%d paragraphs=%d", title, book.chapter_count, paragraph_count)
    return book


def create_book_from_text(
    session: Session,
    *,
    title: str,
    text: str,
    language: str | None = None,
    source_path: str | None = None,
) -> Book:
    paragraphs = [ParsedParagraph(text=p, html=p) for p in split_paragraphs(text)]
    return create_book(
        session,
        title=title,
        chapters=[ChapterInput(title=None, paragraphs=paragraphs)],
        source_type=BookSourceType.plain_text,
        language=language,
        source_path=source_path,
    )


def create_book_from_epub(session: Session, path: Path, *, language: str | None = None) -> Book:
    loaded = load_epub(path)
    return create_book(
        session,
        title=loaded.title,
        chapters=[ChapterInput(title=c.title, paragraphs=c.paragraphs) for c in loaded.chapters],
        source_type=BookSourceType.epub,
        language=language or loaded.language,
        source_path=str(path),
    )


def delete_book(session: Session, book_id: uuid.UUID) -> bool:
    """Delete a book with its chapters, paragraphs and stored translations."""
    book = session.get(Book, book_id)
    if book is None:
        return False
    para_ids = select(Paragraph.para_id).where(Paragraph.book_id == book_id)
    session.execute(delete(ParagraphTranslationRecord).where(ParagraphTranslationRecord.para_id.in_(para_ids)))
    session.delete(book)
    session.flush()
    return True
