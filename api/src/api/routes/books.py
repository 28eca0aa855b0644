"""Book endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from sqlalchemy import func, select

from api.deps import DbSession
from interlinea_core.db.enums import BookSourceType
from interlinea_core.db.models import Book, Chapter, Paragraph

router = APIRouter()


class BookListItem(BaseModel):
    """Book summary for list views."""

    book_id: UUID
    title: str
    language: str | None
    source_type: BookSourceType
    chapter_count: int
    paragraph_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ChapterInfo(BaseModel):
    """Chapter with the number of paragraphs it holds."""

    chapter_id: UUID
    order_index: int
    title: str | None
    paragraph_count: int


class BookDetailResponse(BookListItem):
    """Book with its chapters."""

    chapters: list[ChapterInfo]


class ParagraphListItem(BaseModel):
    """Paragraph of a chapter."""

    para_id: UUID
    order_index: int
    original_text: str

    model_config = {"from_attributes": True}


@router.get("", response_model=list[BookListItem])
def list_books(db: DbSession) -> list[BookListItem]:
    """List imported books, oldest first."""
    books = db.scalars(select(Book).order_by(Book.created_at)).all()
    return [BookListItem.model_validate(b) for b in books]


@router.get("/{book_id}", response_model=BookDetailResponse)
def get_book(db: DbSession, book_id: UUID) -> BookDetailResponse:
    """Get a book with its chapters and paragraph counts."""
    book = db.get(Book, book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")

    rows = db.execute(
        select(Chapter, func.count(Paragraph.para_id))
        .outerjoin(Paragraph, Paragraph.chapter_id == Chapter.chapter_id)
        .where(Chapter.book_id == book_id)
        .group_by(Chapter.chapter_id)
        .order_by(Chapter.order_index)
    ).all()

    return BookDetailResponse(
        book_id=book.book_id,
        title=book.title,
        language=book.language,
        source_type=book.source_type,
        chapter_count=book.chapter_count,
        paragraph_count=book.paragraph_count,
        created_at=book.created_at,
        chapters=[
            ChapterInfo(
                chapter_id=chapter.chapter_id,
                order_index=chapter.order_index,
                title=chapter.title,
                paragraph_count=count,
            )
            for chapter, count in rows
        ],
    )


@router.get("/{book_id}/chapters/{order_index}", response_model=list[ParagraphListItem])
def list_chapter_paragraphs(db: DbSession, book_id: UUID, order_index: int) -> list[ParagraphListItem]:
    """Paragraphs of one chapter, in reading order."""
    chapter = db.scalar(select(Chapter).where(Chapter.book_id == book_id).where(Chapter.order_index == order_index))
    if not chapter:
        raise HTTPException(status_code=404, detail="Chapter not found")
    return [ParagraphListItem.model_validate(p) for p in chapter.paragraphs]
