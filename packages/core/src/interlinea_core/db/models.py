from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from interlinea_core.db.base import Base
from interlinea_core.db.enums import BookSourceType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Book(Base):
    __tablename__ = "book"

    book_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    title: Mapped[str] = mapped_column(String(1024), nullable=False)
    language: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_type: Mapped[BookSourceType] = mapped_column(
        Enum(BookSourceType, native_enum=False), nullable=False, default=BookSourceType.plain_text
    )
    source_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    chapter_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    paragraph_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    chapters: Mapped[list["Chapter"]] = relationship(
        back_populates="book", order_by="Chapter.order_index", cascade="all, delete-orphan"
    )


class Chapter(Base):
    __tablename__ = "chapter"
    __table_args__ = (UniqueConstraint("book_id", "order_index", name="uq_chapter_book_order"),)

    chapter_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    book_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("book.book_id", ondelete="CASCADE"))
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    book: Mapped[Book] = relationship(back_populates="chapters")
    paragraphs: Mapped[list["Paragraph"]] = relationship(
        back_populates="chapter", order_by="Paragraph.order_index", cascade="all, delete-orphan"
    )


class Paragraph(Base):
    __tablename__ = "paragraph"
    __table_args__ = (
        UniqueConstraint("chapter_id", "order_index", name="uq_paragraph_chapter_order"),
        Index("ix_paragraph_book", "book_id"),
    )

    para_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    book_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("book.book_id", ondelete="CASCADE"))
    chapter_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("chapter.chapter_id", ondelete="CASCADE"))
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    # Sanitized markup (em/i/b/br only) when the source was HTML.
    original_html: Mapped[str | None] = mapped_column(Text, nullable=True)

    chapter: Mapped[Chapter] = relationship(back_populates="paragraphs")


class ParagraphTranslationRecord(Base):
    __tablename__ = "paragraph_translation"
    __table_args__ = (UniqueConstraint("para_id", "target_language", name="uq_paragraph_translation_lang"),)

    translation_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    para_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("paragraph.para_id", ondelete="CASCADE"))
    target_language: Mapped[str] = mapped_column(String(64), nullable=False)
    model_name: Mapped[str] = mapped_column(String(128), nullable=False)
    request_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    translation_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class QueryCacheEntry(Base):
    __tablename__ = "query_cache"

    hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
