"""FastAPI dependencies for database access and translators."""

from collections.abc import AsyncGenerator, Generator
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from api.config import settings
from interlinea_contracts.models import ParagraphTranslation, WordLookup
from translation_pipeline.cache import CacheStore, MemoryCacheStore, create_cache_store
from translation_pipeline.models import UnknownModelError
from translation_pipeline.settings import settings as pipeline_settings
from translation_pipeline.translator import (
    PARAGRAPH_TASK,
    WORD_LOOKUP_TASK,
    CachingTranslator,
    MissingConfigurationError,
    TranslationTask,
    get_translator,
)

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_translation_cache() -> MemoryCacheStore:
    """
    In-process cache for the app, backed by the configured persistent store.

    Holds at most `translation_cache_size` recent entries; older ones are read
    back from the persistent store on demand.
    """
    return MemoryCacheStore(
        backing=create_cache_store(
            pipeline_settings.cache_backend,
            cache_dir=pipeline_settings.cache_dir,
            session_factory=SessionLocal,
        ),
        max_entries=settings.translation_cache_size,
    )


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for request handling."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker[Session]:
    """Session factory for work that commits outside the request session."""
    return SessionLocal


def get_translation_cache(request: Request) -> CacheStore:
    return request.app.state.translation_cache


def _build_translator(
    task: TranslationTask, store: CacheStore, target_language: str | None, model: int | None
) -> CachingTranslator:
    try:
        return get_translator(task, store=store, target_language=target_language, model_id=model)
    except (MissingConfigurationError, UnknownModelError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


async def _close(translator: CachingTranslator) -> None:
    aclose = getattr(translator.client, "aclose", None)
    if aclose is not None:
        await aclose()


async def get_word_translator(
    store: Annotated[CacheStore, Depends(get_translation_cache)],
    target_language: str | None = None,
    model: int | None = None,
) -> AsyncGenerator[CachingTranslator[WordLookup], None]:
    """Word-lookup translator for the requested (or configured) language and model."""
    translator = _build_translator(WORD_LOOKUP_TASK, store, target_language, model)
    try:
        yield translator
    finally:
        await _close(translator)


async def get_paragraph_translator(
    store: Annotated[CacheStore, Depends(get_translation_cache)],
    target_language: str | None = None,
    model: int | None = None,
) -> AsyncGenerator[CachingTranslator[ParagraphTranslation], None]:
    """Paragraph translator for the requested (or configured) language and model."""
    translator = _build_translator(PARAGRAPH_TASK, store, target_language, model)
    try:
        yield translator
    finally:
        await _close(translator)


DbSession = Annotated[Session, Depends(get_db)]
SessionFactory = Annotated[sessionmaker[Session], Depends(get_session_factory)]
WordTranslator = Annotated[CachingTranslator[WordLookup], Depends(get_word_translator)]
ParagraphTranslator = Annotated[CachingTranslator[ParagraphTranslation], Depends(get_paragraph_translator)]
