from __future__ import annotations

import asyncio
import json
import logging
import uuid

import typer
from sqlalchemy import select

from interlinea_contracts.render import render_full_translation, render_paragraph
from interlinea_contracts.models import ParagraphTranslation
from interlinea_core.db.models import Chapter, Paragraph, ParagraphTranslationRecord
from interlinea_core.db.session import SessionLocal, init_db
from interlinea_segmenter import InvalidSpanError, PlainTextTree, span_for_text_offsets
from translation_pipeline.cache import CacheStore, MemoryCacheStore, create_cache_store
from translation_pipeline.dictionary import build_dictionary_request, lookup_word
from translation_pipeline.llm.client import LLMClient
from translation_pipeline.models import MODELS, UnknownModelError
from translation_pipeline.run import ParagraphNotFoundError, translate_book, translate_paragraph
from translation_pipeline.settings import settings
from translation_pipeline.translator import (
    PARAGRAPH_TASK,
    WORD_LOOKUP_TASK,
    MissingConfigurationError,
    TranslationTask,
    get_translator,
)

app = typer.Typer(help="Translation pipeline (paragraph translation, word lookup).")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _store() -> CacheStore:
    # Memory layer in front so repeated requests within one command stay in-process.
    return MemoryCacheStore(
        backing=create_cache_store(settings.cache_backend, cache_dir=settings.cache_dir, session_factory=SessionLocal)
    )


def _translator(task: TranslationTask, target_language: str | None, model_id: int | None):
    try:
        return get_translator(task, store=_store(), target_language=target_language, model_id=model_id)
    except (MissingConfigurationError, UnknownModelError) as exc:
        raise typer.BadParameter(
            f"{exc}. Set INTERLINEA_TARGET_LANGUAGE, INTERLINEA_GEMINI_API_KEY or INTERLINEA_OPENAI_API_KEY."
        ) from exc


async def _close(client: LLMClient) -> None:
    aclose = getattr(client, "aclose", None)
    if aclose is not None:
        await aclose()


@app.command("models")
def list_models() -> None:
    """List the translation models that can be selected with --model."""
    for m in MODELS:
        marker = "*" if m.id == settings.translation_model else " "
        typer.echo(f"{marker} {m.id}: {m.name} ({m.provider.value})")


@app.command("translate")
def translate(
    book_id: str,
    *,
    target_language: str | None = typer.Option(None, help="Target language, e.g. 'English'."),
    model: int | None = typer.Option(None, help="Model id (see `models`)."),
    n_parallel: int | None = typer.Option(None, help="Concurrent LLM requests."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Ignore cached translations."),
) -> None:
    """Translate every paragraph of an imported book."""
    init_db()
    translator = _translator(PARAGRAPH_TASK, target_language, model)

    async def _run():
        try:
            return await translate_book(
                uuid.UUID(book_id),
                translator,
                n_parallel=n_parallel or settings.n_parallel,
                use_cache=not no_cache,
            )
        finally:
            await _close(translator.client)

    stats = asyncio.run(_run())
    typer.echo(
        f"[translate] book_id={book_id} total={stats.total} translated={stats.translated} "
        f"cached={stats.cached} skipped={stats.skipped} failed={stats.failed}"
    )
    if stats.failed:
        raise typer.Exit(code=1)


@app.command("translate-paragraph")
def translate_one_paragraph(
    para_id: str,
    *,
    target_language: str | None = typer.Option(None, help="Target language, e.g. 'English'."),
    model: int | None = typer.Option(None, help="Model id (see `models`)."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Ask the LLM again and replace the stored translation."),
) -> None:
    """Translate (or re-translate) a single paragraph and store the result."""
    init_db()
    translator = _translator(PARAGRAPH_TASK, target_language, model)

    async def _run():
        try:
            return await translate_paragraph(uuid.UUID(para_id), translator, use_cache=not no_cache)
        finally:
            await _close(translator.client)

    try:
        result = asyncio.run(_run())
    except ParagraphNotFoundError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"[translate-paragraph] para_id={para_id} target={translator.target_language} model={translator.model}")
    typer.echo(render_full_translation(result))


@app.command("lookup")
def lookup(
    paragraph: str,
    start: int = typer.Argument(..., help="Offset of the selected word in the paragraph."),
    end: int | None = typer.Argument(None, help="End offset of the selection (defaults to start)."),
    *,
    target_language: str | None = typer.Option(None, help="Target language, e.g. 'English'."),
    model: int | None = typer.Option(None, help="Model id (see `models`)."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Ignore cached lookups."),
) -> None:
    """Look up the word at an offset of a paragraph, in the context of its sentence."""
    tree = PlainTextTree(paragraph)
    try:
        target = span_for_text_offsets(tree, start, start if end is None else end)
    except InvalidSpanError as exc:
        raise typer.BadParameter(str(exc)) from exc
    request = build_dictionary_request(tree, target)
    if request is None or request.word is None:
        raise typer.BadParameter(f"No word at offset {start}")
    typer.echo(f"[lookup] sentence={request.sentence!r} word={request.word.value!r}@{request.word.position}")

    translator = _translator(WORD_LOOKUP_TASK, target_language, model)

    async def _run():
        try:
            return await lookup_word(translator, request, use_cache=not no_cache)
        finally:
            await _close(translator.client)

    result = asyncio.run(_run())
    typer.echo(json.dumps(result.to_wire(), ensure_ascii=False, indent=2))


@app.command("show")
def show(
    book_id: str,
    *,
    target_language: str | None = typer.Option(None, help="Target language of the stored translations."),
    limit: int = typer.Option(10, help="Print at most N paragraphs."),
) -> None:
    """Print stored translations of a book next to the original text."""
    target_language = target_language or settings.target_language
    if not target_language:
        raise typer.BadParameter("Missing --target-language (or INTERLINEA_TARGET_LANGUAGE).")
    book_uuid = uuid.UUID(book_id)
    with SessionLocal() as session:
        rows = session.execute(
            select(Paragraph.original_text, ParagraphTranslationRecord.translation_json)
            .join(Chapter, Chapter.chapter_id == Paragraph.chapter_id)
            .join(ParagraphTranslationRecord, ParagraphTranslationRecord.para_id == Paragraph.para_id)
            .where(Paragraph.book_id == book_uuid)
            .where(ParagraphTranslationRecord.target_language == target_language)
            .order_by(Chapter.order_index, Paragraph.order_index)
            .limit(limit)
        ).all()

    if not rows:
        typer.echo(f"[show] no {target_language} translations for book_id={book_id}")
        return
    for original_text, translation_json in rows:
        translation = ParagraphTranslation.model_validate(translation_json)
        typer.echo(render_paragraph(translation))
        typer.echo(f"  = {render_full_translation(translation)}")
        if render_paragraph(translation).strip() != original_text.strip():
            typer.echo(f"  (original: {original_text[:240]!r})")
        typer.echo("")


if __name__ == "__main__":
    app()
