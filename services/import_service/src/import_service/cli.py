from __future__ import annotations

import logging
import uuid
from pathlib import Path

import typer
from sqlalchemy import select

from interlinea_core.db.models import Book
from interlinea_core.db.session import SessionLocal, init_db
from import_service.settings import settings
from import_service.store import create_book_from_epub, create_book_from_text, delete_book

app = typer.Typer(help="Import service (plain text and EPUB books into the library).")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()


def _check_size(path: Path) -> None:
    if not path.is_file():
        raise typer.BadParameter(f"Not a file: {path}")
    if path.stat().st_size > settings.max_bytes:
        raise typer.BadParameter(f"{path} is larger than {settings.max_bytes} bytes")


@app.command("import")
def import_file(
    path: Path,
    *,
    title: str | None = typer.Option(None, help="Book title (plain text only; defaults to the file name)."),
    language: str | None = typer.Option(None, help="Source language of the book."),
) -> None:
    """Import a .txt or .epub file, choosing the importer by extension."""
    suffix = path.suffix.lower()
    if suffix == ".epub":
        import_epub(path, language=language)
    elif suffix in {".txt", ".text", ""}:
        import_text(path, title=title, language=language)
    else:
        raise typer.BadParameter(f"Unsupported file format: {path.suffix}")


@app.command("import-text")
def import_text(
    path: Path,
    *,
    title: str | None = typer.Option(None, help="Book title (defaults to the file name)."),
    language: str | None = typer.Option(None, help="Source language of the book."),
) -> None:
    """Import a plain-text file as a single-chapter book, one paragraph per line."""
    _check_size(path)
    text = path.read_text(encoding="utf-8", errors="replace")
    with SessionLocal() as session:
        book = create_book_from_text(
            session,
            title=title or path.stem,
            text=text,
            language=language or settings.default_language,
            source_path=str(path),
        )
        session.commit()
        typer.echo(f"[import] book_id={book.book_id} title={book.title!r} paragraphs={book.paragraph_count}")


@app.command("import-epub")
def import_epub(
    path: Path,
    *,
    language: str | None = typer.Option(None, help="Source language (defaults to the EPUB metadata)."),
) -> None:
    """Import an EPUB, one chapter per table-of-contents entry."""
    _check_size(path)
    with SessionLocal() as session:
        book = create_book_from_epub(session, path, language=language or settings.default_language)
        session.commit()
        typer.echo(
            f"[import] book_id={book.book_id} title={book.title!r} "
            f"chapters={book.chapter_count} paragraphs={book.paragraph_count}"
        )


@app.command("list")
def list_books() -> None:
    """List imported books."""
    with SessionLocal() as session:
        books = session.scalars(select(Book).order_by(Book.created_at)).all()
        if not books:
            typer.echo("[list] library is empty")
            return
        for b in books:
            typer.echo(
                f"{b.book_id}  {b.title!r} lang={b.language or '-'} "
                f"chapters={b.chapter_count} paragraphs={b.paragraph_count}"
            )


@app.command("delete")
def delete(book_id: str) -> None:
    """Delete a book and its stored translations."""
    with SessionLocal() as session:
        if not delete_book(session, uuid.UUID(book_id)):
            raise typer.BadParameter(f"Book not found: {book_id}")
        session.commit()
    typer.echo(f"[delete] book_id={book_id}")


if __name__ == "__main__":
    app()
