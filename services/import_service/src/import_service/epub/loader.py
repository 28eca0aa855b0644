"""
Read an EPUB into chapters of paragraphs.

Chapters follow the table of contents: every TOC entry pointing into a spine
document starts a chapter that runs to the next entry of the same document
(or its end). Spine documents with no TOC entry become a single chapter named
after their <title>.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import ebooklib
from ebooklib import epub

from import_service.parse.html_to_paragraphs import ParsedParagraph, document_title, parse_html_to_paragraphs

logger = logging.getLogger(__name__)


@dataclass
class EpubChapter:
    title: str
    paragraphs: list[ParsedParagraph] = field(default_factory=list)


@dataclass
class EpubBook:
    title: str
    language: str | None
    chapters: list[EpubChapter]


def flatten_toc(toc_items) -> list[tuple[str, str]]:
    """Flatten the nested TOC into (label, href) pairs in reading order."""
    result: list[tuple[str, str]] = []
    for item in toc_items:
        if isinstance(item, tuple):
            section, children = item
            if getattr(section, "href", None):
                result.append((section.title or "", section.href))
            result.extend(flatten_toc(children))
        elif getattr(item, "href", None):
            result.append((item.title or "", item.href))
    return result


def _strip_prefix(href: str) -> str:
    return href.split("#", 1)[0].replace("OEBPS/", "")


def _anchor(href: str) -> str:
    return href.split("#", 1)[1] if "#" in href else ""


def _first_metadata(book: epub.EpubBook, name: str) -> str | None:
    values = book.get_metadata("DC", name)
    if values and values[0] and values[0][0]:
        return str(values[0][0])
    return None


def load_epub(path: Path) -> EpubBook:
    book = epub.read_epub(str(path))
    toc = flatten_toc(book.toc)

    chapters: list[EpubChapter] = []
    for idref, _linear in book.spine:
        item = book.get_item_with_id(idref)
        if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
            continue
        doc_href = _strip_prefix(item.get_name())
        html = item.get_content().decode("utf-8", errors="replace")
        entries = [(label, href) for label, href in toc if _strip_prefix(href) == doc_href]

        if not entries:
            chapters.append(EpubChapter(title=document_title(html), paragraphs=parse_html_to_paragraphs(html)))
            continue

        for i, (label, href) in enumerate(entries):
            end_anchor = _anchor(entries[i + 1][1]) if i + 1 < len(entries) else None
            paragraphs = parse_html_to_paragraphs(html, _anchor(href), end_anchor)
            chapters.append(EpubChapter(title=label, paragraphs=paragraphs))
        logger.debug("%s: %d toc entries", doc_href, len(entries))

    title_parts = [p for p in (_first_metadata(book, "creator"), _first_metadata(book, "title")) if p]
    return EpubBook(
        title=" - ".join(title_parts) or path.stem,
        language=_first_metadata(book, "language"),
        chapters=chapters,
    )
