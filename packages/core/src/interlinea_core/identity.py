from __future__ import annotations

import uuid

NAMESPACE_BOOK = uuid.UUID("3b0f6a52-9d3e-4c1e-a9a4-0f5c2d8e7b61")
NAMESPACE_CHAPTER = uuid.UUID("c7d2e4a1-58b6-4f0e-9b1d-2a6e3f4c5d70")
NAMESPACE_PARAGRAPH = uuid.UUID("8e1a9c3b-2d4f-4a6b-8c0d-1e2f3a4b5c6d")


def stable_uuid(namespace: uuid.UUID, name: str) -> uuid.UUID:
    return uuid.uuid5(namespace, name.strip())


def book_id_for(*, title: str, content_hash: str) -> uuid.UUID:
    return stable_uuid(NAMESPACE_BOOK, f"{title.strip()}:{content_hash}")


def chapter_id_for(*, book_id: uuid.UUID, order_index: int) -> uuid.UUID:
    return stable_uuid(NAMESPACE_CHAPTER, f"{book_id}:{order_index}")


def paragraph_id_for(*, chapter_id: uuid.UUID, order_index: int) -> uuid.UUID:
    return stable_uuid(NAMESPACE_PARAGRAPH, f"{chapter_id}:{order_index}")
