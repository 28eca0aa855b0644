import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from api.deps import get_db, get_paragraph_translator, get_session_factory, get_word_translator
from api.main import app
from import_service.store import create_book_from_text
from interlinea_core.db.models import Paragraph, ParagraphTranslationRecord
from translation_pipeline.cache import MemoryCacheStore
from translation_pipeline.settings import settings as pipeline_settings
from translation_pipeline.translator import PARAGRAPH_TASK, WORD_LOOKUP_TASK, CachingTranslator

from conftest import paragraph_answer

TEXT = "Hello world. How are you?"


@pytest.fixture
def client(session_factory):
    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.state.translation_cache = MemoryCacheStore()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def book(session_factory):
    with session_factory() as session:
        book = create_book_from_text(session, title="Greetings", text=f"{TEXT}\nSecond paragraph.")
        session.commit()
        para_ids = session.scalars(select(Paragraph.para_id).order_by(Paragraph.order_index)).all()
        return book.book_id, para_ids


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_books(client, book) -> None:
    book_id, _ = book
    listed = client.get("/api/books").json()
    assert [b["title"] for b in listed] == ["Greetings"]
    assert listed[0]["source_type"] == "plain_text"

    detail = client.get(f"/api/books/{book_id}").json()
    assert detail["paragraph_count"] == 2
    assert detail["chapters"] == [
        {"chapter_id": detail["chapters"][0]["chapter_id"], "order_index": 0, "title": None, "paragraph_count": 2}
    ]

    paragraphs = client.get(f"/api/books/{book_id}/chapters/0").json()
    assert [p["original_text"] for p in paragraphs] == [TEXT, "Second paragraph."]

    assert client.get("/api/books/00000000-0000-0000-0000-000000000000").status_code == 404


def test_paragraph_segmentation(client, book) -> None:
    _, para_ids = book
    data = client.get(f"/api/paragraphs/{para_ids[0]}").json()
    assert [s["text"] for s in data["sentences"]] == ["Hello world.", "How are you?"]
    assert [w["text"] for w in data["sentences"][1]["words"]] == ["How", "are", "you"]
    assert data["translation"] is None


def test_paragraph_with_stored_translation(client, book, session_factory) -> None:
    _, para_ids = book
    with session_factory() as session:
        session.add(
            ParagraphTranslationRecord(
                para_id=para_ids[1],
                target_language="German",
                model_name="fake-model",
                request_hash="0" * 64,
                translation_json=paragraph_answer("Second paragraph.", full_translation="Zweiter Absatz."),
            )
        )
        session.commit()

    data = client.get(f"/api/paragraphs/{para_ids[1]}", params={"target_language": "German"}).json()
    assert data["full_translation"] == "Zweiter Absatz."
    assert data["translation"]["targetLanguage"] == "deu"
    assert [c["text"] for c in data["chunks"] if c["word_index"] is not None] == ["Second", "paragraph."]

    missing = client.get(f"/api/paragraphs/{para_ids[1]}", params={"target_language": "French"}).json()
    assert missing["target_language"] == "French"
    assert missing["translation"] is None


def test_dictionary_request_from_offsets(client) -> None:
    resp = client.post("/api/dictionary/request", json={"text": TEXT, "start": 18})
    assert resp.status_code == 200
    assert resp.json() == {"paragraph": TEXT, "sentence": "How are you?", "word": {"position": 1, "value": "are"}}

    assert client.post("/api/dictionary/request", json={"text": TEXT, "start": 99}).status_code == 422


def test_lookup_uses_translator_and_cache(client, word_client) -> None:
    store = MemoryCacheStore()

    def override_translator():
        return CachingTranslator(client=word_client, store=store, task=WORD_LOOKUP_TASK, target_language="German")

    app.dependency_overrides[get_word_translator] = override_translator
    body = {"paragraph": TEXT, "sentence": "How are you?", "word": {"position": 1, "value": "are"}}

    first = client.post("/api/dictionary/lookup", json=body)
    assert first.status_code == 200
    assert first.json()["sentenceTranslation"] == "a sentence"
    assert first.json()["original"] == "are"
    second = client.post("/api/dictionary/lookup", json=body)
    assert second.json() == first.json()
    assert len(word_client.calls) == 1

    bad = {**body, "word": {"position": 7, "value": "are"}}
    assert client.post("/api/dictionary/lookup", json=bad).status_code == 422
    assert len(word_client.calls) == 1


def test_lookup_without_configuration_is_a_bad_request(client, monkeypatch) -> None:
    monkeypatch.setattr(pipeline_settings, "target_language", None)
    body = {"paragraph": TEXT, "sentence": "How are you?", "word": {"position": 0, "value": "How"}}
    resp = client.post("/api/dictionary/lookup", json=body)
    assert resp.status_code == 400


def test_translate_paragraph_endpoint_caches_and_overwrites(client, book, session_factory, paragraph_client) -> None:
    _, para_ids = book
    store = MemoryCacheStore()

    def override_translator():
        return CachingTranslator(client=paragraph_client, store=store, task=PARAGRAPH_TASK, target_language="German")

    app.dependency_overrides[get_paragraph_translator] = override_translator
    url = f"/api/paragraphs/{para_ids[1]}/translate"

    first = client.post(url)
    assert first.status_code == 200
    assert first.json()["target_language"] == "German"
    assert first.json()["full_translation"] == "translated"

    paragraph_client.answer = lambda req: paragraph_answer(req["paragraph"], full_translation="retranslated")
    assert client.post(url).json()["full_translation"] == "translated"
    assert len(paragraph_client.calls) == 1

    fresh = client.post(url, params={"use_cache": "false"})
    assert fresh.json()["full_translation"] == "retranslated"
    assert len(paragraph_client.calls) == 2

    stored = client.get(f"/api/paragraphs/{para_ids[1]}", params={"target_language": "German"}).json()
    assert stored["full_translation"] == "retranslated"
    with session_factory() as session:
        count = session.scalar(
            select(func.count())
            .select_from(ParagraphTranslationRecord)
            .where(ParagraphTranslationRecord.para_id == para_ids[1])
        )
    assert count == 1

    assert client.post(f"/api/paragraphs/{uuid.uuid4()}/translate").status_code == 404
