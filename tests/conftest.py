from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from interlinea_core.db.session import init_db
from translation_pipeline.llm.client import LLMResponse


def paragraph_answer(paragraph: str, *, full_translation: str = "translated") -> dict[str, Any]:
    """A schema-valid paragraph translation with one word per whitespace token."""
    words = [
        {
            "original": token,
            "isPunctuation": False,
            "translations": [token.upper()],
            "note": "",
            "grammar": {"partOfSpeech": "noun", "originalInitialForm": token, "targetInitialForm": token.upper()},
        }
        for token in paragraph.split()
    ]
    return {
        "sentences": [{"words": words, "fullTranslation": full_translation}],
        "sourceLanguage": "eng",
        "targetLanguage": "deu",
    }


def word_answer(word: str, *, translation: str = "Wort") -> dict[str, Any]:
    return {
        "original": word,
        "translations": [translation],
        "note": "",
        "grammar": {"partOfSpeech": "noun", "originalInitialForm": word, "targetInitialForm": translation},
        "sentenceTranslation": "a sentence",
    }


class FakeLLMClient:
    """
    Stands in for a provider client. `answer` maps the decoded user content
    to the JSON object to return; raising from it simulates a failed call.
    """

    def __init__(self, answer, *, model: str = "fake-model", delay: float = 0.0) -> None:
        self.answer = answer
        self.model = model
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    def prepare_schema(self, schema: dict[str, Any]) -> dict[str, Any]:
        return schema

    async def complete_json(self, *, system_prompt, user_content, schema, schema_name) -> LLMResponse:
        self.calls.append({"system_prompt": system_prompt, "user_content": user_content, "schema_name": schema_name})
        if self.delay:
            await asyncio.sleep(self.delay)
        obj = self.answer(json.loads(user_content))
        return LLMResponse(raw_text=json.dumps(obj), json=obj, model_name=self.model)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def paragraph_client() -> FakeLLMClient:
    return FakeLLMClient(lambda req: paragraph_answer(req["paragraph"]))


@pytest.fixture
def word_client() -> FakeLLMClient:
    return FakeLLMClient(lambda req: word_answer(req["word"]["value"]))
