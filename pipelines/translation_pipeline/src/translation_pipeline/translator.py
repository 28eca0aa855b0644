"""
Cached LLM translation of paragraphs and single words.

A `CachingTranslator` is bound to one task (paragraph translation or word
lookup), one target language, one model and one cache store. Each request is
normalized to a content hash; identical requests on the same binding share a
cache entry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from interlinea_contracts.models import DictionaryRequest, ParagraphTranslation, WordLookup
from interlinea_contracts.validate import (
    PARAGRAPH_TRANSLATION_SCHEMA,
    WORD_LOOKUP_SCHEMA,
    load_schema,
    validate_json,
)
from interlinea_core.db.enums import TranslationProvider
from interlinea_core.hashing import canonical_json, sha256_parts

from translation_pipeline.cache import CacheStore
from translation_pipeline.llm.client import LLMClient, TranslationError
from translation_pipeline.models import get_model
from translation_pipeline.prompts import paragraph_prompt, word_prompt

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class MissingConfigurationError(ValueError):
    pass


def request_cache_key(request: DictionaryRequest, *, prompt: str, schema: dict[str, Any], model: str) -> str:
    """
    Content hash of everything that determines an LLM answer.

    The request and schema are serialized as compact JSON with their key
    order kept, then concatenated with the prompt and model name in that
    order. Changing any of the four changes the key.
    """
    return sha256_parts((canonical_json(request.to_wire()), prompt, canonical_json(schema), model))


@dataclass(frozen=True)
class TranslationTask(Generic[T]):
    name: str
    schema_file: str
    result_type: type[T]
    build_prompt: Callable[[str], str]


PARAGRAPH_TASK: TranslationTask[ParagraphTranslation] = TranslationTask(
    name="paragraph_translation",
    schema_file=PARAGRAPH_TRANSLATION_SCHEMA,
    result_type=ParagraphTranslation,
    build_prompt=paragraph_prompt,
)

WORD_LOOKUP_TASK: TranslationTask[WordLookup] = TranslationTask(
    name="word_lookup",
    schema_file=WORD_LOOKUP_SCHEMA,
    result_type=WordLookup,
    build_prompt=word_prompt,
)


class CachingTranslator(Generic[T]):
    def __init__(
        self,
        *,
        client: LLMClient,
        store: CacheStore,
        task: TranslationTask[T],
        target_language: str,
    ) -> None:
        self.client = client
        self.store = store
        self.task = task
        self.target_language = target_language
        self.prompt = task.build_prompt(target_language)
        # The hash covers the schema as sent, so it is prepared once here.
        self.schema = client.prepare_schema(load_schema(task.schema_file))

    @property
    def model(self) -> str:
        return self.client.model

    def cache_key(self, request: DictionaryRequest) -> str:
        return request_cache_key(request, prompt=self.prompt, schema=self.schema, model=self.client.model)

    async def get_cached_translation(self, request: DictionaryRequest) -> T | None:
        value = await self.store.get(self.cache_key(request))
        if value is None:
            return None
        return self.task.result_type.model_validate(value)

    async def get_translation(self, request: DictionaryRequest) -> T:
        """
        Ask the LLM, store the answer under the request's key and return it.

        The cache is not consulted and any existing entry is replaced.
        Concurrent identical calls each reach the LLM; the last put wins.
        """
        key = self.cache_key(request)
        resp = await self.client.complete_json(
            system_prompt=self.prompt,
            user_content=canonical_json(request.to_wire()),
            schema=self.schema,
            schema_name=self.task.name,
        )
        if resp.json is None:
            raise TranslationError(f"{self.task.name}: model {resp.model_name} returned no JSON object")
        validate_json(resp.json, self.schema)
        result = self.task.result_type.model_validate(resp.json)
        await self.store.put(key, result.to_wire())
        logger.debug(
            "%s stored %s (prompt_tokens=%s completion_tokens=%s)",
            self.task.name,
            key[:12],
            resp.prompt_tokens,
            resp.completion_tokens,
        )
        return result

    async def translate(self, request: DictionaryRequest, *, use_cache: bool = True) -> T:
        if use_cache:
            cached = await self.get_cached_translation(request)
            if cached is not None:
                logger.debug("%s cache hit %s", self.task.name, self.cache_key(request)[:12])
                return cached
        return await self.get_translation(request)


def create_llm_client(
    model_id: int,
    *,
    gemini_api_key: str | None,
    openai_api_key: str | None,
    timeout_s: float = 120.0,
    temperature: float | None = None,
) -> LLMClient:
    model = get_model(model_id)
    if model.provider == TranslationProvider.google:
        if not gemini_api_key:
            raise MissingConfigurationError(f"Gemini API key is not set (model {model.name})")
        from translation_pipeline.llm.gemini import GeminiClient

        return GeminiClient(api_key=gemini_api_key, model=model.name, temperature=temperature)

    if not openai_api_key:
        raise MissingConfigurationError(f"OpenAI API key is not set (model {model.name})")
    from translation_pipeline.llm.openai_client import OpenAIClient

    return OpenAIClient(api_key=openai_api_key, model=model.name, timeout_s=timeout_s, temperature=temperature)


def get_translator(
    task: TranslationTask[T],
    *,
    store: CacheStore,
    target_language: str | None = None,
    model_id: int | None = None,
    client: LLMClient | None = None,
) -> CachingTranslator[T]:
    """
    Build a translator from pipeline settings, overridden by the arguments.

    Raises MissingConfigurationError when the target language or the API key
    for the chosen model's provider is missing. No LLM call is made.
    """
    from translation_pipeline.settings import settings

    target_language = target_language or settings.target_language
    if not target_language:
        raise MissingConfigurationError("Target language is not set")
    if client is None:
        client = create_llm_client(
            settings.translation_model if model_id is None else model_id,
            gemini_api_key=settings.gemini_api_key,
            openai_api_key=settings.openai_api_key,
            timeout_s=settings.llm_timeout_s,
            temperature=settings.llm_temperature,
        )
    return CachingTranslator(client=client, store=store, task=task, target_language=target_language)
