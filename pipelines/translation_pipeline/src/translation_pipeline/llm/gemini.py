from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from google import genai
from google.genai import types

from translation_pipeline.llm.client import LLMResponse, TranslationError, extract_json_object


@dataclass
class GeminiClient:
    """Gemini JSON-mode generation through the async google-genai client."""

    api_key: str
    model: str = "gemini-2.5-flash"
    temperature: float | None = None
    _client: genai.Client | None = field(default=None, init=False, repr=False)

    def _get_client(self) -> genai.Client:
        # The client owns a connection pool; build it once per instance.
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def prepare_schema(self, schema: dict[str, Any]) -> dict[str, Any]:
        return schema

    async def complete_json(
        self,
        *,
        system_prompt: str,
        user_content: str,
        schema: dict[str, Any],
        schema_name: str,
    ) -> LLMResponse:
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            response_mime_type="application/json",
            response_json_schema=schema,
            temperature=self.temperature,
        )
        response = await self._get_client().aio.models.generate_content(
            model=self.model,
            contents=user_content,
            config=config,
        )
        text = response.text or ""
        if not text.strip():
            raise TranslationError(f"Gemini returned empty content for model {self.model} ({schema_name})")

        usage = response.usage_metadata
        return LLMResponse(
            raw_text=text,
            json=extract_json_object(text),
            model_name=self.model,
            prompt_tokens=usage.prompt_token_count if usage else None,
            completion_tokens=usage.candidates_token_count if usage else None,
        )
