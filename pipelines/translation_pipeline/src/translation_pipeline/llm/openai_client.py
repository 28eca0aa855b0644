from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import openai

from translation_pipeline.llm.client import LLMResponse, TranslationError, extract_json_object


def to_strict_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """
    Rewrite a JSON schema for OpenAI strict structured outputs: every object
    lists all of its properties as required and forbids extra ones, so fields
    that were optional become nullable instead.
    """
    out = dict(schema)
    if out.get("type") == "object" and isinstance(out.get("properties"), dict):
        required = set(out.get("required", []))
        properties: dict[str, Any] = {}
        for name, sub in out["properties"].items():
            sub = to_strict_schema(sub)
            if name not in required and isinstance(sub.get("type"), str):
                sub = {**sub, "type": [sub["type"], "null"]}
            properties[name] = sub
        out["properties"] = properties
        out["required"] = list(properties)
        out["additionalProperties"] = False
    if isinstance(out.get("items"), dict):
        out["items"] = to_strict_schema(out["items"])
    return out


@dataclass
class OpenAIClient:
    """OpenAI chat completions with a strict JSON-schema response format."""

    api_key: str
    model: str = "gpt-5-mini"
    timeout_s: float = 120.0
    temperature: float | None = None
    base_url: str | None = None
    _client: openai.AsyncOpenAI | None = field(default=None, init=False, repr=False)

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            timeout = httpx.Timeout(self.timeout_s, connect=min(self.timeout_s, 30.0))
            self._client = openai.AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=timeout)
        return self._client

    async def __aenter__(self) -> "OpenAIClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    def prepare_schema(self, schema: dict[str, Any]) -> dict[str, Any]:
        return to_strict_schema(schema)

    async def complete_json(
        self,
        *,
        system_prompt: str,
        user_content: str,
        schema: dict[str, Any],
        schema_name: str,
    ) -> LLMResponse:
        kwargs: dict[str, Any] = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        resp = await self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": system_prompt
                    + "\n\nReturn ONLY a single JSON object that matches the requested schema. Do not wrap it in markdown.",
                },
                {"role": "user", "content": user_content},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": schema, "strict": True},
            },
            **kwargs,
        )

        choice0 = resp.choices[0] if resp.choices else None
        content = (choice0.message.content if choice0 else None) or ""
        if not content.strip():
            raise TranslationError(f"OpenAI returned empty content for model {self.model}")

        usage = resp.usage
        return LLMResponse(
            raw_text=content,
            json=extract_json_object(content),
            model_name=resp.model or self.model,
            prompt_tokens=usage.prompt_tokens if usage else None,
            completion_tokens=usage.completion_tokens if usage else None,
        )
