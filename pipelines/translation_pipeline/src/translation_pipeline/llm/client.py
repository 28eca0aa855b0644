from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Protocol


class TranslationError(RuntimeError):
    pass


@dataclass(frozen=True)
class LLMResponse:
    raw_text: str
    json: dict[str, Any] | None
    model_name: str
    prompt_tokens: int | None = None
    completion_tokens: int | None = None


class LLMClient(Protocol):
    model: str

    def prepare_schema(self, schema: dict[str, Any]) -> dict[str, Any]: ...

    async def complete_json(
        self,
        *,
        system_prompt: str,
        user_content: str,
        schema: dict[str, Any],
        schema_name: str,
    ) -> LLMResponse: ...


_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Parse a JSON-mode answer, allowing a markdown code fence around it."""
    text = text.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        return None
    return obj if isinstance(obj, dict) else None
