from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INTERLINEA_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    cache_dir: Path = Path("data/cache")
    # Where translation results are cached: one JSON file per key, the
    # query_cache table, or process memory only.
    cache_backend: Literal["disk", "sql", "memory"] = "disk"

    gemini_api_key: str | None = None
    openai_api_key: str | None = None

    target_language: str | None = None
    translation_model: int = 0

    n_parallel: int = 4
    llm_timeout_s: float = 120.0
    llm_temperature: float | None = None


settings = Settings()
