from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INTERLINEA_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Language recorded on imported books when none is given on the command line.
    default_language: str | None = None
    max_bytes: int = 200_000_000


settings = Settings()
