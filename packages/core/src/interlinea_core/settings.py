from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INTERLINEA_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    database_url: str = "sqlite:///data/interlinea.db"


settings = Settings()
