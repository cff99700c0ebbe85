"""Application settings loaded from the environment and an optional ``.env`` file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = "dev"

    # Database
    database_url: str = "sqlite:///./staff_tracker.db"
    db_echo: bool = False
    db_auto_create: bool = True

    # Logging
    log_level: str = "INFO"

    # Desktop web view origins, comma separated
    cors_origins: str = ""

    # Live queries
    live_poll_interval_seconds: float = 2.0
    live_ping_seconds: int = 15

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
