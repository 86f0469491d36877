"""Runtime configuration and logging setup."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENTSTORE_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    app_title: str = "Events API"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"


def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "info") -> None:
    """Install a root handler once per process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
