"""Application configuration."""

import os

from pydantic import AnyHttpUrl, BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    wordle_service_url: str
    wordle_reply_token: str
    program_id: str = "game-session"
    game_timeout_seconds: float = 600.0
    reply_wait_seconds: float = 5.0
    mailbox_size: int = 100
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


class GameSessionInit(BaseModel):
    """Start-up payload naming the Wordle service."""

    wordle_address: AnyHttpUrl


def load_init_payload(settings: Settings) -> GameSessionInit:
    """Validate the start-up payload; raises ValidationError when invalid."""
    return GameSessionInit(wordle_address=settings.wordle_service_url)
