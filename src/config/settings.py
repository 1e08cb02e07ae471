"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Literal["local", "dev", "prod"] = Field(default="local")
    log_level: str = Field(default="INFO")

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Gemini connectivity
    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the Gemini API. The server refuses to start without it.",
    )
    analysis_model: str = Field(default="gemini-2.5-flash")
    live_model: str = Field(default="gemini-2.5-flash-native-audio-preview-09-2025")
    analysis_timeout_seconds: float = Field(default=60.0, gt=0)

    # Image analysis
    max_image_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest decoded image accepted by /api/analyze-image.",
    )

    # Live audio
    input_sample_rate: int = Field(default=16000)
    output_sample_rate: int = Field(default=24000)

    # Client
    analysis_server_url: str = Field(
        default="http://localhost:3001",
        description="Base URL the command line client talks to.",
    )

    @field_validator("gemini_api_key")
    @classmethod
    def blank_key_is_missing(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
