"""Factory returning configured model client implementations."""

from __future__ import annotations

from config.settings import get_settings
from llm.base import BaseVisionClient


def build_vision_client() -> BaseVisionClient:
    """Instantiate the Gemini vision connector."""

    # Lazy import to keep the Gemini SDK out of module import time.
    from llm.gemini_client import GeminiVisionClient

    return GeminiVisionClient()


def build_live_connector():
    """Instantiate the Gemini Live session connector."""

    from live.gemini_session import GeminiLiveConnector

    settings = get_settings()
    if not settings.gemini_api_key:
        raise ValueError("GEMINI_API_KEY must be configured for live sessions.")
    return GeminiLiveConnector(api_key=settings.gemini_api_key, model=settings.live_model)
