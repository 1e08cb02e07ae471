"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from diagnosis.analyzer import ImageAnalyzer
    from live.session import LiveConnector


@lru_cache(maxsize=1)
def _analyzer_factory() -> ImageAnalyzer:
    # Lazy import to avoid importing the Gemini SDK at module import time.
    from diagnosis.analyzer import ImageAnalyzer
    from llm.factory import build_vision_client

    return ImageAnalyzer(build_vision_client())


def get_analyzer() -> ImageAnalyzer:
    return _analyzer_factory()


@lru_cache(maxsize=1)
def _live_connector_factory() -> LiveConnector:
    from llm.factory import build_live_connector

    return build_live_connector()


def get_live_connector() -> LiveConnector:
    return _live_connector_factory()
