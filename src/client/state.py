"""Explicit application state for the diagnosis client.

All mutations go through named transitions so that the current language,
result and chat flag never change behind the controller's back.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from diagnosis.schemas import LANGUAGE_NAMES, AnalysisResult, GroundingSource


@dataclass
class AppState:
    language: str = "en"
    is_loading: bool = False
    error: str | None = None
    result: AnalysisResult | None = None
    sources: list[GroundingSource] = field(default_factory=list)
    image_name: str | None = None
    chat_open: bool = False

    def set_language(self, language: str) -> None:
        if language not in LANGUAGE_NAMES:
            raise ValueError(f"Unsupported language: {language}")
        self.language = language

    def begin_analysis(self, image_name: str) -> None:
        # A new submission replaces whatever was displayed before.
        self.image_name = image_name
        self.is_loading = True
        self.error = None
        self.result = None
        self.sources = []

    def analysis_succeeded(self, result: AnalysisResult, sources: list[GroundingSource]) -> None:
        self.is_loading = False
        self.error = None
        self.result = result
        self.sources = list(sources)

    def analysis_failed(self, message: str) -> None:
        self.is_loading = False
        self.error = message
        self.result = None
        self.sources = []

    def reset(self) -> None:
        self.is_loading = False
        self.error = None
        self.result = None
        self.sources = []
        self.image_name = None

    def open_chat(self) -> None:
        self.chat_open = True

    def close_chat(self) -> None:
        self.chat_open = False
