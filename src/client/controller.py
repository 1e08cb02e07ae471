"""Top-level controller driving the application state."""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any

from client.analysis_client import AnalysisClient, AnalysisRequestFailed
from client.state import AppState

LOGGER = logging.getLogger(__name__)

USER_ERROR_MESSAGE = "An error occurred. Please try again."


def guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or "application/octet-stream"


class DiagnosisController:
    def __init__(self, client: AnalysisClient, state: AppState | None = None) -> None:
        self._client = client
        self.state = state or AppState()

    async def analyze_bytes(self, image_bytes: bytes, mime_type: str, *, name: str = "image") -> AppState:
        self.state.begin_analysis(name)
        encoded = base64.b64encode(image_bytes).decode("ascii")
        try:
            response = await self._client.analyze(encoded, mime_type, self.state.language)
        except AnalysisRequestFailed as exc:
            LOGGER.error("Analysis failed (%s): %s", exc.code, exc.message)
            self.state.analysis_failed(USER_ERROR_MESSAGE)
            return self.state

        self.state.analysis_succeeded(response.result, response.sources)
        return self.state

    async def analyze_file(self, path: Path) -> AppState:
        try:
            image_bytes = path.read_bytes()
        except OSError as exc:
            LOGGER.error("Could not read %s: %s", path, exc)
            self.state.begin_analysis(path.name)
            self.state.analysis_failed(USER_ERROR_MESSAGE)
            return self.state
        return await self.analyze_bytes(image_bytes, guess_mime_type(path), name=path.name)

    def open_chat(self) -> dict[str, Any]:
        """Open the voice assistant and return its ``start`` message for ``/api/live``.

        The assistant is seeded with the displayed result, if any.
        """

        self.state.open_chat()
        result = self.state.result
        return {
            "type": "start",
            "language": self.state.language,
            "analysisResult": result.model_dump(by_alias=True) if result is not None else None,
        }

    def close_chat(self) -> None:
        self.state.close_chat()
