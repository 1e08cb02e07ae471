"""HTTP client for the ``/api/analyze-image`` proxy."""

from __future__ import annotations

import logging

import httpx

from diagnosis.schemas import AnalysisRequest, AnalysisResponse

LOGGER = logging.getLogger(__name__)


class AnalysisRequestFailed(Exception):
    def __init__(self, message: str, *, code: str = "unknown", status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class AnalysisClient:
    """Thin wrapper posting an image payload to the analysis proxy."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def analyze(self, base64_image: str, mime_type: str, language: str) -> AnalysisResponse:
        payload = AnalysisRequest(base64_image=base64_image, mime_type=mime_type, language=language)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self._base_url}/api/analyze-image",
                    json=payload.model_dump(by_alias=True),
                )
        except httpx.HTTPError as exc:
            LOGGER.error("Failed to reach analysis server: %s", exc)
            raise AnalysisRequestFailed(
                "Failed to connect to the analysis server. Please ensure the backend is running.",
                code="upstream_unavailable",
            ) from exc

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise AnalysisRequestFailed(
                body.get("error") or f"Server error: {response.status_code}",
                code=body.get("code") or "unknown",
                status_code=response.status_code,
            )

        try:
            return AnalysisResponse.model_validate(response.json())
        except ValueError as exc:
            LOGGER.error("Unexpected analysis response: %s", response.text[:500])
            raise AnalysisRequestFailed(
                "Unexpected response from the analysis server.", code="upstream_format"
            ) from exc
