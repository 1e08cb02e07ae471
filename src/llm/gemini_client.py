"""Google Gemini client wrapper for image diagnosis."""

from __future__ import annotations

import asyncio
import base64
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config.settings import get_settings
from diagnosis.errors import UpstreamUnavailableError
from diagnosis.schemas import GroundingSource, WebSource
from llm.base import BaseVisionClient, VisionReply

LOGGER = logging.getLogger(__name__)


class GeminiVisionClient(BaseVisionClient):
    """Single-shot ``generate_content`` call with Google Search grounding."""

    def __init__(self, client: genai.Client | None = None) -> None:
        settings = get_settings()
        if client is None:
            if not settings.gemini_api_key:
                raise ValueError("GEMINI_API_KEY must be configured for the Gemini client.")
            client = genai.Client(
                api_key=settings.gemini_api_key,
                http_options=types.HttpOptions(timeout=int(settings.analysis_timeout_seconds * 1000)),
            )
        self._client = client
        self._model = settings.analysis_model

    async def describe_image(
        self,
        *,
        image_b64: str,
        mime_type: str,
        instruction: str,
    ) -> VisionReply:
        image_part = types.Part.from_bytes(data=base64.b64decode(image_b64), mime_type=mime_type)
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=[image_part, instruction],
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError, asyncio.TimeoutError) as exc:
            LOGGER.exception("Gemini request failed: %s", exc)
            raise UpstreamUnavailableError() from exc

        return VisionReply(text=response.text or "", sources=grounding_sources(response))


def grounding_sources(response: types.GenerateContentResponse) -> list[GroundingSource]:
    """Extract web citations of the first candidate, in the order returned."""

    if not response.candidates:
        return []
    metadata = response.candidates[0].grounding_metadata
    if metadata is None or not metadata.grounding_chunks:
        return []

    sources: list[GroundingSource] = []
    for chunk in metadata.grounding_chunks:
        web = chunk.web
        if web is not None and web.uri:
            sources.append(GroundingSource(web=WebSource(uri=web.uri, title=web.title or "")))
        else:
            sources.append(GroundingSource())
    return sources
