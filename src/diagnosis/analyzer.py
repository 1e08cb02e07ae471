"""Stateless proxy between the web client and the vision model."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

from config.settings import get_settings
from diagnosis.errors import ValidationError
from diagnosis.parsing import parse_analysis_reply
from diagnosis.schemas import LANGUAGE_NAMES, AnalysisRequest, AnalysisResult, GroundingSource
from llm.base import BaseVisionClient
from prompts.loader import render_prompt

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatedRequest:
    image_b64: str
    mime_type: str
    language: str


def build_instruction(language: str) -> str:
    return render_prompt("analysis_instruction.txt", language=language)


class ImageAnalyzer:
    """Validate a request, ask the vision model once and parse its answer."""

    def __init__(self, client: BaseVisionClient, *, max_image_bytes: int | None = None) -> None:
        self._client = client
        self._max_image_bytes = max_image_bytes or get_settings().max_image_bytes

    def validate(self, request: AnalysisRequest) -> ValidatedRequest:
        image_b64 = (request.base64_image or "").strip()
        mime_type = (request.mime_type or "").strip().lower()
        language = (request.language or "").strip()

        if not image_b64 or not mime_type or not language:
            raise ValidationError()
        if language not in LANGUAGE_NAMES:
            raise ValidationError(f"Unsupported language: {language}")
        if not mime_type.startswith("image/"):
            raise ValidationError(f"Unsupported MIME type: {mime_type}")

        try:
            image_bytes = base64.b64decode(image_b64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("base64Image is not valid base64 data") from exc
        if len(image_bytes) > self._max_image_bytes:
            raise ValidationError("Image payload too large")

        return ValidatedRequest(image_b64=image_b64, mime_type=mime_type, language=language)

    async def analyze(
        self, request: AnalysisRequest
    ) -> tuple[AnalysisResult, list[GroundingSource]]:
        validated = self.validate(request)
        LOGGER.info(
            "Analyzing %s image (%d base64 chars) in language %s",
            validated.mime_type,
            len(validated.image_b64),
            validated.language,
        )

        reply = await self._client.describe_image(
            image_b64=validated.image_b64,
            mime_type=validated.mime_type,
            instruction=build_instruction(validated.language),
        )
        result = parse_analysis_reply(reply.text)
        return result, reply.sources
