"""Turn the free-text reply of the vision model into an ``AnalysisResult``."""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError as SchemaError

from diagnosis.errors import UpstreamFormatError
from diagnosis.schemas import AnalysisResult

LOGGER = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"\A\s*```[\w.+-]*[ \t]*(?:\r?\n)?")
_TRAILING_FENCE = re.compile(r"(?:\r?\n)?[ \t]*```\s*\Z")


def strip_markdown_fences(text: str) -> str:
    """Remove one leading and one trailing markdown code fence.

    Text without fences is returned unchanged, so stripping is idempotent.
    """

    stripped = _LEADING_FENCE.sub("", text, count=1)
    return _TRAILING_FENCE.sub("", stripped, count=1)


def parse_analysis_reply(text: str | None) -> AnalysisResult:
    raw_text = text or ""
    cleaned = strip_markdown_fences(raw_text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        LOGGER.error("Analysis reply is not valid JSON: %s", raw_text)
        raise UpstreamFormatError(raw_text=raw_text) from exc

    if not isinstance(payload, dict):
        LOGGER.error("Analysis reply is not a JSON object: %s", raw_text)
        raise UpstreamFormatError(raw_text=raw_text)

    try:
        return AnalysisResult.model_validate(payload)
    except SchemaError as exc:
        LOGGER.error("Analysis reply does not match the result schema (%s): %s", exc, raw_text)
        raise UpstreamFormatError(raw_text=raw_text) from exc
