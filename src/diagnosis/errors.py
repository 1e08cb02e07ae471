"""Domain-specific exceptions for image analysis.

These exceptions are safe to import from API layers without pulling in the Gemini SDK.
"""

from __future__ import annotations


class AnalysisError(Exception):
    status_code: int = 500
    code: str = "analysis_error"
    default_detail: str = "Failed to analyze image"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class ValidationError(AnalysisError):
    status_code = 400
    code = "validation_error"
    default_detail = "Missing required fields: base64Image, mimeType, or language"


class UpstreamUnavailableError(AnalysisError):
    status_code = 503
    code = "upstream_unavailable"
    default_detail = "The analysis service could not be reached. Please try again."


class UpstreamFormatError(AnalysisError):
    status_code = 502
    code = "upstream_format"
    default_detail = "The analysis service returned an unreadable answer. Please try again."

    def __init__(self, detail: str | None = None, *, raw_text: str = "") -> None:
        super().__init__(detail)
        self.raw_text = raw_text
