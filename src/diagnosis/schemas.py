"""Pydantic schemas for image analysis exchange."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

LOGGER = logging.getLogger(__name__)

Language = Literal["en", "hi", "bn", "te", "mr", "gu"]
ObjectType = Literal["leaf", "fruit", "other"]

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "bn": "Bengali",
    "te": "Telugu",
    "mr": "Marathi",
    "gu": "Gujarati",
}


class CamelModel(BaseModel):
    """Base model speaking the camelCase wire format of the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisRequest(CamelModel):
    """Body of ``POST /api/analyze-image``.

    Every field is optional at the schema level so that missing fields are
    reported by the analyzer as a single ``ValidationError``.
    """

    base64_image: str | None = None
    mime_type: str | None = None
    language: str | None = None


class Product(CamelModel):
    name: str
    usage: str


class Cure(CamelModel):
    products: list[Product] = Field(default_factory=list)
    preventative_measures: str


class AnalysisResult(CamelModel):
    """Structured diagnosis returned by the vision model."""

    object_type: ObjectType
    is_healthy: bool
    disease_name: str | None = Field(default=None, description="Scientific name")
    common_name: str | None = Field(default=None, description="Common name in the user's language")
    description: str
    cure: Cure | None = None

    @model_validator(mode="after")
    def drop_cure_without_disease(self) -> AnalysisResult:
        # Healthy subjects and non-mango objects never carry a diagnosis.
        if self.is_healthy or self.object_type == "other":
            if self.cure is not None or self.disease_name or self.common_name:
                LOGGER.warning(
                    "Dropping diagnosis fields for %s subject (healthy=%s)",
                    self.object_type,
                    self.is_healthy,
                )
            self.cure = None
            self.disease_name = None
            self.common_name = None
        elif self.cure is not None and not (self.disease_name or self.common_name):
            # A cure needs an identified disease.
            LOGGER.warning("Dropping cure for unnamed disease on %s subject", self.object_type)
            self.cure = None
        return self


class WebSource(CamelModel):
    uri: str
    title: str = ""


class GroundingSource(CamelModel):
    web: WebSource | None = None


class AnalysisResponse(CamelModel):
    result: AnalysisResult
    sources: list[GroundingSource] = Field(default_factory=list)
