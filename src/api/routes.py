"""FastAPI routes exposing image diagnosis."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_analyzer
from diagnosis.analyzer import ImageAnalyzer
from diagnosis.schemas import AnalysisRequest, AnalysisResponse

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/analyze-image",
    response_model=AnalysisResponse,
    response_model_by_alias=True,
)
async def analyze_image(
    payload: AnalysisRequest,
    analyzer: ImageAnalyzer = Depends(get_analyzer),
) -> AnalysisResponse:
    result, sources = await analyzer.analyze(payload)
    LOGGER.info(
        "Analysis finished: %s healthy=%s sources=%d",
        result.object_type,
        result.is_healthy,
        len(sources),
    )
    return AnalysisResponse(result=result, sources=sources)
