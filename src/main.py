"""Entry point for the mango disease diagnosis service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.live_routes import router as live_router
from api.routes import router as api_router
from api.schemas import ErrorResponse, HealthResponse
from config.settings import get_settings
from diagnosis.errors import AnalysisError, ValidationError

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not get_settings().gemini_api_key:
        LOGGER.error("GEMINI_API_KEY environment variable is not set")
        raise RuntimeError("GEMINI_API_KEY environment variable is not set")
    LOGGER.info("API key configured: yes")
    yield


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Mango Guard",
    description="Mango leaf and fruit disease diagnosis with a live voice assistant.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    body = ErrorResponse(error=exc.detail, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    LOGGER.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    error = ValidationError()
    body = ErrorResponse(error=error.detail, code=error.code)
    return JSONResponse(status_code=error.status_code, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled error while serving %s", request.url.path)
    body = ErrorResponse(error=AnalysisError.default_detail, code=AnalysisError.code)
    return JSONResponse(status_code=AnalysisError.status_code, content=body.model_dump())


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


app.include_router(api_router, prefix="/api")
app.include_router(live_router, prefix="/api")


def run() -> None:
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
