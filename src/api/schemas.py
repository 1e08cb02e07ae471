"""API-facing Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(description="User-facing error message.")
    code: str = Field(description="Machine readable error kind.")


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "Server is running"
