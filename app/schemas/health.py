"""Pydantic schemas for health check responses (plain body, not the API envelope)."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service status plus whether a trivial query against DATABASE_URL succeeded."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="APP_ENV the service runs with (dev or prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Result of SELECT 1 on a request-scoped session",
    )
