"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field

from auth_service import __version__


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    version: str = Field(default=__version__, description="Service version")
    environment: str = Field(description="Current app environment (dev, test or prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Whether a SELECT 1 against the auth database succeeded",
    )
