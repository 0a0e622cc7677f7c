"""Pydantic response models for the health check endpoint."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """Response model for the /api/health endpoint."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok", "error"]
    message: str
