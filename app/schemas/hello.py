"""Pydantic response model for the root greeting."""

from pydantic import BaseModel, ConfigDict


class HelloResponse(BaseModel):
    """Response model for the / endpoint."""

    model_config = ConfigDict(frozen=True)

    message: str
