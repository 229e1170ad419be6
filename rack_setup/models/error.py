"""Error response model."""

from __future__ import annotations

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body returned for every handled rack setup error."""

    error: str
    message: str
    details: dict | None = None
