"""Health response model."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    version: str
    uptime: int
    inventory_sleds: int
    bootstrap_peers: int
