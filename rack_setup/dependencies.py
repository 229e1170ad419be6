"""FastAPI dependency injection via Depends()."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from rack_setup.services.session import RackSetupService


def get_rack_setup(request: Request) -> RackSetupService:
    return request.app.state.rack_setup
