"""Health endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from rack_setup.dependencies import get_rack_setup
from rack_setup.models.health import HealthResponse
from rack_setup.models.inventory import SpType

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, rack_setup=Depends(get_rack_setup)) -> HealthResponse:
    from rack_setup.main import get_uptime

    inventory_sleds = sum(1 for sp in rack_setup.inventory.sps if sp.id.type == SpType.SLED)
    peers = len(rack_setup.bootstrap_peers)

    # Nothing to configure until discovery has reported at least one sled.
    status = "ok" if inventory_sleds else "degraded"

    return HealthResponse(
        status=status,
        version=request.app.state.version,
        uptime=get_uptime(),
        inventory_sleds=inventory_sleds,
        bootstrap_peers=peers,
    )
