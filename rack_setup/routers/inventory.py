"""Endpoints through which discovery pushes the current rack view."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from rack_setup.dependencies import get_rack_setup
from rack_setup.exceptions import ValidationError
from rack_setup.models.inventory import PutBootstrapPeersRequest, RackInventory

router = APIRouter(tags=["inventory"])


@router.put("/inventory", status_code=204)
async def put_inventory(
    body: RackInventory,
    rack_setup=Depends(get_rack_setup),
) -> Response:
    rack_setup.set_inventory(body)
    return Response(status_code=204)


@router.put("/bootstrap-peers", status_code=204)
async def put_bootstrap_peers(
    body: PutBootstrapPeersRequest,
    rack_setup=Depends(get_rack_setup),
) -> Response:
    peers = {}
    for peer in body.peers:
        if peer.baseboard in peers:
            raise ValidationError(
                f"Duplicate bootstrap peer for baseboard {peer.baseboard}",
                details={"baseboard": str(peer.baseboard)},
            )
        peers[peer.baseboard] = peer.ip
    rack_setup.bootstrap_peers.replace(peers)
    return Response(status_code=204)
