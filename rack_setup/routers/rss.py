"""Rack setup configuration endpoints used by the operator console."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from rack_setup.dependencies import get_rack_setup
from rack_setup.exceptions import ValidationError
from rack_setup.models.rss_config import (
    CertificateUploadResult,
    CurrentRssUserConfig,
    PreflightResponse,
    PutRecoveryPasswordHashRequest,
    PutRssUserConfigInsensitive,
)

router = APIRouter(prefix="/rack-setup", tags=["rack-setup"])


async def _read_upload(request: Request, what: str) -> bytes:
    body = await request.body()
    if not body:
        raise ValidationError(f"{what} upload is empty")
    return body


@router.get("/config", response_model=CurrentRssUserConfig)
async def get_rss_config(rack_setup=Depends(get_rack_setup)) -> CurrentRssUserConfig:
    return rack_setup.current_config()


@router.put("/config", status_code=204)
async def put_rss_config(
    body: PutRssUserConfigInsensitive,
    rack_setup=Depends(get_rack_setup),
) -> Response:
    rack_setup.update_config(body)
    return Response(status_code=204)


@router.post("/config/cert", response_model=CertificateUploadResult)
async def post_rss_config_cert(
    request: Request,
    rack_setup=Depends(get_rack_setup),
) -> CertificateUploadResult:
    cert = await _read_upload(request, "certificate")
    return CertificateUploadResult(status=rack_setup.upload_cert(cert))


@router.post("/config/key", response_model=CertificateUploadResult)
async def post_rss_config_key(
    request: Request,
    rack_setup=Depends(get_rack_setup),
) -> CertificateUploadResult:
    key = await _read_upload(request, "key")
    return CertificateUploadResult(status=rack_setup.upload_key(key))


@router.put("/config/recovery-user-password-hash", status_code=204)
async def put_rss_config_recovery_user_password_hash(
    body: PutRecoveryPasswordHashRequest,
    rack_setup=Depends(get_rack_setup),
) -> Response:
    rack_setup.set_recovery_user_password_hash(body.hash)
    return Response(status_code=204)


@router.post("/preflight", response_model=PreflightResponse)
async def post_rss_preflight(rack_setup=Depends(get_rack_setup)) -> PreflightResponse:
    """Assemble the initialization request without sending it anywhere."""
    request = rack_setup.start_rss_request()
    return PreflightResponse(
        ready=True,
        rack_subnet=request.rack_subnet,
        bootstrap_addrs=list(request.bootstrap_discovery.addrs),
        num_external_certificates=len(request.external_certificates),
        external_dns_zone_name=request.external_dns_zone_name,
        recovery_silo_name=request.recovery_silo.silo_name,
    )
