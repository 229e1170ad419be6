"""Operator-facing rack setup configuration models."""

from __future__ import annotations

import re
from enum import Enum
from ipaddress import IPv6Address

from pydantic import BaseModel, Field, field_validator

from rack_setup.models.inventory import BootstrapSledDescription
from rack_setup.models.network import IpRange, RackNetworkConfig

# argon2id PHC string, e.g. $argon2id$v=19$m=98304,t=13,p=1$c2FsdA$aGFzaA
_PHC_ARGON2ID_RE = re.compile(
    r"^\$argon2id\$v=\d+\$m=\d+,t=\d+,p=\d+\$[A-Za-z0-9+/]+={0,2}\$[A-Za-z0-9+/]+={0,2}$"
)


class PutRssUserConfigInsensitive(BaseModel):
    """Full replacement of the user-editable rack setup fields."""

    bootstrap_sleds: set[int] = Field(default_factory=set)
    ntp_servers: list[str] = Field(default_factory=list)
    dns_servers: list[str] = Field(default_factory=list)
    internal_services_ip_pool_ranges: list[IpRange] = Field(default_factory=list)
    external_dns_zone_name: str = ""
    rack_network_config: RackNetworkConfig


class CurrentRssUserConfigSensitive(BaseModel):
    num_external_certificates: int
    recovery_silo_password_set: bool


class CurrentRssUserConfigInsensitive(BaseModel):
    bootstrap_sleds: list[BootstrapSledDescription]
    ntp_servers: list[str]
    dns_servers: list[str]
    internal_services_ip_pool_ranges: list[IpRange]
    external_dns_zone_name: str
    rack_network_config: RackNetworkConfig | None = None


class CurrentRssUserConfig(BaseModel):
    sensitive: CurrentRssUserConfigSensitive
    insensitive: CurrentRssUserConfigInsensitive


class CertificateUploadResponse(str, Enum):
    WAITING_ON_CERT = "waiting_on_cert"
    WAITING_ON_KEY = "waiting_on_key"
    CERT_KEY_ACCEPTED = "cert_key_accepted"


class CertificateUploadResult(BaseModel):
    status: CertificateUploadResponse


class PutRecoveryPasswordHashRequest(BaseModel):
    hash: str

    @field_validator("hash")
    @classmethod
    def _check_phc_format(cls, v: str) -> str:
        if not _PHC_ARGON2ID_RE.match(v):
            raise ValueError("hash must be an argon2id PHC string")
        return v


class PreflightResponse(BaseModel):
    """Display-safe summary of a successfully assembled initialization request."""

    ready: bool
    rack_subnet: IPv6Address
    bootstrap_addrs: list[IPv6Address]
    num_external_certificates: int
    external_dns_zone_name: str
    recovery_silo_name: str
