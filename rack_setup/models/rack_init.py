"""Request types understood by the rack provisioning service.

These mirror the provisioning service's wire representation and are kept
separate from the operator-facing models so each side can evolve on its own.
"""

from __future__ import annotations

from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class PortSpeed(str, Enum):
    SPEED_0G = "speed0_g"
    SPEED_1G = "speed1_g"
    SPEED_10G = "speed10_g"
    SPEED_25G = "speed25_g"
    SPEED_40G = "speed40_g"
    SPEED_50G = "speed50_g"
    SPEED_100G = "speed100_g"
    SPEED_200G = "speed200_g"
    SPEED_400G = "speed400_g"


class PortFec(str, Enum):
    FIRECODE = "firecode"
    NONE = "none"
    RS = "rs"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Ipv4Range(_Frozen):
    first: IPv4Address
    last: IPv4Address


class Ipv6Range(_Frozen):
    first: IPv6Address
    last: IPv6Address


IpRange = Union[Ipv4Range, Ipv6Range]


class RackNetworkConfig(_Frozen):
    gateway_ip: IPv4Address
    infra_ip_first: IPv4Address
    infra_ip_last: IPv4Address
    uplink_port: str
    uplink_port_speed: PortSpeed
    uplink_port_fec: PortFec
    uplink_ip: IPv4Address
    uplink_vid: int | None = None


class BootstrapAddressDiscovery(_Frozen):
    """Use exactly the listed bootstrap addresses; no further discovery."""

    type: Literal["only_these"] = "only_these"
    addrs: tuple[IPv6Address, ...]


class Certificate(_Frozen):
    cert: bytes
    key: bytes


class RecoverySiloConfig(_Frozen):
    silo_name: str
    user_name: str
    user_password_hash: str


class RackInitializeRequest(_Frozen):
    rack_subnet: IPv6Address
    bootstrap_discovery: BootstrapAddressDiscovery
    rack_secret_threshold: int
    ntp_servers: tuple[str, ...]
    dns_servers: tuple[str, ...]
    internal_services_ip_pool_ranges: tuple[IpRange, ...]
    external_dns_zone_name: str
    external_certificates: tuple[Certificate, ...]
    recovery_silo: RecoverySiloConfig
    rack_network_config: RackNetworkConfig | None = None
