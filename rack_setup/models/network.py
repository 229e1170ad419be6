"""Operator-supplied address ranges and rack uplink settings."""

from __future__ import annotations

from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Union

from pydantic import BaseModel, Field, model_validator


class Ipv4Range(BaseModel):
    first: IPv4Address
    last: IPv4Address

    @model_validator(mode="after")
    def _check_order(self) -> Ipv4Range:
        if self.first > self.last:
            raise ValueError(f"IP range first address {self.first} is after last address {self.last}")
        return self


class Ipv6Range(BaseModel):
    first: IPv6Address
    last: IPv6Address

    @model_validator(mode="after")
    def _check_order(self) -> Ipv6Range:
        if self.first > self.last:
            raise ValueError(f"IP range first address {self.first} is after last address {self.last}")
        return self


IpRange = Union[Ipv4Range, Ipv6Range]


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


class RackNetworkConfig(BaseModel):
    """Uplink configuration for the rack's switches."""

    gateway_ip: IPv4Address
    infra_ip_first: IPv4Address
    infra_ip_last: IPv4Address
    uplink_port: str = Field(min_length=1)
    uplink_port_speed: PortSpeed
    uplink_port_fec: PortFec
    uplink_ip: IPv4Address
    uplink_vid: int | None = Field(default=None, ge=0, le=4095)

    @model_validator(mode="after")
    def _check_infra_range(self) -> RackNetworkConfig:
        if self.infra_ip_first > self.infra_ip_last:
            raise ValueError(
                f"infra_ip_first {self.infra_ip_first} is after infra_ip_last {self.infra_ip_last}"
            )
        return self
