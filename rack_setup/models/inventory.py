"""Rack inventory and sled identity models."""

from __future__ import annotations

from enum import Enum
from ipaddress import IPv6Address
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SpType(str, Enum):
    SLED = "sled"
    SWITCH = "switch"
    POWER = "power"


class SpIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: SpType
    slot: int = Field(ge=0)


class SpState(BaseModel):
    serial_number: str
    model: str
    revision: int = Field(ge=0)


class SpInventoryEntry(BaseModel):
    id: SpIdentifier
    state: SpState | None = None


class RackInventory(BaseModel):
    """Service processors currently known to the rack's management network."""

    sps: list[SpInventoryEntry] = Field(default_factory=list)


class Baseboard(BaseModel):
    """Hardware identity of a sled.

    Only ``gimlet`` baseboards are real rack members; ``pc`` and ``unknown``
    show up when the service runs on development hardware.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["gimlet", "pc", "unknown"]
    identifier: str = ""
    model: str = ""
    revision: int = 0

    @classmethod
    def new_gimlet(cls, identifier: str, model: str, revision: int) -> Baseboard:
        return cls(kind="gimlet", identifier=identifier, model=model, revision=revision)

    @property
    def is_gimlet(self) -> bool:
        return self.kind == "gimlet"

    def __str__(self) -> str:
        if self.kind == "unknown":
            return "unknown"
        return f"{self.kind}:{self.identifier}:{self.model}:{self.revision}"


class BootstrapSledDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: SpIdentifier
    baseboard: Baseboard
    bootstrap_ip: IPv6Address | None = None


class BootstrapPeer(BaseModel):
    baseboard: Baseboard
    ip: IPv6Address


class PutBootstrapPeersRequest(BaseModel):
    peers: list[BootstrapPeer] = Field(default_factory=list)
