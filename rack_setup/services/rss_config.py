"""Piecemeal rack setup configuration and its conversion to an init request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from ipaddress import IPv6Address

from rack_setup.exceptions import (
    AddressResolutionError,
    CannotRemoveSelfError,
    CertificateValidationError,
    MissingPrerequisiteError,
    SelfMissingFromInventoryError,
    UnknownSledError,
)
from rack_setup.models import rack_init as wire
from rack_setup.models.inventory import (
    Baseboard,
    BootstrapSledDescription,
    RackInventory,
    SpType,
)
from rack_setup.models.network import (
    IpRange,
    Ipv4Range,
    PortFec,
    PortSpeed,
    RackNetworkConfig,
)
from rack_setup.models.rss_config import (
    CertificateUploadResponse,
    CurrentRssUserConfig,
    CurrentRssUserConfigInsensitive,
    CurrentRssUserConfigSensitive,
    PutRssUserConfigInsensitive,
)
from rack_setup.services.bootstrap_peers import BootstrapPeers
from rack_setup.services.certificates import CertificateError, CertificateValidator

logger = logging.getLogger(__name__)

# Single-rack deployments always use the same rack subnet.
RACK_SUBNET = IPv6Address("fd00:1122:3344:0100::")

RECOVERY_SILO_NAME = "recovery"
RECOVERY_SILO_USERNAME = "recovery"

RACK_SECRET_THRESHOLD = 1

PORT_SPEEDS: dict[PortSpeed, wire.PortSpeed] = {
    PortSpeed.SPEED_0G: wire.PortSpeed.SPEED_0G,
    PortSpeed.SPEED_1G: wire.PortSpeed.SPEED_1G,
    PortSpeed.SPEED_10G: wire.PortSpeed.SPEED_10G,
    PortSpeed.SPEED_25G: wire.PortSpeed.SPEED_25G,
    PortSpeed.SPEED_40G: wire.PortSpeed.SPEED_40G,
    PortSpeed.SPEED_50G: wire.PortSpeed.SPEED_50G,
    PortSpeed.SPEED_100G: wire.PortSpeed.SPEED_100G,
    PortSpeed.SPEED_200G: wire.PortSpeed.SPEED_200G,
    PortSpeed.SPEED_400G: wire.PortSpeed.SPEED_400G,
}

PORT_FECS: dict[PortFec, wire.PortFec] = {
    PortFec.FIRECODE: wire.PortFec.FIRECODE,
    PortFec.NONE: wire.PortFec.NONE,
    PortFec.RS: wire.PortFec.RS,
}


class PartialCertificateState(Enum):
    EMPTY = "empty"
    HAVE_CERT = "have_cert"
    HAVE_KEY = "have_key"
    HAVE_BOTH = "have_both"


@dataclass
class PartialCertificate:
    """One half (or both halves) of a certificate upload awaiting promotion."""

    cert: bytes | None = None
    key: bytes | None = None

    @property
    def state(self) -> PartialCertificateState:
        if self.cert is not None and self.key is not None:
            return PartialCertificateState.HAVE_BOTH
        if self.cert is not None:
            return PartialCertificateState.HAVE_CERT
        if self.key is not None:
            return PartialCertificateState.HAVE_KEY
        return PartialCertificateState.EMPTY


def _sled_order(sled: BootstrapSledDescription) -> tuple[int, str]:
    return (sled.id.slot, str(sled.baseboard))


@dataclass
class CurrentRssConfig:
    """Rack initialization settings accumulated from the operator piecemeal.

    Mirrors ``RackInitializeRequest`` but every field may still be missing.
    Not thread-safe; callers serialize access (see ``RackSetupService``).
    """

    inventory: set[BootstrapSledDescription] = field(default_factory=set)

    bootstrap_sleds: set[BootstrapSledDescription] = field(default_factory=set)
    ntp_servers: list[str] = field(default_factory=list)
    dns_servers: list[str] = field(default_factory=list)
    internal_services_ip_pool_ranges: list[IpRange] = field(default_factory=list)
    external_dns_zone_name: str = ""
    external_certificates: list[wire.Certificate] = field(default_factory=list)
    recovery_silo_password_hash: str | None = None
    rack_network_config: RackNetworkConfig | None = None

    # Certificates arrive as two uploads (cert and key, in either order);
    # the pair is validated and promoted once both halves are here.
    partial_external_certificate: PartialCertificate = field(default_factory=PartialCertificate)

    def populate_available_bootstrap_sleds_from_inventory(
        self,
        inventory: RackInventory,
        bootstrap_peers: BootstrapPeers,
    ) -> None:
        """Replace ``inventory`` with the sleds currently known to the rack."""
        bootstrap_sleds = bootstrap_peers.sleds()

        sleds: dict[Baseboard, BootstrapSledDescription] = {}
        for sp in inventory.sps:
            if sp.id.type != SpType.SLED or sp.state is None:
                continue
            baseboard = Baseboard.new_gimlet(
                sp.state.serial_number,
                sp.state.model,
                sp.state.revision,
            )
            sleds[baseboard] = BootstrapSledDescription(
                id=sp.id,
                baseboard=baseboard,
                bootstrap_ip=bootstrap_sleds.get(baseboard),
            )

        self.inventory = set(sleds.values())
        logger.debug("Inventory refreshed: %d sled(s)", len(self.inventory))

    def update(
        self,
        value: PutRssUserConfigInsensitive,
        our_baseboard: Baseboard | None,
    ) -> None:
        """Replace all user-editable fields, or nothing if validation fails."""
        # A real sled running this service must be in the inventory and must
        # stay in the selection: we cannot exclude ourselves from the rack.
        inventory = sorted(self.inventory, key=_sled_order)
        our_sled = None
        if our_baseboard is not None and our_baseboard.is_gimlet:
            our_sled = next((sled for sled in inventory if sled.baseboard == our_baseboard), None)
            if our_sled is None:
                raise SelfMissingFromInventoryError(str(our_baseboard))
            if our_sled.id.slot not in value.bootstrap_sleds:
                raise CannotRemoveSelfError(our_sled.id.slot, str(our_baseboard))

        bootstrap_sleds: set[BootstrapSledDescription] = set()
        for slot in sorted(value.bootstrap_sleds):
            # If another baseboard reports our slot, our own entry wins.
            if our_sled is not None and slot == our_sled.id.slot:
                sled = our_sled
            else:
                sled = next((s for s in inventory if s.id.slot == slot), None)
            if sled is None:
                raise UnknownSledError(slot)
            bootstrap_sleds.add(sled)

        self.bootstrap_sleds = bootstrap_sleds
        self.ntp_servers = list(value.ntp_servers)
        self.dns_servers = list(value.dns_servers)
        self.internal_services_ip_pool_ranges = list(value.internal_services_ip_pool_ranges)
        self.external_dns_zone_name = value.external_dns_zone_name
        self.rack_network_config = value.rack_network_config

        logger.info(
            "Rack setup config updated: %d bootstrap sled(s) selected",
            len(bootstrap_sleds),
        )

    def set_recovery_user_password_hash(self, password_hash: str) -> None:
        self.recovery_silo_password_hash = password_hash
        logger.info("Recovery user password hash set")

    def push_cert(self, cert: bytes) -> CertificateUploadResponse:
        self.partial_external_certificate.cert = cert
        return self._maybe_promote_external_certificate()

    def push_key(self, key: bytes) -> CertificateUploadResponse:
        self.partial_external_certificate.key = key
        return self._maybe_promote_external_certificate()

    def _maybe_promote_external_certificate(self) -> CertificateUploadResponse:
        partial = self.partial_external_certificate
        state = partial.state

        # Still waiting on one half; not an error.
        if state is PartialCertificateState.HAVE_KEY:
            return CertificateUploadResponse.WAITING_ON_CERT
        if state is PartialCertificateState.HAVE_CERT:
            return CertificateUploadResponse.WAITING_ON_KEY
        if state is PartialCertificateState.EMPTY:
            # Only push_cert/push_key call us, and each stores a half first.
            raise AssertionError("certificate promotion attempted with no partial certificate")

        validator = CertificateValidator()
        # No NTP yet, so expiration can't be trusted here; it is checked
        # again once the control plane is up.
        validator.disable_expiration_validation()

        try:
            validator.validate(partial.cert, partial.key)
        except CertificateError as exc:
            logger.warning("Rejected uploaded certificate/key pair: %s", exc)
            raise CertificateValidationError(str(exc)) from exc

        self.external_certificates.append(wire.Certificate(cert=partial.cert, key=partial.key))
        self.partial_external_certificate = PartialCertificate()
        logger.info(
            "Certificate/key pair accepted (%d total)",
            len(self.external_certificates),
        )
        return CertificateUploadResponse.CERT_KEY_ACCEPTED

    def start_rss_request(self, bootstrap_peers: BootstrapPeers) -> wire.RackInitializeRequest:
        """Assemble the rack initialization request, or raise if anything is missing."""
        if not self.bootstrap_sleds:
            raise MissingPrerequisiteError(
                "bootstrap_sleds", "bootstrap_sleds is empty (have you uploaded a config?)"
            )
        if not self.ntp_servers:
            raise MissingPrerequisiteError("ntp_servers", "at least one NTP server is required")
        if not self.dns_servers:
            raise MissingPrerequisiteError("dns_servers", "at least one DNS server is required")
        if not self.internal_services_ip_pool_ranges:
            raise MissingPrerequisiteError(
                "internal_services_ip_pool_ranges",
                "at least one internal services IP pool range is required",
            )
        if not self.external_dns_zone_name:
            raise MissingPrerequisiteError(
                "external_dns_zone_name", "external dns zone name is required"
            )
        if not self.external_certificates:
            raise MissingPrerequisiteError(
                "external_certificates", "at least one certificate/key pair is required"
            )
        if self.recovery_silo_password_hash is None:
            raise MissingPrerequisiteError(
                "recovery_silo_password_hash", "recovery password not yet set"
            )
        if self.rack_network_config is None:
            raise MissingPrerequisiteError(
                "rack_network_config",
                "rack network config not set (have you uploaded a config?)",
            )
        rack_network_config = _to_wire_rack_network_config(self.rack_network_config)

        # Addresses may have changed since the sleds were selected.
        known_bootstrap_sleds = bootstrap_peers.sleds()
        bootstrap_ips: list[IPv6Address] = []
        for sled in sorted(self.bootstrap_sleds, key=_sled_order):
            ip = known_bootstrap_sleds.get(sled.baseboard)
            if ip is None:
                raise AddressResolutionError(sled.id.slot, str(sled.baseboard))
            bootstrap_ips.append(ip)

        return wire.RackInitializeRequest(
            rack_subnet=RACK_SUBNET,
            bootstrap_discovery=wire.BootstrapAddressDiscovery(addrs=tuple(bootstrap_ips)),
            rack_secret_threshold=RACK_SECRET_THRESHOLD,
            ntp_servers=tuple(self.ntp_servers),
            dns_servers=tuple(self.dns_servers),
            internal_services_ip_pool_ranges=tuple(
                _to_wire_ip_range(r) for r in self.internal_services_ip_pool_ranges
            ),
            external_dns_zone_name=self.external_dns_zone_name,
            external_certificates=tuple(self.external_certificates),
            recovery_silo=wire.RecoverySiloConfig(
                silo_name=RECOVERY_SILO_NAME,
                user_name=RECOVERY_SILO_USERNAME,
                user_password_hash=self.recovery_silo_password_hash,
            ),
            rack_network_config=rack_network_config,
        )

    def to_user_config(self) -> CurrentRssUserConfig:
        """Display-safe view of the draft; secrets are reduced to counts and flags."""
        # Until the operator picks sleds, show every sled we know about.
        bootstrap_sleds = self.bootstrap_sleds or self.inventory

        return CurrentRssUserConfig(
            sensitive=CurrentRssUserConfigSensitive(
                num_external_certificates=len(self.external_certificates),
                recovery_silo_password_set=self.recovery_silo_password_hash is not None,
            ),
            insensitive=CurrentRssUserConfigInsensitive(
                bootstrap_sleds=sorted(bootstrap_sleds, key=_sled_order),
                ntp_servers=list(self.ntp_servers),
                dns_servers=list(self.dns_servers),
                internal_services_ip_pool_ranges=list(self.internal_services_ip_pool_ranges),
                external_dns_zone_name=self.external_dns_zone_name,
                rack_network_config=self.rack_network_config,
            ),
        )


def _to_wire_ip_range(ip_range: IpRange) -> wire.IpRange:
    if isinstance(ip_range, Ipv4Range):
        return wire.Ipv4Range(first=ip_range.first, last=ip_range.last)
    return wire.Ipv6Range(first=ip_range.first, last=ip_range.last)


def _to_wire_rack_network_config(config: RackNetworkConfig) -> wire.RackNetworkConfig:
    # TODO: client-side checks that the uplink and infra addresses share a subnet with gateway_ip.
    return wire.RackNetworkConfig(
        gateway_ip=config.gateway_ip,
        infra_ip_first=config.infra_ip_first,
        infra_ip_last=config.infra_ip_last,
        uplink_port=config.uplink_port,
        uplink_port_speed=PORT_SPEEDS[config.uplink_port_speed],
        uplink_port_fec=PORT_FECS[config.uplink_port_fec],
        uplink_ip=config.uplink_ip,
        uplink_vid=config.uplink_vid,
    )
