"""Shared test fixtures for the rack setup API."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from ipaddress import IPv6Address

import pytest
import pytest_asyncio
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from httpx import ASGITransport, AsyncClient

from rack_setup.config import Settings
from rack_setup.models.inventory import (
    Baseboard,
    RackInventory,
    SpIdentifier,
    SpInventoryEntry,
    SpState,
    SpType,
)
from rack_setup.models.network import Ipv4Range, PortFec, PortSpeed, RackNetworkConfig
from rack_setup.models.rss_config import PutRssUserConfigInsensitive
from rack_setup.services.bootstrap_peers import BootstrapPeers

PASSWORD_HASH = "$argon2id$v=19$m=98304,t=13,p=1$c2FsdHNhbHQ$aGFzaGhhc2hoYXNoaGFzaA"

SLED_A = Baseboard.new_gimlet("BRM42220001", "913-0000019", 6)
SLED_B = Baseboard.new_gimlet("BRM42220002", "913-0000019", 6)
SLED_A_IP = IPv6Address("fdb0:a840:2504:1d1::1")
SLED_B_IP = IPv6Address("fdb0:a840:2504:1d2::1")


def make_key():
    return ec.generate_private_key(ec.SECP256R1())


def make_cert_pem(
    key,
    common_name: str = "recovery.sys.example.com",
    not_before: datetime | None = None,
    not_after: datetime | None = None,
) -> bytes:
    """Self-signed certificate for ``key``, valid for a year by default."""
    now = datetime.now(timezone.utc)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or now - timedelta(days=1))
        .not_valid_after(not_after or now + timedelta(days=365))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(common_name)]), critical=False)
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


def make_key_pem(key) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def cert_pair() -> tuple[bytes, bytes]:
    """A matching (cert PEM, key PEM) pair."""
    key = make_key()
    return make_cert_pem(key), make_key_pem(key)


@pytest.fixture
def other_key_pem() -> bytes:
    return make_key_pem(make_key())


def sled_entry(slot: int, baseboard: Baseboard) -> SpInventoryEntry:
    return SpInventoryEntry(
        id=SpIdentifier(type=SpType.SLED, slot=slot),
        state=SpState(
            serial_number=baseboard.identifier,
            model=baseboard.model,
            revision=baseboard.revision,
        ),
    )


@pytest.fixture
def inventory() -> RackInventory:
    """Two sleds, a switch and a sled whose SP state is not known yet."""
    return RackInventory(
        sps=[
            sled_entry(0, SLED_A),
            sled_entry(1, SLED_B),
            SpInventoryEntry(
                id=SpIdentifier(type=SpType.SWITCH, slot=0),
                state=SpState(serial_number="SW0", model="913-0000006", revision=4),
            ),
            SpInventoryEntry(id=SpIdentifier(type=SpType.SLED, slot=7), state=None),
        ]
    )


@pytest.fixture
def bootstrap_peers() -> BootstrapPeers:
    return BootstrapPeers({SLED_A: SLED_A_IP, SLED_B: SLED_B_IP})


@pytest.fixture
def network_config() -> RackNetworkConfig:
    return RackNetworkConfig(
        gateway_ip="172.20.15.1",
        infra_ip_first="172.20.15.21",
        infra_ip_last="172.20.15.22",
        uplink_port="qsfp0",
        uplink_port_speed=PortSpeed.SPEED_40G,
        uplink_port_fec=PortFec.NONE,
        uplink_ip="172.20.15.21",
        uplink_vid=None,
    )


@pytest.fixture
def user_config(network_config: RackNetworkConfig) -> PutRssUserConfigInsensitive:
    return PutRssUserConfigInsensitive(
        bootstrap_sleds={0, 1},
        ntp_servers=["ntp.example.com"],
        dns_servers=["1.1.1.1"],
        internal_services_ip_pool_ranges=[Ipv4Range(first="172.20.26.1", last="172.20.26.10")],
        external_dns_zone_name="example.com",
        rack_network_config=network_config,
    )


@pytest.fixture
def tmp_settings() -> Settings:
    return Settings(log_level="WARNING")


@pytest_asyncio.fixture
async def app_client(tmp_settings: Settings):
    """AsyncClient backed by the real FastAPI app with test settings and lifespan."""
    from rack_setup.main import create_app

    app = create_app(settings=tmp_settings)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


def inventory_json(inventory: RackInventory) -> dict:
    return inventory.model_dump(mode="json")


def peers_json(peers: dict[Baseboard, IPv6Address]) -> dict:
    return {
        "peers": [
            {"baseboard": baseboard.model_dump(mode="json"), "ip": str(ip)}
            for baseboard, ip in peers.items()
        ]
    }
