"""Tests for the rack setup configuration endpoints."""

from __future__ import annotations

import pytest
from tests.conftest import (
    PASSWORD_HASH,
    SLED_A,
    SLED_A_IP,
    SLED_B,
    SLED_B_IP,
    inventory_json,
    peers_json,
)


@pytest.fixture
def user_config_json(user_config) -> dict:
    return user_config.model_dump(mode="json")


@pytest.fixture
async def seeded_client(app_client, inventory):
    await app_client.put("/inventory", json=inventory_json(inventory))
    await app_client.put("/bootstrap-peers", json=peers_json({SLED_A: SLED_A_IP, SLED_B: SLED_B_IP}))
    return app_client


async def _upload_pair(client, cert: bytes, key: bytes) -> None:
    resp = await client.post("/rack-setup/config/cert", content=cert)
    assert resp.json() == {"status": "waiting_on_key"}
    resp = await client.post("/rack-setup/config/key", content=key)
    assert resp.json() == {"status": "cert_key_accepted"}


@pytest.mark.asyncio
async def test_get_config_empty(app_client):
    resp = await app_client.get("/rack-setup/config")
    assert resp.status_code == 200
    data = resp.json()
    assert data["sensitive"] == {
        "num_external_certificates": 0,
        "recovery_silo_password_set": False,
    }
    assert data["insensitive"]["bootstrap_sleds"] == []
    assert data["insensitive"]["rack_network_config"] is None


@pytest.mark.asyncio
async def test_put_config(seeded_client, user_config_json):
    resp = await seeded_client.put("/rack-setup/config", json=user_config_json)
    assert resp.status_code == 204

    insensitive = (await seeded_client.get("/rack-setup/config")).json()["insensitive"]
    assert insensitive["ntp_servers"] == ["ntp.example.com"]
    assert insensitive["external_dns_zone_name"] == "example.com"
    assert insensitive["rack_network_config"]["uplink_port_speed"] == "speed40_g"
    assert insensitive["internal_services_ip_pool_ranges"] == [
        {"first": "172.20.26.1", "last": "172.20.26.10"}
    ]


@pytest.mark.asyncio
async def test_put_config_unknown_sled(seeded_client, user_config_json):
    user_config_json["bootstrap_sleds"] = [0, 5]
    resp = await seeded_client.put("/rack-setup/config", json=user_config_json)
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "INVALID_SLED_SELECTION"
    assert data["details"] == {"slot": 5}

    # Nothing from the rejected update was applied.
    insensitive = (await seeded_client.get("/rack-setup/config")).json()["insensitive"]
    assert insensitive["ntp_servers"] == []


@pytest.mark.asyncio
async def test_put_config_rejects_backwards_range(seeded_client, user_config_json):
    user_config_json["internal_services_ip_pool_ranges"] = [
        {"first": "172.20.26.10", "last": "172.20.26.1"}
    ]
    resp = await seeded_client.put("/rack-setup/config", json=user_config_json)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_put_config_rejects_unknown_port_speed(seeded_client, user_config_json):
    user_config_json["rack_network_config"]["uplink_port_speed"] = "speed800_g"
    resp = await seeded_client.put("/rack-setup/config", json=user_config_json)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_cert_upload_empty_body(app_client):
    resp = await app_client.post("/rack-setup/config/cert", content=b"")
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_key_first_waits_on_cert(app_client, cert_pair):
    _, key = cert_pair
    resp = await app_client.post("/rack-setup/config/key", content=key)
    assert resp.status_code == 200
    assert resp.json() == {"status": "waiting_on_cert"}


@pytest.mark.asyncio
async def test_mismatched_pair(app_client, cert_pair, other_key_pem):
    cert, _ = cert_pair
    await app_client.post("/rack-setup/config/cert", content=cert)
    resp = await app_client.post("/rack-setup/config/key", content=other_key_pem)
    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_CERTIFICATE"

    sensitive = (await app_client.get("/rack-setup/config")).json()["sensitive"]
    assert sensitive["num_external_certificates"] == 0


@pytest.mark.asyncio
async def test_password_hash(app_client):
    resp = await app_client.put(
        "/rack-setup/config/recovery-user-password-hash", json={"hash": PASSWORD_HASH}
    )
    assert resp.status_code == 204

    resp = await app_client.get("/rack-setup/config")
    assert resp.json()["sensitive"]["recovery_silo_password_set"] is True
    assert PASSWORD_HASH not in resp.text


@pytest.mark.asyncio
async def test_password_hash_must_be_phc(app_client):
    resp = await app_client.put(
        "/rack-setup/config/recovery-user-password-hash", json={"hash": "hunter2"}
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_preflight_missing_prerequisite(seeded_client):
    resp = await seeded_client.post("/rack-setup/preflight")
    assert resp.status_code == 409
    data = resp.json()
    assert data["error"] == "MISSING_PREREQUISITE"
    assert data["details"] == {"field": "bootstrap_sleds"}


@pytest.mark.asyncio
async def test_preflight_full_flow(seeded_client, user_config_json, cert_pair):
    cert, key = cert_pair
    await seeded_client.put("/rack-setup/config", json=user_config_json)
    await _upload_pair(seeded_client, cert, key)
    await seeded_client.put(
        "/rack-setup/config/recovery-user-password-hash", json={"hash": PASSWORD_HASH}
    )

    resp = await seeded_client.post("/rack-setup/preflight")
    assert resp.status_code == 200
    data = resp.json()
    assert data["ready"] is True
    assert data["rack_subnet"] == "fd00:1122:3344:100::"
    assert data["bootstrap_addrs"] == [str(SLED_A_IP), str(SLED_B_IP)]
    assert data["num_external_certificates"] == 1
    assert data["recovery_silo_name"] == "recovery"
    assert "PRIVATE KEY" not in resp.text


@pytest.mark.asyncio
async def test_preflight_unknown_address(seeded_client, user_config_json, cert_pair):
    cert, key = cert_pair
    await seeded_client.put("/rack-setup/config", json=user_config_json)
    await _upload_pair(seeded_client, cert, key)
    await seeded_client.put(
        "/rack-setup/config/recovery-user-password-hash", json={"hash": PASSWORD_HASH}
    )
    # Sled B drops off the bootstrap network after being selected.
    await seeded_client.put("/bootstrap-peers", json=peers_json({SLED_A: SLED_A_IP}))

    resp = await seeded_client.post("/rack-setup/preflight")
    assert resp.status_code == 409
    data = resp.json()
    assert data["error"] == "BOOTSTRAP_ADDRESS_UNKNOWN"
    assert data["details"]["slot"] == 1
