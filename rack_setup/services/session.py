"""Per-process rack setup session: one draft config behind a lock."""

from __future__ import annotations

import logging
import threading

from rack_setup.models import rack_init as wire
from rack_setup.models.inventory import Baseboard, RackInventory
from rack_setup.models.rss_config import (
    CertificateUploadResponse,
    CurrentRssUserConfig,
    PutRssUserConfigInsensitive,
)
from rack_setup.services.bootstrap_peers import BootstrapPeers
from rack_setup.services.rss_config import CurrentRssConfig

logger = logging.getLogger(__name__)


class RackSetupService:
    """Serialize every operation on the draft rack setup config.

    Inventory and bootstrap peers are pushed in by discovery; reads and
    updates re-sync the draft's inventory from the latest of both first.
    """

    def __init__(self, our_baseboard: Baseboard | None = None, bootstrap_peers: BootstrapPeers | None = None):
        self._lock = threading.Lock()
        self._config = CurrentRssConfig()
        self._inventory = RackInventory()
        self._our_baseboard = our_baseboard
        self.bootstrap_peers = bootstrap_peers or BootstrapPeers()

    @property
    def inventory(self) -> RackInventory:
        with self._lock:
            return self._inventory

    def set_inventory(self, inventory: RackInventory) -> None:
        with self._lock:
            self._inventory = inventory
        logger.info("Rack inventory replaced: %d SP(s)", len(inventory.sps))

    def _sync(self) -> None:
        self._config.populate_available_bootstrap_sleds_from_inventory(
            self._inventory, self.bootstrap_peers
        )

    def current_config(self) -> CurrentRssUserConfig:
        with self._lock:
            self._sync()
            return self._config.to_user_config()

    def update_config(self, value: PutRssUserConfigInsensitive) -> None:
        with self._lock:
            self._sync()
            self._config.update(value, self._our_baseboard)

    def upload_cert(self, cert: bytes) -> CertificateUploadResponse:
        with self._lock:
            return self._config.push_cert(cert)

    def upload_key(self, key: bytes) -> CertificateUploadResponse:
        with self._lock:
            return self._config.push_key(key)

    def set_recovery_user_password_hash(self, password_hash: str) -> None:
        with self._lock:
            self._config.set_recovery_user_password_hash(password_hash)

    def start_rss_request(self) -> wire.RackInitializeRequest:
        with self._lock:
            request = self._config.start_rss_request(self.bootstrap_peers)
        logger.info(
            "Rack initialization request assembled for %d sled(s)",
            len(request.bootstrap_discovery.addrs),
        )
        return request
