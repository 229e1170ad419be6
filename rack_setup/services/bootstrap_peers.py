"""Registry of sleds currently reachable on the bootstrap network."""

from __future__ import annotations

import logging
import threading
from ipaddress import IPv6Address

from rack_setup.models.inventory import Baseboard

logger = logging.getLogger(__name__)


class BootstrapPeers:
    """Baseboard -> bootstrap address map, fed by peer discovery.

    Discovery runs elsewhere and replaces the whole map whenever its view
    changes; readers always get a copy.
    """

    def __init__(self, peers: dict[Baseboard, IPv6Address] | None = None):
        self._lock = threading.Lock()
        self._sleds: dict[Baseboard, IPv6Address] = dict(peers or {})

    def replace(self, peers: dict[Baseboard, IPv6Address]) -> None:
        with self._lock:
            self._sleds = dict(peers)
        logger.info("Bootstrap peers updated: %d sled(s) reachable", len(peers))

    def sleds(self) -> dict[Baseboard, IPv6Address]:
        with self._lock:
            return dict(self._sleds)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sleds)
