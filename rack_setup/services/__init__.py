"""Rack setup state and validation services."""

from rack_setup.services.bootstrap_peers import BootstrapPeers
from rack_setup.services.certificates import CertificateError, CertificateValidator
from rack_setup.services.rss_config import CurrentRssConfig, PartialCertificate, PartialCertificateState
from rack_setup.services.session import RackSetupService

__all__ = [
    "BootstrapPeers",
    "CertificateError",
    "CertificateValidator",
    "CurrentRssConfig",
    "PartialCertificate",
    "PartialCertificateState",
    "RackSetupService",
]
