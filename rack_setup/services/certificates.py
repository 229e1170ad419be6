"""Structural validation of PEM certificate chains and their private keys."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes, PublicKeyTypes

logger = logging.getLogger(__name__)

_PEM_CERT_MARKER = b"-----BEGIN CERTIFICATE-----"

_SUPPORTED_KEY_TYPES = (
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    ed25519.Ed25519PrivateKey,
)


class CertificateError(Exception):
    """A certificate chain or private key failed validation."""


class CertificateValidator:
    """Check that a PEM certificate chain and PEM private key form a usable pair.

    The leaf (first) certificate of the chain must carry the public half of
    the supplied private key. Expiration is checked against the current time
    unless disabled, which callers must do when no trustworthy clock is
    available yet.
    """

    def __init__(self) -> None:
        self._check_expiration = True

    def disable_expiration_validation(self) -> None:
        self._check_expiration = False

    def validate(self, certs: bytes, key: bytes, *, now: datetime | None = None) -> None:
        """Raise CertificateError if ``certs``/``key`` are not a valid pair."""
        chain = self._load_chain(certs)
        private_key = self._load_key(key)
        leaf = chain[0]

        if self._check_expiration:
            now = now or datetime.now(timezone.utc)
            if leaf.not_valid_after_utc < now:
                raise CertificateError(f"certificate expired at {leaf.not_valid_after_utc.isoformat()}")
            if leaf.not_valid_before_utc > now:
                raise CertificateError(
                    f"certificate is not valid before {leaf.not_valid_before_utc.isoformat()}"
                )

        if _public_der(leaf.public_key()) != _public_der(private_key.public_key()):
            raise CertificateError("certificate and private key do not match")

        logger.debug("Validated certificate chain of %d cert(s) for %s", len(chain), leaf.subject.rfc4514_string())

    @staticmethod
    def _load_chain(certs: bytes) -> list[x509.Certificate]:
        if _PEM_CERT_MARKER not in certs:
            raise CertificateError("no certificates present in PEM data")
        try:
            chain = x509.load_pem_x509_certificates(certs)
        except ValueError as exc:
            raise CertificateError(f"failed to parse certificate: {exc}") from exc
        if not chain:
            raise CertificateError("no certificates present in PEM data")
        return chain

    @staticmethod
    def _load_key(key: bytes) -> PrivateKeyTypes:
        try:
            private_key = serialization.load_pem_private_key(key, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise CertificateError(f"failed to parse private key: {exc}") from exc
        if not isinstance(private_key, _SUPPORTED_KEY_TYPES):
            raise CertificateError(f"unsupported private key type: {type(private_key).__name__}")
        return private_key


def _public_der(public_key: PublicKeyTypes) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
