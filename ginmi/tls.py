"""TLS trust policies for gNMI channels.

Two policies exist:

``StandardTrust``
    Verifies the server chain against a caller supplied CA certificate and
    checks the server identity against an expected domain name.

``BypassTrust``
    Accepts any server identity. Only reachable through
    ``ClientBuilder.dangerous().disable_certificate_verification()``.

Both produce ``TlsSettings`` that the connection builder hands to
``connect_channel``.
"""

from __future__ import annotations

import asyncio
import logging
import socket
import ssl
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import grpc
from cryptography import x509
from cryptography.x509.oid import NameOID

from .errors import TransportError

_LOGGER = logging.getLogger(__name__)

TARGET_NAME_OVERRIDE = "grpc.ssl_target_name_override"
CERTIFICATE_FETCH_TIMEOUT = 10.0


@dataclass(frozen=True)
class TlsSettings:
    """Channel credentials plus the channel options they require."""

    credentials: grpc.ChannelCredentials
    options: tuple[tuple[str, Any], ...] = ()


def system_roots() -> TlsSettings:
    """TLS settings trusting the CA roots bundled with gRPC."""
    return TlsSettings(grpc.ssl_channel_credentials())


def load_certificates(pem: bytes) -> list[x509.Certificate]:
    """Parse every certificate in a PEM bundle.

    Raises:
        TransportError: If no certificate can be parsed from ``pem``
    """
    try:
        certificates = x509.load_pem_x509_certificates(pem)
    except ValueError as err:
        raise TransportError(f"invalid CA certificate: {err}") from err
    if not certificates:
        raise TransportError("invalid CA certificate: no certificate found")
    return certificates


def certificate_identity(certificate: x509.Certificate) -> str | None:
    """Return the first DNS subject alternative name, else the common name."""
    try:
        san = certificate.extensions.get_extension_for_class(
            x509.SubjectAlternativeName
        )
    except x509.ExtensionNotFound:
        pass
    else:
        names = san.value.get_values_for_type(x509.DNSName)
        if names:
            return names[0]

    common_names = certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if common_names:
        value = common_names[0].value
        return value if isinstance(value, str) else value.decode()
    return None


@dataclass(frozen=True)
class StandardTrust:
    """Validate the server against ``ca_certificate`` and ``domain_name``.

    ca_certificate
    PEM encoded CA certificate (or bundle).

    domain_name
    Identity the server certificate must carry.
    """

    ca_certificate: bytes
    domain_name: str

    async def settings(self, host: str, port: int) -> TlsSettings:
        """Build channel credentials for this policy.

        Raises:
            TransportError: If the CA certificate cannot be parsed
        """
        load_certificates(self.ca_certificate)
        return TlsSettings(
            grpc.ssl_channel_credentials(root_certificates=self.ca_certificate),
            ((TARGET_NAME_OVERRIDE, self.domain_name),),
        )


def fetch_server_certificate(
    host: str, port: int, *, timeout: float = CERTIFICATE_FETCH_TIMEOUT
) -> bytes:
    """Complete a TLS handshake without verification and return the peer certificate.

    Returns:
        PEM encoded leaf certificate presented by the server

    Raises:
        TransportError: If the handshake fails or no certificate is presented
    """
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.set_alpn_protocols(["h2"])

    try:
        with socket.create_connection((host, port), timeout=timeout) as sock:
            with context.wrap_socket(sock, server_hostname=host) as tls_sock:
                der = tls_sock.getpeercert(binary_form=True)
    except (OSError, ssl.SSLError) as err:
        raise TransportError(f"failed to fetch certificate from {host}:{port}: {err}") from err

    if not der:
        raise TransportError(f"{host}:{port} did not present a certificate")
    return ssl.DER_cert_to_PEM_cert(der).encode()


@dataclass(frozen=True)
class BypassTrust:
    """Accept whatever certificate the server presents.

    Warning:
        This disables chain validation and hostname matching altogether.
        Any party able to intercept the connection can impersonate the
        device. Use it only in a lab where no certificate
        infrastructure exists yet.

    The certificate the server presents is fetched without verification and
    pinned as the only trusted root, and the expected name is taken from the
    certificate itself.

    The gRPC TLS stack still checks the validity period of the pinned
    certificate, so an expired or not yet valid certificate is refused before
    any connection attempt.
    """

    async def settings(self, host: str, port: int) -> TlsSettings:
        """Build channel credentials trusting the server's own certificate.

        Raises:
            TransportError: If the server certificate cannot be fetched or is
                outside its validity period
        """
        _LOGGER.warning(
            "TLS certificate verification is DISABLED for %s:%s; "
            "the connection is open to man-in-the-middle attacks",
            host,
            port,
        )
        pem = await asyncio.to_thread(fetch_server_certificate, host, port)
        certificate = load_certificates(pem)[0]
        now = datetime.now(UTC)
        if not certificate.not_valid_before_utc <= now <= certificate.not_valid_after_utc:
            raise TransportError(
                f"certificate presented by {host}:{port} is outside its validity period "
                f"({certificate.not_valid_before_utc:%Y-%m-%d} to "
                f"{certificate.not_valid_after_utc:%Y-%m-%d}); "
                "disabling verification cannot accept it"
            )
        name = certificate_identity(certificate) or host
        return TlsSettings(
            grpc.ssl_channel_credentials(root_certificates=pem),
            ((TARGET_NAME_OVERRIDE, name),),
        )


TrustConfig = StandardTrust | BypassTrust
