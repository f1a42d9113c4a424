"""Pytest configuration and fixtures for ginmi tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import grpc
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from pygnmi.spec.v080 import gnmi_pb2_grpc

from ginmi.protobuf_util import gnmi_pb2

SERVER_NAME = "ginmi-test"


@dataclass(frozen=True)
class CertificatePair:
    """PEM encoded certificate and private key."""

    certificate: bytes
    private_key: bytes


def generate_self_signed(
    common_name: str, valid_from_days: int = -1, valid_to_days: int = 1
) -> CertificatePair:
    """Create a self-signed certificate for ``common_name``.

    The validity window runs from ``valid_from_days`` to ``valid_to_days``
    relative to now.
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now + timedelta(days=valid_from_days))
        .not_valid_after(now + timedelta(days=valid_to_days))
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName(common_name)]),
            critical=False,
        )
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return CertificatePair(
        certificate=certificate.public_bytes(serialization.Encoding.PEM),
        private_key=key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        ),
    )


def capability_response(
    version: str = "0.8.0",
    models: list[tuple[str, str, str]] | None = None,
    encodings: list[int] | None = None,
) -> gnmi_pb2.CapabilityResponse:
    """Create a CapabilityResponse with the given models and encodings."""
    return gnmi_pb2.CapabilityResponse(
        gNMI_version=version,
        supported_models=[
            gnmi_pb2.ModelData(name=name, organization=org, version=ver)
            for name, org, ver in models or []
        ],
        supported_encodings=encodings or [],
    )


@dataclass
class RecordingServicer(gnmi_pb2_grpc.gNMIServicer):
    """gNMI servicer that records the metadata of every call."""

    response: gnmi_pb2.CapabilityResponse = field(default_factory=capability_response)
    metadata: list[dict[str, str]] = field(default_factory=list)
    get_requests: list[gnmi_pb2.GetRequest] = field(default_factory=list)

    async def Capabilities(self, request, context):  # noqa: N802
        self.metadata.append(dict(context.invocation_metadata()))
        return self.response

    async def Get(self, request, context):  # noqa: N802
        self.metadata.append(dict(context.invocation_metadata()))
        self.get_requests.append(request)
        return gnmi_pb2.GetResponse(
            notification=[gnmi_pb2.Notification(timestamp=1, prefix=request.prefix)]
        )


@dataclass(frozen=True)
class RunningServer:
    """An in-process gNMI server."""

    port: int
    servicer: RecordingServicer
    server: grpc.aio.Server
    certificate: CertificatePair | None = None


@pytest.fixture(scope="session")
def server_certificate() -> CertificatePair:
    """Self-signed certificate presented by the TLS test server."""
    return generate_self_signed(SERVER_NAME)


@pytest.fixture
def fake_transport() -> AsyncMock:
    """Create a mock transport satisfying ready/call."""
    transport = AsyncMock()
    transport.ready = AsyncMock(return_value=None)
    transport.call = AsyncMock()
    transport.close = AsyncMock()
    return transport


@pytest.fixture
async def plaintext_server():
    """Start a gNMI server without TLS on a free local port."""
    servicer = RecordingServicer()
    server = grpc.aio.server()
    gnmi_pb2_grpc.add_gNMIServicer_to_server(servicer, server)
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    yield RunningServer(port=port, servicer=servicer, server=server)
    await server.stop(None)


@pytest.fixture
async def tls_server(server_certificate: CertificatePair):
    """Start a gNMI server presenting a self-signed certificate."""
    servicer = RecordingServicer()
    server = grpc.aio.server()
    gnmi_pb2_grpc.add_gNMIServicer_to_server(servicer, server)
    credentials = grpc.ssl_server_credentials(
        [(server_certificate.private_key, server_certificate.certificate)]
    )
    port = server.add_secure_port("127.0.0.1:0", credentials)
    await server.start()
    yield RunningServer(
        port=port, servicer=servicer, server=server, certificate=server_certificate
    )
    await server.stop(None)


@pytest.fixture
def make_capability_response():
    """Factory for CapabilityResponse messages."""
    return capability_response


@pytest.fixture
def make_certificate():
    """Factory for self-signed certificates."""
    return generate_self_signed
