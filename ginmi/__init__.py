"""Asynchronous gNMI client for managing network devices."""

__version__ = "0.1.3"

from .auth import AuthService, Credentials, HeaderValue
from .client import (
    Capabilities,
    Client,
    ClientBuilder,
    DangerousClientBuilder,
    DataType,
    Encoding,
)
from .errors import (
    GinmiError,
    GrpcError,
    InvalidHeaderValue,
    InvalidUriError,
    TransportError,
)
from .path import Path, PathElement
from .tls import StandardTrust, TlsSettings, TrustConfig

__all__ = [
    "AuthService",
    "Capabilities",
    "Client",
    "ClientBuilder",
    "Credentials",
    "DangerousClientBuilder",
    "DataType",
    "Encoding",
    "GinmiError",
    "GrpcError",
    "HeaderValue",
    "InvalidHeaderValue",
    "InvalidUriError",
    "Path",
    "PathElement",
    "StandardTrust",
    "TlsSettings",
    "TransportError",
    "TrustConfig",
    "__version__",
]
