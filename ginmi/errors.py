"""Client error types for gNMI device interactions."""

from __future__ import annotations

import grpc


class GinmiError(Exception):
    """Base error for gNMI client failures."""


class InvalidUriError(GinmiError):
    """The target passed to the builder is not a valid URI."""

    def __init__(self, message: str) -> None:
        super().__init__(f"invalid uri passed as target: {message}")
        self.reason = message


class TransportError(GinmiError):
    """TLS settings were invalid or the connection to the device failed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"error connecting to endpoint: {message}")
        self.reason = message


class InvalidHeaderValue(GinmiError):
    """A credential cannot be encoded as gRPC request metadata."""

    def __init__(self, message: str) -> None:
        super().__init__(f"invalid header in grpc request: {message}")
        self.reason = message


class GrpcError(GinmiError):
    """The device or the channel returned a non-OK RPC status."""

    def __init__(self, code: grpc.StatusCode, details: str | None) -> None:
        super().__init__(
            f"error communicating with target device: {code.name}: {details or ''}"
        )
        self.code = code
        self.details = details or ""
