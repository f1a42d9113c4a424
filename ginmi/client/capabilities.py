"""Capabilities negotiated with a gNMI target device."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from ..protobuf_util import gnmi_pb2, message_to_dict


class Encoding(IntEnum):
    """Data encodings defined by gNMI, valued by their wire codes."""

    JSON = 0
    BYTES = 1
    PROTO = 2
    ASCII = 3
    JSON_IETF = 4


class Capabilities:
    """Capabilities supported by a gNMI target device.

    Wraps the device's ``CapabilityResponse`` (gNMI specification section
    3.2.2). The wrapper keeps its own copy of the response and exposes only
    read access.
    """

    __slots__ = ("_response",)

    def __init__(self, response: gnmi_pb2.CapabilityResponse) -> None:
        copy = gnmi_pb2.CapabilityResponse()
        copy.CopyFrom(response)
        self._response = copy

    @property
    def response(self) -> gnmi_pb2.CapabilityResponse:
        """A copy of the raw response."""
        copy = gnmi_pb2.CapabilityResponse()
        copy.CopyFrom(self._response)
        return copy

    def gnmi_version(self) -> str:
        """Retrieve the gNMI version that the target device supports."""
        return self._response.gNMI_version

    def supports_model(self, name: str, organization: str, version: str) -> bool:
        """Check if the target device supports a given model.

        Args:
            name: Name of the model
            organization: Organization publishing the model
            version: Version of the model

        Returns:
            True only if all three fields match one advertised model
        """
        return any(
            model.name == name
            and model.organization == organization
            and model.version == version
            for model in self._response.supported_models
        )

    def supports_encoding(self, encoding: Encoding) -> bool:
        """Check if the target device supports a given encoding."""
        return int(encoding) in self._response.supported_encodings

    def to_dict(self) -> dict[str, Any]:
        return message_to_dict(self._response)

    def __repr__(self) -> str:
        return (
            f"Capabilities(gnmi_version={self.gnmi_version()!r}, "
            f"models={len(self._response.supported_models)}, "
            f"encodings={list(self._response.supported_encodings)})"
        )
