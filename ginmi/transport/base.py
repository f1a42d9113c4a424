"""Transport interface shared by the channel and the auth middleware."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from google.protobuf.message import Message

RequestT_contra = TypeVar("RequestT_contra", contravariant=True)
ResponseT = TypeVar("ResponseT", bound=Message)
ResponseT_co = TypeVar("ResponseT_co", covariant=True)


@dataclass(frozen=True)
class RpcRequest(Generic[ResponseT]):
    """A single unary RPC ready to be handed to a transport.

    method
    Fully qualified gRPC method, e.g. ``/gnmi.gNMI/Get``.

    message
    Request payload.

    response_type
    Generated message class the response is parsed into.

    metadata
    Call metadata sent alongside the payload.
    """

    method: str
    message: Message
    response_type: type[ResponseT]
    metadata: Mapping[str, str] = field(default_factory=dict)


class RpcTransport(Protocol[RequestT_contra, ResponseT_co]):
    """Minimal callable RPC transport.

    ready
    Resolves once the transport can accept a call, raises otherwise.

    call
    Sends one request and returns its response.
    """

    async def ready(self) -> None:
        """Wait until the transport can accept a call."""

    async def call(self, request: RequestT_contra) -> ResponseT_co:
        """Send a request and return the response."""
