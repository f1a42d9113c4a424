"""gRPC channel transport for gNMI devices."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import grpc

from ..errors import GrpcError, TransportError
from ..protobuf_util import serialize_message
from .base import RpcRequest, ResponseT

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0

ChannelOptions = Sequence[tuple[str, Any]]


async def wait_until_ready(channel: grpc.aio.Channel, *, timeout: float) -> None:
    """Drive the channel towards READY and fail fast on connect errors.

    Args:
        channel: Channel to connect
        timeout: Upper bound for the whole attempt in seconds

    Raises:
        TransportError: If the channel hits TRANSIENT_FAILURE, is shut down,
            or is not ready within ``timeout``
    """

    async def _drive() -> None:
        state = channel.get_state(try_to_connect=True)
        while state is not grpc.ChannelConnectivity.READY:
            if state is grpc.ChannelConnectivity.TRANSIENT_FAILURE:
                raise TransportError("connection attempt failed")
            if state is grpc.ChannelConnectivity.SHUTDOWN:
                raise TransportError("channel is shut down")
            await channel.wait_for_state_change(state)
            state = channel.get_state(try_to_connect=True)

    try:
        await asyncio.wait_for(_drive(), timeout=timeout)
    except TimeoutError as err:
        raise TransportError(f"connection timed out after {timeout}s") from err


class ChannelTransport:
    """Unary RPC transport over a ``grpc.aio`` channel.

    A channel multiplexes concurrent calls, so one instance is shared by every
    clone of a client.
    """

    def __init__(
        self,
        channel: grpc.aio.Channel,
        address: str,
    ) -> None:
        self._channel = channel
        self._address = address

    @property
    def address(self) -> str:
        """The ``host:port`` the channel targets."""
        return self._address

    async def ready(self) -> None:
        """Check the channel is open and nudge it to (re)connect.

        Does not wait for READY: a channel in reconnect backoff still accepts
        calls, and those fail with their own UNAVAILABLE status.

        Raises:
            GrpcError: If the channel has been closed
        """
        state = self._channel.get_state(try_to_connect=True)
        if state is grpc.ChannelConnectivity.SHUTDOWN:
            raise GrpcError(grpc.StatusCode.UNAVAILABLE, "channel is closed")

    async def call(self, request: RpcRequest[ResponseT]) -> ResponseT:
        """Send one unary request over the channel.

        Raises:
            GrpcError: If the call finishes with a non-OK status
        """
        rpc = self._channel.unary_unary(
            request.method,
            request_serializer=serialize_message,
            response_deserializer=request.response_type.FromString,
        )
        _LOGGER.debug("[%s] Calling %s", self._address, request.method)
        try:
            return await rpc(request.message, metadata=tuple(request.metadata.items()))
        except grpc.aio.AioRpcError as err:
            raise GrpcError(err.code(), err.details()) from err

    async def close(self) -> None:
        """Close the underlying channel."""
        await self._channel.close()


async def connect_channel(
    address: str,
    *,
    credentials: grpc.ChannelCredentials | None = None,
    options: ChannelOptions = (),
    timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> ChannelTransport:
    """Open a channel to ``address`` and wait for it to become ready.

    Args:
        address: ``host:port`` to connect to
        credentials: TLS channel credentials, plaintext when None
        options: Extra gRPC channel arguments
        timeout: Connection timeout in seconds

    Returns:
        Connected transport

    Raises:
        TransportError: If the connection could not be established
    """
    if credentials is None:
        channel = grpc.aio.insecure_channel(address, options=list(options))
    else:
        channel = grpc.aio.secure_channel(address, credentials, options=list(options))

    _LOGGER.debug("Connecting to %s (tls=%s)", address, credentials is not None)
    try:
        await wait_until_ready(channel, timeout=timeout)
    except TransportError:
        await channel.close()
        raise
    return ChannelTransport(channel, address)
