"""Transport layer for the gNMI client.

This package contains all IO and network handling.

Components:
- base: request value and transport interface
- channel: gRPC channel transport and connection establishment
"""

from .base import RpcRequest, RpcTransport
from .channel import (
    DEFAULT_CONNECT_TIMEOUT,
    ChannelTransport,
    connect_channel,
    wait_until_ready,
)

__all__ = [
    "DEFAULT_CONNECT_TIMEOUT",
    "ChannelTransport",
    "RpcRequest",
    "RpcTransport",
    "connect_channel",
    "wait_until_ready",
]
