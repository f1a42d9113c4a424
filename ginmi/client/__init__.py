"""Client that connects to gNMI-capable devices.

Clients are created through ``Client.builder`` and are cheap to clone.

Components:
- client: Client, builder and target parsing
- dangerous: builder branch that disables certificate verification
- capabilities: negotiated capabilities and encodings
- get: Get request composition
"""

from .capabilities import Capabilities, Encoding
from .client import Client, ClientBuilder, Target, parse_target
from .dangerous import DangerousClientBuilder
from .get import DataType, build_get_request

__all__ = [
    "Capabilities",
    "Client",
    "ClientBuilder",
    "DangerousClientBuilder",
    "DataType",
    "Encoding",
    "Target",
    "build_get_request",
    "parse_target",
]
