"""Client and builder for connecting to gNMI target devices."""

from __future__ import annotations

import ipaddress
import logging
import re
import string
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from google.protobuf.message import Message

from ..auth import AuthService, Credentials, HeaderValue
from ..errors import InvalidHeaderValue, InvalidUriError
from ..path import Path
from ..protobuf_util import gnmi_ext_pb2, gnmi_pb2
from ..tls import StandardTrust, TlsSettings, TrustConfig, system_roots
from ..transport.base import RpcRequest
from ..transport.channel import DEFAULT_CONNECT_TIMEOUT, ChannelTransport, connect_channel
from .capabilities import Capabilities, Encoding
from .get import DataType, build_get_request

if TYPE_CHECKING:
    from types import TracebackType

    from .dangerous import DangerousClientBuilder

_LOGGER = logging.getLogger(__name__)

CAPABILITIES_METHOD = "/gnmi.gNMI/Capabilities"
GET_METHOD = "/gnmi.gNMI/Get"

DEFAULT_PORTS = {"https": 443, "http": 80}
FALLBACK_PORT = 80

# RFC 3986 unreserved, reserved and percent characters.
_URI_CHARS = frozenset(string.ascii_letters + string.digits + "-._~:/?#[]@!$&'()*+,;=%")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_HOST_RE = re.compile(r"^[A-Za-z0-9_](?:[A-Za-z0-9_\-.]*[A-Za-z0-9_])?$")


@dataclass(frozen=True)
class Target:
    """A parsed target URI."""

    scheme: str
    host: str
    port: int

    @property
    def address(self) -> str:
        """``host:port`` as gRPC expects it."""
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_target(target: str) -> Target:
    """Parse ``scheme://host[:port][/path]`` or a bare ``host[:port]``.

    The host is a DNS name or IPv4 address made of letters, digits, ``-``,
    ``.`` and ``_``, or a bracketed IPv6 literal. Percent-encoded hosts and
    other sub-delimiters are rejected since gRPC cannot resolve them.

    Raises:
        InvalidUriError: If ``target`` is not a valid URI
    """
    if not target:
        raise InvalidUriError("empty string")
    for char in target:
        if char not in _URI_CHARS:
            raise InvalidUriError(f"invalid uri character {char!r}")

    if "://" in target:
        scheme, rest = target.split("://", 1)
        if not _SCHEME_RE.match(scheme):
            raise InvalidUriError(f"invalid scheme {scheme!r}")
        scheme = scheme.lower()
    else:
        scheme, rest = "", target

    authority = re.split(r"[/?#]", rest, maxsplit=1)[0]
    if not authority:
        raise InvalidUriError("missing host")
    if "@" in authority:
        raise InvalidUriError("user info is not supported in the target")

    port_text: str | None
    if authority.startswith("["):
        end = authority.find("]")
        if end == -1:
            raise InvalidUriError("unterminated IPv6 literal")
        host = authority[1:end]
        try:
            ipaddress.IPv6Address(host)
        except ValueError as err:
            raise InvalidUriError(f"invalid IPv6 literal {host!r}") from err
        remainder = authority[end + 1 :]
        if remainder and not remainder.startswith(":"):
            raise InvalidUriError(f"unexpected characters after host: {remainder!r}")
        port_text = remainder[1:] if remainder else None
    else:
        host, sep, port_text_raw = authority.partition(":")
        port_text = port_text_raw if sep else None
        if not _HOST_RE.match(host):
            raise InvalidUriError(f"invalid host {host!r}")

    if port_text:
        if not port_text.isdigit() or int(port_text) > 65535:
            raise InvalidUriError(f"invalid port {port_text!r}")
        port = int(port_text)
    else:
        port = DEFAULT_PORTS.get(scheme, FALLBACK_PORT)

    return Target(scheme=scheme, host=host, port=port)


class Client:
    """Connection to a gNMI target device.

    Usage:
        async with await (
            Client.builder("https://clab-srl01-srl:57400")
            .tls(ca_pem, "clab-srl01-srl")
            .credentials("admin", "admin")
            .build()
        ) as client:
            capabilities = await client.capabilities()

    Clients are cheap to clone; clones share the channel and credentials and
    may issue calls concurrently.
    """

    def __init__(
        self,
        service: AuthService[Message],
        transport: ChannelTransport | None = None,
    ) -> None:
        self._service = service
        self._transport = transport

    @staticmethod
    def builder(target: str) -> ClientBuilder:
        """Create a ``ClientBuilder`` for ``target``."""
        return ClientBuilder(target)

    def clone(self) -> Client:
        """Return a handle sharing this client's transport and credentials."""
        return Client(self._service, self._transport)

    async def _unary(self, request: RpcRequest[Any]) -> Any:
        await self._service.ready()
        return await self._service.call(request)

    async def capabilities(self) -> Capabilities:
        """Ask the target device which models, encodings and version it supports.

        Raises:
            GrpcError: If the device rejects the request or is unreachable
        """
        response = await self._unary(
            RpcRequest(
                CAPABILITIES_METHOD,
                gnmi_pb2.CapabilityRequest(),
                gnmi_pb2.CapabilityResponse,
            )
        )
        return Capabilities(response)

    async def get(
        self,
        prefix: str | Path,
        path: str | Path,
        data_type: DataType = DataType.ALL,
        encoding: Encoding = Encoding.JSON,
        use_models: Iterable[gnmi_pb2.ModelData] = (),
        extensions: Iterable[gnmi_ext_pb2.Extension] = (),
    ) -> gnmi_pb2.GetResponse:
        """Retrieve a snapshot of ``path`` from the target device.

        Args:
            prefix: Common prefix, slash shorthand or ``Path``; unset when empty
            path: Path to retrieve, slash shorthand or ``Path``
            data_type: Config, state, operational or all data
            encoding: Encoding the device should answer with
            use_models: Models the device should restrict itself to
            extensions: gNMI extensions

        Returns:
            The device's ``GetResponse``, unmodified

        Raises:
            GrpcError: If the device rejects the request or is unreachable
        """
        request = build_get_request(
            prefix, path, data_type, encoding, use_models, extensions
        )
        return await self._unary(RpcRequest(GET_METHOD, request, gnmi_pb2.GetResponse))

    async def close(self) -> None:
        """Close the channel. Every clone of this client becomes unusable."""
        if self._transport is not None:
            await self._transport.close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


class ClientBuilder:
    """Builder for ``Client`` instances.

    Nothing is validated until ``build``; the builder can be built once.
    """

    def __init__(self, target: str) -> None:
        self._target = target
        self._credentials: Credentials | None = None
        self._trust: TrustConfig | None = None
        self._connect_timeout = DEFAULT_CONNECT_TIMEOUT
        self._built = False

    @property
    def target(self) -> str:
        return self._target

    def credentials(self, username: str, password: str) -> ClientBuilder:
        """Configure credentials sent with every call."""
        self._credentials = Credentials(username, password)
        return self

    def tls(self, ca_certificate: bytes | str, domain_name: str) -> ClientBuilder:
        """Verify the device against ``ca_certificate`` and ``domain_name``.

        Args:
            ca_certificate: PEM encoded CA certificate
            domain_name: Name the device certificate must be issued for
        """
        if isinstance(ca_certificate, str):
            ca_certificate = ca_certificate.encode()
        self._trust = StandardTrust(ca_certificate, domain_name)
        return self

    def connect_timeout(self, seconds: float) -> ClientBuilder:
        """Bound the time ``build`` waits for the channel to become ready."""
        self._connect_timeout = seconds
        return self

    def dangerous(self) -> DangerousClientBuilder:
        """Switch to the builder exposing options that weaken security."""
        from .dangerous import DangerousClientBuilder

        return DangerousClientBuilder(self)

    def _set_trust(self, trust: TrustConfig) -> None:
        self._trust = trust

    async def _tls_settings(self, target: Target) -> TlsSettings | None:
        if self._trust is not None:
            return await self._trust.settings(target.host, target.port)
        if target.scheme == "https":
            return system_roots()
        return None

    async def build(self) -> Client:
        """Consume the builder and return a connected ``Client``.

        Raises:
            InvalidUriError: If the target is not a valid URI
            TransportError: If the TLS settings are invalid or the connection
                could not be established
            InvalidHeaderValue: If a credential is not valid metadata
            RuntimeError: If the builder was already built
        """
        if self._built:
            raise RuntimeError("ClientBuilder.build() may only be called once")
        self._built = True

        target = parse_target(self._target)
        tls = await self._tls_settings(target)

        transport = await connect_channel(
            target.address,
            credentials=tls.credentials if tls else None,
            options=tls.options if tls else (),
            timeout=self._connect_timeout,
        )

        username = password = None
        if self._credentials is not None:
            try:
                username = HeaderValue.from_str(self._credentials.username)
                password = HeaderValue.from_str(self._credentials.password)
            except InvalidHeaderValue:
                await transport.close()
                raise

        _LOGGER.info(
            "Connected to %s (tls=%s, credentials=%s)",
            target.address,
            tls is not None,
            username is not None,
        )
        return Client(AuthService(transport, username, password), transport)
