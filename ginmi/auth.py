"""Credential injection for outbound gNMI calls.

gNMI devices authenticate each RPC through two metadata entries,
``username`` and ``password``. ``AuthService`` wraps any transport and adds
them to every call it forwards.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Generic, TypeVar

from .errors import InvalidHeaderValue
from .transport.base import RpcRequest, RpcTransport

ResponseT = TypeVar("ResponseT")

USERNAME_KEY = "username"
PASSWORD_KEY = "password"


@dataclass(frozen=True)
class Credentials:
    """Username and password configured on a client builder."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class HeaderValue:
    """A string known to be legal as gRPC ASCII metadata."""

    value: str

    @classmethod
    def from_str(cls, value: str) -> HeaderValue:
        """Validate ``value`` for use as metadata.

        gRPC only accepts printable ASCII (0x20-0x7E) in non-binary metadata
        values.

        Raises:
            InvalidHeaderValue: If ``value`` contains any other character
        """
        for index, char in enumerate(value):
            if not 0x20 <= ord(char) <= 0x7E:
                raise InvalidHeaderValue(
                    f"character {char!r} at position {index} is not printable ASCII"
                )
        return cls(value)

    def __str__(self) -> str:
        return self.value


class AuthService(Generic[ResponseT]):
    """Transport decorator that injects credentials into every call.

    Usage:
        service = AuthService(transport, HeaderValue.from_str("admin"),
                              HeaderValue.from_str("admin"))
        await service.ready()
        response = await service.call(request)

    Credentials are only sent when both username and password are present.
    """

    def __init__(
        self,
        inner: RpcTransport[RpcRequest, ResponseT],
        username: HeaderValue | None = None,
        password: HeaderValue | None = None,
    ) -> None:
        self._inner = inner
        self._username = username
        self._password = password

    @property
    def inner(self) -> RpcTransport[RpcRequest, ResponseT]:
        """The wrapped transport."""
        return self._inner

    @property
    def has_credentials(self) -> bool:
        return self._username is not None and self._password is not None

    async def ready(self) -> None:
        await self._inner.ready()

    async def call(self, request: RpcRequest) -> ResponseT:
        if self._username is not None and self._password is not None:
            metadata = dict(request.metadata)
            metadata[USERNAME_KEY] = self._username.value
            metadata[PASSWORD_KEY] = self._password.value
            request = replace(request, metadata=metadata)
        return await self._inner.call(request)
