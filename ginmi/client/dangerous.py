"""Connect to gNMI devices without verifying their TLS certificate.

Safety:
    Never use this module outside of local testing. Disabling certificate
    verification leaves the connection open to man-in-the-middle attacks:
    anyone on the path can impersonate the device and read the credentials
    sent with every call.

Example:
    client = await (
        Client.builder("https://clab-srl01-srl:57400")
        .credentials("admin", "password1")
        .dangerous()
        .disable_certificate_verification()
        .build()
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..tls import BypassTrust

if TYPE_CHECKING:
    from .client import Client, ClientBuilder


class DangerousClientBuilder:
    """Builder for ``Client`` instances with options that require extra care."""

    def __init__(self, builder: ClientBuilder) -> None:
        self._builder = builder

    def disable_certificate_verification(self) -> DangerousClientBuilder:
        """Accept any certificate the device presents.

        Safety:
            This skips chain validation and hostname matching. A certificate
            outside its validity period is still refused by ``build``.
            It replaces any trust configured with ``ClientBuilder.tls``.
        """
        self._builder._set_trust(BypassTrust())
        return self

    async def build(self) -> Client:
        """Consume the builder and return a ``Client``.

        Raises:
            InvalidUriError: If the target is not a valid URI
            TransportError: If the connection could not be established
            InvalidHeaderValue: If a credential is not valid metadata
        """
        return await self._builder.build()
