"""Tests for Client operations over a mocked transport."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import grpc
import pytest

from ginmi import AuthService, Client, DataType, Encoding, GrpcError, HeaderValue, Path
from ginmi.client.client import CAPABILITIES_METHOD, GET_METHOD
from ginmi.protobuf_util import gnmi_pb2


@pytest.fixture
def client(fake_transport: AsyncMock) -> Client:
    """Client whose calls land on the fake transport."""
    service = AuthService(
        fake_transport, HeaderValue.from_str("admin"), HeaderValue.from_str("admin")
    )
    return Client(service, fake_transport)


class TestCapabilities:
    """Tests for Client.capabilities()."""

    async def test_sends_empty_request(
        self, client: Client, fake_transport: AsyncMock, make_capability_response
    ) -> None:
        """Test an empty CapabilityRequest is sent and the response wrapped."""
        fake_transport.call.return_value = make_capability_response(
            version="0.8.0", encodings=[0, 4]
        )

        caps = await client.capabilities()

        request = fake_transport.call.await_args.args[0]
        assert request.method == CAPABILITIES_METHOD
        assert request.message == gnmi_pb2.CapabilityRequest()
        assert request.response_type is gnmi_pb2.CapabilityResponse
        assert caps.gnmi_version() == "0.8.0"
        assert caps.supports_encoding(Encoding.JSON_IETF)

    async def test_checks_readiness_first(
        self, client: Client, fake_transport: AsyncMock
    ) -> None:
        """Test a closed transport fails the call before it is sent."""
        fake_transport.ready.side_effect = GrpcError(
            grpc.StatusCode.UNAVAILABLE, "channel is closed"
        )

        with pytest.raises(GrpcError, match="UNAVAILABLE"):
            await client.capabilities()
        fake_transport.call.assert_not_awaited()

    async def test_rpc_error_propagates(self, client: Client, fake_transport: AsyncMock) -> None:
        """Test device errors reach the caller unchanged."""
        error = GrpcError(grpc.StatusCode.UNIMPLEMENTED, "no capabilities")
        fake_transport.call.side_effect = error

        with pytest.raises(GrpcError) as excinfo:
            await client.capabilities()
        assert excinfo.value is error


class TestGet:
    """Tests for Client.get()."""

    async def test_returns_raw_response(self, client: Client, fake_transport: AsyncMock) -> None:
        """Test the GetResponse is returned without post-processing."""
        response = gnmi_pb2.GetResponse(notification=[gnmi_pb2.Notification(timestamp=42)])
        fake_transport.call.return_value = response

        result = await client.get("interfaces", "interface/state", DataType.STATE, Encoding.JSON_IETF)

        assert result is response
        request = fake_transport.call.await_args.args[0]
        assert request.method == GET_METHOD
        assert request.response_type is gnmi_pb2.GetResponse
        assert request.message.type == gnmi_pb2.GetRequest.STATE
        assert request.message.encoding == gnmi_pb2.JSON_IETF
        assert request.message.prefix == Path.from_str("interfaces").to_proto()
        assert request.metadata == {"username": "admin", "password": "admin"}

    async def test_structural_path(self, client: Client, fake_transport: AsyncMock) -> None:
        """Test a structural Path is sent with its keys."""
        fake_transport.call.return_value = gnmi_pb2.GetResponse()
        path = Path().push("interface", {"name": "ethernet-1/1"})

        await client.get("", path)

        request = fake_transport.call.await_args.args[0]
        assert list(request.message.path) == [path.to_proto()]

    async def test_rpc_error_propagates(self, client: Client, fake_transport: AsyncMock) -> None:
        """Test Get errors reach the caller."""
        fake_transport.call.side_effect = GrpcError(grpc.StatusCode.NOT_FOUND, "no such path")

        with pytest.raises(GrpcError, match="NOT_FOUND"):
            await client.get("", "does/not/exist")


class TestClientLifecycle:
    """Tests for cloning and closing."""

    async def test_clone_shares_transport(
        self, client: Client, fake_transport: AsyncMock
    ) -> None:
        """Test clones route through the same transport."""
        fake_transport.call.return_value = gnmi_pb2.GetResponse()
        clone = client.clone()

        await asyncio.gather(client.get("", "a"), clone.get("", "b"))

        assert clone is not client
        assert fake_transport.call.await_count == 2

    async def test_context_manager_closes(
        self, client: Client, fake_transport: AsyncMock
    ) -> None:
        """Test leaving the context closes the transport."""
        async with client:
            pass
        fake_transport.close.assert_awaited_once()

    async def test_close_without_transport(self, fake_transport: AsyncMock) -> None:
        """Test closing a client built around a bare service is a no-op."""
        await Client(AuthService(fake_transport)).close()
        fake_transport.close.assert_not_awaited()
