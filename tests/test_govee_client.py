"""
Tests for GoveeClient over loopback UDP against simulated devices.
"""

import asyncio
import logging

import pytest
import pytest_asyncio

from lightweave.capabilities.backends.govee_udp import (
    RESPONSE_BUFFER_SIZE,
    DevStatusRequest,
    DeviceColor,
    DevStatusResponse,
    DeviceStatus,
    GoveeClient,
    TurnRequest,
)
from lightweave.capabilities.exceptions import ProtocolError, TransportError

LOOPBACK = "127.0.0.1"


def make_status(on: bool = True, rgb: tuple[int, int, int] = (255, 0, 0)) -> DeviceStatus:
    r, g, b = rgb
    return DeviceStatus(on=on, brightness=50, color=DeviceColor(r=r, g=g, b=b))


@pytest_asyncio.fixture
async def client():
    client = GoveeClient()
    yield client
    client.close()


class TestOpenClose:
    """Socket lifecycle."""

    @pytest.mark.asyncio
    async def test_open_binds_ephemeral_port(self, client):
        assert not client.is_open
        assert client.local_address is None

        await client.open(LOOPBACK, 0)

        assert client.is_open
        host, port = client.local_address
        assert host == LOOPBACK
        assert port > 0

    @pytest.mark.asyncio
    async def test_close(self, client):
        await client.open(LOOPBACK, 0)
        client.close()

        assert not client.is_open
        assert client.local_address is None

    @pytest.mark.asyncio
    async def test_open_twice_raises(self, client):
        await client.open(LOOPBACK, 0)
        with pytest.raises(TransportError):
            await client.open(LOOPBACK, 0)

    @pytest.mark.asyncio
    async def test_bind_failure_is_transport_error(self, client):
        # TEST-NET-3 address; not assigned to any local interface
        with pytest.raises(TransportError, match="Could not bind"):
            await client.open("203.0.113.1", 0)

    @pytest.mark.asyncio
    async def test_send_before_open_raises(self, client):
        with pytest.raises(TransportError, match="not open"):
            await client.send((LOOPBACK, 4003), TurnRequest.for_state(True))


class TestRequest:
    """devStatus exchanges."""

    @pytest.mark.asyncio
    async def test_request_returns_device_status(self, client, govee_device):
        await client.open(LOOPBACK, 0)

        response = await client.request(govee_device.host_port, DevStatusRequest(), timeout=1.0)

        assert isinstance(response, DevStatusResponse)
        assert response.data == govee_device.status

    @pytest.mark.asyncio
    async def test_timeout_raises_with_device_address(self, client, govee_device_factory):
        silent = await govee_device_factory(respond=False)
        await client.open(LOOPBACK, 0)

        with pytest.raises(TransportError) as exc_info:
            await client.request(silent.host_port, DevStatusRequest(), timeout=0.1)

        assert exc_info.value.address == silent.address
        assert "No response" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_oversized_reply_is_truncated(self, client, govee_device):
        govee_device.raw_reply = b'{"msg": {"cmd": "devStatus", "data": {"pad": "'
        govee_device.raw_reply += b"x" * (RESPONSE_BUFFER_SIZE * 2) + b'"}}}'
        await client.open(LOOPBACK, 0)

        with pytest.raises(ProtocolError):
            await client.request(govee_device.host_port, DevStatusRequest(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_close_fails_pending_exchange(self, client, govee_device_factory):
        silent = await govee_device_factory(respond=False)
        await client.open(LOOPBACK, 0)

        pending = asyncio.create_task(client.request(silent.host_port, DevStatusRequest()))
        await silent.wait_for_requests(1)
        client.close()

        with pytest.raises(TransportError, match="closed"):
            await pending

    @pytest.mark.asyncio
    async def test_replies_go_to_the_right_device(self, client, govee_device_factory):
        red = await govee_device_factory(make_status(rgb=(255, 0, 0)))
        blue = await govee_device_factory(make_status(on=False, rgb=(0, 0, 255)))
        await client.open(LOOPBACK, 0)

        red_reply, blue_reply = await asyncio.gather(
            client.request(red.host_port, DevStatusRequest(), timeout=1.0),
            client.request(blue.host_port, DevStatusRequest(), timeout=1.0),
        )

        assert red_reply.data == red.status
        assert blue_reply.data == blue.status

    @pytest.mark.asyncio
    async def test_unsolicited_datagram_is_discarded(self, client, caplog):
        caplog.set_level(logging.DEBUG, logger="lightweave.capabilities.backends.govee_udp")
        await client.open(LOOPBACK, 0)

        client._on_datagram(b"{}", ("192.0.2.10", 4003))

        assert "Discarding datagram from 192.0.2.10" in caplog.text


class TestSend:
    """Fire-and-forget commands."""

    @pytest.mark.asyncio
    async def test_send_reaches_device(self, client, govee_device):
        await client.open(LOOPBACK, 0)

        await client.send(govee_device.host_port, TurnRequest.for_state(False))
        await govee_device.wait_for_requests(1)

        assert govee_device.received == [TurnRequest.for_state(False)]
