"""
Shared fixtures: a simulated Govee device answering on loopback UDP.
"""

import asyncio
from typing import Optional

import pytest_asyncio

from lightweave.capabilities.backends.govee_udp import (
    DeviceColor,
    DevStatusRequest,
    DevStatusResponse,
    DeviceStatus,
    decode_request,
    encode_response,
)

LOOPBACK = "127.0.0.1"


def make_status(
    on: bool = True,
    brightness: int = 80,
    rgb: tuple[int, int, int] = (255, 0, 0),
) -> DeviceStatus:
    r, g, b = rgb
    return DeviceStatus(on=on, brightness=brightness, color=DeviceColor(r=r, g=g, b=b))


class SimulatedGoveeDevice(asyncio.DatagramProtocol):
    """
    Minimal Govee LAN endpoint.

    Records every request it decodes. Answers devStatus with `status`
    unless `respond` is False; `raw_reply` replaces the encoded answer.
    """

    def __init__(self, status: DeviceStatus, respond: bool = True):
        self.status = status
        self.respond = respond
        self.raw_reply: Optional[bytes] = None
        self.received: list = []
        self.transport: Optional[asyncio.DatagramTransport] = None

    def connection_made(self, transport) -> None:
        self.transport = transport

    def datagram_received(self, data: bytes, addr) -> None:
        request = decode_request(data)
        self.received.append(request)
        if not self.respond or not isinstance(request, DevStatusRequest):
            return
        reply = self.raw_reply or encode_response(DevStatusResponse(data=self.status))
        self.transport.sendto(reply, addr)

    @property
    def host_port(self) -> tuple[str, int]:
        return self.transport.get_extra_info("sockname")[:2]

    @property
    def address(self) -> str:
        host, port = self.host_port
        return f"{host}:{port}"

    async def wait_for_requests(self, count: int, timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while len(self.received) < count:
            if loop.time() > deadline:
                raise AssertionError(
                    f"expected {count} request(s), got {len(self.received)}"
                )
            await asyncio.sleep(0.01)


@pytest_asyncio.fixture
async def govee_device_factory():
    """Start simulated devices on ephemeral loopback ports; closed after the test."""
    transports = []

    async def start(
        status: Optional[DeviceStatus] = None,
        respond: bool = True,
    ) -> SimulatedGoveeDevice:
        loop = asyncio.get_running_loop()
        device = SimulatedGoveeDevice(status or make_status(), respond=respond)
        transport, _ = await loop.create_datagram_endpoint(
            lambda: device, local_addr=(LOOPBACK, 0)
        )
        transports.append(transport)
        return device

    yield start

    for transport in transports:
        transport.close()


@pytest_asyncio.fixture
async def govee_device(govee_device_factory):
    return await govee_device_factory()
