"""
Govee LAN API backend: JSON-over-UDP wire codec and shared-socket client.

Every message travels as {"msg": {"cmd": <command>, "data": <payload>}}.
Devices listen on UDP port 4003. devStatus is answered with a status
reply; turn, brightness and colorwc are fire-and-forget.

The protocol carries no correlation identifier. A client that shares one
socket between several devices and takes "the next datagram" as the reply
can hand one device's status to another. GoveeClient instead routes each
datagram to the exchange waiting on its source host, and keeps at most one
exchange per host outstanding.
"""

import asyncio
import ipaddress
import logging
import socket
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    IPvAnyAddress,
    ValidationError,
    ValidationInfo,
    field_serializer,
    field_validator,
)

from ..exceptions import ConfigError, ProtocolError, TransportError

logger = logging.getLogger("lightweave.capabilities.backends.govee_udp")

GOVEE_CONTROL_PORT = 4003
RESPONSE_BUFFER_SIZE = 1024

HostAndPort = tuple[str, int]


# ------------------------------------------------------------------
# Wire quirk: on/off travels as integer 0/1
# ------------------------------------------------------------------


def bool_to_wire(value: bool) -> int:
    return 1 if value else 0


def bool_from_wire(value: Any) -> bool:
    # bool is an int subclass; a JSON true is not a valid flag here
    if isinstance(value, bool) or value not in (0, 1):
        raise ValueError(f"expected 0 or 1, got {value!r}")
    return value == 1


# ------------------------------------------------------------------
# Payloads
# ------------------------------------------------------------------


class DeviceColor(BaseModel):
    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)


class DeviceStatus(BaseModel):
    """Payload of a devStatus reply."""

    model_config = ConfigDict(populate_by_name=True)

    on: bool = Field(alias="onOff")
    brightness: int = Field(ge=0, le=255)
    color: DeviceColor
    color_temperature_kelvin: int = Field(default=0, ge=0, alias="colorTemInKelvin")

    @field_validator("on", mode="before")
    @classmethod
    def _decode_on_off(cls, value: Any, info: ValidationInfo) -> bool:
        # Python callers may pass a real bool; the wire only carries 0/1
        if info.mode == "python" and isinstance(value, bool):
            return value
        return bool_from_wire(value)

    @field_serializer("on")
    def _encode_on_off(self, value: bool) -> int:
        return bool_to_wire(value)


class LanDevice(BaseModel):
    """Payload of a scan reply."""

    model_config = ConfigDict(populate_by_name=True)

    ip: IPvAnyAddress
    device: str
    sku: str
    ble_version_hard: str = Field(alias="bleVersionHard")
    ble_version_soft: str = Field(alias="bleVersionSoft")
    wifi_version_hard: str = Field(alias="wifiVersionHard")
    wifi_version_soft: str = Field(alias="wifiVersionSoft")


class EmptyPayload(BaseModel):
    pass


class ScanPayload(BaseModel):
    account_topic: Literal["reserve"] = "reserve"


class TurnPayload(BaseModel):
    value: Literal[0, 1]


class BrightnessPayload(BaseModel):
    value: int = Field(ge=0, le=100)


class ColorPayload(BaseModel):
    color: DeviceColor


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


class ScanRequest(BaseModel):
    cmd: Literal["scan"] = "scan"
    data: ScanPayload = Field(default_factory=ScanPayload)


class DevStatusRequest(BaseModel):
    cmd: Literal["devStatus"] = "devStatus"
    data: EmptyPayload = Field(default_factory=EmptyPayload)


class TurnRequest(BaseModel):
    cmd: Literal["turn"] = "turn"
    data: TurnPayload

    @classmethod
    def for_state(cls, on: bool) -> "TurnRequest":
        return cls(data=TurnPayload(value=bool_to_wire(on)))

    @property
    def on(self) -> bool:
        return bool_from_wire(self.data.value)


class BrightnessRequest(BaseModel):
    cmd: Literal["brightness"] = "brightness"
    data: BrightnessPayload

    @classmethod
    def for_level(cls, level: int) -> "BrightnessRequest":
        return cls(data=BrightnessPayload(value=level))


class ColorRequest(BaseModel):
    cmd: Literal["colorwc"] = "colorwc"
    data: ColorPayload

    @classmethod
    def for_rgb(cls, red: int, green: int, blue: int) -> "ColorRequest":
        return cls(data=ColorPayload(color=DeviceColor(r=red, g=green, b=blue)))


class DevStatusResponse(BaseModel):
    cmd: Literal["devStatus"] = "devStatus"
    data: DeviceStatus


class ScanResponse(BaseModel):
    cmd: Literal["scan"] = "scan"
    data: LanDevice


Request = Annotated[
    Union[ScanRequest, DevStatusRequest, TurnRequest, BrightnessRequest, ColorRequest],
    Field(discriminator="cmd"),
]
Response = Annotated[Union[DevStatusResponse, ScanResponse], Field(discriminator="cmd")]


class RequestMessage(BaseModel):
    msg: Request


class ResponseMessage(BaseModel):
    msg: Response


# ------------------------------------------------------------------
# Codec
# ------------------------------------------------------------------


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


def encode_request(request: Request) -> bytes:
    return RequestMessage(msg=request).model_dump_json(by_alias=True).encode("utf-8")


def decode_request(data: bytes) -> Request:
    """Decode a request datagram (device side of the exchange)."""
    try:
        return RequestMessage.model_validate_json(data).msg
    except ValidationError as e:
        raise ProtocolError(f"Malformed Govee request: {_describe(e)}") from e


def encode_response(response: Response) -> bytes:
    """Encode a reply datagram (device side of the exchange)."""
    return ResponseMessage(msg=response).model_dump_json(by_alias=True).encode("utf-8")


def decode_response(data: bytes) -> Response:
    try:
        return ResponseMessage.model_validate_json(data).msg
    except ValidationError as e:
        raise ProtocolError(f"Malformed Govee response: {_describe(e)}") from e


def parse_device_address(address: str) -> HostAndPort:
    """
    Parse a configured device address.

    Accepts 'a.b.c.d' (control port 4003) or 'a.b.c.d:port'.

    Raises:
        ConfigError: the address is not an IPv4 address with optional port.
    """
    text = address.strip()
    host, port = text, GOVEE_CONTROL_PORT
    if ":" in text:
        host, _, port_text = text.rpartition(":")
        try:
            port = int(port_text)
        except ValueError:
            raise ConfigError(f"Invalid port in Govee device address: {address!r}") from None
        if not 0 < port < 65536:
            raise ConfigError(f"Port out of range in Govee device address: {address!r}")
    try:
        ip = ipaddress.IPv4Address(host)
    except ValueError as e:
        raise ConfigError(f"Invalid Govee device address: {address!r}") from e
    return (str(ip), port)


def format_device_address(addr: HostAndPort) -> str:
    """Canonical text form of a device address; the control port is implied."""
    host, port = addr
    if port == GOVEE_CONTROL_PORT:
        return host
    return f"{host}:{port}"


# ------------------------------------------------------------------
# Client
# ------------------------------------------------------------------


class _GoveeDatagramProtocol(asyncio.DatagramProtocol):
    """Adapter between the asyncio transport and GoveeClient."""

    def __init__(self, client: "GoveeClient"):
        self._client = client

    def datagram_received(self, data: bytes, addr: HostAndPort) -> None:
        self._client._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        # ICMP errors cannot be tied to one exchange; that exchange times out.
        logger.debug("Govee socket error: %s", exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self._client._on_connection_lost(exc)


class GoveeClient:
    """
    One UDP socket shared by every Govee light found in a discovery pass.

    Usage:
        client = GoveeClient()
        await client.open()
        response = await client.request(("10.0.0.5", 4003), DevStatusRequest(), timeout=5.0)
        await client.send(("10.0.0.5", 4003), TurnRequest.for_state(True))
        client.close()
    """

    def __init__(self):
        self._transport: Optional[asyncio.DatagramTransport] = None
        self._waiters: dict[str, asyncio.Future[bytes]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def is_open(self) -> bool:
        return self._transport is not None and not self._transport.is_closing()

    @property
    def local_address(self) -> Optional[HostAndPort]:
        if self._transport is None:
            return None
        return self._transport.get_extra_info("sockname")

    async def open(self, bind_host: str = "0.0.0.0", bind_port: int = 0) -> None:
        """Bind the shared socket."""
        if self._transport is not None:
            raise TransportError("Govee client is already open")

        loop = asyncio.get_running_loop()
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _GoveeDatagramProtocol(self),
                local_addr=(bind_host, bind_port),
                family=socket.AF_INET,
            )
        except OSError as e:
            raise TransportError(
                f"Could not bind Govee socket on {bind_host}:{bind_port}: {e}"
            ) from e

        self._transport = transport  # type: ignore[assignment]
        logger.debug("Govee client bound to %s", self.local_address)

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        self._fail_waiters("Govee client closed")

    async def send(self, addr: HostAndPort, request: Request) -> None:
        """Send a command that expects no reply."""
        self._sendto(encode_request(request), addr)

    async def request(
        self,
        addr: HostAndPort,
        request: Request,
        timeout: Optional[float] = None,
    ) -> Response:
        """
        Send a command and wait for the device's reply.

        Args:
            addr: Device (host, port)
            request: Command to send
            timeout: Seconds to wait for the reply; None waits indefinitely

        Raises:
            TransportError: send failed, socket closed, or no reply in time
            ProtocolError: the reply did not decode
        """
        host, port = addr
        lock = self._locks.setdefault(host, asyncio.Lock())
        async with lock:
            waiter: asyncio.Future[bytes] = asyncio.get_running_loop().create_future()
            self._waiters[host] = waiter
            try:
                self._sendto(encode_request(request), addr)
                try:
                    data = await asyncio.wait_for(waiter, timeout)
                except asyncio.TimeoutError as e:
                    raise TransportError(
                        f"No response within {timeout:.1f}s",
                        address=f"{host}:{port}",
                    ) from e
            finally:
                if self._waiters.get(host) is waiter:
                    del self._waiters[host]

        logger.debug("Received from %s:%d: %s", host, port, data)
        return decode_response(data)

    def _sendto(self, payload: bytes, addr: HostAndPort) -> None:
        if not self.is_open:
            raise TransportError("Govee client is not open", address=f"{addr[0]}:{addr[1]}")
        logger.debug("Sending to %s:%d: %s", addr[0], addr[1], payload)
        try:
            self._transport.sendto(payload, addr)
        except OSError as e:
            raise TransportError(f"Send failed: {e}", address=f"{addr[0]}:{addr[1]}") from e

    def _on_datagram(self, data: bytes, addr: HostAndPort) -> None:
        waiter = self._waiters.get(addr[0])
        if waiter is None or waiter.done():
            logger.debug("Discarding datagram from %s:%d, no exchange pending", addr[0], addr[1])
            return
        if len(data) > RESPONSE_BUFFER_SIZE:
            logger.debug(
                "Truncating %d-byte datagram from %s to %d bytes",
                len(data), addr[0], RESPONSE_BUFFER_SIZE,
            )
        waiter.set_result(data[:RESPONSE_BUFFER_SIZE])

    def _on_connection_lost(self, exc: Optional[Exception]) -> None:
        self._transport = None
        self._fail_waiters(f"Govee socket closed: {exc}" if exc else "Govee socket closed")

    def _fail_waiters(self, message: str) -> None:
        for host, waiter in self._waiters.items():
            if not waiter.done():
                waiter.set_exception(TransportError(message, address=host))
