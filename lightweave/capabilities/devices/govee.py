"""
Govee LAN light implementation.

Lights are found from a static address list; each one is confirmed with a
devStatus exchange before it is handed out. All lights from one discovery
pass share a single GoveeClient socket.
"""

import logging
from typing import TYPE_CHECKING, Optional

from ..backends.govee_udp import (
    BrightnessRequest,
    ColorRequest,
    DevStatusRequest,
    DevStatusResponse,
    GoveeClient,
    HostAndPort,
    TurnRequest,
    format_device_address,
    parse_device_address,
)
from ..exceptions import (
    ConfigError,
    DiscoveryError,
    LightweaveError,
    ProtocolError,
    TransportError,
)
from ..protocols import BaseLight, Integration, LightState
from ...utils.future import FutureBatch

if TYPE_CHECKING:
    from ...config import Settings

logger = logging.getLogger("lightweave.capabilities.devices.govee")

MIN_BRIGHTNESS = 0
MAX_BRIGHTNESS = 100


def _clamp_brightness(level: int) -> int:
    return max(MIN_BRIGHTNESS, min(MAX_BRIGHTNESS, level))


def _check_channel(label: str, value: int) -> int:
    if not 0 <= value <= 255:
        raise ValueError(f"{label} channel must be between 0 and 255, got {value}")
    return value


class GoveeLight(BaseLight):
    """
    A Govee light reachable over the LAN API.

    The cache is filled by refresh_state and mirrored by each successful
    mutator; nothing is read back from the device after a write.
    """

    VENDOR = "govee"

    def __init__(
        self,
        client: GoveeClient,
        device_addr: HostAndPort,
        timeout: Optional[float] = None,
    ):
        address = format_device_address(device_addr)
        super().__init__(address, f"Govee Light ({address})", supports_color=True)
        self._client = client
        self._device_addr = device_addr
        self._timeout = timeout

    @classmethod
    async def connect(
        cls,
        client: GoveeClient,
        address: str,
        timeout: Optional[float] = None,
    ) -> "GoveeLight":
        """
        Build a light for a configured address and read its initial state.

        Raises:
            ConfigError: address is malformed
            TransportError: device did not answer
            ProtocolError: device answered with something other than a status
        """
        light = cls(client, parse_device_address(address), timeout=timeout)
        await light.refresh_state()
        return light

    @property
    def device_address(self) -> HostAndPort:
        return self._device_addr

    async def refresh_state(self) -> None:
        response = await self._client.request(
            self._device_addr, DevStatusRequest(), timeout=self._timeout
        )
        if not isinstance(response, DevStatusResponse):
            raise ProtocolError(
                f"Expected devStatus reply from {self._local_id}, got {response.cmd!r}"
            )

        status = response.data
        self._state = LightState(
            is_on=status.on,
            brightness=_clamp_brightness(status.brightness),
            rgb_color=(status.color.r, status.color.g, status.color.b),
        )
        logger.debug("%s state refreshed: %s", self.id, self._state)

    async def set_on(self, on: bool) -> None:
        await self._client.send(self._device_addr, TurnRequest.for_state(on))
        self._state.is_on = on

    async def set_color(self, red: int, green: int, blue: int) -> None:
        rgb = (
            _check_channel("red", red),
            _check_channel("green", green),
            _check_channel("blue", blue),
        )
        await self._client.send(self._device_addr, ColorRequest.for_rgb(*rgb))
        self._state.rgb_color = rgb

    async def set_brightness(self, brightness: int) -> None:
        level = _clamp_brightness(brightness)
        await self._client.send(self._device_addr, BrightnessRequest.for_level(level))
        self._state.brightness = level


class GoveeIntegration(Integration):
    """Discovers Govee lights from the configured address list."""

    @property
    def name(self) -> str:
        return "govee"

    def preflight(self, settings: "Settings") -> bool:
        return settings.govee.enabled

    async def discover(self, settings: "Settings") -> list[GoveeLight]:
        config = settings.govee
        client = GoveeClient()
        try:
            await client.open(config.bind_host, config.bind_port)
        except TransportError as e:
            raise DiscoveryError(self.name, e) from e

        logger.info(
            "Govee discovery: querying %d configured address(es) from %s",
            len(config.addresses), client.local_address,
        )

        batch: FutureBatch[Optional[GoveeLight]] = FutureBatch()
        for device_addr in self._unique_addresses(config.addresses):
            batch.push(self._connect(client, device_addr, config.response_timeout))

        try:
            results = await batch.run()
        except BaseException:
            client.close()
            raise

        lights = [light for light in results if light is not None]
        if not lights:
            client.close()

        logger.info(
            "Govee discovery found %d of %d light(s)", len(lights), len(config.addresses)
        )
        return lights

    def _unique_addresses(self, addresses: list[str]) -> list[HostAndPort]:
        """Parse configured addresses in order, dropping malformed and repeated ones."""
        unique: list[HostAndPort] = []
        for address in addresses:
            try:
                device_addr = parse_device_address(address)
            except ConfigError as e:
                logger.warning("Skipping Govee device %r: %s", address, e)
                continue
            if device_addr in unique:
                logger.warning(
                    "Skipping Govee device %r: duplicate of %s",
                    address, format_device_address(device_addr),
                )
                continue
            unique.append(device_addr)
        return unique

    async def _connect(
        self,
        client: GoveeClient,
        device_addr: HostAndPort,
        timeout: Optional[float],
    ) -> Optional[GoveeLight]:
        light = GoveeLight(client, device_addr, timeout=timeout)
        try:
            await light.refresh_state()
        except LightweaveError as e:
            logger.warning("Skipping Govee device %s: %s", format_device_address(device_addr), e)
            return None
        return light
