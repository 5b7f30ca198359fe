"""
Mock device implementations for testing.

These lights keep their state in memory and need no network.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from ..protocols import BaseLight, Integration, LightState

if TYPE_CHECKING:
    from ...config import Settings

logger = logging.getLogger("lightweave.capabilities.devices.mock")


class MockLight(BaseLight):
    """
    Mock light for exercising the discovery pipeline.

    A white-only mock (supports_color=False) ignores set_color.
    """

    VENDOR = "mock"

    def __init__(self, local_id: str, name: str, supports_color: bool = True):
        super().__init__(local_id, name, supports_color=supports_color)
        self._device = LightState(is_on=False, brightness=100, rgb_color=(255, 255, 255))
        self.commands: list[tuple[str, tuple]] = []

    async def refresh_state(self) -> None:
        self._state = LightState(
            is_on=self._device.is_on,
            brightness=self._device.brightness,
            rgb_color=self._device.rgb_color,
        )

    async def set_on(self, on: bool) -> None:
        self.commands.append(("set_on", (on,)))
        self._device.is_on = on
        self._state.is_on = on
        logger.info("[MOCK] %s turned %s", self.name, "ON" if on else "OFF")

    async def set_color(self, red: int, green: int, blue: int) -> None:
        if not self.supports_color:
            logger.debug("[MOCK] %s is white-only, ignoring color", self.name)
            return
        for label, value in (("red", red), ("green", green), ("blue", blue)):
            if not 0 <= value <= 255:
                raise ValueError(f"{label} channel must be between 0 and 255, got {value}")
        self.commands.append(("set_color", (red, green, blue)))
        self._device.rgb_color = (red, green, blue)
        self._state.rgb_color = (red, green, blue)
        logger.info("[MOCK] %s color set to (%d, %d, %d)", self.name, red, green, blue)

    async def set_brightness(self, brightness: int) -> None:
        level = max(0, min(100, brightness))
        self.commands.append(("set_brightness", (level,)))
        self._device.brightness = level
        self._state.brightness = level
        logger.info("[MOCK] %s brightness set to %d", self.name, level)


class MockIntegration(Integration):
    """Produces mock.count in-memory lights after mock.latency_ms."""

    @property
    def name(self) -> str:
        return "mock"

    def preflight(self, settings: "Settings") -> bool:
        return settings.mock.enabled

    async def discover(self, settings: "Settings") -> list[MockLight]:
        config = settings.mock
        if config.latency_ms:
            await asyncio.sleep(config.latency_ms / 1000)

        lights = []
        for i in range(config.count):
            light = MockLight(
                f"light-{i}",
                f"Mock Light {i}",
                supports_color=(i % 2 == 0),
            )
            await light.refresh_state()
            lights.append(light)

        logger.info("[MOCK] discovered %d light(s)", len(lights))
        return lights
