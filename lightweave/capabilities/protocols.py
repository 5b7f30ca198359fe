"""
Protocol definitions for the capability system.

A Light is one controllable device with cached on/off, color and brightness
state. An Integration is the vendor module that finds Lights on its own
network or transport. Every vendor implements both contracts; callers only
ever see these two shapes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..config import Settings

ID_SEPARATOR = "::"


def make_light_id(vendor: str, local_id: str) -> str:
    """Namespace a vendor-local identifier so it is unique across vendors."""
    return f"{vendor}{ID_SEPARATOR}{local_id}"


@dataclass
class LightState:
    """Cached state for a light."""
    is_on: bool = False
    brightness: int = 0  # 0-100
    rgb_color: tuple[int, int, int] = (0, 0, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_on": self.is_on,
            "brightness": self.brightness,
            "rgb_color": list(self.rgb_color),
        }


@runtime_checkable
class Light(Protocol):
    """
    Protocol for every light, whatever the vendor.

    Mutators are write-through: the command is pushed to the device first
    and the cache is updated to the requested value only once that
    succeeded. Accessors read the cache and never perform I/O.
    """

    @property
    def id(self) -> str:
        """Globally unique identifier, '<vendor>::<vendor-local-id>'."""
        ...

    @property
    def name(self) -> str:
        """Human-readable name."""
        ...

    @property
    def is_on(self) -> bool:
        ...

    @property
    def brightness(self) -> int:
        ...

    @property
    def red(self) -> int:
        ...

    @property
    def green(self) -> int:
        ...

    @property
    def blue(self) -> int:
        ...

    @property
    def supports_color(self) -> bool:
        """Whether set_color has an observable effect on this light."""
        ...

    async def refresh_state(self) -> None:
        """Re-read the device state and replace the whole cache."""
        ...

    async def set_on(self, on: bool) -> None:
        ...

    async def set_color(self, red: int, green: int, blue: int) -> None:
        ...

    async def set_brightness(self, brightness: int) -> None:
        ...


class BaseLight:
    """Base class for lights with shared cache handling."""

    VENDOR = ""

    def __init__(self, local_id: str, name: str, supports_color: bool = True):
        self._local_id = local_id
        self._name = name
        self._supports_color = supports_color
        self._state = LightState()

    @property
    def id(self) -> str:
        return make_light_id(self.VENDOR, self._local_id)

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_on(self) -> bool:
        return self._state.is_on

    @property
    def brightness(self) -> int:
        return self._state.brightness

    @property
    def red(self) -> int:
        return self._state.rgb_color[0]

    @property
    def green(self) -> int:
        return self._state.rgb_color[1]

    @property
    def blue(self) -> int:
        return self._state.rgb_color[2]

    @property
    def supports_color(self) -> bool:
        return self._supports_color

    @property
    def state(self) -> LightState:
        """A copy of the cached state."""
        return replace(self._state)

    def to_dict(self) -> dict[str, Any]:
        """Serialize light metadata and cached state."""
        return {
            "id": self.id,
            "name": self.name,
            "vendor": self.VENDOR,
            "supports_color": self.supports_color,
            "state": self._state.to_dict(),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, is_on={self.is_on})"


class Integration(ABC):
    """
    Abstract base class for vendor integrations.

    Integrations hold no state of their own; everything they need comes
    from the Settings snapshot handed to preflight and discover.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Vendor identifier (e.g., 'govee')."""
        ...

    @abstractmethod
    def preflight(self, settings: "Settings") -> bool:
        """
        Cheap synchronous gate, typically "is this vendor enabled".

        Must not perform I/O. When it returns False, discover is never
        called for this vendor.
        """
        ...

    @abstractmethod
    async def discover(self, settings: "Settings") -> list[Light]:
        """
        Find the vendor's lights and return live handles.

        Raises:
            DiscoveryError: the discovery mechanism itself could not start.
                Unreachable individual devices are logged and left out
                instead.
        """
        ...
