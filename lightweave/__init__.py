"""
lightweave - vendor-neutral discovery and control for smart lights.
"""

from .capabilities import (
    BaseLight,
    ConfigError,
    DiscoveryError,
    Integration,
    Light,
    LightState,
    LightweaveError,
    ProtocolError,
    TransportError,
)
from .config import Settings, configure_logging
from .discovery import Discoverer, discover_lights
from .utils import FutureBatch

__version__ = "0.1.0"

__all__ = [
    "discover_lights",
    "Discoverer",
    "FutureBatch",
    "Light",
    "LightState",
    "BaseLight",
    "Integration",
    "Settings",
    "configure_logging",
    "LightweaveError",
    "TransportError",
    "ProtocolError",
    "ConfigError",
    "DiscoveryError",
]
