"""
Capability system for vendor-neutral light control.

This module provides:
- Protocol definitions for lights and vendor integrations
- The error taxonomy shared by every vendor module
"""

from .exceptions import (
    ConfigError,
    DiscoveryError,
    LightweaveError,
    ProtocolError,
    TransportError,
)
from .protocols import BaseLight, Integration, Light, LightState, make_light_id

__all__ = [
    # Protocols
    "Light",
    "Integration",
    "BaseLight",
    "LightState",
    "make_light_id",
    # Errors
    "LightweaveError",
    "TransportError",
    "ProtocolError",
    "ConfigError",
    "DiscoveryError",
]
