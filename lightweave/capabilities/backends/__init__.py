"""
Communication backends for device capabilities.

Backends handle the actual wire communication with devices
(sockets, codecs, request/response correlation).
"""

from .govee_udp import (
    GOVEE_CONTROL_PORT,
    GoveeClient,
    format_device_address,
    parse_device_address,
)

__all__ = [
    "GOVEE_CONTROL_PORT",
    "GoveeClient",
    "format_device_address",
    "parse_device_address",
]
