"""
Custom exceptions for the capability layer.

Provides explicit error types for device and discovery failures.
"""

from typing import Optional


class LightweaveError(Exception):
    """Base exception for all lightweave errors."""

    pass


class TransportError(LightweaveError):
    """Raised when a socket bind, send or receive fails or times out."""

    def __init__(self, message: str, address: Optional[str] = None):
        self.address = address
        if address:
            message = f"{message} (device: {address})"
        super().__init__(message)


class ProtocolError(LightweaveError):
    """Raised when a device response is malformed or not the expected reply."""

    pass


class ConfigError(LightweaveError):
    """Raised when an address or connection parameter is malformed."""

    pass


class DiscoveryError(LightweaveError):
    """Raised when an integration cannot begin discovery at all."""

    def __init__(self, integration: str, cause: Exception):
        self.integration = integration
        self.cause = cause
        super().__init__(f"Discovery for '{integration}' could not start: {cause}")
