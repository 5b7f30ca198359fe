"""
Device implementations.

Concrete Light and Integration classes for each supported vendor.
"""

from .govee import GoveeIntegration, GoveeLight
from .mock import MockIntegration, MockLight

__all__ = [
    "GoveeLight",
    "GoveeIntegration",
    "MockLight",
    "MockIntegration",
]
