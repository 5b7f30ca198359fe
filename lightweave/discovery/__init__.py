"""
Light discovery.

Runs every enabled vendor integration concurrently and collects the
lights they find into one list.
"""

from .service import Discoverer, default_integrations, discover_lights

__all__ = ["Discoverer", "default_integrations", "discover_lights"]
