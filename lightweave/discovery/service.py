"""
Discovery Service - Orchestrates light discovery across vendors.

Each registered integration runs as one task in a shared FutureBatch, so a
slow or broken vendor never delays or breaks the others.
"""

import logging
from typing import Iterable, Optional

from ..capabilities.devices import GoveeIntegration, MockIntegration
from ..capabilities.exceptions import DiscoveryError
from ..capabilities.protocols import Integration, Light
from ..config import Settings
from ..utils.future import FutureBatch

logger = logging.getLogger("lightweave.discovery.service")


def default_integrations() -> list[Integration]:
    """Integrations registered when the caller supplies none."""
    return [GoveeIntegration(), MockIntegration()]


class Discoverer:
    """
    Runs one discovery pass over a set of integrations.

    Usage:
        discoverer = Discoverer(settings)
        discoverer.register(GoveeIntegration())
        lights = await discoverer.run()
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._batch: FutureBatch[list[Light]] = FutureBatch()

    @property
    def settings(self) -> Settings:
        return self._settings

    def register(self, integration: Integration) -> None:
        """Queue an integration for the next run if its preflight passes."""
        if not integration.preflight(self._settings):
            logger.debug("Integration '%s' skipped by preflight", integration.name)
            return

        self._batch.push(self._discover(integration))

    async def _discover(self, integration: Integration) -> list[Light]:
        try:
            lights = await integration.discover(self._settings)
        except DiscoveryError as e:
            logger.warning("Integration '%s' failed: %s", integration.name, e)
            return []
        except Exception:
            logger.exception("Unexpected error discovering '%s' lights", integration.name)
            return []

        logger.info("Integration '%s' found %d light(s)", integration.name, len(lights))
        return list(lights)

    async def run(self) -> list[Light]:
        """Run every registered integration concurrently and flatten the results."""
        logger.info("Starting discovery across %d integration(s)", len(self._batch))
        per_integration = await self._batch.run()
        lights = [light for group in per_integration for light in group]
        logger.info("Discovery complete: %d light(s)", len(lights))
        return lights


async def discover_lights(
    settings: Optional[Settings] = None,
    integrations: Optional[Iterable[Integration]] = None,
) -> list[Light]:
    """
    Discover every reachable light.

    Args:
        settings: Settings snapshot; loaded from the environment when omitted
        integrations: Integrations to run; defaults to every built-in vendor

    Returns:
        Lights in integration registration order
    """
    if settings is None:
        settings = Settings()
    if integrations is None:
        integrations = default_integrations()

    discoverer = Discoverer(settings)
    for integration in integrations:
        discoverer.register(integration)
    return await discoverer.run()
