"""
Centralized configuration management using Pydantic Settings.

Configuration is loaded from environment variables with sensible defaults.
A Settings instance is a read-only snapshot: build it once and pass it to
every integration.
"""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoveeConfig(BaseSettings):
    """Govee LAN (UDP) integration configuration."""

    model_config = SettingsConfigDict(env_prefix="LIGHTWEAVE_GOVEE_", frozen=True)

    enabled: bool = Field(default=False, description="Enable Govee LAN discovery")
    addresses: list[str] = Field(
        default_factory=list,
        description="Static device addresses, 'ip' or 'ip:port' (no broadcast scan)",
    )
    scan_timeout: int = Field(
        default=5000,
        ge=0,
        description="Milliseconds to wait for a devStatus reply (0 = wait indefinitely)",
    )
    bind_host: str = Field(default="0.0.0.0", description="Local address for the client socket")
    bind_port: int = Field(
        default=0,
        ge=0,
        le=65535,
        description="Local port for the client socket (0 = ephemeral)",
    )

    @property
    def response_timeout(self) -> float | None:
        """scan_timeout in seconds, or None when waits are unbounded."""
        if self.scan_timeout == 0:
            return None
        return self.scan_timeout / 1000


class MockConfig(BaseSettings):
    """In-memory mock lights, for demos and tests."""

    model_config = SettingsConfigDict(env_prefix="LIGHTWEAVE_MOCK_", frozen=True)

    enabled: bool = Field(default=False, description="Enable mock lights")
    count: int = Field(default=2, ge=0, description="Number of mock lights to discover")
    latency_ms: int = Field(default=0, ge=0, description="Simulated discovery latency")


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="LIGHTWEAVE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Integrations
    govee: GoveeConfig = Field(default_factory=GoveeConfig)
    mock: MockConfig = Field(default_factory=MockConfig)


def configure_logging(settings: Settings) -> None:
    """Configure root logging for applications embedding lightweave."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
