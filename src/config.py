"""
Configuration module for the Pterodactyl provider.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PanelConfig:
    """Pterodactyl Panel API configuration."""

    url: str = "http://localhost"
    api_key: str = field(default="", repr=False)  # Never log the API key
    timeout: int = 30  # seconds

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        api_key = os.getenv("PTERODACTYL_API_KEY", "")
        if not api_key:
            raise ValueError(
                "PTERODACTYL_API_KEY environment variable must be set. "
                "The panel application API key cannot be empty."
            )

        return cls(
            url=os.getenv("PTERODACTYL_URL", "http://localhost"),
            api_key=api_key,
            timeout=int(os.getenv("PTERODACTYL_TIMEOUT", "30")),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(level=os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class Config:
    """Main configuration object."""

    panel: PanelConfig
    logging: LoggingConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            panel=PanelConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(
            panel=PanelConfig(),
            logging=LoggingConfig(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
