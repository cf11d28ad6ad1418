"""
Configuration management for the rendezvous relay.

Settings come from the process environment, optionally seeded from a
``.env`` file.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from ..core.types import (
    DEFAULT_HOST,
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_OUTBOUND_QUEUE_SIZE,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PORT,
    ENV_HOST,
    ENV_LOG_LEVEL,
    ENV_MAX_MESSAGE_SIZE,
    ENV_OUTBOUND_QUEUE_SIZE,
    ENV_PING_INTERVAL,
    ENV_PORT,
    LOG_LEVELS,
)
from ..infrastructure.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class RelayConfig:
    """Runtime configuration for the signaling relay."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    ping_interval: int = DEFAULT_PING_INTERVAL
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE
    outbound_queue_size: int = DEFAULT_OUTBOUND_QUEUE_SIZE
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate ranges after construction."""
        if not 0 <= self.port <= 65535:
            raise ConfigurationError(f"Port out of range: {self.port}")
        if self.ping_interval < 0:
            raise ConfigurationError("ping_interval cannot be negative")
        if self.max_message_size <= 0:
            raise ConfigurationError("max_message_size must be positive")
        if self.outbound_queue_size <= 0:
            raise ConfigurationError("outbound_queue_size must be positive")
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level {self.log_level!r}, expected one of {', '.join(LOG_LEVELS)}"
            )


class RelayConfigManager:
    """Simple configuration manager."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to environment file
        """
        self.env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from file."""
        if os.path.exists(self.env_file_path):
            load_dotenv(dotenv_path=self.env_file_path)
            logger.info(f"Loaded environment from {self.env_file_path}")
        else:
            logger.debug(f"Environment file {self.env_file_path} not found")

    def _get_optional_env(self, key: str, default: str = None) -> str:
        """Get optional environment variable."""
        return os.getenv(key, default)

    def _get_int_env(self, key: str, default: int) -> int:
        """
        Get an integer environment variable.

        Raises:
            ConfigurationError: If the value is not an integer
        """
        value = self._get_optional_env(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(
                f"Environment variable {key} must be an integer, got {value!r}"
            )

    def get_config(self) -> RelayConfig:
        """
        Get the relay configuration.

        Returns:
            RelayConfig: Relay configuration

        Raises:
            ConfigurationError: If a setting is malformed
        """
        try:
            config = RelayConfig(
                host=self._get_optional_env(ENV_HOST, DEFAULT_HOST),
                port=self._get_int_env(ENV_PORT, DEFAULT_PORT),
                ping_interval=self._get_int_env(
                    ENV_PING_INTERVAL, DEFAULT_PING_INTERVAL
                ),
                max_message_size=self._get_int_env(
                    ENV_MAX_MESSAGE_SIZE, DEFAULT_MAX_MESSAGE_SIZE
                ),
                outbound_queue_size=self._get_int_env(
                    ENV_OUTBOUND_QUEUE_SIZE, DEFAULT_OUTBOUND_QUEUE_SIZE
                ),
                log_level=self._get_optional_env(ENV_LOG_LEVEL, "INFO").upper(),
            )

            logger.info("Configuration loaded successfully")
            return config

        except ConfigurationError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise


# Global configuration manager instance
config_manager = RelayConfigManager()
