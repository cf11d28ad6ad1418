"""
Infrastructure components for the rendezvous relay.

This package contains infrastructure concerns including:
- Logging configuration and utilities with production controls
- Custom exception definitions
"""

from .logging import setup_logging, get_logger, apply_log_level, LoggingContext
from .logging_manager import LoggingManager, Environment
from .exceptions import (
    RelayError,
    ConfigurationError,
    EnvelopeError,
    RegistryError,
    RoomNotFoundError,
    UnregisteredClientError,
    SignalingError,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "apply_log_level",
    "LoggingContext",
    "LoggingManager",
    "Environment",
    # Exceptions
    "RelayError",
    "ConfigurationError",
    "EnvelopeError",
    "RegistryError",
    "RoomNotFoundError",
    "UnregisteredClientError",
    "SignalingError",
]
