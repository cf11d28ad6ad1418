"""
Configuration management for the rendezvous relay.

This package provides:
- The relay configuration dataclass
- Environment variable and .env file loading
- Default value management
"""

from .settings import RelayConfig, RelayConfigManager, config_manager

__all__ = [
    "RelayConfig",
    "RelayConfigManager",
    "config_manager",
]
