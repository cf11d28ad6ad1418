"""
Rendezvous Relay - WebRTC signaling relay for browser peers.

Two peers meet in an ephemeral room: the creator stores an offer, the joiner
fetches it and returns an answer, and both exchange ICE candidates through the
relay until their direct connection is up. The relay never looks inside those
payloads.

Architecture:
- Core: client and room registry
- WebSockets: relay server, per-connection sessions, signaling client
- Config: environment-based settings
- Infrastructure: logging, exceptions
"""

__version__ = "1.0.0"

from .core import RoomRegistry, Room, Client
from .websockets.server import SignalingRelayServer
from .websockets.client import SignalingClient
from .config import RelayConfig, RelayConfigManager, config_manager
from .infrastructure.logging import setup_logging, get_logger
from .infrastructure.exceptions import (
    RelayError,
    ConfigurationError,
    EnvelopeError,
    RoomNotFoundError,
    UnregisteredClientError,
    SignalingError,
)

__all__ = [
    "__version__",
    # Core components
    "RoomRegistry",
    "Room",
    "Client",
    # Networking components
    "SignalingRelayServer",
    "SignalingClient",
    # Configuration
    "RelayConfig",
    "RelayConfigManager",
    "config_manager",
    # Infrastructure
    "setup_logging",
    "get_logger",
    "RelayError",
    "ConfigurationError",
    "EnvelopeError",
    "RoomNotFoundError",
    "UnregisteredClientError",
    "SignalingError",
]
