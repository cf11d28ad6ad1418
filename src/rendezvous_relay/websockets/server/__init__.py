"""
WebSocket server implementation for the signaling relay.

This module contains the main SignalingRelayServer class and related components.
"""

from .relay_server import SignalingRelayServer
from .session import ClientSession

__all__ = [
    "SignalingRelayServer",
    "ClientSession",
]
