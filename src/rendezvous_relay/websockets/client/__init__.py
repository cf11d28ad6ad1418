"""
WebSocket client implementation for the signaling relay.
"""

from .signaling_client import SignalingClient

__all__ = ["SignalingClient"]
