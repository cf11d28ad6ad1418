"""
Message processing modules for the signaling relay server.

This package contains the envelope decoder and the signaling handler.
"""

from .envelopes import (
    Envelope,
    UnrecognizedEnvelope,
    decode_envelope,
)
from .signaling_message import SignalingMessageHandler

__all__ = [
    "Envelope",
    "UnrecognizedEnvelope",
    "decode_envelope",
    "SignalingMessageHandler",
]
