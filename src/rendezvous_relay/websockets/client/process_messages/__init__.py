"""
Client-side message processing for the signaling client.
"""

from .signaling_message import SignalingMessageHandler
from .subscriptions import (
    PURPOSE_ICE_CANDIDATE,
    PURPOSE_PEER_LEFT,
    PURPOSE_ROOM_ANSWER,
    PURPOSE_ROOM_CREATED,
    PURPOSE_ROOM_JOINED,
    PURPOSE_ROOM_OFFER,
    SubscriptionTable,
)

__all__ = [
    "SignalingMessageHandler",
    "SubscriptionTable",
    "PURPOSE_ICE_CANDIDATE",
    "PURPOSE_PEER_LEFT",
    "PURPOSE_ROOM_ANSWER",
    "PURPOSE_ROOM_CREATED",
    "PURPOSE_ROOM_JOINED",
    "PURPOSE_ROOM_OFFER",
]
