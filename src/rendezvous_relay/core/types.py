"""
Common types and constants for the rendezvous relay.

This module centralizes envelope types, setting names and defaults to avoid
hardcoding throughout the codebase.
"""

from typing import Final

# Inbound envelope types (client -> relay)
MSG_REGISTER: Final[str] = "register"
MSG_CREATE_ROOM: Final[str] = "create-room"
MSG_GET_ROOM_OFFER: Final[str] = "get-room-offer"
MSG_JOIN_ROOM: Final[str] = "join-room"
MSG_ICE_CANDIDATE: Final[str] = "ice-candidate"
MSG_LEAVE_ROOM: Final[str] = "leave-room"

# Outbound envelope types (relay -> client)
MSG_ROOM_CREATED: Final[str] = "room-created"
MSG_ROOM_OFFER: Final[str] = "room-offer"
MSG_ROOM_ANSWER: Final[str] = "room-answer"
MSG_ROOM_JOINED: Final[str] = "room-joined"
MSG_PEER_LEFT: Final[str] = "peer-left"
MSG_ERROR: Final[str] = "error"

# Error messages
ERR_ROOM_NOT_FOUND: Final[str] = "Room not found"
ERR_NOT_REGISTERED: Final[str] = "Client not registered"

# Environment Variable Names (from .env file)
ENV_HOST: Final[str] = "HOST"
ENV_PORT: Final[str] = "PORT"
ENV_PING_INTERVAL: Final[str] = "PING_INTERVAL"
ENV_MAX_MESSAGE_SIZE: Final[str] = "MAX_MESSAGE_SIZE"
ENV_OUTBOUND_QUEUE_SIZE: Final[str] = "OUTBOUND_QUEUE_SIZE"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"

# Accepted LOG_LEVEL values
LOG_LEVELS: Final = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Default Values
DEFAULT_HOST: Final[str] = "0.0.0.0"
DEFAULT_PORT: Final[int] = 8080
DEFAULT_PING_INTERVAL: Final[int] = 20
DEFAULT_MAX_MESSAGE_SIZE: Final[int] = 2**20
DEFAULT_OUTBOUND_QUEUE_SIZE: Final[int] = 256
DEFAULT_WEBSOCKET_URL: Final[str] = "ws://localhost:8080"
