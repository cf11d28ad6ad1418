"""
Custom exceptions for the rendezvous relay.

This module defines all custom exceptions used throughout the system,
providing clear error categorization and handling.
"""

from typing import Optional


class RelayError(Exception):
    """Base exception for all relay related errors."""

    pass


class ConfigurationError(RelayError):
    """Raised when there are configuration-related errors."""

    pass


class EnvelopeError(RelayError):
    """Raised when an inbound frame cannot be decoded into an envelope."""

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw = raw


class RegistryError(RelayError):
    """Raised when a registry operation cannot be applied."""

    pass


class RoomNotFoundError(RegistryError):
    """Raised when an envelope references a room that does not exist."""

    def __init__(self, room_id: str) -> None:
        super().__init__("Room not found")
        self.room_id = room_id


class UnregisteredClientError(RegistryError):
    """Raised when a connection acts before it has registered."""

    def __init__(self) -> None:
        super().__init__("Client not registered")


class SignalingError(RelayError):
    """Raised on the client side when the relay answers with an error."""

    pass
