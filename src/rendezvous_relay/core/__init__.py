"""
Core state management for the rendezvous relay.

This package contains the client/room registry and shared constants.
"""

from .room_registry import Client, Connection, Room, RoomRegistry

__all__ = [
    "Client",
    "Connection",
    "Room",
    "RoomRegistry",
]
