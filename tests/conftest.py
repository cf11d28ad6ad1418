"""
Pytest configuration and shared fixtures for the rendezvous relay test suite.

This module provides common fixtures and configuration for all tests.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from rendezvous_relay.core import RoomRegistry


class FakeConnection:
    """In-memory stand-in for a client session that records deliveries."""

    def __init__(self, name: str = "conn", accept: bool = True) -> None:
        self.name = name
        self.client_id = None
        self.accept = accept
        self.messages = []

    @property
    def label(self) -> str:
        return self.client_id or self.name

    def deliver(self, message):
        if not self.accept:
            return False
        self.messages.append(message)
        return True

    def of_type(self, message_type):
        return [m for m in self.messages if m["type"] == message_type]

    def __repr__(self) -> str:
        return f"FakeConnection({self.label!r})"


@pytest.fixture
def registry():
    """Create an empty room registry."""
    return RoomRegistry()


@pytest.fixture
def make_connection():
    """Factory for fake connections."""

    def _make(name: str = "conn", accept: bool = True) -> FakeConnection:
        return FakeConnection(name, accept)

    return _make


@pytest.fixture
def mock_websocket():
    """Create a mock WebSocket connection for testing."""
    websocket = MagicMock()
    websocket.remote_address = ("127.0.0.1", 12345)
    websocket.send = AsyncMock()
    websocket.close = AsyncMock()
    return websocket


@pytest.fixture
def mock_logger():
    """Create a mock logger."""
    return MagicMock()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
