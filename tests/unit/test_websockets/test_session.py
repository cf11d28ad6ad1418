"""
Unit tests for ClientSession outbound delivery.
"""

import asyncio
import json
import logging

import pytest
from websockets.exceptions import ConnectionClosedError

from rendezvous_relay.websockets.server.session import ClientSession

logger = logging.getLogger("test_session")


class TestClientSession:
    """Test cases for the per-connection outbound queue."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delivers_json_in_order(self, mock_websocket):
        session = ClientSession(mock_websocket, logger)
        session.start()

        assert session.deliver({"type": "room-created", "roomId": "r1"})
        assert session.deliver({"type": "room-joined", "roomId": "r1"})
        await asyncio.sleep(0.01)
        await session.close()

        sent = [json.loads(call.args[0]) for call in mock_websocket.send.await_args_list]
        assert sent == [
            {"type": "room-created", "roomId": "r1"},
            {"type": "room-joined", "roomId": "r1"},
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_full_queue_drops_instead_of_blocking(self, mock_websocket):
        session = ClientSession(mock_websocket, logger, queue_size=2)

        assert session.deliver({"type": "a"})
        assert session.deliver({"type": "b"})
        assert not session.deliver({"type": "c"})
        assert session.pending() == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_closed_session_rejects_deliveries(self, mock_websocket):
        session = ClientSession(mock_websocket, logger)
        session.start()
        await session.close()

        assert not session.deliver({"type": "peer-left"})
        mock_websocket.send.assert_not_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_dead_connection_stops_writer(self, mock_websocket):
        mock_websocket.send.side_effect = ConnectionClosedError(None, None)
        session = ClientSession(mock_websocket, logger)
        session.start()

        session.deliver({"type": "ice-candidate"})
        await asyncio.sleep(0.01)

        assert not session.deliver({"type": "ice-candidate"})
        await session.close()

    @pytest.mark.unit
    def test_label_prefers_client_id(self, mock_websocket):
        session = ClientSession(mock_websocket, logger)
        assert session.label == "('127.0.0.1', 12345)"

        session.client_id = "a"
        assert session.label == "a"
