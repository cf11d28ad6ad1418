"""
Integration tests against a running SignalingRelayServer.
"""

import asyncio
import json

import pytest
import pytest_asyncio
from websockets.asyncio.client import connect

from rendezvous_relay.infrastructure.exceptions import SignalingError
from rendezvous_relay.websockets.client import SignalingClient
from rendezvous_relay.websockets.server import SignalingRelayServer

TIMEOUT = 2.0


@pytest_asyncio.fixture
async def relay_server():
    server = SignalingRelayServer(host="127.0.0.1", port=0, ping_interval=0)
    assert await server.start()
    yield server
    await server.stop()


def url_for(server: SignalingRelayServer) -> str:
    return f"ws://127.0.0.1:{server.bound_port}"


async def recv_json(websocket):
    return json.loads(await asyncio.wait_for(websocket.recv(), TIMEOUT))


async def send_json(websocket, **envelope):
    await websocket.send(json.dumps(envelope))


async def wait_until(predicate):
    deadline = asyncio.get_running_loop().time() + TIMEOUT
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


class TestRelayServer:
    """End-to-end scenarios over real WebSocket connections."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_room_walkthrough(self, relay_server):
        registry = relay_server.registry
        async with connect(url_for(relay_server)) as a, connect(url_for(relay_server)) as b:
            await send_json(a, type="register", clientId="a")
            await send_json(b, type="register", clientId="b")

            await send_json(a, type="create-room", roomId="r1", clientId="a", offer="O")
            assert await recv_json(a) == {"type": "room-created", "roomId": "r1"}

            await send_json(b, type="get-room-offer", roomId="r1", clientId="b")
            assert await recv_json(b) == {"type": "room-offer", "roomId": "r1", "offer": "O"}

            await send_json(b, type="join-room", roomId="r1", clientId="b", answer="A")
            assert await recv_json(a) == {"type": "room-answer", "roomId": "r1", "answer": "A"}
            assert await recv_json(b) == {"type": "room-joined", "roomId": "r1"}

            await send_json(a, type="leave-room", roomId="r1", clientId="a")
            assert await recv_json(b) == {"type": "peer-left", "roomId": "r1", "clientId": "a"}
            assert registry.get_room("r1").members == ["b"]

            await b.close()
            await wait_until(lambda: registry.get_room("r1") is None)
            assert not registry.is_registered("b")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_ghost_room_error_goes_to_caller_only(self, relay_server):
        async with connect(url_for(relay_server)) as a, connect(url_for(relay_server)) as b:
            await send_json(a, type="register", clientId="a")
            await send_json(b, type="register", clientId="b")

            await send_json(a, type="get-room-offer", roomId="ghost", clientId="a")

            assert await recv_json(a) == {"type": "error", "message": "Room not found"}
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(b.recv(), 0.1)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_garbage_does_not_close_connection(self, relay_server):
        async with connect(url_for(relay_server)) as a:
            await a.send("{{{ definitely not json")
            await a.send(b"\x00\x01binary")
            await send_json(a, type="register", clientId="a")
            await send_json(a, type="create-room", roomId="r1", clientId="a", offer=None)

            assert await recv_json(a) == {"type": "room-created", "roomId": "r1"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_abrupt_disconnect_notifies_peer(self, relay_server):
        registry = relay_server.registry
        async with connect(url_for(relay_server)) as b:
            a = await connect(url_for(relay_server))
            await send_json(a, type="register", clientId="a")
            await send_json(b, type="register", clientId="b")
            await send_json(a, type="create-room", roomId="r1", clientId="a", offer="O")
            await recv_json(a)
            await send_json(b, type="join-room", roomId="r1", clientId="b", answer="A")
            await recv_json(b)

            a.transport.abort()

            assert await recv_json(b) == {"type": "peer-left", "roomId": "r1", "clientId": "a"}
            await wait_until(lambda: not registry.is_registered("a"))
            assert registry.get_room("r1").members == ["b"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_stats(self, relay_server):
        async with connect(url_for(relay_server)) as a:
            await send_json(a, type="register", clientId="a")
            await send_json(a, type="create-room", roomId="r1", clientId="a", offer="O")
            await recv_json(a)

            stats = relay_server.get_stats()

        assert stats["server_running"] is True
        assert stats["registry_stats"] == {"total_clients": 1, "rooms": 1, "room_members": 1}


class TestSignalingClientAgainstRelay:
    """The Python client driving a full negotiation through the relay."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_two_clients_negotiate(self, relay_server):
        creator = SignalingClient(url_for(relay_server), client_id="creator", request_timeout=TIMEOUT)
        joiner = SignalingClient(url_for(relay_server), client_id="joiner", request_timeout=TIMEOUT)
        assert await creator.connect(max_retries=1)
        assert await joiner.connect(max_retries=1)

        answers = asyncio.Queue()
        creator_candidates = asyncio.Queue()
        departures = asyncio.Queue()

        try:
            room_id = await creator.create_room({"sdp": "offer"})
            creator.on_room_answer(room_id, answers.put_nowait)
            creator.on_ice_candidate(
                room_id, lambda candidate, is_creator: creator_candidates.put_nowait(
                    (candidate, is_creator)
                )
            )
            creator.on_peer_left(room_id, departures.put_nowait)

            assert await joiner.get_room_offer(room_id) == {"sdp": "offer"}
            await joiner.join_room(room_id, {"sdp": "answer"})
            assert await asyncio.wait_for(answers.get(), TIMEOUT) == {"sdp": "answer"}

            await joiner.send_ice_candidate(room_id, {"candidate": "c1"}, False)
            assert await asyncio.wait_for(creator_candidates.get(), TIMEOUT) == (
                {"candidate": "c1"},
                False,
            )

            await joiner.leave_room(room_id)
            assert await asyncio.wait_for(departures.get(), TIMEOUT) == "joiner"
        finally:
            await joiner.disconnect()
            await creator.disconnect()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_missing_room_raises_signaling_error(self, relay_server):
        client = SignalingClient(url_for(relay_server), request_timeout=TIMEOUT)
        assert await client.connect(max_retries=1)
        try:
            with pytest.raises(SignalingError, match="Room not found"):
                await client.get_room_offer("ghost")
        finally:
            await client.disconnect()
