"""
Signaling client for the rendezvous relay.

The client registers on connect, queues envelopes while disconnected, and
exposes the room workflow (create, fetch offer, join, exchange candidates,
leave) as coroutines and callbacks.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

import websockets.exceptions
from websockets.asyncio.client import ClientConnection, connect

from rendezvous_relay.core.types import (
    MSG_CREATE_ROOM,
    MSG_GET_ROOM_OFFER,
    MSG_ICE_CANDIDATE,
    MSG_JOIN_ROOM,
    MSG_LEAVE_ROOM,
    MSG_REGISTER,
)
from rendezvous_relay.infrastructure import get_logger

from .process_messages import (
    PURPOSE_ICE_CANDIDATE,
    PURPOSE_PEER_LEFT,
    PURPOSE_ROOM_ANSWER,
    PURPOSE_ROOM_CREATED,
    PURPOSE_ROOM_JOINED,
    PURPOSE_ROOM_OFFER,
    SignalingMessageHandler,
)


class SignalingClient:
    """
    Asyncio client for the signaling relay.

    Requests that expect a reply (``create_room``, ``get_room_offer``,
    ``join_room``) wait at most ``request_timeout`` seconds and raise
    ``SignalingError`` when the relay answers with an error.
    """

    def __init__(
        self,
        server_url: str,
        client_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        request_timeout: float = 10.0,
    ) -> None:
        """
        Initialize the signaling client.

        Args:
            server_url: Relay URL (ws:// or wss://)
            client_id: Client identifier, a random uuid4 if omitted
            logger: Logger instance
            request_timeout: Seconds to wait for a reply to a request
        """
        if not server_url:
            raise ValueError("server_url cannot be empty")
        if not server_url.startswith(("ws://", "wss://")):
            raise ValueError("server_url must start with 'ws://' or 'wss://'")

        self.server_url: str = server_url
        self.client_id: str = client_id or str(uuid.uuid4())
        self.logger: logging.Logger = logger or get_logger("signaling_client")
        self.request_timeout: float = request_timeout

        self.websocket: Optional[ClientConnection] = None
        self.is_connected: bool = False

        self.message_handler = SignalingMessageHandler(self.client_id, self.logger)

        self._message_queue: List[Dict[str, Any]] = []
        self._receive_task: Optional[asyncio.Task[None]] = None

    async def connect(self, max_retries: int = 5, retry_delay: float = 1.0) -> bool:
        """
        Connect and register with the relay, retrying with exponential backoff.

        Returns:
            True if connection successful, False otherwise
        """
        for attempt in range(max_retries):
            try:
                self.logger.info(
                    f"[{self.client_id}] Connecting to relay (attempt {attempt + 1}/{max_retries})"
                )
                self.websocket = await connect(self.server_url)
                self._receive_task = asyncio.create_task(self._process_messages())

                await self.websocket.send(
                    json.dumps({"type": MSG_REGISTER, "clientId": self.client_id})
                )
                self.is_connected = True

                while self._message_queue:
                    await self._send_now(self._message_queue.pop(0))

                self.logger.info(f"[{self.client_id}] Client ready")
                return True

            except (OSError, websockets.exceptions.WebSocketException) as e:
                self.logger.error(
                    f"[{self.client_id}] Error connecting (attempt {attempt + 1}): {e}"
                )
                await self._abandon_connection()
                if attempt < max_retries - 1:
                    await asyncio.sleep(retry_delay)
                    retry_delay *= 2

        return False

    async def _abandon_connection(self) -> None:
        """Drop a half-open connection and its receive task before retrying."""
        self.is_connected = False
        if self._receive_task:
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
            self._receive_task = None
        if self.websocket:
            try:
                await self.websocket.close()
            except Exception as e:
                self.logger.debug(f"[{self.client_id}] Error closing failed connection: {e}")
            self.websocket = None

    async def _process_messages(self) -> None:
        """Process incoming messages from the relay."""
        try:
            async for message in self.websocket:
                if isinstance(message, str):
                    self.message_handler.process_signaling_message(message)
        except websockets.exceptions.ConnectionClosed:
            self.logger.warning(f"[{self.client_id}] Connection closed by relay")
        finally:
            self.is_connected = False

    async def send(self, message: Dict[str, Any]) -> None:
        """Send an envelope, or queue it until the next connect."""
        if self.is_connected and self.websocket:
            await self._send_now(message)
        else:
            self._message_queue.append(message)

    async def _send_now(self, message: Dict[str, Any]) -> None:
        try:
            await self.websocket.send(json.dumps(message))
        except websockets.exceptions.ConnectionClosed:
            self.logger.warning(
                f"[{self.client_id}] Connection closed while sending, queueing {message['type']}"
            )
            self.is_connected = False
            self._message_queue.append(message)

    async def _request(self, message: Dict[str, Any], future: asyncio.Future) -> Dict[str, Any]:
        await self.send(message)
        return await asyncio.wait_for(future, self.request_timeout)

    # ------------------------------------------------------------------
    # Room workflow
    # ------------------------------------------------------------------

    async def create_room(self, offer: Any, room_id: Optional[str] = None) -> str:
        """Create a room holding ``offer`` and return its id."""
        room_id = room_id or str(uuid.uuid4())
        future = self.message_handler.expect_reply(room_id, PURPOSE_ROOM_CREATED)
        await self._request(
            {
                "type": MSG_CREATE_ROOM,
                "roomId": room_id,
                "clientId": self.client_id,
                "offer": offer,
            },
            future,
        )
        return room_id

    async def get_room_offer(self, room_id: str) -> Any:
        """Fetch the offer stored in a room."""
        future = self.message_handler.expect_reply(
            room_id, PURPOSE_ROOM_OFFER, may_fail=True
        )
        reply = await self._request(
            {"type": MSG_GET_ROOM_OFFER, "roomId": room_id, "clientId": self.client_id},
            future,
        )
        return reply.get("offer")

    async def join_room(self, room_id: str, answer: Any) -> None:
        """Join a room, handing ``answer`` to its creator."""
        future = self.message_handler.expect_reply(
            room_id, PURPOSE_ROOM_JOINED, may_fail=True
        )
        await self._request(
            {
                "type": MSG_JOIN_ROOM,
                "roomId": room_id,
                "clientId": self.client_id,
                "answer": answer,
            },
            future,
        )

    def on_room_answer(self, room_id: str, callback: Callable[[Any], Any]) -> None:
        """Call ``callback(answer)`` when a peer joins a room we created."""
        self.message_handler.subscriptions.subscribe(
            room_id, PURPOSE_ROOM_ANSWER, callback
        )

    def on_ice_candidate(self, room_id: str, callback: Callable[[Any, Any], Any]) -> None:
        """Call ``callback(candidate, is_creator)`` for each relayed candidate."""
        self.message_handler.subscriptions.subscribe(
            room_id, PURPOSE_ICE_CANDIDATE, callback
        )

    def on_peer_left(self, room_id: str, callback: Callable[[str], Any]) -> None:
        """Call ``callback(client_id)`` when another member leaves."""
        self.message_handler.subscriptions.subscribe(
            room_id, PURPOSE_PEER_LEFT, callback
        )

    async def send_ice_candidate(self, room_id: str, candidate: Any, is_creator: bool) -> None:
        await self.send(
            {
                "type": MSG_ICE_CANDIDATE,
                "roomId": room_id,
                "clientId": self.client_id,
                "candidate": candidate,
                "isCreator": is_creator,
            }
        )

    async def leave_room(self, room_id: str) -> None:
        """Leave a room and drop its listeners."""
        self.message_handler.subscriptions.clear_room(room_id)
        await self.send(
            {"type": MSG_LEAVE_ROOM, "roomId": room_id, "clientId": self.client_id}
        )

    async def disconnect(self) -> None:
        """Close the connection to the relay."""
        if self.websocket:
            try:
                await self.websocket.close()
            except Exception as e:
                self.logger.error(
                    f"[{self.client_id}] Error disconnecting: {e}", exc_info=True
                )
            finally:
                self.websocket = None
                self.is_connected = False

        if self._receive_task:
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
            self._receive_task = None

        self.message_handler.reset()
        self.logger.info(f"[{self.client_id}] Disconnected from relay")

    def get_status(self) -> Dict[str, Any]:
        """Get client status information."""
        return {
            "client_id": self.client_id,
            "is_connected": self.is_connected,
            "server_url": self.server_url,
            "queued_messages": len(self._message_queue),
        }
