"""
Client and room registry for the signaling relay.

Both tables live behind a single asyncio lock. Every operation computes its
outbound envelopes while holding the lock and hands them to the recipients'
connections after releasing it, so no read-modify-write sequence ever
interleaves with another connection's.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from ..infrastructure.exceptions import RoomNotFoundError, UnregisteredClientError
from .types import (
    MSG_ICE_CANDIDATE,
    MSG_PEER_LEFT,
    MSG_ROOM_ANSWER,
    MSG_ROOM_CREATED,
    MSG_ROOM_JOINED,
    MSG_ROOM_OFFER,
)

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Outbound side of one transport connection."""

    client_id: Optional[str]

    def deliver(self, message: Dict[str, Any]) -> bool:
        """Queue an envelope without blocking; False if it was dropped."""
        ...


@dataclass
class Client:
    """A registered connection."""

    id: str
    connection: Connection
    member_of: Set[str] = field(default_factory=set)


@dataclass
class Room:
    """A pending or active signaling session."""

    id: str
    creator_id: str
    offer: Any
    answer: Any = None
    has_answer: bool = False
    members: List[str] = field(default_factory=list)


Delivery = Tuple[Connection, Dict[str, Any]]


class RoomRegistry:
    """Owns the client table and the room table."""

    def __init__(self) -> None:
        # Map client_id -> Client
        self.clients: Dict[str, Client] = {}

        # Map room_id -> Room
        self.rooms: Dict[str, Room] = {}

        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def register(self, connection: Connection, client_id: str) -> None:
        """Bind a connection to a client id with empty membership.

        A connection that re-registers under a new id gives up its old
        identity first. An id already held by another connection is taken
        over; the displaced entry leaves its rooms as if it had disconnected.
        """
        deliveries: List[Delivery] = []
        async with self._lock:
            previous_id = connection.client_id
            if previous_id is not None and previous_id != client_id:
                deliveries += self._drop_client(previous_id, connection)

            existing = self.clients.get(client_id)
            if existing is not None and existing.connection is not connection:
                logger.warning(
                    f"Client id {client_id} re-registered from a new connection"
                )
                deliveries += self._drop_client(client_id, existing.connection)
                existing.connection.client_id = None
            elif existing is not None:
                deliveries += self._leave_all(existing)

            self.clients[client_id] = Client(id=client_id, connection=connection)
            connection.client_id = client_id

        logger.info(f"Client registered: {client_id}")
        self._dispatch(deliveries)

    async def unregister(self, connection: Connection) -> None:
        """Remove a closing connection's client and leave all of its rooms.

        No-op for connections that never registered or whose id has been
        taken over by a newer connection.
        """
        client_id = connection.client_id
        if client_id is None:
            return

        async with self._lock:
            deliveries = self._drop_client(client_id, connection)

        self._dispatch(deliveries)

    # ------------------------------------------------------------------
    # Room operations
    # ------------------------------------------------------------------

    async def create_room(self, connection: Connection, room_id: str, offer: Any) -> None:
        """Create a room with the caller as its first member."""
        async with self._lock:
            client = self._require_client(connection)

            if room_id in self.rooms:
                logger.warning(f"Room {room_id} already exists, overwriting")
                # The replaced room's members no longer belong to it
                for member_id in self.rooms[room_id].members:
                    member = self.clients.get(member_id)
                    if member is not None:
                        member.member_of.discard(room_id)

            self.rooms[room_id] = Room(
                id=room_id,
                creator_id=client.id,
                offer=offer,
                members=[client.id],
            )
            client.member_of.add(room_id)
            deliveries = [(connection, {"type": MSG_ROOM_CREATED, "roomId": room_id})]

        logger.info(f"Room created: {room_id} by {client.id}")
        self._dispatch(deliveries)

    async def get_room_offer(self, connection: Connection, room_id: str) -> None:
        """Send a room's offer back to the caller."""
        async with self._lock:
            self._require_client(connection)
            room = self.rooms.get(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            deliveries = [
                (
                    connection,
                    {"type": MSG_ROOM_OFFER, "roomId": room_id, "offer": room.offer},
                )
            ]

        self._dispatch(deliveries)

    async def join_room(self, connection: Connection, room_id: str, answer: Any) -> None:
        """Add the caller to a room and hand its answer to the creator."""
        deliveries: List[Delivery] = []
        async with self._lock:
            client = self._require_client(connection)
            room = self.rooms.get(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)

            if room.has_answer:
                logger.warning(
                    f"Room {room_id} already answered, overwriting answer "
                    f"({len(room.members)} members)"
                )

            room.members.append(client.id)
            room.answer = answer
            room.has_answer = True
            client.member_of.add(room_id)

            creator = self.clients.get(room.creator_id)
            if creator is not None:
                deliveries.append(
                    (
                        creator.connection,
                        {"type": MSG_ROOM_ANSWER, "roomId": room_id, "answer": answer},
                    )
                )
            else:
                logger.warning(f"Creator {room.creator_id} of room {room_id} not connected")
            deliveries.append((connection, {"type": MSG_ROOM_JOINED, "roomId": room_id}))

        logger.info(f"Client {client.id} joined room {room_id}")
        self._dispatch(deliveries)

    async def relay_ice_candidate(
        self,
        connection: Connection,
        room_id: str,
        candidate: Any,
        is_creator: Any,
    ) -> None:
        """Forward a candidate to every other member of the room."""
        async with self._lock:
            client = self._require_client(connection)
            room = self.rooms.get(room_id)
            if room is None:
                logger.debug(f"Candidate for unknown room {room_id} from {client.id}")
                return

            if client.id not in room.members:
                logger.debug(f"Candidate from non-member {client.id} in room {room_id}")

            message = {
                "type": MSG_ICE_CANDIDATE,
                "roomId": room_id,
                "candidate": candidate,
                "isCreator": is_creator,
            }
            deliveries = self._room_broadcast(room, message, exclude=client.id)

        self._dispatch(deliveries)

    async def leave_room(self, connection: Connection, room_id: str) -> None:
        """Remove the caller from a room; unknown rooms are ignored."""
        async with self._lock:
            client = self._require_client(connection)
            deliveries = self._leave(client, room_id)

        self._dispatch(deliveries)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_room(self, room_id: str) -> Optional[Room]:
        """Get a room by id."""
        return self.rooms.get(room_id)

    def get_client(self, client_id: str) -> Optional[Client]:
        """Get a client by id."""
        return self.clients.get(client_id)

    def is_registered(self, client_id: str) -> bool:
        """Check if client is registered."""
        return client_id in self.clients

    def get_stats(self) -> Dict[str, int]:
        """Get registry statistics."""
        return {
            "total_clients": len(self.clients),
            "rooms": len(self.rooms),
            "room_members": sum(len(room.members) for room in self.rooms.values()),
        }

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _require_client(self, connection: Connection) -> Client:
        client_id = connection.client_id
        client = self.clients.get(client_id) if client_id is not None else None
        if client is None or client.connection is not connection:
            raise UnregisteredClientError()
        return client

    def _leave(self, client: Client, room_id: str) -> List[Delivery]:
        client.member_of.discard(room_id)

        room = self.rooms.get(room_id)
        if room is None or client.id not in room.members:
            return []

        # A client that joined twice still leaves completely
        room.members[:] = [member_id for member_id in room.members if member_id != client.id]
        logger.info(f"Client {client.id} left room {room_id}")

        if not room.members:
            del self.rooms[room_id]
            logger.info(f"Room {room_id} deleted (empty)")
            return []

        message = {"type": MSG_PEER_LEFT, "roomId": room_id, "clientId": client.id}
        return self._room_broadcast(room, message, exclude=client.id)

    def _leave_all(self, client: Client) -> List[Delivery]:
        deliveries: List[Delivery] = []
        for room_id in list(client.member_of):
            deliveries += self._leave(client, room_id)
        return deliveries

    def _drop_client(self, client_id: str, connection: Connection) -> List[Delivery]:
        client = self.clients.get(client_id)
        if client is None or client.connection is not connection:
            return []

        deliveries = self._leave_all(client)
        del self.clients[client_id]
        logger.info(f"Client disconnected: {client_id}")
        return deliveries

    def _room_broadcast(
        self, room: Room, message: Dict[str, Any], exclude: Optional[str] = None
    ) -> List[Delivery]:
        deliveries: List[Delivery] = []
        for member_id in room.members:
            if member_id == exclude:
                continue
            member = self.clients.get(member_id)
            if member is None:
                logger.warning(f"Client {member_id} not found or not connected")
                continue
            deliveries.append((member.connection, message))
        return deliveries

    def _dispatch(self, deliveries: List[Delivery]) -> None:
        for connection, message in deliveries:
            if not connection.deliver(message):
                logger.warning(
                    f"Dropped {message.get('type')} for {connection.client_id}"
                )
