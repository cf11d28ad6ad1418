"""
Signaling message handler for the WebSocket relay server.

This module decodes inbound envelopes and applies them to the room registry.
"""

import logging
from typing import Awaitable, Callable, Dict, Type

from rendezvous_relay.core import RoomRegistry
from rendezvous_relay.core.types import (
    ERR_NOT_REGISTERED,
    ERR_ROOM_NOT_FOUND,
    MSG_ERROR,
)
from rendezvous_relay.infrastructure.exceptions import (
    EnvelopeError,
    RoomNotFoundError,
    UnregisteredClientError,
)

from ..session import ClientSession
from .envelopes import (
    CreateRoomEnvelope,
    Envelope,
    GetRoomOfferEnvelope,
    IceCandidateEnvelope,
    JoinRoomEnvelope,
    LeaveRoomEnvelope,
    RegisterEnvelope,
    RoomEnvelope,
    UnrecognizedEnvelope,
    decode_envelope,
)

EnvelopeHandler = Callable[[ClientSession, Envelope], Awaitable[None]]


class SignalingMessageHandler:
    """Routes signaling envelopes between the members of a room."""

    def __init__(self, registry: RoomRegistry, logger: logging.Logger) -> None:
        self.registry = registry
        self.logger = logger

        self._handlers: Dict[Type[Envelope], EnvelopeHandler] = {
            RegisterEnvelope: self._handle_register,
            CreateRoomEnvelope: self._handle_create_room,
            GetRoomOfferEnvelope: self._handle_get_room_offer,
            JoinRoomEnvelope: self._handle_join_room,
            IceCandidateEnvelope: self._handle_ice_candidate,
            LeaveRoomEnvelope: self._handle_leave_room,
        }

    async def process_signaling_message(
        self, session: ClientSession, message: str
    ) -> None:
        """Process one inbound text frame. Never raises."""
        try:
            envelope = decode_envelope(message)
        except EnvelopeError as e:
            self.logger.warning(f"Dropping frame from {session.label}: {e}")
            return

        if isinstance(envelope, UnrecognizedEnvelope):
            self.logger.warning(f"Unhandled message type: {envelope.type}")
            return

        self.logger.debug(f"Received {envelope.type} from {session.label}")

        try:
            await self._handlers[type(envelope)](session, envelope)
        except RoomNotFoundError as e:
            self.logger.info(f"{session.label} referenced unknown room {e.room_id}")
            self._send_error(session, ERR_ROOM_NOT_FOUND)
        except UnregisteredClientError:
            self.logger.warning(
                f"{envelope.type} from unregistered connection {session.label}"
            )
            self._send_error(session, ERR_NOT_REGISTERED)
        except Exception as e:
            self.logger.error(
                f"Error processing {envelope.type} from {session.label}: {e}",
                exc_info=True,
            )

    async def _handle_register(
        self, session: ClientSession, envelope: RegisterEnvelope
    ) -> None:
        await self.registry.register(session, envelope.client_id)

    async def _handle_create_room(
        self, session: ClientSession, envelope: CreateRoomEnvelope
    ) -> None:
        self._check_identity(session, envelope)
        await self.registry.create_room(session, envelope.room_id, envelope.offer)

    async def _handle_get_room_offer(
        self, session: ClientSession, envelope: GetRoomOfferEnvelope
    ) -> None:
        self._check_identity(session, envelope)
        await self.registry.get_room_offer(session, envelope.room_id)

    async def _handle_join_room(
        self, session: ClientSession, envelope: JoinRoomEnvelope
    ) -> None:
        self._check_identity(session, envelope)
        await self.registry.join_room(session, envelope.room_id, envelope.answer)

    async def _handle_ice_candidate(
        self, session: ClientSession, envelope: IceCandidateEnvelope
    ) -> None:
        self._check_identity(session, envelope)
        await self.registry.relay_ice_candidate(
            session, envelope.room_id, envelope.candidate, envelope.is_creator
        )

    async def _handle_leave_room(
        self, session: ClientSession, envelope: LeaveRoomEnvelope
    ) -> None:
        self._check_identity(session, envelope)
        await self.registry.leave_room(session, envelope.room_id)

    def _check_identity(self, session: ClientSession, envelope: RoomEnvelope) -> None:
        # The id bound at registration wins over whatever the envelope claims
        if (
            envelope.client_id is not None
            and session.client_id is not None
            and envelope.client_id != session.client_id
        ):
            self.logger.warning(
                f"{envelope.type} from {session.client_id} claims clientId "
                f"{envelope.client_id}, ignoring claimed id"
            )

    def _send_error(self, session: ClientSession, message: str) -> None:
        """Send error message to client."""
        session.deliver({"type": MSG_ERROR, "message": message})
