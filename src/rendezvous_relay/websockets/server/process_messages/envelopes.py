"""
Typed inbound envelopes.

Frames are decoded in two steps: the ``type`` discriminator is read first,
then known types are validated into one of a closed set of pydantic models.
Types outside that set decode to ``UnrecognizedEnvelope``.
"""

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from rendezvous_relay.core.types import (
    MSG_CREATE_ROOM,
    MSG_GET_ROOM_OFFER,
    MSG_ICE_CANDIDATE,
    MSG_JOIN_ROOM,
    MSG_LEAVE_ROOM,
    MSG_REGISTER,
)
from rendezvous_relay.infrastructure.exceptions import EnvelopeError


class Envelope(BaseModel):
    """Base for all inbound envelopes."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str


class RegisterEnvelope(Envelope):
    type: Literal[MSG_REGISTER]
    client_id: str = Field(alias="clientId", min_length=1)


class RoomEnvelope(Envelope):
    """Envelope addressed to a room on behalf of a client."""

    room_id: str = Field(alias="roomId")
    client_id: Optional[str] = Field(default=None, alias="clientId")


class CreateRoomEnvelope(RoomEnvelope):
    type: Literal[MSG_CREATE_ROOM]
    offer: Any = None


class GetRoomOfferEnvelope(RoomEnvelope):
    type: Literal[MSG_GET_ROOM_OFFER]


class JoinRoomEnvelope(RoomEnvelope):
    type: Literal[MSG_JOIN_ROOM]
    answer: Any = None


class IceCandidateEnvelope(RoomEnvelope):
    type: Literal[MSG_ICE_CANDIDATE]
    candidate: Any = None
    is_creator: Any = Field(default=None, alias="isCreator")


class LeaveRoomEnvelope(RoomEnvelope):
    type: Literal[MSG_LEAVE_ROOM]


class UnrecognizedEnvelope(Envelope):
    """Any envelope whose type the relay does not handle."""


InboundEnvelope = Annotated[
    Union[
        RegisterEnvelope,
        CreateRoomEnvelope,
        GetRoomOfferEnvelope,
        JoinRoomEnvelope,
        IceCandidateEnvelope,
        LeaveRoomEnvelope,
    ],
    Field(discriminator="type"),
]

INBOUND_TYPES = frozenset(
    {
        MSG_REGISTER,
        MSG_CREATE_ROOM,
        MSG_GET_ROOM_OFFER,
        MSG_JOIN_ROOM,
        MSG_ICE_CANDIDATE,
        MSG_LEAVE_ROOM,
    }
)

_inbound_adapter = TypeAdapter(InboundEnvelope)


def decode_envelope(raw: Union[str, bytes]) -> Envelope:
    """
    Decode one text frame into a typed envelope.

    Args:
        raw: The frame payload

    Returns:
        A typed envelope, or ``UnrecognizedEnvelope`` for unknown types

    Raises:
        EnvelopeError: If the frame is not a JSON object with a string
            ``type``, or a known type has missing or mistyped fields
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise EnvelopeError(f"Invalid JSON: {e}", raw) from e

    if not isinstance(data, dict):
        raise EnvelopeError("Envelope must be a JSON object", raw)

    message_type = data.get("type")
    if not isinstance(message_type, str) or not message_type:
        raise EnvelopeError("Missing envelope type", raw)

    if message_type not in INBOUND_TYPES:
        return UnrecognizedEnvelope(type=message_type)

    try:
        return _inbound_adapter.validate_python(data)
    except PydanticValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in e.errors()
        )
        raise EnvelopeError(f"Invalid {message_type} envelope ({fields})", raw) from e
