"""
Unit tests for inbound envelope decoding.
"""

import json

import pytest

from rendezvous_relay.infrastructure.exceptions import EnvelopeError
from rendezvous_relay.websockets.server.process_messages.envelopes import (
    CreateRoomEnvelope,
    GetRoomOfferEnvelope,
    IceCandidateEnvelope,
    JoinRoomEnvelope,
    LeaveRoomEnvelope,
    RegisterEnvelope,
    UnrecognizedEnvelope,
    decode_envelope,
)


class TestDecodeEnvelope:
    """Test cases for decode_envelope."""

    @pytest.mark.unit
    def test_register(self):
        envelope = decode_envelope('{"type": "register", "clientId": "a"}')

        assert isinstance(envelope, RegisterEnvelope)
        assert envelope.client_id == "a"

    @pytest.mark.unit
    def test_create_room_keeps_offer_opaque(self):
        offer = {"type": "offer", "sdp": "v=0\r\n", "extra": [1, 2, {"x": None}]}
        envelope = decode_envelope(
            json.dumps(
                {"type": "create-room", "roomId": "r1", "clientId": "a", "offer": offer}
            )
        )

        assert isinstance(envelope, CreateRoomEnvelope)
        assert envelope.room_id == "r1"
        assert envelope.offer == offer

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "payload, expected_type",
        [
            ({"type": "get-room-offer", "roomId": "r1"}, GetRoomOfferEnvelope),
            ({"type": "join-room", "roomId": "r1", "answer": "A"}, JoinRoomEnvelope),
            ({"type": "leave-room", "roomId": "r1", "clientId": "b"}, LeaveRoomEnvelope),
        ],
    )
    def test_room_envelopes(self, payload, expected_type):
        envelope = decode_envelope(json.dumps(payload))

        assert isinstance(envelope, expected_type)
        assert envelope.room_id == "r1"

    @pytest.mark.unit
    def test_ice_candidate_fields(self):
        envelope = decode_envelope(
            json.dumps(
                {
                    "type": "ice-candidate",
                    "roomId": "r1",
                    "clientId": "a",
                    "candidate": {"candidate": "c", "sdpMLineIndex": 0},
                    "isCreator": False,
                }
            )
        )

        assert isinstance(envelope, IceCandidateEnvelope)
        assert envelope.candidate == {"candidate": "c", "sdpMLineIndex": 0}
        assert envelope.is_creator is False

    @pytest.mark.unit
    def test_unknown_type_is_unrecognized(self):
        envelope = decode_envelope('{"type": "dance", "roomId": "r1"}')

        assert isinstance(envelope, UnrecognizedEnvelope)
        assert envelope.type == "dance"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "",
            "[1, 2, 3]",
            '"register"',
            '{"clientId": "a"}',
            '{"type": 7}',
            '{"type": ""}',
        ],
    )
    def test_malformed_frames(self, raw):
        with pytest.raises(EnvelopeError):
            decode_envelope(raw)

    @pytest.mark.unit
    def test_known_type_with_missing_field(self):
        with pytest.raises(EnvelopeError, match="create-room"):
            decode_envelope('{"type": "create-room", "clientId": "a", "offer": {}}')

    @pytest.mark.unit
    def test_register_requires_client_id(self):
        with pytest.raises(EnvelopeError):
            decode_envelope('{"type": "register"}')
