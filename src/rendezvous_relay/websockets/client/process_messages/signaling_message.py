"""
Client-side signaling message handler.

This module turns relay envelopes into resolved waiters and callback
invocations on the client's subscription table.
"""

import asyncio
import json
import logging
from collections import deque
from typing import Any, Deque, Dict

from rendezvous_relay.core.types import (
    MSG_ERROR,
    MSG_ICE_CANDIDATE,
    MSG_PEER_LEFT,
    MSG_ROOM_ANSWER,
    MSG_ROOM_CREATED,
    MSG_ROOM_JOINED,
    MSG_ROOM_OFFER,
)
from rendezvous_relay.infrastructure.exceptions import SignalingError

from .subscriptions import (
    PURPOSE_ICE_CANDIDATE,
    PURPOSE_PEER_LEFT,
    PURPOSE_ROOM_ANSWER,
    PURPOSE_ROOM_CREATED,
    PURPOSE_ROOM_JOINED,
    PURPOSE_ROOM_OFFER,
    SubscriptionTable,
)

# Replies that complete a request
_REPLY_PURPOSES = {
    MSG_ROOM_CREATED: PURPOSE_ROOM_CREATED,
    MSG_ROOM_OFFER: PURPOSE_ROOM_OFFER,
    MSG_ROOM_JOINED: PURPOSE_ROOM_JOINED,
}


class SignalingMessageHandler:
    """Handles envelopes received from the relay."""

    def __init__(self, client_id: str, logger: logging.Logger) -> None:
        self.client_id = client_id
        self.logger = logger
        self.subscriptions = SubscriptionTable()

        # Requests the relay may answer with a bare error, oldest first
        self._error_targets: Deque[asyncio.Future] = deque()

    def expect_reply(
        self, room_id: str, purpose: str, may_fail: bool = False
    ) -> asyncio.Future:
        """Create a waiter for a reply; ``may_fail`` requests also take errors."""
        future = self.subscriptions.expect(room_id, purpose)
        if may_fail:
            self._error_targets.append(future)
        return future

    def process_signaling_message(self, message: str) -> None:
        """Process one text frame from the relay."""
        try:
            data = json.loads(message)
        except json.JSONDecodeError as e:
            self.logger.error(f"[{self.client_id}] Error parsing relay message: {e}")
            return

        if not isinstance(data, dict):
            self.logger.warning(f"[{self.client_id}] Ignoring non-object message")
            return

        message_type = data.get("type")
        room_id = data.get("roomId")

        if message_type in _REPLY_PURPOSES:
            if not self.subscriptions.resolve(
                room_id, _REPLY_PURPOSES[message_type], data
            ):
                self.logger.debug(
                    f"[{self.client_id}] Unsolicited {message_type} for room {room_id}"
                )
        elif message_type == MSG_ROOM_ANSWER:
            self._dispatch(room_id, PURPOSE_ROOM_ANSWER, data.get("answer"))
        elif message_type == MSG_ICE_CANDIDATE:
            self._dispatch(
                room_id,
                PURPOSE_ICE_CANDIDATE,
                data.get("candidate"),
                data.get("isCreator"),
            )
        elif message_type == MSG_PEER_LEFT:
            self._dispatch(room_id, PURPOSE_PEER_LEFT, data.get("clientId"))
        elif message_type == MSG_ERROR:
            self._handle_error_response(data)
        else:
            self.logger.warning(
                f"[{self.client_id}] Unhandled message type: {message_type}"
            )

    def _dispatch(self, room_id: Any, purpose: str, *args: Any) -> None:
        try:
            if not self.subscriptions.dispatch(room_id, purpose, *args):
                self.logger.debug(
                    f"[{self.client_id}] No {purpose} listener for room {room_id}"
                )
        except Exception as e:
            self.logger.error(
                f"[{self.client_id}] {purpose} callback failed: {e}", exc_info=True
            )

    def _handle_error_response(self, data: Dict[str, Any]) -> None:
        """Fail the oldest outstanding request that can receive an error."""
        error_msg = data.get("message", "Unknown error")
        while self._error_targets:
            future = self._error_targets.popleft()
            if not future.done():
                future.set_exception(SignalingError(error_msg))
                return
        self.logger.error(f"[{self.client_id}] Server error: {error_msg}")

    def reset(self) -> None:
        """Cancel every outstanding waiter and drop all callbacks."""
        self.subscriptions.clear()
        self._error_targets.clear()
