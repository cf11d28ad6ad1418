"""
Subscription table for signaling clients.

Listeners are keyed by ``(room_id, purpose)`` so that waiting for an offer,
a join confirmation and incoming candidates on the same room never replace
one another.
"""

import asyncio
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, Final, Tuple

PURPOSE_ROOM_CREATED: Final[str] = "room-created"
PURPOSE_ROOM_OFFER: Final[str] = "room-offer"
PURPOSE_ROOM_JOINED: Final[str] = "room-joined"
PURPOSE_ROOM_ANSWER: Final[str] = "room-answer"
PURPOSE_ICE_CANDIDATE: Final[str] = "ice-candidate"
PURPOSE_PEER_LEFT: Final[str] = "peer-left"

SubscriptionKey = Tuple[str, str]


class SubscriptionTable:
    """One-shot waiters and persistent callbacks per (room, purpose)."""

    def __init__(self) -> None:
        self._waiters: Dict[SubscriptionKey, Deque[asyncio.Future]] = defaultdict(deque)
        self._callbacks: Dict[SubscriptionKey, Callable[..., Any]] = {}

    def expect(self, room_id: str, purpose: str) -> asyncio.Future:
        """Register a waiter resolved by the next matching envelope."""
        future = asyncio.get_running_loop().create_future()
        self._waiters[(room_id, purpose)].append(future)
        return future

    def resolve(self, room_id: str, purpose: str, message: Dict[str, Any]) -> bool:
        """Resolve the oldest live waiter for the key."""
        key = (room_id, purpose)
        waiters = self._waiters.get(key)
        while waiters:
            future = waiters.popleft()
            if not future.done():
                future.set_result(message)
                if not waiters:
                    del self._waiters[key]
                return True
        self._waiters.pop(key, None)
        return False

    def subscribe(self, room_id: str, purpose: str, callback: Callable[..., Any]) -> None:
        """Set the persistent callback for the key."""
        self._callbacks[(room_id, purpose)] = callback

    def unsubscribe(self, room_id: str, purpose: str) -> None:
        self._callbacks.pop((room_id, purpose), None)

    def dispatch(self, room_id: str, purpose: str, *args: Any) -> bool:
        """Invoke the callback for the key, if any."""
        callback = self._callbacks.get((room_id, purpose))
        if callback is None:
            return False
        callback(*args)
        return True

    def clear_room(self, room_id: str) -> None:
        """Drop every waiter and callback for a room."""
        for key in [key for key in self._waiters if key[0] == room_id]:
            for future in self._waiters.pop(key):
                future.cancel()
        for key in [key for key in self._callbacks if key[0] == room_id]:
            del self._callbacks[key]

    def clear(self) -> None:
        for waiters in self._waiters.values():
            for future in waiters:
                future.cancel()
        self._waiters.clear()
        self._callbacks.clear()

    def __contains__(self, key: SubscriptionKey) -> bool:
        return key in self._callbacks or bool(self._waiters.get(key))
