"""
Per-connection session for the signaling relay.

Each session owns a bounded outbound queue drained by its own writer task,
so a slow or dead peer only ever stalls itself.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed


class ClientSession:
    """One live WebSocket connection and the client id bound to it."""

    def __init__(
        self,
        websocket: ServerConnection,
        logger: logging.Logger,
        queue_size: int = 256,
    ) -> None:
        self.websocket = websocket
        self.logger = logger
        self.client_id: Optional[str] = None

        self._outbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._writer_task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def remote_address(self) -> Any:
        return self.websocket.remote_address

    @property
    def label(self) -> str:
        """Client id once registered, otherwise the peer address."""
        return self.client_id or str(self.remote_address)

    def start(self) -> None:
        """Start the writer task."""
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(self._drain_outbox())

    def deliver(self, message: Dict[str, Any]) -> bool:
        """Queue an envelope for sending without blocking."""
        if self._closed:
            self.logger.warning(
                f"Connection {self.label} closed, dropping {message.get('type')}"
            )
            return False

        try:
            self._outbox.put_nowait(message)
            return True
        except asyncio.QueueFull:
            self.logger.warning(
                f"Outbound queue full for {self.label}, dropping {message.get('type')}"
            )
            return False

    async def _drain_outbox(self) -> None:
        while True:
            message = await self._outbox.get()
            try:
                await self.websocket.send(json.dumps(message))
            except ConnectionClosed:
                self.logger.debug(f"Connection {self.label} closed while sending")
                self._closed = True
                return
            except Exception as e:
                self.logger.error(f"Error sending to {self.label}: {e}")

    async def close(self) -> None:
        """Stop the writer task; undelivered envelopes are discarded."""
        self._closed = True
        if self._writer_task:
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass
            self._writer_task = None

    def pending(self) -> int:
        """Number of envelopes waiting to be sent."""
        return self._outbox.qsize()
