"""
WebSocket signaling relay server.

Tracks ephemeral rooms and forwards signaling envelopes between the members
of each room. One task per connection; the shared registry serializes every
mutation.
"""

import asyncio
from typing import Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from rendezvous_relay.config import RelayConfig, config_manager
from rendezvous_relay.core import RoomRegistry
from rendezvous_relay.core.types import (
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_OUTBOUND_QUEUE_SIZE,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PORT,
)
from rendezvous_relay.infrastructure import (
    ConfigurationError,
    apply_log_level,
    setup_logging,
)

from .process_messages import SignalingMessageHandler
from .session import ClientSession

logger = setup_logging(component_name="signaling_relay")


class SignalingRelayServer:
    """Rendezvous relay for WebRTC signaling."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        ping_interval: int = DEFAULT_PING_INTERVAL,
        max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
        outbound_queue_size: int = DEFAULT_OUTBOUND_QUEUE_SIZE,
        registry: Optional[RoomRegistry] = None,
    ) -> None:
        """Initialize the signaling relay server."""
        self.host = host
        self.port = port
        self.ping_interval = ping_interval
        self.max_message_size = max_message_size
        self.outbound_queue_size = outbound_queue_size
        self.server: Optional[Server] = None

        self.registry = registry if registry is not None else RoomRegistry()
        self.signaling_handler = SignalingMessageHandler(self.registry, logger)

    @classmethod
    def from_config(cls, config: RelayConfig) -> "SignalingRelayServer":
        """Build a server from a loaded configuration."""
        return cls(
            host=config.host,
            port=config.port,
            ping_interval=config.ping_interval,
            max_message_size=config.max_message_size,
            outbound_queue_size=config.outbound_queue_size,
        )

    @property
    def bound_port(self) -> Optional[int]:
        """Actual listening port (useful when started on port 0)."""
        if not self.server or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> bool:
        """Start the signaling relay server."""
        try:
            self.server = await serve(
                self._handle_connection,
                self.host,
                self.port,
                ping_interval=self.ping_interval or None,
                max_size=self.max_message_size,
            )
            logger.info(f"Signaling relay started on {self.host}:{self.bound_port}")
            return True
        except Exception as e:
            logger.error(f"Failed to start signaling relay: {e}", exc_info=True)
            return False

    async def stop(self) -> None:
        """Stop the signaling relay server."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            logger.info("Signaling relay stopped")

    async def _handle_connection(
        self, websocket: ServerConnection, path: Optional[str] = None
    ) -> None:
        """Handle one WebSocket connection for its whole lifetime."""
        client_address = websocket.remote_address
        logger.info(f"New connection from {client_address}")

        session = ClientSession(websocket, logger, self.outbound_queue_size)
        session.start()
        try:
            async for message in websocket:
                if isinstance(message, str):
                    await self.signaling_handler.process_signaling_message(
                        session, message
                    )
                else:
                    logger.warning(f"Ignoring binary frame from {session.label}")
        except ConnectionClosed:
            logger.info(f"Connection closed: {client_address}")
        except Exception as e:
            logger.error(
                f"Error handling connection from {client_address}: {e}",
                exc_info=True,
            )
        finally:
            await session.close()
            await self.registry.unregister(session)
            logger.info(f"Client disconnected: {session.label}")

    def get_stats(self) -> dict:
        """Get server statistics."""
        return {
            "server_running": self.server is not None,
            "registry_stats": self.registry.get_stats(),
        }


async def main(config: Optional[RelayConfig] = None) -> None:
    """Run the signaling relay until cancelled."""
    if config is None:
        config = config_manager.get_config()
    apply_log_level(config.log_level)

    server = SignalingRelayServer.from_config(config)

    try:
        if await server.start():
            logger.info("Signaling relay running. Press Ctrl+C to stop.")
            await asyncio.Future()  # Run forever
    finally:
        await server.stop()


def run() -> None:
    """Console entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down signaling relay...")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    run()
