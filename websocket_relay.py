#!/usr/bin/env python3
"""
WebSocket Relay Server for WebRTC signaling.

This script starts the rendezvous relay that lets browser peers create and
join rooms and exchange offers, answers and ICE candidates.
"""

import asyncio
import sys
from pathlib import Path

# Add the src directory to the Python path
src_dir = Path(__file__).parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from rendezvous_relay.config import config_manager
from rendezvous_relay.infrastructure import ConfigurationError, setup_logging
from rendezvous_relay.websockets.server.relay_server import main as relay_main

logger = setup_logging(component_name="websocket_relay")


async def main():
    """Main function to start the signaling relay."""
    config = config_manager.get_config()
    logger.info(f"Starting signaling relay on {config.host}:{config.port}...")
    await relay_main(config)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nSignaling relay shutdown requested")
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
