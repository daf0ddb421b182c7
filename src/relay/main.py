#!/usr/bin/env python3
"""
Chat Room Relay Server

Realtime chat-room relay: clients create or join rooms by code and
exchange messages over WebSocket.
"""

import asyncio
import logging
import sys

from .config import RelayConfig
from .room_state import RoomRegistry
from .router import EventRouter
from .websocket_server import WebSocketServer

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_server(config: RelayConfig) -> WebSocketServer:
    """
    Wire the registry, router and transport together.

    Args:
        config: Relay settings

    Returns:
        WebSocketServer ready to be started
    """
    registry = RoomRegistry(max_code_attempts=config.max_code_attempts)
    router = EventRouter(
        registry,
        strict_membership=config.strict_membership,
        report_missing_rooms=config.report_missing_rooms,
    )
    return WebSocketServer(router, config.host, config.port)


async def run_server(config: RelayConfig):
    """
    Run the relay until cancelled.

    Args:
        config: Relay settings
    """
    ws_server = build_server(config)

    logger.info(f"Binding to port {config.port}")
    await ws_server.start()

    logger.info(f"Relay listening on ws://{config.host}:{config.port}")
    if config.strict_membership:
        logger.info("Strict membership checks enabled")

    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        logger.info("Server shutdown requested")
    finally:
        await ws_server.stop()
        logger.info("Relay server stopped")


def main():
    """Main entry point for the relay server."""
    try:
        config = RelayConfig.from_env()
    except ValueError as e:
        configure_logging("INFO")
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    configure_logging(config.log_level)
    logger.info("Starting chat room relay...")

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Shutting down relay server...")
        sys.exit(0)


if __name__ == "__main__":
    main()
