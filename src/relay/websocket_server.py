"""
WebSocket Server for the Relay

Handles WebSocket connections from clients, hands decoded events to the
EventRouter and sends the resulting deliveries. Also answers plain HTTP
health checks on the same port.

Wire format: one JSON text frame per event,
    {"type": "<event name>", "data": {...}}
"""

import json
import logging
import time
from http import HTTPStatus
from typing import Any, Dict, Iterable, Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from .router import Delivery, EventRouter
from .schemas import create_error_response, create_internal_error_response

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"


class WebSocketServer:
    """
    WebSocket server for handling client connections.

    Keeps the addressing table of live connections (connection id ->
    websocket) and provides the channel operations the router's
    deliveries need: send to one connection, to a snapshotted list of
    room subscribers, or to every connection.
    """

    def __init__(self, router: EventRouter, host: str, port: int):
        """
        Initialize the WebSocket server.

        Args:
            router: The event router instance
            host: Host address to bind to
            port: Port to listen on
        """
        self.router = router
        self.host = host
        self.port = port
        self.server: Optional[Server] = None
        self.started_at = time.monotonic()
        self._connections: Dict[str, ServerConnection] = {}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def start(self):
        """Start the WebSocket server."""
        self.started_at = time.monotonic()
        self.server = await serve(
            self.handle_client,
            self.host,
            self.port,
            process_request=self.process_request,
        )
        logger.info(f"WebSocket server started on ws://{self.host}:{self.port}")

    async def stop(self):
        """Stop the WebSocket server."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            logger.info("WebSocket server stopped")

    def health(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - self.started_at, 3),
            "connections": self.connection_count,
        }

    def process_request(
        self, connection: ServerConnection, request: Request
    ) -> Optional[Response]:
        """
        Answer health checks before the WebSocket handshake.

        Returns:
            An HTTP response for the health path, None to continue the
            handshake for every other path
        """
        if request.path.split("?", 1)[0] != HEALTH_PATH:
            return None
        response = connection.respond(HTTPStatus.OK, json.dumps(self.health()))
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response

    @staticmethod
    def connection_id_of(websocket) -> str:
        return str(websocket.id)

    def register_connection(self, websocket) -> str:
        """
        Add a websocket to the addressing table and the router.

        Returns:
            The connection id assigned to the websocket
        """
        connection_id = self.connection_id_of(websocket)
        self._connections[connection_id] = websocket
        self.router.connect(connection_id)
        return connection_id

    async def unregister_connection(self, websocket):
        """Remove a websocket and notify the rest of its room."""
        connection_id = self.connection_id_of(websocket)
        self._connections.pop(connection_id, None)
        deliveries = self.router.disconnect(connection_id)
        await self.deliver(deliveries)

    async def handle_client(self, websocket: ServerConnection):
        """
        Handle a client connection.

        Args:
            websocket: The WebSocket connection
        """
        connection_id = self.register_connection(websocket)
        logger.info(f"Client {connection_id} connected")

        try:
            async for message in websocket:
                await self.process_message(websocket, message)
        except ConnectionClosed:
            logger.info(f"Client {connection_id} connection closed")
        except Exception as e:
            logger.error(f"Error handling client {connection_id}: {e}")
        finally:
            await self.unregister_connection(websocket)
            logger.info(f"Client {connection_id} disconnected")

    async def process_message(self, websocket, message):
        """
        Process an incoming message from a client.

        Args:
            websocket: The WebSocket connection
            message: The message string (JSON)
        """
        connection_id = self.connection_id_of(websocket)
        try:
            data = json.loads(message)
            if not isinstance(data, dict):
                await self.send_error(
                    websocket, "Message must be a JSON object", "INVALID_REQUEST"
                )
                return
            deliveries = self.router.dispatch(
                connection_id, data.get("type"), data.get("data")
            )
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON received from {connection_id}: {e}")
            await self.send_error(websocket, "Invalid JSON format", "INVALID_REQUEST")
            return
        except Exception as e:
            logger.error(f"Error processing message from {connection_id}: {e}")
            await self._send(websocket, create_internal_error_response())
            return

        await self.deliver(deliveries)

    async def deliver(self, deliveries: Iterable[Delivery]):
        """Send routed events to their snapshotted recipients."""
        for delivery in deliveries:
            await self.send_to_connections(delivery.recipients, delivery.event)

    async def send_to_connections(
        self, connection_ids: Iterable[str], event: Dict[str, Any]
    ):
        message_json = json.dumps(event)
        for connection_id in connection_ids:
            websocket = self._connections.get(connection_id)
            if websocket is None:
                logger.debug(
                    f"Skipping {event.get('type')} for gone connection "
                    f"{connection_id}"
                )
                continue
            await self._send(websocket, message_json)

    async def send_to_room(
        self,
        room_code: str,
        event: Dict[str, Any],
        exclude: Optional[str] = None,
    ):
        """
        Send an event to every member of a room.

        Args:
            room_code: The room code
            event: The event envelope
            exclude: Optional connection id to leave out
        """
        recipients = self.router.registry.recipients(room_code, exclude=exclude)
        await self.send_to_connections(recipients, event)

    async def broadcast(self, event: Dict[str, Any]):
        """Send an event to every live connection."""
        await self.send_to_connections(list(self._connections), event)

    async def send_error(
        self, websocket, error_message: str, error_code: str
    ):
        """
        Send an error response to a client.

        Args:
            websocket: The WebSocket connection
            error_message: The error message
            error_code: Machine readable error code
        """
        await self._send(websocket, create_error_response(error_message, error_code))

    async def _send(self, websocket, message):
        if not isinstance(message, str):
            message = json.dumps(message)
        try:
            await websocket.send(message)
        except ConnectionClosed:
            pass
