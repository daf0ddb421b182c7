"""
Client Service for the Chat Room Relay

This module provides the client service class that talks to a relay
server over WebSocket: creating and joining rooms, listing members,
relaying messages and leaving rooms.

Architecture:
    - Uses WebSocket for real-time bidirectional communication
    - Supports dependency injection for the network layer (for testability)
    - Async/await pattern for non-blocking I/O operations
    - Events that arrive while waiting for a reply are queued, not dropped
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import websockets
from websockets.exceptions import ConnectionClosed

from .schemas import (
    CreateRoomRequest,
    ErrorResponse,
    GetRoomUsersRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    NewMessageNotification,
    RoomInfo,
    RoomJoinedResponse,
    RoomUsersResponse,
    SendMessageRequest,
    UserJoinedNotification,
    UserLeftNotification,
)

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_TIMEOUT = 5.0  # seconds

EVENT_SCHEMAS = {
    "room_created": RoomInfo,
    "room_joined": RoomJoinedResponse,
    "room_users": RoomUsersResponse,
    "user_joined": UserJoinedNotification,
    "user_left": UserLeftNotification,
    "new_message": NewMessageNotification,
    "error": ErrorResponse,
}


class RoomNotFoundError(ValueError):
    """The relay answered room_not_found."""


class RelayClientError(ValueError):
    """The relay answered with an error event."""

    def __init__(self, response: ErrorResponse):
        super().__init__(response.message)
        self.error_code = response.error_code
        self.response = response


def parse_event(message: str) -> Tuple[str, Any]:
    """
    Decode one relay frame into its type and typed payload.

    Returns:
        (event_type, payload) where payload is a schema object for known
        events, the raw data for unknown ones, and None for room_not_found
    """
    envelope = json.loads(message)
    event_type = envelope.get("type")
    schema = EVENT_SCHEMAS.get(event_type)
    if schema is not None:
        return event_type, schema.from_dict(envelope)
    return event_type, envelope.get("data")


class RelayClient:
    """
    Client for interacting with a relay server.

    Attributes:
        server_url: WebSocket URL of the relay (e.g., ws://localhost:3000)
        websocket: Active WebSocket connection (None if not connected)
        pending_events: Events received while waiting for a reply
        current_room: Code of the room this client is in, if any
    """

    def __init__(
        self,
        server_url: str,
        websocket_factory: Optional[Callable] = None,
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
    ):
        """
        Initialize the client.

        Args:
            server_url: WebSocket URL of the relay server
            websocket_factory: Optional factory for creating WebSocket
                             connections (for dependency injection/testing)
            response_timeout: Seconds to wait for a reply
        """
        self.server_url = server_url
        self.websocket = None
        self.response_timeout = response_timeout
        self.pending_events: List[Tuple[str, Any]] = []
        self.current_room: Optional[str] = None
        self._websocket_factory = websocket_factory or websockets.connect
        self._handlers: Dict[str, List[Callable[[Any], None]]] = {}
        self._connected = False

        logger.info(f"RelayClient initialized for server: {server_url}")

    async def connect(self) -> None:
        """
        Establish WebSocket connection to the relay.

        Raises:
            ConnectionError: If connection fails
        """
        try:
            logger.info(f"Connecting to {self.server_url}...")
            self.websocket = await self._websocket_factory(self.server_url)
            self._connected = True
            logger.info("Successfully connected to relay server")
        except Exception as e:
            logger.error(f"Failed to connect to relay: {e}")
            raise ConnectionError(f"Could not connect to {self.server_url}: {e}")

    async def disconnect(self) -> None:
        """Close the WebSocket connection."""
        if self.websocket:
            await self.websocket.close()
            self.websocket = None
            self._connected = False
            self.current_room = None
            logger.info("Disconnected from relay server")

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to a relay."""
        return self._connected and self.websocket is not None

    def on(self, event_type: str, handler: Callable[[Any], None]) -> None:
        """
        Register a callback for an event type.

        Args:
            event_type: Outbound relay event name (e.g., "new_message")
            handler: Callback receiving the typed payload
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def _set_test_mode(self, mock_websocket: object = None) -> None:
        """
        Set the client in test mode with a mock connection.

        Raises:
            ValueError: If mock_websocket is not provided
        """
        if mock_websocket is None:
            raise ValueError("_set_test_mode requires a mock_websocket object")
        self._connected = True
        self.websocket = mock_websocket

    async def create_room(self, room_name: str, user_name: str) -> RoomInfo:
        """
        Create a new room and become its first member.

        Args:
            room_name: Display name of the room
            user_name: Display name of this user

        Returns:
            RoomInfo with the room code and members

        Raises:
            ConnectionError: If not connected
            RelayClientError: If the relay rejects the request
        """
        self._require_connection()
        logger.info(f"Sending create_room request for '{room_name}'")

        await self.websocket.send(CreateRoomRequest(room_name, user_name).to_json())
        _, room = await self._await_reply("create_room", {"room_created"})
        self.current_room = room.code
        logger.info(f"Created room '{room.name}' with code {room.code}")
        return room

    async def join_room(self, room_code: str, user_name: str) -> RoomJoinedResponse:
        """
        Join an existing room by code.

        Raises:
            ConnectionError: If not connected
            RoomNotFoundError: If no room has that code
            RelayClientError: If the relay rejects the request
        """
        self._require_connection()
        logger.info(f"Sending join_room request for room '{room_code}'")

        await self.websocket.send(JoinRoomRequest(room_code, user_name).to_json())
        _, response = await self._await_reply("join_room", {"room_joined"})
        self.current_room = response.room.code
        logger.info(f"Successfully joined room '{response.room.name}'")
        return response

    async def get_room_users(self, room_code: str) -> Optional[RoomUsersResponse]:
        """
        Ask for the members of a room.

        The relay does not answer for unknown rooms, so this returns
        None after the response timeout in that case.
        """
        self._require_connection()
        await self.websocket.send(GetRoomUsersRequest(room_code).to_json())
        try:
            _, response = await self._await_reply("get_room_users", {"room_users"})
        except (asyncio.TimeoutError, RoomNotFoundError):
            logger.info(f"No member list for room '{room_code}'")
            return None
        return response

    async def send_message(self, room_code: str, **fields: Any) -> None:
        """
        Relay a message to the other members of a room.

        This is fire-and-forget: the relay does not confirm delivery.
        """
        self._require_connection()
        logger.debug(f"Sending message to room '{room_code}'")
        await self.websocket.send(SendMessageRequest(room_code, fields).to_json())

    async def leave_room(
        self, room_code: str, user_id: Optional[str] = None
    ) -> None:
        """
        Leave a room. Fire-and-forget.

        Args:
            room_code: Code of the room to leave
            user_id: Connection to remove (defaults to this connection)
        """
        self._require_connection()
        logger.info(f"Leaving room '{room_code}'")
        await self.websocket.send(LeaveRoomRequest(room_code, user_id).to_json())
        if user_id is None and self.current_room == room_code:
            self.current_room = None

    async def handle_messages(self) -> None:
        """
        Listen for incoming events until the connection closes.

        Queued events are dispatched first, then each received event is
        dispatched to the handlers registered with ``on``.
        """
        self._require_connection()
        logger.info("Starting message handler loop")

        while self.pending_events:
            self._dispatch(*self.pending_events.pop(0))

        try:
            async for message in self.websocket:
                self._dispatch(*parse_event(message))
        except ConnectionClosed:
            logger.warning("Connection closed by server")
            self._connected = False

    def _dispatch(self, event_type: str, payload: Any) -> None:
        handlers = self._handlers.get(event_type, [])
        if not handlers:
            logger.debug(f"No handler for {event_type} event")
        for handler in handlers:
            handler(payload)

    async def _await_reply(
        self, request_type: str, expected: set
    ) -> Tuple[str, Any]:
        """
        Wait for the reply to a request of type ``request_type``.

        Unrelated events received meanwhile, including errors raised by
        earlier fire-and-forget requests, go to pending_events. The
        response timeout covers the whole wait, not each frame.

        Raises:
            asyncio.TimeoutError: If no reply arrived in time
            RoomNotFoundError: If the relay answered room_not_found
            RelayClientError: If the relay rejected this request
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.response_timeout
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise asyncio.TimeoutError()
            message = await asyncio.wait_for(self.websocket.recv(), timeout=remaining)
            event_type, payload = parse_event(message)
            if event_type in expected:
                return event_type, payload
            if event_type == "room_not_found":
                raise RoomNotFoundError("Room not found")
            if event_type == "error" and payload.request_type in (None, request_type):
                logger.error(f"Relay error: {payload.message}")
                raise RelayClientError(payload)
            self.pending_events.append((event_type, payload))

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise ConnectionError("Not connected to a relay server")
