"""
Relay Server Package

This package provides the chat-room relay: the room/presence registry,
the event router that fans events out to room members, and the
WebSocket transport.
"""

from .codes import RoomCodeGenerator, ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH
from .config import RelayConfig
from .errors import (
    RelayError,
    RoomNotFound,
    CapacityExhausted,
    NotAMember,
    InvalidEvent,
    UnknownEvent,
    ConnectionTerminated,
)
from .lifecycle import ConnectionLifecycle, ConnectionState
from .presence import PresenceTracker
from .room_state import (
    RoomRegistry,
    Room,
    Member,
    CreateResult,
    JoinResult,
    LeaveResult,
    MAX_CODE_ATTEMPTS,
)
from .router import EventRouter, Delivery
from .websocket_server import WebSocketServer

__all__ = [
    "RoomCodeGenerator",
    "ROOM_CODE_ALPHABET",
    "ROOM_CODE_LENGTH",
    "RelayConfig",
    "RelayError",
    "RoomNotFound",
    "CapacityExhausted",
    "NotAMember",
    "InvalidEvent",
    "UnknownEvent",
    "ConnectionTerminated",
    "ConnectionLifecycle",
    "ConnectionState",
    "PresenceTracker",
    "RoomRegistry",
    "Room",
    "Member",
    "CreateResult",
    "JoinResult",
    "LeaveResult",
    "MAX_CODE_ATTEMPTS",
    "EventRouter",
    "Delivery",
    "WebSocketServer",
]
