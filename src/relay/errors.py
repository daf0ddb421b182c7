"""
Relay Errors

Domain exceptions raised by the room registry and the event router.
Each error carries an ``error_code`` that is reported back to the
originating connection instead of crashing the server.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for all relay domain errors."""

    error_code = "RELAY_ERROR"

    def __init__(self, message: str, room_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.room_code = room_code


class RoomNotFound(RelayError):
    """Raised when a room code does not exist in the registry."""

    error_code = "ROOM_NOT_FOUND"

    def __init__(self, room_code: str):
        super().__init__(f"Room {room_code} not found", room_code)


class CapacityExhausted(RelayError):
    """Raised when no free room code was found within the retry cap."""

    error_code = "CAPACITY_EXHAUSTED"

    def __init__(self, attempts: int):
        super().__init__(
            f"Could not allocate a free room code after {attempts} attempts"
        )
        self.attempts = attempts


class NotAMember(RelayError):
    """Raised in strict mode when a connection acts on a room it is not in."""

    error_code = "NOT_A_MEMBER"

    def __init__(self, room_code: str, connection_id: str):
        super().__init__(
            f"Connection {connection_id} is not a member of room {room_code}",
            room_code,
        )
        self.connection_id = connection_id


class InvalidEvent(RelayError):
    """Raised when an inbound payload is malformed."""

    error_code = "INVALID_REQUEST"


class UnknownEvent(RelayError):
    """Raised for an inbound event type the router does not handle."""

    error_code = "UNKNOWN_EVENT"

    def __init__(self, event_type):
        super().__init__(f"Unknown message type: {event_type}")
        self.event_type = event_type


class ConnectionTerminated(RelayError):
    """Raised when a terminated connection attempts another operation."""

    error_code = "CONNECTION_TERMINATED"

    def __init__(self, connection_id: str):
        super().__init__(f"Connection {connection_id} is terminated")
        self.connection_id = connection_id
