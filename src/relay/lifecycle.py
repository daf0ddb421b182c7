"""
Connection Lifecycle

Per-connection state machine driving when registry mutations happen:

    CONNECTED -> IN_ROOM -> CONNECTED -> ... -> TERMINATED

TERMINATED is reached once, on transport disconnect, and is final.
"""

import logging
from enum import Enum
from typing import Optional

from .errors import ConnectionTerminated

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle states of a connection."""

    CONNECTED = "CONNECTED"
    IN_ROOM = "IN_ROOM"
    TERMINATED = "TERMINATED"


class ConnectionLifecycle:
    """
    Tracks the lifecycle state of one transport connection.

    Attributes:
        connection_id: Identifier of the transport connection
        state: Current lifecycle state
        room_code: Code of the current room while IN_ROOM
    """

    def __init__(self, connection_id: str):
        self.connection_id = connection_id
        self.state = ConnectionState.CONNECTED
        self.room_code: Optional[str] = None

    @property
    def is_terminated(self) -> bool:
        return self.state == ConnectionState.TERMINATED

    def ensure_active(self):
        """
        Raises:
            ConnectionTerminated: If the connection already terminated
        """
        if self.is_terminated:
            raise ConnectionTerminated(self.connection_id)

    def enter_room(self, room_code: str):
        """Transition to IN_ROOM after a create or join."""
        self.ensure_active()
        self.state = ConnectionState.IN_ROOM
        self.room_code = room_code
        logger.debug(f"Connection {self.connection_id} entered room {room_code}")

    def leave_room(self):
        """Transition back to CONNECTED after a leave or eviction."""
        self.ensure_active()
        if self.state == ConnectionState.IN_ROOM:
            logger.debug(
                f"Connection {self.connection_id} left room {self.room_code}"
            )
        self.state = ConnectionState.CONNECTED
        self.room_code = None

    def terminate(self):
        """Enter the terminal state. Terminating twice is an error."""
        self.ensure_active()
        self.state = ConnectionState.TERMINATED
        self.room_code = None
        logger.debug(f"Connection {self.connection_id} terminated")
