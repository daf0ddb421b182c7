"""
Presence Tracking

Reverse index from connection id to the code of the room the
connection is currently in. Only RoomRegistry mutates it.
"""

from typing import Dict, Optional


class PresenceTracker:
    """Pure mapping of connection id -> room code."""

    def __init__(self):
        self._rooms_by_connection: Dict[str, str] = {}

    def set(self, connection_id: str, room_code: str):
        self._rooms_by_connection[connection_id] = room_code

    def get(self, connection_id: str) -> Optional[str]:
        return self._rooms_by_connection.get(connection_id)

    def clear(self, connection_id: str) -> Optional[str]:
        """Remove the entry and return the room code it pointed to."""
        return self._rooms_by_connection.pop(connection_id, None)

    def items(self):
        return list(self._rooms_by_connection.items())

    def __contains__(self, connection_id) -> bool:
        return connection_id in self._rooms_by_connection

    def __len__(self) -> int:
        return len(self._rooms_by_connection)
