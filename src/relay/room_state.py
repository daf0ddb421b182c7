"""
Room State Management for the Relay

This module owns the authoritative room map (room code -> Room) together
with the presence index (connection id -> room code). Both structures are
only ever changed inside one RoomRegistry method body, under one lock, so
they can never drift apart.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .codes import RoomCodeGenerator
from .errors import CapacityExhausted, RoomNotFound
from .presence import PresenceTracker

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 100  # regenerations before a create fails


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Member:
    """
    A connection's membership record within a room.

    Attributes:
        connection_id: Identifier of the transport connection
        display_name: Name supplied by the client, not unique
        joined_at: ISO 8601 timestamp when the member joined
    """

    connection_id: str
    display_name: str
    joined_at: str = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        return {"id": self.connection_id, "name": self.display_name}


@dataclass
class Room:
    """
    A named, coded group of connections.

    Attributes:
        code: Unique six character room code
        name: Display name set at creation
        members: Members in join order
        created_at: ISO 8601 timestamp when the room was created
    """

    code: str
    name: str
    members: List[Member] = field(default_factory=list)
    created_at: str = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert room to dictionary for serialization."""
        return {
            "name": self.name,
            "code": self.code,
            "members": [member.to_dict() for member in self.members],
        }

    def snapshot(self) -> "Room":
        """Return a copy whose member list is detached from the registry."""
        return Room(
            code=self.code,
            name=self.name,
            members=list(self.members),
            created_at=self.created_at,
        )

    def find_member(self, connection_id: str) -> Optional[Member]:
        for member in self.members:
            if member.connection_id == connection_id:
                return member
        return None

    def connection_ids(self) -> List[str]:
        return [member.connection_id for member in self.members]


@dataclass
class LeaveResult:
    """
    Outcome of removing a connection from a room.

    Attributes:
        room_code: The room that was left
        connection_id: The connection that was removed
        removed: False when the connection was not a member (no change)
        room_deleted: True when the removal emptied and deleted the room
        remaining: Connection ids still in the room, in join order
    """

    room_code: str
    connection_id: str
    removed: bool = False
    room_deleted: bool = False
    remaining: Tuple[str, ...] = ()


@dataclass
class JoinResult:
    """
    Outcome of a successful join.

    Attributes:
        room: Snapshot of the room after the join
        member: The member record of the joining connection
        others: Connection ids of the members other than the joiner
        already_member: True when the connection was already in this room
        previous: Result of leaving the connection's previous room, if any
    """

    room: Room
    member: Member
    others: Tuple[str, ...] = ()
    already_member: bool = False
    previous: Optional[LeaveResult] = None


@dataclass
class CreateResult:
    """
    Outcome of creating a room.

    Attributes:
        room: Snapshot of the new room
        previous: Result of leaving the creator's previous room, if any
    """

    room: Room
    previous: Optional[LeaveResult] = None


class RoomRegistry:
    """
    Manages all rooms hosted by this relay and the presence index.

    Every public method acquires the registry lock for its whole body,
    so room membership and presence change together or not at all.
    Callers only ever receive snapshots of rooms.
    """

    def __init__(
        self,
        code_generator: Optional[RoomCodeGenerator] = None,
        max_code_attempts: int = MAX_CODE_ATTEMPTS,
    ):
        """
        Initialize the registry.

        Args:
            code_generator: Source of room codes (defaults to a fresh one)
            max_code_attempts: Regenerations allowed before a create fails
        """
        self._code_generator = code_generator or RoomCodeGenerator()
        self._max_code_attempts = max_code_attempts
        self._rooms: Dict[str, Room] = {}
        self._presence = PresenceTracker()
        self._lock = threading.RLock()
        logger.info("RoomRegistry initialized")

    def create_room(
        self, name: str, creator_connection_id: str, creator_name: str
    ) -> CreateResult:
        """
        Create a new room with the creator as its only member.

        Args:
            name: Display name of the room
            creator_connection_id: Connection creating the room
            creator_name: Display name of the creator

        Returns:
            CreateResult with a snapshot of the new room

        Raises:
            CapacityExhausted: If no free code was found within the cap
        """
        with self._lock:
            code = self._allocate_code()

            previous = None
            current = self._presence.get(creator_connection_id)
            if current is not None:
                previous = self._remove_member(current, creator_connection_id)

            room = Room(
                code=code,
                name=name,
                members=[Member(creator_connection_id, creator_name)],
            )
            self._rooms[code] = room
            self._presence.set(creator_connection_id, code)
            logger.info(
                f"Created room '{name}' (code: {code}) by "
                f"{creator_name} ({creator_connection_id})"
            )
            return CreateResult(room=room.snapshot(), previous=previous)

    def join_room(
        self, code: str, connection_id: str, display_name: str
    ) -> JoinResult:
        """
        Append a member to an existing room.

        Args:
            code: The room code
            connection_id: The joining connection
            display_name: Display name of the joining user

        Returns:
            JoinResult describing the room after the join

        Raises:
            RoomNotFound: If the code does not exist
        """
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                raise RoomNotFound(code)

            existing = room.find_member(connection_id)
            if existing is not None:
                logger.info(
                    f"Connection {connection_id} re-joining room {code} "
                    f"(already a member)"
                )
                return JoinResult(
                    room=room.snapshot(),
                    member=existing,
                    others=tuple(
                        cid for cid in room.connection_ids() if cid != connection_id
                    ),
                    already_member=True,
                )

            previous = None
            current = self._presence.get(connection_id)
            if current is not None:
                previous = self._remove_member(current, connection_id)

            others = tuple(room.connection_ids())
            member = Member(connection_id, display_name)
            room.members.append(member)
            self._presence.set(connection_id, code)
            logger.info(
                f"Added {display_name} ({connection_id}) to room "
                f"'{room.name}' (code: {code})"
            )
            return JoinResult(
                room=room.snapshot(),
                member=member,
                others=others,
                previous=previous,
            )

    def get_members(self, code: str) -> Optional[List[Member]]:
        """
        Get the members of a room in join order.

        Returns:
            List of members, or None if the room does not exist
        """
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return None
            return list(room.members)

    def leave_room(self, code: str, connection_id: str) -> LeaveResult:
        """
        Remove a connection from a room.

        Leaving a room the connection is not in changes nothing.

        Args:
            code: The room code
            connection_id: The connection to remove

        Returns:
            LeaveResult describing what changed
        """
        with self._lock:
            return self._remove_member(code, connection_id)

    def disconnect(self, connection_id: str) -> Optional[LeaveResult]:
        """
        Remove a connection from whatever room it is in.

        Presence is cleared even when no room was found.

        Returns:
            LeaveResult, or None if the connection was in no room
        """
        with self._lock:
            code = self._presence.get(connection_id)
            result = None
            if code is not None:
                result = self._remove_member(code, connection_id)
            self._presence.clear(connection_id)
            if result is None or not result.removed:
                return None
            return result

    def get_room(self, code: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.get(code)
            return room.snapshot() if room else None

    def room_of(self, connection_id: str) -> Optional[str]:
        """Get the code of the room a connection is currently in."""
        with self._lock:
            return self._presence.get(connection_id)

    def is_member(self, code: str, connection_id: str) -> bool:
        with self._lock:
            room = self._rooms.get(code)
            return bool(room) and room.find_member(connection_id) is not None

    def recipients(
        self, code: str, exclude: Optional[str] = None
    ) -> Tuple[str, ...]:
        """
        Snapshot the connection ids subscribed to a room.

        Args:
            code: The room code
            exclude: Optional connection id to leave out (usually the sender)

        Returns:
            Tuple of connection ids in join order, empty if no such room
        """
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return ()
            return tuple(cid for cid in room.connection_ids() if cid != exclude)

    def list_rooms(self) -> List[Dict]:
        with self._lock:
            return [
                {
                    "code": room.code,
                    "name": room.name,
                    "member_count": len(room.members),
                    "created_at": room.created_at,
                }
                for room in self._rooms.values()
            ]

    def get_room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def _allocate_code(self) -> str:
        for _ in range(self._max_code_attempts):
            code = self._code_generator.generate()
            if code not in self._rooms:
                return code
            logger.debug(f"Room code collision on {code}, regenerating")
        logger.error(
            f"No free room code after {self._max_code_attempts} attempts "
            f"({len(self._rooms)} live rooms)"
        )
        raise CapacityExhausted(self._max_code_attempts)

    def _remove_member(self, code: str, connection_id: str) -> LeaveResult:
        # Caller holds the lock.
        room = self._rooms.get(code)
        if room is None or room.find_member(connection_id) is None:
            return LeaveResult(room_code=code, connection_id=connection_id)

        room.members = [
            m for m in room.members if m.connection_id != connection_id
        ]
        if self._presence.get(connection_id) == code:
            self._presence.clear(connection_id)
        logger.info(
            f"Removed {connection_id} from room '{room.name}' (code: {code})"
        )

        if not room.members:
            del self._rooms[code]
            logger.info(f"Deleted empty room '{room.name}' (code: {code})")
            return LeaveResult(
                room_code=code,
                connection_id=connection_id,
                removed=True,
                room_deleted=True,
            )

        return LeaveResult(
            room_code=code,
            connection_id=connection_id,
            removed=True,
            remaining=tuple(room.connection_ids()),
        )
