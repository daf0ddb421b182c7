"""
Member Schema Definitions

This module defines the message structures for room membership operations
including joining, leaving, listing members and member notifications.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import BaseRequest, BaseResponse
from .room import MemberInfo, RoomInfo, _members_from


@dataclass
class JoinRoomRequest(BaseRequest):
    """
    Request to join an existing room.

    Attributes:
        room_code: Code of the room to join
        user_name: Display name of the joining user
    """

    room_code: str
    user_name: str

    def _data(self) -> Dict[str, Any]:
        return {"roomCode": self.room_code, "user": {"name": self.user_name}}

    @property
    def _message_type(self) -> str:
        """Return the message type for join room requests."""
        return "join_room"


@dataclass
class GetRoomUsersRequest(BaseRequest):
    """Request for the member list of a room."""

    room_code: str

    def _data(self) -> Dict[str, Any]:
        return {"roomCode": self.room_code}

    @property
    def _message_type(self) -> str:
        return "get_room_users"


@dataclass
class LeaveRoomRequest(BaseRequest):
    """
    Request to leave a room.

    Attributes:
        room_code: Code of the room to leave
        user_id: Connection id to remove; the relay uses the sender's
            own connection when omitted
    """

    room_code: str
    user_id: Optional[str] = None

    def _data(self) -> Dict[str, Any]:
        data = {"roomCode": self.room_code}
        if self.user_id:
            data["userId"] = self.user_id
        return data

    @property
    def _message_type(self) -> str:
        return "leave_room"


@dataclass
class RoomJoinedResponse(BaseResponse):
    """
    Response indicating a successful room join.

    Attributes:
        room: The joined room
        members: Members of the room in join order, including the joiner
    """

    room: RoomInfo
    members: List[MemberInfo]

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "RoomJoinedResponse":
        """Create from response data dictionary."""
        return cls(
            room=RoomInfo._from_data(data["room"]),
            members=_members_from(data.get("members", [])),
        )


@dataclass
class RoomUsersResponse(BaseResponse):
    """Member list returned for get_room_users."""

    members: List[MemberInfo]

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "RoomUsersResponse":
        return cls(members=_members_from(data.get("members", [])))


@dataclass
class UserJoinedNotification(BaseResponse):
    """
    Notification that a new member joined the room.

    Attributes:
        id: Connection id of the new member
        name: Display name of the new member
    """

    id: str
    name: str

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "UserJoinedNotification":
        return cls(id=data.get("id", ""), name=data["name"])


@dataclass
class UserLeftNotification(BaseResponse):
    """Notification that a member left or disconnected."""

    id: str

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "UserLeftNotification":
        return cls(id=data["id"])
