"""
Room Schema Definitions

This module defines the message structures for creating rooms and the
room and member records the relay sends back.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import BaseRequest, BaseResponse


@dataclass
class MemberInfo(BaseResponse):
    """
    Public record of a room member.

    Attributes:
        id: Connection id of the member
        name: Display name of the member
    """

    id: str
    name: str

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "MemberInfo":
        return cls(id=data["id"], name=data["name"])


def _members_from(data: List[Dict[str, Any]]) -> List[MemberInfo]:
    return [MemberInfo._from_data(member) for member in data]


@dataclass
class CreateRoomRequest(BaseRequest):
    """
    Request to create a new room.

    Attributes:
        room_name: Display name of the room
        user_name: Display name of the creator
    """

    room_name: str
    user_name: str

    def _data(self) -> Dict[str, Any]:
        return {"roomName": self.room_name, "user": {"name": self.user_name}}

    @property
    def _message_type(self) -> str:
        return "create_room"


@dataclass
class RoomInfo(BaseResponse):
    """
    A room as described by room_created.

    Attributes:
        code: Six character room code
        name: Display name of the room
        members: Members in join order
    """

    code: str
    name: str
    members: List[MemberInfo] = field(default_factory=list)

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "RoomInfo":
        """Create from response data dictionary."""
        return cls(
            code=data["code"],
            name=data["name"],
            members=_members_from(data.get("members", [])),
        )

    @property
    def member_names(self) -> List[str]:
        return [member.name for member in self.members]
