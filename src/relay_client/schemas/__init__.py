"""
Client Schemas

Request and response structures for talking to the relay, organized by
category:
    - room: Room creation and room/member records
    - member: Joining, leaving and member notifications
    - message: Relayed messages and errors
"""

from .base import BaseRequest, BaseResponse
from .room import CreateRoomRequest, MemberInfo, RoomInfo
from .member import (
    JoinRoomRequest,
    GetRoomUsersRequest,
    LeaveRoomRequest,
    RoomJoinedResponse,
    RoomUsersResponse,
    UserJoinedNotification,
    UserLeftNotification,
)
from .message import SendMessageRequest, NewMessageNotification, ErrorResponse

__all__ = [
    "BaseRequest",
    "BaseResponse",
    "CreateRoomRequest",
    "MemberInfo",
    "RoomInfo",
    "JoinRoomRequest",
    "GetRoomUsersRequest",
    "LeaveRoomRequest",
    "RoomJoinedResponse",
    "RoomUsersResponse",
    "UserJoinedNotification",
    "UserLeftNotification",
    "SendMessageRequest",
    "NewMessageNotification",
    "ErrorResponse",
]
