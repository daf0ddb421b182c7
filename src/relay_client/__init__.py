"""
Relay Client Package

This package provides an async Python client for the chat-room relay,
including the RelayClient service and the request/response schemas.
"""

from .service import (
    RelayClient,
    RelayClientError,
    RoomNotFoundError,
    parse_event,
)
from .schemas import (
    BaseRequest,
    BaseResponse,
    CreateRoomRequest,
    MemberInfo,
    RoomInfo,
    JoinRoomRequest,
    GetRoomUsersRequest,
    LeaveRoomRequest,
    RoomJoinedResponse,
    RoomUsersResponse,
    UserJoinedNotification,
    UserLeftNotification,
    SendMessageRequest,
    NewMessageNotification,
    ErrorResponse,
)

__all__ = [
    "RelayClient",
    "RelayClientError",
    "RoomNotFoundError",
    "parse_event",
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
