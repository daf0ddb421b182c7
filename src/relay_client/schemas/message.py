"""
Message Schema Definitions

This module defines the message structures for relayed chat messages and
for error responses.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .base import BaseRequest, BaseResponse


@dataclass
class SendMessageRequest(BaseRequest):
    """
    Request to relay a message to the other members of a room.

    Attributes:
        room_code: Code of the target room
        fields: Arbitrary message fields, relayed verbatim
    """

    room_code: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def _data(self) -> Dict[str, Any]:
        data = dict(self.fields)
        data["roomCode"] = self.room_code
        return data

    @property
    def _message_type(self) -> str:
        return "send_message"


@dataclass
class NewMessageNotification(BaseResponse):
    """
    A message relayed from another member.

    Attributes:
        room_code: Code of the room the message was sent to
        fields: All other message fields as sent by the author
    """

    room_code: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "NewMessageNotification":
        fields_ = {k: v for k, v in data.items() if k != "roomCode"}
        return cls(room_code=data.get("roomCode", ""), fields=fields_)


@dataclass
class ErrorResponse(BaseResponse):
    """
    Error reported by the relay.

    Attributes:
        error_code: Error code (e.g., NOT_A_MEMBER, INVALID_REQUEST)
        message: Human readable message
        room_code: Room the error refers to, if any
        request_type: Request that caused the error, if the relay knows it
    """

    error_code: str
    message: str
    room_code: Optional[str] = None
    request_type: Optional[str] = None

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "ErrorResponse":
        return cls(
            error_code=data.get("error_code", "UNKNOWN_ERROR"),
            message=data.get("message", ""),
            room_code=data.get("roomCode"),
            request_type=data.get("requestType"),
        )
