"""
Response Schema Definitions

Contains functions for creating error responses sent back to the
connection that caused them.
"""

from typing import Any, Dict, Optional


def create_error_response(
    error_message: str,
    error_code: str,
    room_code: Optional[str] = None,
    request_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a generic error response.

    Args:
        error_message: Error message text
        error_code: Machine readable error code
        room_code: Optional room code the error refers to
        request_type: Optional inbound event type that caused the error

    Returns:
        dict: Error response
    """
    data = {
        "error_code": error_code,
        "message": error_message,
    }
    if room_code:
        data["roomCode"] = room_code
    if request_type:
        data["requestType"] = request_type
    return {"type": "error", "data": data}


def create_internal_error_response() -> Dict[str, Any]:
    return create_error_response("Internal server error", "INTERNAL_ERROR")
