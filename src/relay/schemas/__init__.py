"""
Schemas for the Relay

This module contains schema definitions for inbound requests and the
outbound events and error responses sent to clients.
"""

from .events import (
    create_room_created_event,
    create_room_joined_event,
    create_room_not_found_event,
    create_user_joined_event,
    create_room_users_event,
    create_new_message_event,
    create_user_left_event,
)
from .responses import (
    create_error_response,
    create_internal_error_response,
)
from .requests import (
    require_payload,
    require_string,
    optional_string,
    parse_user_name,
)

__all__ = [
    "create_room_created_event",
    "create_room_joined_event",
    "create_room_not_found_event",
    "create_user_joined_event",
    "create_room_users_event",
    "create_new_message_event",
    "create_user_left_event",
    "create_error_response",
    "create_internal_error_response",
    "require_payload",
    "require_string",
    "optional_string",
    "parse_user_name",
]
