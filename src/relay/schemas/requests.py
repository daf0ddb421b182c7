"""
Request Schema Definitions

Validation of inbound event payloads. Field names follow the wire
format used by browser clients (camelCase).
"""

from typing import Any, Dict, Optional

from ..errors import InvalidEvent


def require_payload(payload: Any) -> Dict[str, Any]:
    """
    Ensure the event payload is a JSON object.

    Raises:
        InvalidEvent: If the payload is not a dict
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidEvent("Event data must be a JSON object")
    return payload


def require_string(payload: Dict[str, Any], key: str) -> str:
    """
    Get a required non-empty string field.

    Raises:
        InvalidEvent: If the field is missing, empty or not a string
    """
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidEvent(f"Missing or invalid field '{key}'")
    return value


def optional_string(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise InvalidEvent(f"Invalid field '{key}'")
    return value


def parse_user_name(payload: Dict[str, Any]) -> str:
    """
    Extract ``user.name`` from a create_room or join_room payload.

    Raises:
        InvalidEvent: If ``user`` is not an object with a name
    """
    user = payload.get("user")
    if not isinstance(user, dict):
        raise InvalidEvent("Missing or invalid field 'user'")
    return require_string(user, "name")
