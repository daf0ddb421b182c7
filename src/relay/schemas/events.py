"""
Event Schema Definitions

Contains functions for creating the outbound event envelopes sent to
clients: room creation, joins, member lists, relayed messages and leaves.
"""

from typing import Any, Dict, List

from ..room_state import Member, Room


def create_room_created_event(room: Room) -> Dict[str, Any]:
    """
    Create a room_created event for the room creator.

    Args:
        room: Snapshot of the new room

    Returns:
        dict: Event envelope
    """
    return {"type": "room_created", "data": room.to_dict()}


def create_room_joined_event(room: Room) -> Dict[str, Any]:
    """
    Create a room_joined event for the joining connection.

    Args:
        room: Snapshot of the room after the join

    Returns:
        dict: Event envelope with the room and its members
    """
    room_data = room.to_dict()
    return {
        "type": "room_joined",
        "data": {"room": room_data, "members": room_data["members"]},
    }


def create_room_not_found_event() -> Dict[str, Any]:
    """Create a room_not_found event. It carries no payload."""
    return {"type": "room_not_found"}


def create_user_joined_event(member: Member) -> Dict[str, Any]:
    """
    Create a user_joined event for the other members of a room.

    Args:
        member: The member that joined

    Returns:
        dict: Event envelope with the joining user's public info
    """
    return {"type": "user_joined", "data": member.to_dict()}


def create_room_users_event(members: List[Member]) -> Dict[str, Any]:
    """
    Create a room_users event answering get_room_users.

    Args:
        members: Members of the room in join order

    Returns:
        dict: Event envelope
    """
    return {
        "type": "room_users",
        "data": {"members": [member.to_dict() for member in members]},
    }


def create_new_message_event(message: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a new_message event.

    The message payload is relayed verbatim and never stored.
    """
    return {"type": "new_message", "data": message}


def create_user_left_event(connection_id: str) -> Dict[str, Any]:
    """
    Create a user_left event.

    Args:
        connection_id: Connection id of the member that left

    Returns:
        dict: Event envelope
    """
    return {"type": "user_left", "data": {"id": connection_id}}
