"""
Event Router for the Relay

Maps each inbound client event to one registry operation and decides
who receives the resulting outbound events. The router never performs
I/O: it returns Delivery objects whose recipient lists are snapshotted
at dispatch time, and the transport sends them afterwards.

Inbound event        Registry operation     Outbound audience
-------------------  ---------------------  ----------------------------------
create_room          create_room            sender: room_created
join_room            join_room              sender: room_joined/room_not_found,
                                            room minus sender: user_joined
get_room_users       get_members            sender: room_users
send_message         (relay only)           room minus sender: new_message
leave_room           leave_room             room minus sender: user_left
(transport close)    disconnect             room: user_left
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import (
    ConnectionTerminated,
    InvalidEvent,
    NotAMember,
    RelayError,
    RoomNotFound,
    UnknownEvent,
)
from .lifecycle import ConnectionLifecycle
from .room_state import LeaveResult, RoomRegistry
from .schemas import (
    create_error_response,
    create_new_message_event,
    create_room_created_event,
    create_room_joined_event,
    create_room_not_found_event,
    create_room_users_event,
    create_user_joined_event,
    create_user_left_event,
    optional_string,
    parse_user_name,
    require_payload,
    require_string,
)

logger = logging.getLogger(__name__)


@dataclass
class Delivery:
    """
    One outbound event and the connections that should receive it.

    Attributes:
        recipients: Connection ids, snapshotted when the event was routed
        event: The event envelope ({"type": ..., "data": ...})
    """

    recipients: Tuple[str, ...]
    event: Dict[str, Any]

    @property
    def event_type(self) -> str:
        return self.event["type"]


class EventRouter:
    """
    Dispatches inbound events from connections to the room registry.

    Domain errors are converted into events for the originating
    connection; they never escape ``dispatch``.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        strict_membership: bool = False,
        report_missing_rooms: bool = False,
    ):
        """
        Initialize the router.

        Args:
            registry: The room registry to operate on
            strict_membership: Require the acting connection to be a member
                of the target room for send_message and leave_room
            report_missing_rooms: Answer get_room_users for unknown rooms
                with room_not_found instead of staying silent
        """
        self.registry = registry
        self.strict_membership = strict_membership
        self.report_missing_rooms = report_missing_rooms
        self._lifecycles: Dict[str, ConnectionLifecycle] = {}
        self._handlers: Dict[
            str, Callable[[ConnectionLifecycle, Dict[str, Any]], List[Delivery]]
        ] = {
            "create_room": self._handle_create_room,
            "join_room": self._handle_join_room,
            "get_room_users": self._handle_get_room_users,
            "send_message": self._handle_send_message,
            "leave_room": self._handle_leave_room,
        }

    @property
    def connection_count(self) -> int:
        return len(self._lifecycles)

    def connect(self, connection_id: str) -> ConnectionLifecycle:
        """
        Register a new transport connection.

        Raises:
            ValueError: If the connection id is already registered
        """
        if connection_id in self._lifecycles:
            raise ValueError(f"Connection {connection_id} already registered")
        lifecycle = ConnectionLifecycle(connection_id)
        self._lifecycles[connection_id] = lifecycle
        logger.info(f"Connection {connection_id} registered")
        return lifecycle

    def get_lifecycle(self, connection_id: str) -> Optional[ConnectionLifecycle]:
        return self._lifecycles.get(connection_id)

    def dispatch(
        self, connection_id: str, event_type: str, payload: Any = None
    ) -> List[Delivery]:
        """
        Route one inbound event.

        Args:
            connection_id: The connection that sent the event
            event_type: Inbound event name
            payload: Decoded event data

        Returns:
            List of deliveries to send, in order
        """
        lifecycle = self._lifecycles.get(connection_id)
        try:
            if lifecycle is None:
                raise ConnectionTerminated(connection_id)
            lifecycle.ensure_active()

            if not isinstance(event_type, str):
                raise InvalidEvent("Missing or invalid field 'type'")
            handler = self._handlers.get(event_type)
            if handler is None:
                raise UnknownEvent(event_type)
            return handler(lifecycle, require_payload(payload))

        except ConnectionTerminated as e:
            logger.warning(f"Dropping {event_type} event: {e.message}")
            return []
        except RoomNotFound as e:
            logger.info(
                f"{event_type} from {connection_id}: room {e.room_code} not found"
            )
            return [self._reply(connection_id, create_room_not_found_event())]
        except RelayError as e:
            logger.warning(
                f"Rejected {event_type} from {connection_id}: {e.message}"
            )
            request_type = event_type if isinstance(event_type, str) else None
            return [
                self._reply(
                    connection_id,
                    create_error_response(
                        e.message, e.error_code, e.room_code, request_type
                    ),
                )
            ]

    def disconnect(self, connection_id: str) -> List[Delivery]:
        """
        Run the terminal cleanup path for a closed connection.

        Returns:
            Deliveries notifying the remaining members of its room
        """
        lifecycle = self._lifecycles.pop(connection_id, None)
        result = self.registry.disconnect(connection_id)
        if lifecycle is not None:
            lifecycle.terminate()
        logger.info(f"Connection {connection_id} disconnected")
        if result is None:
            return []
        return self._leave_deliveries(result, exclude=connection_id)

    def _handle_create_room(
        self, lifecycle: ConnectionLifecycle, payload: Dict[str, Any]
    ) -> List[Delivery]:
        room_name = require_string(payload, "roomName")
        user_name = parse_user_name(payload)

        result = self.registry.create_room(
            room_name, lifecycle.connection_id, user_name
        )
        lifecycle.enter_room(result.room.code)

        deliveries = []
        if result.previous is not None:
            deliveries.extend(
                self._leave_deliveries(
                    result.previous, exclude=lifecycle.connection_id
                )
            )
        deliveries.append(
            self._reply(
                lifecycle.connection_id, create_room_created_event(result.room)
            )
        )
        return deliveries

    def _handle_join_room(
        self, lifecycle: ConnectionLifecycle, payload: Dict[str, Any]
    ) -> List[Delivery]:
        room_code = require_string(payload, "roomCode")
        user_name = parse_user_name(payload)

        result = self.registry.join_room(
            room_code, lifecycle.connection_id, user_name
        )
        lifecycle.enter_room(room_code)

        deliveries = []
        if result.previous is not None:
            deliveries.extend(
                self._leave_deliveries(
                    result.previous, exclude=lifecycle.connection_id
                )
            )
        deliveries.append(
            self._reply(
                lifecycle.connection_id, create_room_joined_event(result.room)
            )
        )
        if not result.already_member and result.others:
            deliveries.append(
                Delivery(result.others, create_user_joined_event(result.member))
            )
        return deliveries

    def _handle_get_room_users(
        self, lifecycle: ConnectionLifecycle, payload: Dict[str, Any]
    ) -> List[Delivery]:
        room_code = require_string(payload, "roomCode")

        members = self.registry.get_members(room_code)
        if members is None:
            if self.report_missing_rooms:
                raise RoomNotFound(room_code)
            logger.debug(
                f"get_room_users for unknown room {room_code}, not answering"
            )
            return []
        return [
            self._reply(lifecycle.connection_id, create_room_users_event(members))
        ]

    def _handle_send_message(
        self, lifecycle: ConnectionLifecycle, payload: Dict[str, Any]
    ) -> List[Delivery]:
        room_code = require_string(payload, "roomCode")
        sender = lifecycle.connection_id

        if self.strict_membership and not self.registry.is_member(
            room_code, sender
        ):
            raise NotAMember(room_code, sender)

        recipients = self.registry.recipients(room_code, exclude=sender)
        if not recipients:
            logger.debug(f"No recipients for message to room {room_code}")
            return []
        logger.debug(
            f"Relaying message from {sender} to {len(recipients)} "
            f"members of room {room_code}"
        )
        return [Delivery(recipients, create_new_message_event(dict(payload)))]

    def _handle_leave_room(
        self, lifecycle: ConnectionLifecycle, payload: Dict[str, Any]
    ) -> List[Delivery]:
        room_code = require_string(payload, "roomCode")
        sender = lifecycle.connection_id
        target = optional_string(payload, "userId") or sender

        if self.strict_membership and not self.registry.is_member(
            room_code, sender
        ):
            raise NotAMember(room_code, sender)

        result = self.registry.leave_room(room_code, target)
        if not result.removed:
            logger.debug(f"{target} was not in room {room_code}, nothing to do")
            return []

        target_lifecycle = self._lifecycles.get(target)
        if target_lifecycle is not None:
            target_lifecycle.leave_room()
        if target != sender:
            logger.info(f"Connection {sender} removed {target} from {room_code}")
        return self._leave_deliveries(result, exclude=sender)

    def _leave_deliveries(
        self, result: LeaveResult, exclude: Optional[str]
    ) -> List[Delivery]:
        if not result.removed or result.room_deleted:
            return []
        recipients = tuple(cid for cid in result.remaining if cid != exclude)
        if not recipients:
            return []
        return [
            Delivery(recipients, create_user_left_event(result.connection_id))
        ]

    @staticmethod
    def _reply(connection_id: str, event: Dict[str, Any]) -> Delivery:
        return Delivery((connection_id,), event)
