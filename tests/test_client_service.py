"""
Tests for the Relay Client

Uses a scripted mock WebSocket to check request serialization, reply
handling and event dispatch without a running relay.
"""

import asyncio
import json

import pytest
from websockets.exceptions import ConnectionClosedOK

from relay_client import (
    CreateRoomRequest,
    ErrorResponse,
    LeaveRoomRequest,
    NewMessageNotification,
    RelayClient,
    RelayClientError,
    RoomInfo,
    RoomNotFoundError,
    SendMessageRequest,
    UserJoinedNotification,
    parse_event,
)


class ScriptedWebSocket:
    """Mock WebSocket replaying a fixed list of server frames."""

    def __init__(self, replies=None):
        self.sent_messages = []
        self.replies = [json.dumps(reply) for reply in (replies or [])]
        self.closed = False

    async def send(self, message):
        self.sent_messages.append(json.loads(message))

    async def recv(self):
        if not self.replies:
            # Behave like a relay that never answers.
            await asyncio.sleep(3600)
        return self.replies.pop(0)

    async def close(self):
        self.closed = True

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.replies:
            raise ConnectionClosedOK(None, None)
        return self.replies.pop(0)


ROOM = {
    "name": "Book Club",
    "code": "ABC234",
    "members": [{"id": "u1", "name": "Alice"}],
}


def _client(replies=None, timeout=0.05):
    client = RelayClient("ws://localhost:3000", response_timeout=timeout)
    mock_ws = ScriptedWebSocket(replies)
    client._set_test_mode(mock_websocket=mock_ws)
    return client, mock_ws


def test_client_can_be_instantiated():
    client = RelayClient(server_url="ws://localhost:3000")
    assert client.server_url == "ws://localhost:3000"
    assert not client.is_connected


def test_set_test_mode_requires_websocket():
    client = RelayClient("ws://localhost:3000")
    with pytest.raises(ValueError):
        client._set_test_mode()


def test_requests_use_wire_field_names():
    assert CreateRoomRequest("Book Club", "Alice").to_dict() == {
        "type": "create_room",
        "data": {"roomName": "Book Club", "user": {"name": "Alice"}},
    }
    assert LeaveRoomRequest("ABC234").to_dict() == {
        "type": "leave_room",
        "data": {"roomCode": "ABC234"},
    }
    assert LeaveRoomRequest("ABC234", "u2").to_dict()["data"]["userId"] == "u2"
    assert SendMessageRequest("ABC234", {"text": "hi"}).to_dict()["data"] == {
        "text": "hi",
        "roomCode": "ABC234",
    }


def test_parse_event():
    event_type, room = parse_event(json.dumps({"type": "room_created", "data": ROOM}))
    assert event_type == "room_created"
    assert isinstance(room, RoomInfo)
    assert room.member_names == ["Alice"]

    assert parse_event('{"type": "room_not_found"}') == ("room_not_found", None)

    event_type, message = parse_event(
        json.dumps({"type": "new_message", "data": {"roomCode": "ABC234", "x": 1}})
    )
    assert message == NewMessageNotification(room_code="ABC234", fields={"x": 1})

    assert parse_event('{"type": "custom", "data": {"a": 1}}') == ("custom", {"a": 1})


@pytest.mark.asyncio
async def test_operations_require_connection():
    client = RelayClient("ws://localhost:3000")
    with pytest.raises(ConnectionError):
        await client.create_room("Book Club", "Alice")


@pytest.mark.asyncio
async def test_connect_failure_raises_connection_error():
    async def failing_factory(url):
        raise OSError("refused")

    client = RelayClient("ws://localhost:1", websocket_factory=failing_factory)
    with pytest.raises(ConnectionError, match="Could not connect"):
        await client.connect()
    assert not client.is_connected


@pytest.mark.asyncio
async def test_connect_and_disconnect_with_factory():
    mock_ws = ScriptedWebSocket()

    async def factory(url):
        return mock_ws

    client = RelayClient("ws://localhost:3000", websocket_factory=factory)
    await client.connect()
    assert client.is_connected

    await client.disconnect()
    assert mock_ws.closed
    assert not client.is_connected


@pytest.mark.asyncio
async def test_create_room_with_mock():
    client, mock_ws = _client([{"type": "room_created", "data": ROOM}])

    room = await client.create_room("Book Club", "Alice")

    assert room.code == "ABC234"
    assert room.members[0].id == "u1"
    assert client.current_room == "ABC234"
    assert mock_ws.sent_messages == [
        {
            "type": "create_room",
            "data": {"roomName": "Book Club", "user": {"name": "Alice"}},
        }
    ]


@pytest.mark.asyncio
async def test_join_room_queues_unrelated_events():
    members = [{"id": "u1", "name": "Alice"}, {"id": "u2", "name": "Bob"}]
    client, _ = _client(
        [
            {"type": "new_message", "data": {"roomCode": "OLD234", "text": "x"}},
            {
                "type": "room_joined",
                "data": {"room": dict(ROOM, members=members), "members": members},
            },
        ]
    )

    joined = await client.join_room("ABC234", "Bob")

    assert [m.name for m in joined.members] == ["Alice", "Bob"]
    assert client.current_room == "ABC234"
    assert len(client.pending_events) == 1
    assert client.pending_events[0][0] == "new_message"


@pytest.mark.asyncio
async def test_join_unknown_room_raises():
    client, _ = _client([{"type": "room_not_found"}])

    with pytest.raises(RoomNotFoundError):
        await client.join_room("ZZZZZZ", "Carl")
    assert client.current_room is None


@pytest.mark.asyncio
async def test_error_reply_raises_client_error():
    client, _ = _client(
        [
            {
                "type": "error",
                "data": {"error_code": "INVALID_REQUEST", "message": "bad"},
            }
        ]
    )

    with pytest.raises(RelayClientError) as excinfo:
        await client.create_room("", "Alice")

    assert excinfo.value.error_code == "INVALID_REQUEST"
    assert excinfo.value.response == ErrorResponse("INVALID_REQUEST", "bad")


@pytest.mark.asyncio
async def test_get_room_users_times_out_on_unknown_room():
    client, mock_ws = _client()

    assert await client.get_room_users("ZZZZZZ") is None
    assert mock_ws.sent_messages == [
        {"type": "get_room_users", "data": {"roomCode": "ZZZZZZ"}}
    ]


@pytest.mark.asyncio
async def test_get_room_users_returns_members():
    client, _ = _client(
        [{"type": "room_users", "data": {"members": ROOM["members"]}}]
    )

    response = await client.get_room_users("ABC234")

    assert [m.name for m in response.members] == ["Alice"]


@pytest.mark.asyncio
async def test_send_message_and_leave_room_are_fire_and_forget():
    client, mock_ws = _client()
    client.current_room = "ABC234"

    await client.send_message("ABC234", text="hi", mood="happy")
    await client.leave_room("ABC234")

    assert mock_ws.sent_messages == [
        {
            "type": "send_message",
            "data": {"text": "hi", "mood": "happy", "roomCode": "ABC234"},
        },
        {"type": "leave_room", "data": {"roomCode": "ABC234"}},
    ]
    assert client.current_room is None


@pytest.mark.asyncio
async def test_handle_messages_dispatches_to_handlers():
    client, _ = _client(
        [
            {"type": "user_joined", "data": {"id": "u2", "name": "Bob"}},
            {"type": "new_message", "data": {"roomCode": "ABC234", "text": "hi"}},
        ]
    )
    client.pending_events.append(("user_left", None))
    received = []
    client.on("user_joined", received.append)
    client.on("new_message", received.append)
    client.on("user_left", received.append)

    await client.handle_messages()

    assert received == [
        None,
        UserJoinedNotification(id="u2", name="Bob"),
        NewMessageNotification(room_code="ABC234", fields={"text": "hi"}),
    ]
    assert client.pending_events == []
    assert not client.is_connected


@pytest.mark.asyncio
async def test_late_error_from_earlier_request_is_queued():
    client, _ = _client(
        [
            {
                "type": "error",
                "data": {
                    "error_code": "NOT_A_MEMBER",
                    "message": "Connection u1 is not a member of room ZZZZZZ",
                    "roomCode": "ZZZZZZ",
                    "requestType": "send_message",
                },
            },
            {"type": "room_created", "data": ROOM},
        ]
    )

    await client.send_message("ZZZZZZ", text="hi")
    room = await client.create_room("Book Club", "Alice")

    assert room.code == "ABC234"
    assert client.current_room == "ABC234"
    assert len(client.pending_events) == 1
    event_type, error = client.pending_events[0]
    assert event_type == "error"
    assert error.error_code == "NOT_A_MEMBER"
    assert error.request_type == "send_message"


@pytest.mark.asyncio
async def test_error_for_same_request_type_is_raised():
    client, _ = _client(
        [
            {
                "type": "error",
                "data": {
                    "error_code": "CAPACITY_EXHAUSTED",
                    "message": "full",
                    "requestType": "create_room",
                },
            }
        ]
    )

    with pytest.raises(RelayClientError) as excinfo:
        await client.create_room("Book Club", "Alice")
    assert excinfo.value.error_code == "CAPACITY_EXHAUSTED"


@pytest.mark.asyncio
async def test_steady_traffic_does_not_extend_reply_timeout():
    class ChattyWebSocket(ScriptedWebSocket):
        async def recv(self):
            await asyncio.sleep(0.01)
            return json.dumps(
                {"type": "new_message", "data": {"roomCode": "ABC234", "n": 1}}
            )

    client = RelayClient("ws://localhost:3000", response_timeout=0.1)
    client._set_test_mode(mock_websocket=ChattyWebSocket())

    result = await asyncio.wait_for(client.get_room_users("ABC234"), timeout=2)

    assert result is None
    assert client.pending_events
    assert all(t == "new_message" for t, _ in client.pending_events)


def test_new_message_keeps_its_own_data_field():
    event_type, message = parse_event(
        json.dumps(
            {
                "type": "new_message",
                "data": {"roomCode": "ABC234", "data": {"kind": "image"}},
            }
        )
    )

    assert message.room_code == "ABC234"
    assert message.fields == {"data": {"kind": "image"}}
    assert NewMessageNotification.from_dict({"type": "new_message"}) == (
        NewMessageNotification(room_code="", fields={})
    )
