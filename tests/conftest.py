import json
import random
import uuid

import pytest

from relay import EventRouter, RoomCodeGenerator, RoomRegistry


class MockWebSocket:
    """Mock WebSocket for testing."""

    def __init__(self, connection_id=None):
        self.id = connection_id or uuid.uuid4()
        self.sent_messages = []

    async def send(self, message):
        self.sent_messages.append(message)

    def events(self):
        return [json.loads(m) for m in self.sent_messages]

    def event_types(self):
        return [event["type"] for event in self.events()]


class ScriptedGenerator(RoomCodeGenerator):
    """Code generator returning a fixed sequence of codes."""

    def __init__(self, codes):
        super().__init__()
        self._codes = list(codes)

    def generate(self):
        return self._codes.pop(0)


def assert_consistent(registry):
    """Room membership and presence must mirror each other exactly."""
    for code, room in registry._rooms.items():
        assert room.code == code
        assert room.members, f"empty room {code} still registered"
        for member in room.members:
            assert registry._presence.get(member.connection_id) == code
    for connection_id, code in registry._presence.items():
        room = registry._rooms.get(code)
        assert room is not None, f"{connection_id} points at missing room {code}"
        assert room.find_member(connection_id) is not None


@pytest.fixture
def registry():
    return RoomRegistry(code_generator=RoomCodeGenerator(rng=random.Random(42)))


@pytest.fixture
def router(registry):
    return EventRouter(registry)


@pytest.fixture
def strict_router(registry):
    return EventRouter(registry, strict_membership=True)
