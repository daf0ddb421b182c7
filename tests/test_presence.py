from relay import PresenceTracker


def test_set_get_clear():
    presence = PresenceTracker()
    assert presence.get("u1") is None

    presence.set("u1", "ABCDEF")
    assert presence.get("u1") == "ABCDEF"
    assert "u1" in presence
    assert len(presence) == 1

    assert presence.clear("u1") == "ABCDEF"
    assert presence.get("u1") is None
    assert len(presence) == 0


def test_clear_missing_entry_is_noop():
    presence = PresenceTracker()
    assert presence.clear("ghost") is None


def test_set_overwrites_previous_room():
    presence = PresenceTracker()
    presence.set("u1", "AAAAAA")
    presence.set("u1", "BBBBBB")
    assert presence.get("u1") == "BBBBBB"
    assert presence.items() == [("u1", "BBBBBB")]
