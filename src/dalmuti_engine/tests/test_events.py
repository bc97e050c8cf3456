"""
Event parsing and snapshot tests.
"""

import pytest

from dalmuti_engine.engine import create_room, join_room, start_game
from dalmuti_engine.serialization import get_public_room_info, sanitize_state
from dalmuti_engine.ws.events import (
    AddBotEvent, ChatEvent, EventType, JoinEvent, PlayEvent, StartEvent,
    create_error_event, create_state_full_event, ErrorCode, parse_inbound_event
)


def test_parse_join():
    event = parse_inbound_event({"type": "join", "room_id": "r1", "name": "Alice"})
    assert isinstance(event, JoinEvent)
    assert event.type == EventType.JOIN
    assert event.name == "Alice"


def test_parse_play_with_ids_and_objects():
    event = parse_inbound_event({
        "type": "play",
        "room_id": "r1",
        "cards": ["7-0", {"id": "7-1", "rank": 7, "name": "Seamstress", "is_jester": False}],
    })
    assert isinstance(event, PlayEvent)
    assert event.card_ids() == ["7-0", "7-1"]


def test_parse_optional_fields():
    event = parse_inbound_event({"type": "add_bot", "room_id": "r1"})
    assert isinstance(event, AddBotEvent)
    assert event.difficulty is None

    event = parse_inbound_event({"type": "start", "room_id": "r1", "seed": 12})
    assert isinstance(event, StartEvent)
    assert event.seed == 12


@pytest.mark.parametrize("data", [
    [],
    {"room_id": "r1"},
    {"type": "dance", "room_id": "r1"},
    {"type": "join", "room_id": "r1"},
    {"type": "join", "room_id": "", "name": "Alice"},
    {"type": "add_bot", "room_id": "r1", "difficulty": "godlike"},
    {"type": "play", "room_id": "r1", "cards": []},
    {"type": "chat", "room_id": "r1", "text": ""},
])
def test_malformed_events_raise_value_error(data):
    with pytest.raises(ValueError):
        parse_inbound_event(data)


def test_chat_text_length():
    assert isinstance(parse_inbound_event({"type": "chat", "room_id": "r", "text": "hi"}), ChatEvent)
    with pytest.raises(ValueError):
        parse_inbound_event({"type": "chat", "room_id": "r", "text": "x" * 201})


def test_outbound_events():
    error = create_error_event(ErrorCode.INVALID_EVENT, "bad")
    dumped = error.model_dump(mode="json")
    assert dumped["type"] == "error"
    assert dumped["code"] == "INVALID_EVENT"

    state_event = create_state_full_event({"room_id": "r"})
    assert state_event.model_dump(mode="json")["type"] == "state_full"


def test_snapshot_hides_other_hands():
    state = create_room("r1")
    join_room(state, "a", "Alice")
    join_room(state, "b", "Bob")
    start_game(state, seed=8)

    snapshot = sanitize_state(state, "a")
    alice, bob = snapshot["players"]
    assert len(alice["hand"]) == 40
    assert alice["hand"][0].keys() == {"id", "rank", "name", "is_jester"}
    assert "hand" not in bob
    assert bob["hand_count"] == 40

    assert snapshot["status"] == "playing"
    assert snapshot["current_player_id"] == state.current_player.id
    assert snapshot["version"] == state.version
    assert snapshot["deck_count"] == 0
    assert snapshot["last_played_cards"] is None


def test_spectator_snapshot_has_no_hands():
    state = create_room("r1")
    join_room(state, "a", "Alice")
    snapshot = sanitize_state(state)
    assert "hand" not in snapshot["players"][0]
    assert snapshot["current_player_id"] == "a"


def test_public_room_info():
    state = create_room("r1")
    join_room(state, "a", "Alice")
    info = get_public_room_info(state)
    assert info == {
        "id": "r1",
        "status": "waiting",
        "player_count": 1,
        "players": [{"id": "a", "name": "Alice", "is_bot": False}],
    }
