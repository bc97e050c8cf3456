"""
Session binding, registry and rule configuration tests.
"""

import pytest
from pydantic import ValidationError

from dalmuti_engine.registry import RoomRegistry
from dalmuti_engine.rules import RuleConfig, create_rules, load_rules_from_env
from dalmuti_engine.sessions import SessionTable


def test_bind_and_lookup():
    sessions = SessionTable()
    assert sessions.bind("s1", "room", "p1") is None

    assert sessions.player_for("s1", "room") == "p1"
    assert sessions.player_for("s1", "other") is None
    assert sessions.session_for("room", "p1") == "s1"
    assert sessions.get("s1").room_id == "room"


def test_rebinding_a_player_drops_the_old_session():
    sessions = SessionTable()
    sessions.bind("s1", "room", "p1")
    assert sessions.bind("s2", "room", "p1") == "s1"

    assert sessions.get("s1") is None
    assert sessions.session_for("room", "p1") == "s2"
    assert len(sessions) == 1


def test_unbind():
    sessions = SessionTable()
    sessions.bind("s1", "room", "p1")
    binding = sessions.unbind("s1")
    assert binding.player_id == "p1"
    assert sessions.unbind("s1") is None
    assert sessions.sessions_in("room") == []


def test_sessions_in_room():
    sessions = SessionTable()
    sessions.bind("s1", "a", "p1")
    sessions.bind("s2", "a", "p2")
    sessions.bind("s3", "b", "p3")
    assert sorted(sessions.sessions_in("a")) == ["s1", "s2"]


def test_registry_creates_rooms_on_demand():
    registry = RoomRegistry(create_rules(turn_time_limit=20))
    assert registry.get("r1") is None
    assert "r1" not in registry

    room = registry.get_or_create("r1")
    assert registry.get_or_create("r1") is room
    assert room.turn_time_limit == 20
    assert "r1" in registry
    assert len(registry) == 1
    assert registry.room_ids() == ["r1"]


def test_registry_has_one_lock_per_room():
    registry = RoomRegistry()
    assert registry.lock("a") is registry.lock("a")
    assert registry.lock("a") is not registry.lock("b")


def test_rule_defaults():
    rules = RuleConfig()
    assert rules.min_players == 1
    assert rules.turn_time_limit is None
    assert rules.bot_delay == 0.0
    assert rules.default_bot_difficulty == "medium"
    assert rules.reconnect_by_name
    assert rules.validate_player_count(1)
    assert not rules.validate_player_count(0)


def test_create_rules_overrides():
    rules = create_rules(min_players=3, bot_delay=0.5)
    assert rules.min_players == 3
    assert rules.bot_delay == 0.5
    assert not rules.validate_player_count(2)


def test_rule_validation():
    with pytest.raises(ValidationError):
        create_rules(default_bot_difficulty="godlike")
    with pytest.raises(ValidationError):
        create_rules(min_players=0)
    with pytest.raises(ValidationError):
        create_rules(bot_delay=-1)


def test_load_rules_from_env(monkeypatch):
    monkeypatch.setenv("DALMUTI_MIN_PLAYERS", "2")
    monkeypatch.setenv("DALMUTI_TURN_TIME_LIMIT", "15")
    monkeypatch.setenv("DALMUTI_BOT_DELAY", "0.25")
    monkeypatch.setenv("DALMUTI_DEFAULT_BOT_DIFFICULTY", "Hard")
    monkeypatch.setenv("DALMUTI_RECONNECT_BY_NAME", "false")

    rules = load_rules_from_env()
    assert rules.min_players == 2
    assert rules.turn_time_limit == 15
    assert rules.bot_delay == 0.25
    assert rules.default_bot_difficulty == "hard"
    assert not rules.reconnect_by_name


def test_load_rules_from_empty_env(monkeypatch):
    for name in ("DALMUTI_MIN_PLAYERS", "DALMUTI_TURN_TIME_LIMIT", "DALMUTI_BOT_DELAY",
                 "DALMUTI_DEFAULT_BOT_DIFFICULTY", "DALMUTI_RECONNECT_BY_NAME"):
        monkeypatch.delenv(name, raising=False)
    assert load_rules_from_env() == RuleConfig()
