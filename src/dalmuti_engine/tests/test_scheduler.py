"""
Turn order tests.
"""

from dalmuti_engine.models import Card, Player
from dalmuti_engine.scheduler import (
    active_players, is_eligible, next_active_index, next_eligible_index, unpassed_players
)


def player(pid, cards=1, passed=False):
    hand = [Card(id=f"9-{i}", rank=9, name="Cook") for i in range(cards)]
    return Player(id=pid, name=pid, hand=hand, has_passed=passed)


def test_is_eligible():
    assert is_eligible(player("a"))
    assert not is_eligible(player("a", passed=True))
    assert not is_eligible(player("a", cards=0))


def test_next_eligible_skips_passed_and_finished():
    players = [player("a"), player("b", passed=True), player("c", cards=0), player("d")]
    assert next_eligible_index(players, 1) == 3


def test_next_eligible_is_inclusive_of_start():
    players = [player("a"), player("b")]
    assert next_eligible_index(players, 1) == 1


def test_next_eligible_wraps_around():
    players = [player("a"), player("b", passed=True), player("c", cards=0)]
    assert next_eligible_index(players, 1) == 0
    assert next_eligible_index(players, 5) == 0


def test_next_eligible_gives_up_after_one_lap():
    players = [player("a", passed=True), player("b", cards=0), player("c", passed=True)]
    assert next_eligible_index(players, 1) == 1
    assert next_eligible_index([], 3) == 0


def test_next_active_ignores_passes():
    players = [player("a", cards=0), player("b", passed=True), player("c")]
    assert next_active_index(players, 0) == 1
    assert next_active_index([player("a", cards=0)], 0) == 0


def test_player_filters():
    players = [player("a"), player("b", passed=True), player("c", cards=0)]
    assert [p.id for p in active_players(players)] == ["a", "b"]
    assert [p.id for p in unpassed_players(players)] == ["a"]
