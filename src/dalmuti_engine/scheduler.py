"""
Turn order: skip logic over passed and finished players.
"""

from typing import List

from .models import Player


def is_eligible(player: Player) -> bool:
    """A player can act if they still hold cards and have not passed this round."""
    return player.is_active and not player.has_passed


def active_players(players: List[Player]) -> List[Player]:
    return [p for p in players if p.is_active]


def unpassed_players(players: List[Player]) -> List[Player]:
    return [p for p in players if is_eligible(p)]


def next_eligible_index(players: List[Player], start: int) -> int:
    """
    Scan forward from start (inclusive) with wraparound for an eligible player.

    At most len(players) seats are probed. If nobody is eligible the scan
    gives up and returns start.
    """
    n = len(players)
    if n == 0:
        return 0
    start %= n
    for offset in range(n):
        index = (start + offset) % n
        if is_eligible(players[index]):
            return index
    return start


def next_active_index(players: List[Player], start: int) -> int:
    """Like next_eligible_index, but only skips players without cards."""
    n = len(players)
    if n == 0:
        return 0
    start %= n
    for offset in range(n):
        index = (start + offset) % n
        if players[index].is_active:
            return index
    return start
