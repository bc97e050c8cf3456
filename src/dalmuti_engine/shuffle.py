"""
Card deck construction, shuffling and dealing utilities.
"""

import random
from typing import List, Optional

from .constants import BEST_RANK, CARD_DEFINITIONS, JESTER_RANK
from .models import Card, Player


def create_deck() -> List[Card]:
    """Create the full Dalmuti deck: n copies of rank n for 1..12, plus two Jesters."""
    deck = []
    for rank, count, name in CARD_DEFINITIONS:
        for i in range(count):
            deck.append(Card(id=f"{rank}-{i}", rank=rank, name=name, is_jester=rank == JESTER_RANK))
    return deck


def shuffle_deck(deck: List[Card], seed: Optional[int] = None) -> List[Card]:
    """
    Shuffle a deck deterministically if seed is provided.

    Args:
        deck: Cards to shuffle
        seed: Optional seed for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = deck.copy()

    if seed is not None:
        rng = random.Random(seed)
        rng.shuffle(deck_copy)
    else:
        random.shuffle(deck_copy)

    return deck_copy


def sort_hand(hand: List[Card]) -> List[Card]:
    """Sort a hand by rank ascending (best cards first)."""
    return sorted(hand, key=lambda c: (c.rank, c.id))


def deal_cards(deck: List[Card], players: List[Player]) -> List[Card]:
    """
    Deal every card round-robin, one at a time, starting with the first seat.

    Hands are replaced and sorted by rank. Returns the undealt remainder,
    which is always empty when there is at least one player.
    """
    remaining = deck.copy()
    if not players:
        return remaining

    hands: List[List[Card]] = [[] for _ in players]
    player_index = 0
    while remaining:
        hands[player_index].append(remaining.pop())
        player_index = (player_index + 1) % len(players)

    for player, hand in zip(players, hands):
        player.hand = sort_hand(hand)
    return remaining


def find_starting_player(players: List[Player]) -> Optional[int]:
    """
    Find the seat holding the Dalmuti (the only rank-1 card).

    Returns:
        Index into players, or None if nobody holds it
    """
    for index, player in enumerate(players):
        if any(card.rank == BEST_RANK for card in player.hand):
            return index
    return None
