"""
Move validation for card plays.
"""

from typing import Iterable, List, Optional, Tuple, Union

from .constants import JESTER_RANK
from .errors import OWNERSHIP_MISMATCH, raise_error
from .models import Card


def effective_rank(cards: List[Card]) -> int:
    """Rank used for comparison: the first non-Jester rank, or 13 for Jesters only."""
    return next((card.rank for card in cards if not card.is_jester), JESTER_RANK)


def detect_pattern(cards: List[Card]) -> Tuple[Optional[int], int]:
    """
    Detect the pattern of cards being played.

    Jesters adopt the rank of the other cards; a selection of Jesters
    only counts as rank 13.

    Args:
        cards: Cards being played

    Returns:
        Tuple of (rank, count) or (None, 0) if invalid
    """
    if not cards:
        return None, 0

    ranks = {card.rank for card in cards if not card.is_jester}
    if len(ranks) > 1:
        return None, 0  # Mixed ranks not allowed

    return effective_rank(cards), len(cards)


def is_valid_move(selected: List[Card], table_top: Optional[List[Card]]) -> bool:
    """
    Decide whether a selection legally follows the cards on the table.

    Args:
        selected: Cards the player wants to play
        table_top: Cards currently on the table, or None when the trick is open

    Returns:
        True if the selection is a legal play
    """
    rank, count = detect_pattern(selected)
    if rank is None:
        return False

    # Open trick: any single-rank set leads
    if not table_top:
        return True

    if count != len(table_top):
        return False

    # Lower number is better
    return rank < effective_rank(table_top)


def card_id_of(ref: Union[str, dict, Card]) -> Optional[str]:
    """Extract a card id from a client reference (an id, a card dict or a Card)."""
    if isinstance(ref, Card):
        return ref.id
    if isinstance(ref, dict):
        return ref.get('id')
    if isinstance(ref, str):
        return ref
    return None


def resolve_cards(hand: List[Card], refs: Iterable[Union[str, dict, Card]]) -> List[Card]:
    """
    Map client card references onto the card instances in a hand.

    Raises:
        GameError: If a card is not in the hand or is referenced twice
    """
    by_id = {card.id: card for card in hand}
    resolved = []
    seen = set()
    for ref in refs:
        card_id = card_id_of(ref)
        if card_id not in by_id:
            raise_error(OWNERSHIP_MISMATCH, f"You don't own {card_id}")
        if card_id in seen:
            raise_error(OWNERSHIP_MISMATCH, f"Card {card_id} selected twice")
        seen.add(card_id)
        resolved.append(by_id[card_id])
    return resolved
