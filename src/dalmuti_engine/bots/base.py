"""
Base bot interface and utilities.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional

from ..constants import STATUS_PLAYING
from ..models import Card, RoomState
from ..validate import effective_rank


class BotAction:
    """Represents a bot action."""

    def __init__(self, action_type: str, **kwargs):
        self.type = action_type
        self.data = kwargs

    @classmethod
    def play(cls, cards: List[Card]) -> 'BotAction':
        """Create a play action."""
        return cls('play', cards=cards)

    @classmethod
    def pass_turn(cls) -> 'BotAction':
        """Create a pass action."""
        return cls('pass')

    def __repr__(self) -> str:
        if self.type == 'play':
            return f"BotAction(play, {[c.id for c in self.data['cards']]})"
        return f"BotAction({self.type})"


def group_by_rank(hand: List[Card]) -> Dict[int, List[Card]]:
    """Group a hand by rank; Jesters form their own rank-13 group."""
    groups = defaultdict(list)
    for card in hand:
        groups[card.rank].append(card)
    return dict(groups)


class BaseBot(ABC):
    """Abstract base class for bot players."""

    def __init__(self, player_id: str):
        self.player_id = player_id

    @abstractmethod
    def choose_action(self, state: RoomState) -> Optional[BotAction]:
        """
        Choose an action based on the current game state.

        Args:
            state: Current game state

        Returns:
            BotAction to take, or None if it is not this bot's turn
        """
        pass

    def get_player_hand(self, state: RoomState) -> List[Card]:
        """Get this bot's current hand."""
        player = state.find_player(self.player_id)
        return player.hand if player else []

    def is_my_turn(self, state: RoomState) -> bool:
        """Check if it's this bot's turn."""
        current = state.current_player
        return state.status == STATUS_PLAYING and current is not None and current.id == self.player_id

    def get_valid_plays(self, state: RoomState) -> List[List[Card]]:
        """
        Get one candidate play per rank group this bot could legally make.

        Leading, every group is a candidate (played whole). Responding, a
        group needs enough cards and a strictly better rank than the table.
        """
        groups = group_by_rank(self.get_player_hand(state))
        table = state.last_played_cards
        if not table:
            return [cards for _, cards in sorted(groups.items(), reverse=True)]

        required = len(table)
        table_rank = effective_rank(table)
        return [
            cards[:required]
            for rank, cards in sorted(groups.items(), reverse=True)
            if rank < table_rank and len(cards) >= required
        ]
