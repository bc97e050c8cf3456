"""
Greedy bot implementation with difficulty tiers.
"""

import random
from typing import List, Optional

from .base import BaseBot, BotAction, group_by_rank
from ..constants import DIFFICULTY_EASY, DIFFICULTY_MEDIUM
from ..models import Card, RoomState
from ..validate import effective_rank


def choose_move(
    hand: List[Card],
    table_top: Optional[List[Card]],
    difficulty: str = DIFFICULTY_MEDIUM,
    rng: Optional[random.Random] = None
) -> Optional[List[Card]]:
    """
    Pick the cards a bot plays, or None to pass.

    Leading, every tier dumps the whole group of its worst rank. Responding,
    the candidates are the ranks strictly better than the table that hold
    enough cards to match its size. Easy picks one of them at random;
    medium and hard pick the worst one, winning the trick as cheaply as
    possible and keeping strong cards for later.

    Args:
        hand: The bot's cards
        table_top: Cards on the table, or None when leading
        difficulty: easy, medium or hard
        rng: Random source for the easy tier

    Returns:
        Cards to play, or None to pass
    """
    groups = group_by_rank(hand)
    if not groups:
        return None

    if not table_top:
        # TODO: keep strong pairs instead of always leading the worst group
        worst = max(groups)
        return list(groups[worst])

    required = len(table_top)
    table_rank = effective_rank(table_top)
    candidates = sorted(
        (rank for rank, cards in groups.items() if rank < table_rank and len(cards) >= required),
        reverse=True
    )
    if not candidates:
        return None

    if difficulty == DIFFICULTY_EASY:
        rank = (rng or random).choice(candidates)
    else:
        rank = candidates[0]
    return groups[rank][:required]


class DalmutiBot(BaseBot):
    """
    Bot that sheds its worst cards first.

    Strategy:
    - Lead with the full set of the worst rank in hand
    - Answer with the weakest set that still wins (medium/hard)
    - Answer with any winning set (easy)
    - Pass when nothing beats the table
    """

    def __init__(self, player_id: str, difficulty: str = DIFFICULTY_MEDIUM,
                 rng: Optional[random.Random] = None):
        super().__init__(player_id)
        self.difficulty = difficulty
        self.rng = rng

    def choose_action(self, state: RoomState) -> Optional[BotAction]:
        """Choose the action for the current state."""
        if not self.is_my_turn(state):
            return None

        move = choose_move(
            self.get_player_hand(state), state.last_played_cards, self.difficulty, self.rng
        )
        if move is None:
            return BotAction.pass_turn()
        return BotAction.play(move)
