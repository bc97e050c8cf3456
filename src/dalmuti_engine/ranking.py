# src/dalmuti_engine/ranking.py

from .models import RoomState
from .constants import (
    TITLE_GREAT_DALMUTI,
    TITLE_LESSER_DALMUTI,
    TITLE_MERCHANT,
    TITLE_LESSER_PEON,
    TITLE_GREATER_PEON,
)

def assign_titles(state: RoomState):
    """
    Assigns titles to players based on their finish order.

    This function mutates the state by setting the 'title' attribute on each
    finished player. The first two finishers are the Dalmuti, the last two
    the Peons, and everyone in between a Merchant. With fewer than four
    finishers the top titles win over the bottom ones.

    Args:
        state: The current RoomState, which must have a populated 'winners' list.
    """
    if not state.winners:
        return # Cannot assign titles without a finish order

    count = len(state.winners)
    titles = [TITLE_MERCHANT] * count
    titles[-1] = TITLE_GREATER_PEON
    if count >= 4:
        titles[-2] = TITLE_LESSER_PEON
    if count >= 3:
        titles[1] = TITLE_LESSER_DALMUTI
    titles[0] = TITLE_GREAT_DALMUTI

    for player, title in zip(state.winners, titles):
        player.title = title
