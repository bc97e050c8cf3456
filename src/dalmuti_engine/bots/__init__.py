"""
Bot players for the Dalmuti game.
"""

from .base import BaseBot, BotAction
from .greedy import DalmutiBot, choose_move

__all__ = ["BaseBot", "BotAction", "DalmutiBot", "choose_move"]
