"""
WebSocket server and event handling for the Dalmuti game.
"""

from .events import *
from .server import app, create_app, GameManager

__all__ = ["app", "create_app", "GameManager"]
