"""
Connection sessions and how they map onto players.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import Player, RoomState

logger = logging.getLogger(__name__)


class ReconnectStrategy(ABC):
    """Decides whether a join is a returning player."""

    @abstractmethod
    def match(self, state: RoomState, name: str) -> Optional[Player]:
        """Return the existing player this join should take over, if any."""
        pass


class NameRebind(ReconnectStrategy):
    """A join using the display name of a human already in the room takes that seat."""

    def match(self, state: RoomState, name: str) -> Optional[Player]:
        return next((p for p in state.players if p.name == name and not p.is_bot), None)


class NoRebind(ReconnectStrategy):
    """Every join is a new player."""

    def match(self, state: RoomState, name: str) -> Optional[Player]:
        return None


@dataclass
class Binding:
    room_id: str
    player_id: str


class SessionTable:
    """
    Binds connection sessions to (room, player).

    A player can be bound to at most one session at a time; binding a
    player to a new session drops the old binding.
    """

    def __init__(self):
        self._bindings: Dict[str, Binding] = {}

    def bind(self, session_id: str, room_id: str, player_id: str) -> Optional[str]:
        """
        Bind a session to a player.

        Returns:
            The session previously bound to that player, if any
        """
        previous = self.session_for(room_id, player_id)
        if previous and previous != session_id:
            del self._bindings[previous]
            logger.info(f"Player {player_id} moved from session {previous} to {session_id}")
        self._bindings[session_id] = Binding(room_id, player_id)
        return previous if previous != session_id else None

    def unbind(self, session_id: str) -> Optional[Binding]:
        return self._bindings.pop(session_id, None)

    def get(self, session_id: str) -> Optional[Binding]:
        return self._bindings.get(session_id)

    def player_for(self, session_id: str, room_id: str) -> Optional[str]:
        """Player id a session acts as in a room, or None if not bound there."""
        binding = self._bindings.get(session_id)
        if binding and binding.room_id == room_id:
            return binding.player_id
        return None

    def session_for(self, room_id: str, player_id: str) -> Optional[str]:
        for session_id, binding in self._bindings.items():
            if binding.room_id == room_id and binding.player_id == player_id:
                return session_id
        return None

    def sessions_in(self, room_id: str) -> List[str]:
        return [sid for sid, binding in self._bindings.items() if binding.room_id == room_id]

    def __len__(self) -> int:
        return len(self._bindings)
