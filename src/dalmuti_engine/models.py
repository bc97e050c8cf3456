"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import STATUS_WAITING


@dataclass(frozen=True)
class Card:
    id: str
    rank: int  # 1 = best, 12 = worst ordinary, 13 = Jester
    name: str
    is_jester: bool = False

    def to_dict(self) -> dict:
        return {'id': self.id, 'rank': self.rank, 'name': self.name, 'is_jester': self.is_jester}


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)  # sorted by rank ascending
    is_bot: bool = False
    bot_difficulty: Optional[str] = None
    has_passed: bool = False
    finished_rank: Optional[int] = None  # 1-based finish position in the current game
    previous_rank: Optional[int] = None  # finish position in the previous game
    title: Optional[str] = None  # Great Dalmuti, Lesser Dalmuti, Merchant, ...
    avatar_id: str = 'peasant'

    @property
    def hand_count(self) -> int:
        return len(self.hand)

    @property
    def is_active(self) -> bool:
        return len(self.hand) > 0


@dataclass
class RoomState:
    id: str
    version: int = 0
    status: str = STATUS_WAITING  # waiting|playing|finished
    players: List[Player] = field(default_factory=list)  # list order is turn order
    current_turn_index: int = 0
    last_played_cards: Optional[List[Card]] = None  # None means the trick is open
    last_player_id: Optional[str] = None
    deck: List[Card] = field(default_factory=list)  # undealt cards
    round: int = 1
    winners: List[Player] = field(default_factory=list)  # in finish order
    turn_time_limit: Optional[int] = None  # seconds, None or <= 0 means unlimited
    turn_started_at: Optional[float] = None  # epoch seconds

    def find_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def index_of(self, player_id: str) -> int:
        return next((i for i, p in enumerate(self.players) if p.id == player_id), -1)

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_turn_index < len(self.players):
            return self.players[self.current_turn_index]
        return None

