"""
Process-wide table of rooms.
"""

import asyncio
from collections import defaultdict
from typing import Dict, List, Optional

from .engine import create_room
from .models import RoomState
from .rules import RuleConfig, default_rules


class RoomRegistry:
    """
    Owns every room's state, keyed by room id.

    Each room id has its own asyncio.Lock; every mutation of a room must
    hold it so that actions on one room never interleave.
    """

    def __init__(self, rules: RuleConfig = default_rules):
        self.rules = rules
        self.rooms: Dict[str, RoomState] = {}
        self.room_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def get(self, room_id: str) -> Optional[RoomState]:
        return self.rooms.get(room_id)

    def get_or_create(self, room_id: str) -> RoomState:
        if room_id not in self.rooms:
            self.rooms[room_id] = create_room(room_id, self.rules)
        return self.rooms[room_id]

    def lock(self, room_id: str) -> asyncio.Lock:
        return self.room_locks[room_id]

    def room_ids(self) -> List[str]:
        return list(self.rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self.rooms

    def __len__(self) -> int:
        return len(self.rooms)
