"""Game constants"""

from typing import Dict, List, Tuple

# (rank, copies in deck, display name); rank 1 is the best card
CARD_DEFINITIONS: List[Tuple[int, int, str]] = [
    (1, 1, 'Dalmuti'),
    (2, 2, 'Archbishop'),
    (3, 3, 'Earl Marshal'),
    (4, 4, 'Baroness'),
    (5, 5, 'Abbess'),
    (6, 6, 'Knight'),
    (7, 7, 'Seamstress'),
    (8, 8, 'Mason'),
    (9, 9, 'Cook'),
    (10, 10, 'Shepherdess'),
    (11, 11, 'Stonecutter'),
    (12, 12, 'Peasant'),
    (13, 2, 'Jester'),
]

BEST_RANK = 1
WORST_RANK = 12
JESTER_RANK = 13
DECK_SIZE = sum(count for _, count, _ in CARD_DEFINITIONS)  # 80

CARD_NAMES: Dict[int, str] = {rank: name for rank, _, name in CARD_DEFINITIONS}

# Room status
STATUS_WAITING = 'waiting'
STATUS_PLAYING = 'playing'
STATUS_FINISHED = 'finished'

# Bot difficulty tiers
DIFFICULTY_EASY = 'easy'
DIFFICULTY_MEDIUM = 'medium'
DIFFICULTY_HARD = 'hard'
DIFFICULTIES = [DIFFICULTY_EASY, DIFFICULTY_MEDIUM, DIFFICULTY_HARD]

AVATAR_IDS = ['king', 'queen', 'knight', 'merchant', 'peasant', 'jester', 'wizard', 'thief']

# Titles handed out by finish position
TITLE_GREAT_DALMUTI = 'Great Dalmuti'
TITLE_LESSER_DALMUTI = 'Lesser Dalmuti'
TITLE_MERCHANT = 'Merchant'
TITLE_LESSER_PEON = 'Lesser Peon'
TITLE_GREATER_PEON = 'Greater Peon'
