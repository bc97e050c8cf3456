"""
Game rule configuration.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import DIFFICULTIES, DIFFICULTY_MEDIUM


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    min_players: int = Field(
        default=1,
        ge=1,
        description="Minimum number of players required to start (2+ recommended)"
    )
    turn_time_limit: Optional[int] = Field(
        default=None,
        description="Default turn time limit in seconds for new rooms (None or <= 0 = unlimited)"
    )
    bot_delay: float = Field(
        default=0.0,
        ge=0.0,
        le=10.0,
        description="Seconds a bot 'thinks' before each move"
    )
    default_bot_difficulty: str = Field(
        default=DIFFICULTY_MEDIUM,
        description="Difficulty used when add_bot does not name one"
    )
    reconnect_by_name: bool = Field(
        default=True,
        description="Rebind a joining connection to an existing player with the same name"
    )

    @field_validator('default_bot_difficulty')
    @classmethod
    def validate_difficulty(cls, v):
        """Validate the difficulty tier is known."""
        if v not in DIFFICULTIES:
            raise ValueError(f'default_bot_difficulty must be one of {DIFFICULTIES}')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is enough to start a game."""
        return player_count >= self.min_players


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)


def load_rules_from_env() -> RuleConfig:
    """Build a RuleConfig from DALMUTI_* environment variables."""
    overrides = {}
    if os.getenv("DALMUTI_MIN_PLAYERS"):
        overrides["min_players"] = int(os.getenv("DALMUTI_MIN_PLAYERS"))
    if os.getenv("DALMUTI_TURN_TIME_LIMIT"):
        overrides["turn_time_limit"] = int(os.getenv("DALMUTI_TURN_TIME_LIMIT"))
    if os.getenv("DALMUTI_BOT_DELAY"):
        overrides["bot_delay"] = float(os.getenv("DALMUTI_BOT_DELAY"))
    if os.getenv("DALMUTI_DEFAULT_BOT_DIFFICULTY"):
        overrides["default_bot_difficulty"] = os.getenv("DALMUTI_DEFAULT_BOT_DIFFICULTY").lower()
    if os.getenv("DALMUTI_RECONNECT_BY_NAME"):
        overrides["reconnect_by_name"] = os.getenv("DALMUTI_RECONNECT_BY_NAME").lower() == "true"
    return create_rules(**overrides)
