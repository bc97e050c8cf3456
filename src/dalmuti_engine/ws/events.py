"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator


class EventType(str, Enum):
    """Inbound event types."""
    JOIN = "join"
    ADD_BOT = "add_bot"
    SET_TIME_LIMIT = "set_time_limit"
    START = "start"
    PLAY = "play"
    PASS = "pass"
    LEAVE = "leave"
    RESET = "reset"
    REQUEST_STATE = "request_state"
    CHAT = "chat"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    JOIN_SUCCESS = "join_success"
    STATE_FULL = "state_full"
    ERROR = "error"
    CHAT = "chat"


class ErrorCode(str, Enum):
    """Error codes for malformed client messages."""
    INVALID_EVENT = "INVALID_EVENT"
    INTERNAL = "INTERNAL"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model; every action names its room."""
    type: EventType
    room_id: str = Field(..., min_length=1, max_length=50)


class JoinEvent(BaseEvent):
    """Join room event."""
    type: EventType = EventType.JOIN
    name: str = Field(..., min_length=1, max_length=30)


class AddBotEvent(BaseEvent):
    """Add bot event."""
    type: EventType = EventType.ADD_BOT
    difficulty: Optional[Difficulty] = None


class SetTimeLimitEvent(BaseEvent):
    """Set per-turn time limit event; 0 or less means unlimited."""
    type: EventType = EventType.SET_TIME_LIMIT
    seconds: Optional[int] = Field(default=None, le=3600)


class StartEvent(BaseEvent):
    """Start game event."""
    type: EventType = EventType.START
    seed: Optional[int] = None


class CardRef(BaseModel):
    """A card as sent by a client; only the instance id is trusted."""
    id: str = Field(..., min_length=1)
    rank: Optional[int] = None
    name: Optional[str] = None
    is_jester: Optional[bool] = None


class PlayEvent(BaseEvent):
    """Play cards event."""
    type: EventType = EventType.PLAY
    cards: List[CardRef] = Field(..., min_length=1, max_length=80)

    @field_validator('cards', mode='before')
    @classmethod
    def accept_bare_ids(cls, v):
        """Allow plain card id strings alongside card objects."""
        if isinstance(v, list):
            return [{"id": c} if isinstance(c, str) else c for c in v]
        return v

    def card_ids(self) -> List[str]:
        return [card.id for card in self.cards]


class PassEvent(BaseEvent):
    """Pass turn event."""
    type: EventType = EventType.PASS


class LeaveEvent(BaseEvent):
    """Leave room event."""
    type: EventType = EventType.LEAVE


class ResetEvent(BaseEvent):
    """Reset a finished room back to waiting."""
    type: EventType = EventType.RESET


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


class ChatEvent(BaseEvent):
    """Chat message event."""
    type: EventType = EventType.CHAT
    text: str = Field(..., min_length=1, max_length=200)


# Union type for all inbound events
InboundEvent = Union[
    JoinEvent,
    AddBotEvent,
    SetTimeLimitEvent,
    StartEvent,
    PlayEvent,
    PassEvent,
    LeaveEvent,
    ResetEvent,
    RequestStateEvent,
    ChatEvent
]


# Outbound event models
class JoinSuccessEvent(BaseModel):
    """Join success confirmation event."""
    type: OutboundEventType = OutboundEventType.JOIN_SUCCESS
    room_id: str
    player_id: str
    reconnected: bool = False
    timestamp: float


class StateFullEvent(BaseModel):
    """Full state event."""
    type: OutboundEventType = OutboundEventType.STATE_FULL
    state: Dict[str, Any]
    timestamp: float


class ErrorEvent(BaseModel):
    """Error event."""
    type: OutboundEventType = OutboundEventType.ERROR
    code: ErrorCode
    message: str
    timestamp: float


class ChatMessageEvent(BaseModel):
    """Chat message event."""
    type: OutboundEventType = OutboundEventType.CHAT
    room_id: str
    player_id: str
    player_name: str
    text: str
    timestamp: float


EVENT_MAP = {
    EventType.JOIN: JoinEvent,
    EventType.ADD_BOT: AddBotEvent,
    EventType.SET_TIME_LIMIT: SetTimeLimitEvent,
    EventType.START: StartEvent,
    EventType.PLAY: PlayEvent,
    EventType.PASS: PassEvent,
    EventType.LEAVE: LeaveEvent,
    EventType.RESET: ResetEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
    EventType.CHAT: ChatEvent,
}


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")

    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_class = EVENT_MAP[event_type]

    try:
        return event_class(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {str(e)}")


def create_error_event(code: ErrorCode, message: str) -> ErrorEvent:
    """Create an error event."""
    return ErrorEvent(
        code=code,
        message=message,
        timestamp=time.time()
    )


def create_join_success_event(room_id: str, player_id: str, reconnected: bool = False) -> JoinSuccessEvent:
    """Create a join success event."""
    return JoinSuccessEvent(
        room_id=room_id,
        player_id=player_id,
        reconnected=reconnected,
        timestamp=time.time()
    )


def create_state_full_event(state: Dict[str, Any]) -> StateFullEvent:
    """Create a full state event."""
    return StateFullEvent(
        state=state,
        timestamp=time.time()
    )


def create_chat_event(room_id: str, player_id: str, player_name: str, text: str) -> ChatMessageEvent:
    """Create a chat message event."""
    return ChatMessageEvent(
        room_id=room_id,
        player_id=player_id,
        player_name=player_name,
        text=text,
        timestamp=time.time()
    )
