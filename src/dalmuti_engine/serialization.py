"""
State serialization and sanitization utilities.
"""

from typing import Any, Dict, List, Optional

from .models import Card, Player, RoomState


def _serialize_cards(cards: Optional[List[Card]]) -> Optional[List[Dict[str, Any]]]:
    if cards is None:
        return None
    return [card.to_dict() for card in cards]


def _serialize_player(player: Player, viewer_id: Optional[str]) -> Dict[str, Any]:
    sanitized_player = {
        "id": player.id,
        "name": player.name,
        "is_bot": player.is_bot,
        "bot_difficulty": player.bot_difficulty,
        "has_passed": player.has_passed,
        "finished_rank": player.finished_rank,
        "previous_rank": player.previous_rank,
        "title": player.title,
        "avatar_id": player.avatar_id,
        "hand_count": player.hand_count
    }

    # Show full hand only to the viewer
    if player.id == viewer_id:
        sanitized_player["hand"] = _serialize_cards(player.hand)

    return sanitized_player


def sanitize_state(state: RoomState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the room snapshot sent to one client.

    Args:
        state: Room state to sanitize
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    current = state.current_player
    return {
        "room_id": state.id,
        "version": state.version,
        "status": state.status,
        "round": state.round,
        "current_turn_index": state.current_turn_index,
        "current_player_id": current.id if current else None,
        "last_played_cards": _serialize_cards(state.last_played_cards),
        "last_player_id": state.last_player_id,
        "players": [_serialize_player(p, viewer_id) for p in state.players],
        "winners": [
            {"id": p.id, "name": p.name, "finished_rank": p.finished_rank}
            for p in state.winners
        ],
        "turn_time_limit": state.turn_time_limit,
        "turn_started_at": state.turn_started_at,
        "deck_count": len(state.deck)
    }


def get_public_room_info(state: RoomState) -> Dict[str, Any]:
    """Get public information about a room for listings."""
    return {
        "id": state.id,
        "status": state.status,
        "player_count": len(state.players),
        "players": [
            {"id": p.id, "name": p.name, "is_bot": p.is_bot}
            for p in state.players
        ]
    }
