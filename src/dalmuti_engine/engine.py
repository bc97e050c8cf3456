"""Room state machine: every game action for one room"""

import logging
import random
import uuid
from typing import Iterator, List, Optional, Union

from .bots.greedy import DalmutiBot
from .constants import (
    AVATAR_IDS, DIFFICULTIES, DIFFICULTY_MEDIUM,
    STATUS_FINISHED, STATUS_PLAYING, STATUS_WAITING
)
from .errors import (
    GameError, raise_error, INVALID_MOVE, NOT_ENOUGH_PLAYERS, NOT_YOUR_TURN,
    PLAYER_NOT_FOUND, WRONG_STATUS
)
from .models import Card, Player, RoomState
from .ranking import assign_titles
from .rules import RuleConfig, default_rules
from .scheduler import (
    active_players, is_eligible, next_active_index, next_eligible_index, unpassed_players
)
from .sessions import ReconnectStrategy
from .shuffle import create_deck, deal_cards, find_starting_player, shuffle_deck
from .validate import is_valid_move, resolve_cards

logger = logging.getLogger(__name__)

CardRef = Union[str, dict, Card]


class ActionResult:
    """Outcome of an engine operation."""

    def __init__(
        self,
        success: bool,
        state: RoomState,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        **data
    ):
        self.success = success
        self.state = state
        self.error_code = error_code
        self.error_message = error_message
        self.data = data

    @classmethod
    def ok(cls, state: RoomState, **data) -> 'ActionResult':
        return cls(True, state, **data)

    @classmethod
    def fail(cls, state: RoomState, error: GameError) -> 'ActionResult':
        return cls(False, state, error_code=error.code, error_message=error.message)


def create_room(room_id: str, rules: RuleConfig = default_rules) -> RoomState:
    return RoomState(id=room_id, turn_time_limit=rules.turn_time_limit)


def new_player_id() -> str:
    return str(uuid.uuid4())[:8]


def _touch(state: RoomState):
    state.version += 1


def _require_status(state: RoomState, status: str):
    if state.status != status:
        raise_error(WRONG_STATUS, f"Room is {state.status}, expected {status}")


def _require_turn(state: RoomState, player_id: str) -> Player:
    player = state.find_player(player_id)
    if not player:
        raise_error(PLAYER_NOT_FOUND, f"Player {player_id} is not in room {state.id}")
    current = state.current_player
    if current is None or current.id != player_id:
        raise_error(NOT_YOUR_TURN, f"Not {player.name}'s turn")
    return player


def _participants(state: RoomState) -> List[Player]:
    """Players dealt into the current game (late joiners hold no cards and never finished)."""
    return [p for p in state.players if p.is_active or p.finished_rank is not None]


def _game_over(state: RoomState) -> bool:
    active = active_players(state.players)
    return not active or (len(active) == 1 and len(_participants(state)) > 1)


def _next_finish_rank(state: RoomState) -> int:
    # Ranks of departed finishers stay used
    return max((p.finished_rank for p in state.winners), default=0) + 1


def _record_finish(state: RoomState, player: Player):
    if player.finished_rank is None:
        player.finished_rank = _next_finish_rank(state)
        state.winners.append(player)
        logger.info(f"[{state.id}] {player.name} finished! Rank: {player.finished_rank}")


def _finish_game(state: RoomState):
    """Rank the last player holding cards and end the game."""
    for player in active_players(state.players):
        player.finished_rank = _next_finish_rank(state)
        state.winners.append(player)
    state.status = STATUS_FINISHED
    state.turn_started_at = None
    assign_titles(state)
    logger.info(f"[{state.id}] Game finished! Order: {[p.name for p in state.winners]}")


def _clear_trick(state: RoomState):
    state.last_played_cards = None
    state.last_player_id = None
    for player in state.players:
        player.has_passed = False


def _reset_to_waiting(state: RoomState):
    state.status = STATUS_WAITING
    state.round = 1
    state.current_turn_index = 0
    state.last_played_cards = None
    state.last_player_id = None
    state.deck = []
    state.winners = []
    state.turn_started_at = None
    for player in state.players:
        player.hand = []
        player.has_passed = False
        player.finished_rank = None


def resolve_round(state: RoomState, winner: Player):
    """
    Award the trick to winner and open the next one.

    The round counter increments, the table clears and every pass flag
    resets. The winner leads unless they have emptied their hand, in which
    case the next player after them holding cards leads. Ends the game if
    at most one player still holds cards.
    """
    state.round += 1
    _clear_trick(state)
    logger.info(f"[{state.id}] Round over! Winner: {winner.name}")

    if _game_over(state):
        _finish_game(state)
        return

    winner_index = state.index_of(winner.id)
    if winner.is_active and winner_index != -1:
        state.current_turn_index = winner_index
    else:
        state.current_turn_index = next_active_index(state.players, winner_index + 1)
        logger.info(f"[{state.id}] Winner is out. Next player starts: {state.current_player.name}")


def _resolve_without_responders(state: RoomState):
    """Nobody left to answer the table: the last player to play takes the trick."""
    winner = state.find_player(state.last_player_id) if state.last_player_id else None
    if winner is None:
        active = active_players(state.players)
        if not active:
            _finish_game(state)
            return
        winner = active[0]
    resolve_round(state, winner)


def _advance_turn(state: RoomState, start: int):
    """Hand the turn to the next eligible seat from start, resolving the trick if the scan wraps."""
    next_index = next_eligible_index(state.players, start)
    candidate = state.players[next_index]
    if not is_eligible(candidate):
        _resolve_without_responders(state)
    elif state.last_player_id and candidate.id == state.last_player_id:
        # Turn came back around to whoever played last
        logger.info(f"[{state.id}] Turn returned to last player {candidate.name}. Round over!")
        resolve_round(state, candidate)
    else:
        state.current_turn_index = next_index


def join_room(
    state: RoomState,
    player_id: str,
    name: str,
    strategy: Optional[ReconnectStrategy] = None,
    avatar_id: Optional[str] = None
) -> ActionResult:
    """
    Add a player to the roster, or hand back an existing one when the
    reconnection strategy recognises them. Allowed in any status; players
    joining a running game hold no cards until the next deal.
    """
    existing = strategy.match(state, name) if strategy else None
    if existing:
        _touch(state)
        logger.info(f"[{state.id}] Player {name} reconnected as {existing.id}")
        return ActionResult.ok(state, player_id=existing.id, reconnected=True)

    player = Player(
        id=player_id,
        name=name,
        avatar_id=avatar_id or random.choice(AVATAR_IDS)
    )
    state.players.append(player)
    _touch(state)
    logger.info(f"[{state.id}] {name} joined room ({player_id})")
    return ActionResult.ok(state, player_id=player_id, reconnected=False)


def add_bot(
    state: RoomState,
    difficulty: str = DIFFICULTY_MEDIUM,
    bot_id: Optional[str] = None,
    avatar_id: Optional[str] = None
) -> ActionResult:
    try:
        _require_status(state, STATUS_WAITING)
        if difficulty not in DIFFICULTIES:
            raise_error(INVALID_MOVE, f"Unknown bot difficulty {difficulty}")
    except GameError as e:
        logger.info(f"[{state.id}] Rejected add_bot: {e.message}")
        return ActionResult.fail(state, e)

    bot = Player(
        id=bot_id or f"bot-{uuid.uuid4().hex[:5]}",
        name=f"Bot {len(state.players) + 1} ({difficulty})",
        is_bot=True,
        bot_difficulty=difficulty,
        avatar_id=avatar_id or random.choice(AVATAR_IDS)
    )
    state.players.append(bot)
    _touch(state)
    return ActionResult.ok(state, player_id=bot.id)


def set_time_limit(state: RoomState, seconds: Optional[int]) -> ActionResult:
    try:
        _require_status(state, STATUS_WAITING)
    except GameError as e:
        logger.info(f"[{state.id}] Rejected set_time_limit: {e.message}")
        return ActionResult.fail(state, e)

    state.turn_time_limit = seconds if seconds and seconds > 0 else None
    _touch(state)
    logger.info(f"[{state.id}] Time limit set to {state.turn_time_limit}s")
    return ActionResult.ok(state)


def start_game(
    state: RoomState,
    seed: Optional[int] = None,
    rules: RuleConfig = default_rules
) -> ActionResult:
    """Deal a fresh deck and hand the lead to whoever holds the Dalmuti."""
    try:
        _require_status(state, STATUS_WAITING)
        if not rules.validate_player_count(len(state.players)):
            raise_error(NOT_ENOUGH_PLAYERS, f"Need at least {rules.min_players} players")
    except GameError as e:
        logger.info(f"[{state.id}] Cannot start game: {e.message}")
        return ActionResult.fail(state, e)

    if len(state.players) < 2:
        logger.warning(f"[{state.id}] Starting game with only {len(state.players)} player(s)")

    for player in state.players:
        player.has_passed = False
        player.finished_rank = None

    state.deck = deal_cards(shuffle_deck(create_deck(), seed), state.players)
    state.status = STATUS_PLAYING
    state.round = 1
    state.winners = []
    state.last_played_cards = None
    state.last_player_id = None

    starter = find_starting_player(state.players)
    if starter is None:
        # Only reachable with a tampered deck
        starter = random.Random(seed).randrange(len(state.players))
    state.current_turn_index = starter
    _touch(state)
    logger.info(f"[{state.id}] Player {state.players[starter].name} has the Dalmuti and starts!")
    return ActionResult.ok(state)


def play_cards(state: RoomState, player_id: str, card_refs: List[CardRef]) -> ActionResult:
    """Play a set of cards from the current player's hand."""
    try:
        _require_status(state, STATUS_PLAYING)
        player = _require_turn(state, player_id)
        cards = resolve_cards(player.hand, card_refs)
        if not is_valid_move(cards, state.last_played_cards):
            raise_error(INVALID_MOVE, f"{[c.id for c in cards]} does not beat the table")
    except GameError as e:
        logger.info(f"[{state.id}] Rejected play from {player_id}: {e.message}")
        return ActionResult.fail(state, e)

    played = {card.id for card in cards}
    player.hand = [card for card in player.hand if card.id not in played]
    state.last_played_cards = cards
    state.last_player_id = player.id
    logger.info(f"[{state.id}] {player.name} plays {len(cards)} card(s) of rank {cards[0].rank}")

    if not player.hand:
        _record_finish(state, player)

    if _game_over(state):
        _finish_game(state)
        _touch(state)
        return ActionResult.ok(state)

    next_index = next_eligible_index(state.players, state.current_turn_index + 1)
    if state.players[next_index].id == player.id:
        # Everyone else has passed or is out: same player leads a fresh trick
        logger.info(f"[{state.id}] Turn returned to {player.name} immediately. Trick cleared")
        _clear_trick(state)
        state.current_turn_index = next_index
    elif not is_eligible(state.players[next_index]):
        resolve_round(state, player)
    else:
        state.current_turn_index = next_index

    _touch(state)
    return ActionResult.ok(state)


def pass_turn(state: RoomState, player_id: str) -> ActionResult:
    """Pass for the rest of the trick."""
    try:
        _require_status(state, STATUS_PLAYING)
        player = _require_turn(state, player_id)
    except GameError as e:
        logger.info(f"[{state.id}] Rejected pass from {player_id}: {e.message}")
        return ActionResult.fail(state, e)

    player.has_passed = True
    unpassed = unpassed_players(state.players)
    logger.info(
        f"[{state.id}] Pass: {player.name}. "
        f"Active: {len(active_players(state.players))}, Unpassed: {len(unpassed)}"
    )

    if len(unpassed) == 1:
        resolve_round(state, unpassed[0])
    elif not unpassed:
        _resolve_without_responders(state)
    else:
        _advance_turn(state, state.current_turn_index + 1)

    _touch(state)
    return ActionResult.ok(state)


def leave_room(state: RoomState, player_id: str) -> ActionResult:
    """Remove a player from the roster, repairing turn order if a game is running."""
    index = state.index_of(player_id)
    if index == -1:
        error = GameError(PLAYER_NOT_FOUND, f"Player {player_id} is not in room {state.id}")
        logger.info(f"[{state.id}] Rejected leave: {error.message}")
        return ActionResult.fail(state, error)

    leaver = state.players.pop(index)
    logger.info(f"[{state.id}] Player {leaver.name} leaving room")

    if state.status == STATUS_PLAYING:
        state.winners = [p for p in state.winners if p.id != player_id]
        if len(state.players) < 2:
            logger.info(f"[{state.id}] Not enough players left, back to waiting")
            _reset_to_waiting(state)
        elif _game_over(state):
            _finish_game(state)
        else:
            held_turn = index == state.current_turn_index
            if index < state.current_turn_index:
                state.current_turn_index -= 1
            if state.current_turn_index >= len(state.players):
                state.current_turn_index = 0
            if held_turn:
                _advance_turn(state, state.current_turn_index)

    _touch(state)
    return ActionResult.ok(state)


def reset_room(state: RoomState) -> ActionResult:
    """Return a finished room to waiting so the same table can play again."""
    try:
        _require_status(state, STATUS_FINISHED)
    except GameError as e:
        logger.info(f"[{state.id}] Rejected reset: {e.message}")
        return ActionResult.fail(state, e)

    for player in state.players:
        player.previous_rank = player.finished_rank
    _reset_to_waiting(state)
    _touch(state)
    return ActionResult.ok(state)


def iter_bot_turns(state: RoomState, rng: Optional[random.Random] = None) -> Iterator[ActionResult]:
    """
    Play bot turns one at a time until a human is to act or the game ends.

    Yields the result of every applied bot action so the caller can
    broadcast between steps.
    """
    while state.status == STATUS_PLAYING:
        player = state.current_player
        if player is None or not player.is_bot:
            return

        bot = DalmutiBot(player.id, player.bot_difficulty or DIFFICULTY_MEDIUM, rng)
        action = bot.choose_action(state)
        if action.type == 'play':
            result = play_cards(state, player.id, action.data['cards'])
        else:
            result = pass_turn(state, player.id)

        if not result.success:
            logger.error(f"[{state.id}] Bot {player.name} action failed: {result.error_message}")
            result = pass_turn(state, player.id)
            if not result.success:
                return
        yield result
