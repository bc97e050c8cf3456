"""
FastAPI WebSocket server for the Dalmuti game.
"""

import asyncio
import logging
import random
import time
import uuid
from contextlib import asynccontextmanager
from typing import Dict, Optional, Set

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..constants import STATUS_PLAYING
from ..engine import (
    add_bot, iter_bot_turns, join_room, leave_room, new_player_id, pass_turn,
    play_cards, reset_room, set_time_limit, start_game
)
from ..registry import RoomRegistry
from ..rules import RuleConfig, load_rules_from_env
from ..serialization import get_public_room_info, sanitize_state
from ..sessions import NameRebind, NoRebind, SessionTable
from ..timers import TimerSupervisor
from .events import (
    parse_inbound_event, create_error_event, create_join_success_event,
    create_state_full_event, create_chat_event, ErrorCode,
    JoinEvent, AddBotEvent, SetTimeLimitEvent, StartEvent, PlayEvent, PassEvent,
    LeaveEvent, ResetEvent, RequestStateEvent, ChatEvent
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def encode(event: BaseModel) -> str:
    return orjson.dumps(event.model_dump(mode="json")).decode()


class ConnectionManager:
    """Manages WebSocket connections, one session id per socket."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    def register(self, websocket: WebSocket) -> str:
        session_id = str(uuid.uuid4())
        self.active_connections[session_id] = websocket
        logger.info(f"Session {session_id} connected")
        return session_id

    def disconnect(self, session_id: str):
        if session_id in self.active_connections:
            del self.active_connections[session_id]
            logger.info(f"Session {session_id} disconnected")

    async def send(self, session_id: str, event: BaseModel):
        websocket = self.active_connections.get(session_id)
        if websocket is None:
            return
        try:
            await websocket.send_text(encode(event))
        except Exception as e:
            logger.error(f"Error sending to session {session_id}: {e}")
            self.disconnect(session_id)

    def __len__(self) -> int:
        return len(self.active_connections)


class GameManager:
    """
    Routes inbound actions to rooms.

    Every room action runs under that room's lock and ends, when it
    changed anything, by re-arming the turn timer and broadcasting the
    new snapshot. Bot turns are then played one step at a time, with a
    broadcast after each step.
    """

    def __init__(self, rules: Optional[RuleConfig] = None):
        self.rules = rules or load_rules_from_env()
        self.registry = RoomRegistry(self.rules)
        self.timers = TimerSupervisor()
        self.sessions = SessionTable()
        self.connections = ConnectionManager()
        self.reconnect = NameRebind() if self.rules.reconnect_by_name else NoRebind()
        self.bot_rng = random.Random()
        self.background_tasks: Set[asyncio.Task] = set()

    async def handle_event(self, session_id: str, event):
        """Handle an inbound event."""
        # Only a join may create a room (and its lock)
        if not isinstance(event, JoinEvent) and event.room_id not in self.registry:
            logger.info(f"Ignoring {event.type.value} for unknown room {event.room_id}")
            return

        async with self.registry.lock(event.room_id):
            if isinstance(event, JoinEvent):
                await self.handle_join(session_id, event)
                return

            state = self.registry.get(event.room_id)

            # Room-level actions
            if isinstance(event, AddBotEvent):
                difficulty = event.difficulty.value if event.difficulty else self.rules.default_bot_difficulty
                result = add_bot(state, difficulty)
            elif isinstance(event, SetTimeLimitEvent):
                result = set_time_limit(state, event.seconds)
            elif isinstance(event, StartEvent):
                result = start_game(state, event.seed, self.rules)
            elif isinstance(event, ResetEvent):
                result = reset_room(state)
            elif isinstance(event, RequestStateEvent):
                await self.send_state(session_id, event.room_id)
                return
            else:
                # Actions taken as a seated player
                player_id = self._player_for(session_id, event)
                if player_id is None:
                    return

                if isinstance(event, PlayEvent):
                    result = play_cards(state, player_id, event.card_ids())
                elif isinstance(event, PassEvent):
                    result = pass_turn(state, player_id)
                elif isinstance(event, LeaveEvent):
                    result = leave_room(state, player_id)
                    if result.success:
                        self.sessions.unbind(session_id)
                elif isinstance(event, ChatEvent):
                    await self.relay_chat(event.room_id, player_id, event.text)
                    return
                else:
                    raise ValueError(f"Unhandled event type: {type(event)}")

            if result.success:
                await self.commit(event.room_id)

    def _player_for(self, session_id: str, event) -> Optional[str]:
        """The player this session acts as in the event's room; None drops the event."""
        player_id = self.sessions.player_for(session_id, event.room_id)
        if player_id is None or self.registry.get(event.room_id).find_player(player_id) is None:
            logger.info(f"Ignoring {event.type.value} from session {session_id}: not in room {event.room_id}")
            return None
        return player_id

    async def handle_join(self, session_id: str, event: JoinEvent):
        """Handle join room event; creates the room on first use."""
        state = self.registry.get_or_create(event.room_id)
        result = join_room(state, new_player_id(), event.name, self.reconnect)
        player_id = result.data["player_id"]
        self.sessions.bind(session_id, event.room_id, player_id)

        await self.connections.send(
            session_id,
            create_join_success_event(event.room_id, player_id, result.data["reconnected"])
        )
        await self.commit(event.room_id, restart_timer=False)

    async def commit(self, room_id: str, restart_timer: bool = True):
        """
        Publish an accepted mutation, then let any bots whose turn it is act.

        A join leaves the turn holder's clock running; every other
        mutation restarts it.
        """
        state = self.registry.get(room_id)
        if restart_timer:
            self.restart_turn_timer(room_id)
        await self.broadcast_state(room_id)

        for _ in iter_bot_turns(state, self.bot_rng):
            self.restart_turn_timer(room_id)
            await self.broadcast_state(room_id)
            current = state.current_player
            if self.rules.bot_delay and state.status == STATUS_PLAYING and current and current.is_bot:
                await asyncio.sleep(self.rules.bot_delay)

    def restart_turn_timer(self, room_id: str):
        """Cancel the room's timer and arm a fresh one for whoever holds the turn."""
        state = self.registry.get(room_id)
        self.timers.cancel(room_id)
        limit = state.turn_time_limit
        if state.status != STATUS_PLAYING or not limit or limit <= 0 or state.current_player is None:
            state.turn_started_at = None
            return

        state.turn_started_at = time.time()
        index = state.current_turn_index
        player_id = state.current_player.id
        self.timers.arm(room_id, limit, lambda: self._on_timer_expired(room_id, index, player_id))

    def _on_timer_expired(self, room_id: str, index: int, player_id: str):
        task = asyncio.create_task(self.handle_turn_timeout(room_id, index, player_id))
        self.background_tasks.add(task)
        task.add_done_callback(self.background_tasks.discard)

    async def handle_turn_timeout(self, room_id: str, index: int, player_id: str):
        """Pass on behalf of a player whose turn timer ran out."""
        async with self.registry.lock(room_id):
            state = self.registry.get(room_id)
            if state is None or state.status != STATUS_PLAYING:
                return

            current = state.current_player
            if state.current_turn_index != index or current is None or current.id != player_id:
                logger.warning(
                    f"[{room_id}] Dropping stale turn timeout for index {index} ({player_id})"
                )
                return

            logger.info(f"[{room_id}] Turn time limit exceeded for player index {index}")
            result = pass_turn(state, player_id)
            if result.success:
                await self.commit(room_id)

    async def broadcast_state(self, room_id: str):
        """Send every session in the room its own view of the state."""
        state = self.registry.get(room_id)
        for session_id in self.sessions.sessions_in(room_id):
            viewer_id = self.sessions.player_for(session_id, room_id)
            await self.connections.send(session_id, create_state_full_event(sanitize_state(state, viewer_id)))

    async def send_state(self, session_id: str, room_id: str):
        state = self.registry.get(room_id)
        viewer_id = self.sessions.player_for(session_id, room_id)
        await self.connections.send(session_id, create_state_full_event(sanitize_state(state, viewer_id)))

    async def relay_chat(self, room_id: str, player_id: str, text: str):
        player = self.registry.get(room_id).find_player(player_id)
        chat_event = create_chat_event(room_id, player_id, player.name, text)
        for session_id in self.sessions.sessions_in(room_id):
            await self.connections.send(session_id, chat_event)

    def disconnect(self, session_id: str):
        """Forget a closed socket. The player keeps their seat until they leave."""
        binding = self.sessions.unbind(session_id)
        self.connections.disconnect(session_id)
        if binding:
            logger.info(f"Player {binding.player_id} lost connection to room {binding.room_id}")

    def shutdown(self):
        self.timers.cancel_all()
        for task in list(self.background_tasks):
            task.cancel()


def create_app(manager: Optional[GameManager] = None) -> FastAPI:
    """Build the FastAPI app around a GameManager."""
    manager = manager or GameManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        manager.shutdown()

    app = FastAPI(title="Dalmuti Game Engine", version="1.0.0", lifespan=lifespan)
    app.state.manager = manager

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Dalmuti Game Engine", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "rooms": len(manager.registry),
            "connections": len(manager.connections)
        }

    @app.get("/rooms")
    async def list_rooms():
        return [get_public_room_info(manager.registry.get(room_id)) for room_id in manager.registry.room_ids()]

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Main WebSocket endpoint."""
        await websocket.accept()
        session_id = manager.connections.register(websocket)

        try:
            while True:
                raw_data = await websocket.receive_text()

                try:
                    event = parse_inbound_event(orjson.loads(raw_data))
                    await manager.handle_event(session_id, event)
                except ValueError as e:
                    # Invalid event (orjson.JSONDecodeError is a ValueError too)
                    await manager.connections.send(session_id, create_error_event(ErrorCode.INVALID_EVENT, str(e)))
                except Exception as e:
                    logger.error(f"Error handling event: {e}")
                    await manager.connections.send(
                        session_id, create_error_event(ErrorCode.INTERNAL, "Internal server error")
                    )

        except WebSocketDisconnect:
            logger.info("WebSocket disconnected")
        finally:
            manager.disconnect(session_id)

    return app


app = create_app()
