"""
WebSocket integration tests through FastAPI's TestClient.
"""

import orjson
import pytest
from fastapi.testclient import TestClient

from dalmuti_engine.rules import create_rules
from dalmuti_engine.ws.server import GameManager, create_app


@pytest.fixture
def client():
    app = create_app(GameManager(create_rules()))
    with TestClient(app) as test_client:
        yield test_client


def send(ws, type_, room_id="room1", **fields):
    ws.send_text(orjson.dumps({"type": type_, "room_id": room_id, **fields}).decode())


def join(ws, name, room_id="room1"):
    send(ws, "join", room_id=room_id, name=name)
    joined = ws.receive_json()
    state = ws.receive_json()
    return joined, state


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Dalmuti Game Engine"
    health = client.get("/health").json()
    assert health == {"status": "healthy", "rooms": 0, "connections": 0}


def test_join_sends_confirmation_then_state(client):
    with client.websocket_connect("/ws") as ws:
        joined, state = join(ws, "Alice")

        assert joined["type"] == "join_success"
        assert joined["room_id"] == "room1"
        assert joined["reconnected"] is False

        assert state["type"] == "state_full"
        players = state["state"]["players"]
        assert [p["name"] for p in players] == ["Alice"]
        assert players[0]["id"] == joined["player_id"]
        assert state["state"]["status"] == "waiting"

        rooms = client.get("/rooms").json()
        assert rooms[0]["id"] == "room1"
        assert rooms[0]["player_count"] == 1


def test_second_player_is_broadcast_to_the_first(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        join(alice, "Alice")
        join(bob, "Bob")

        update = alice.receive_json()
        assert update["type"] == "state_full"
        assert [p["name"] for p in update["state"]["players"]] == ["Alice", "Bob"]


def test_malformed_messages_get_an_error(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        error = ws.receive_json()
        assert error["type"] == "error"
        assert error["code"] == "INVALID_EVENT"

        send(ws, "dance")
        assert ws.receive_json()["code"] == "INVALID_EVENT"


def test_each_player_sees_only_their_hand(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        alice_id = join(alice, "Alice")[0]["player_id"]
        join(bob, "Bob")
        alice.receive_json()

        send(alice, "start", seed=10)
        alice_view = alice.receive_json()["state"]
        bob_view = bob.receive_json()["state"]

        assert alice_view["status"] == "playing"
        alice_in_alice_view = next(p for p in alice_view["players"] if p["id"] == alice_id)
        alice_in_bob_view = next(p for p in bob_view["players"] if p["id"] == alice_id)
        assert len(alice_in_alice_view["hand"]) == 40
        assert "hand" not in alice_in_bob_view
        assert alice_in_bob_view["hand_count"] == 40


def test_request_state_and_chat(client):
    with client.websocket_connect("/ws") as ws:
        player_id = join(ws, "Alice")[0]["player_id"]

        send(ws, "request_state")
        snapshot = ws.receive_json()
        assert snapshot["type"] == "state_full"
        assert snapshot["state"]["room_id"] == "room1"

        send(ws, "chat", text="hello table")
        chat = ws.receive_json()
        assert chat["type"] == "chat"
        assert chat["player_id"] == player_id
        assert chat["player_name"] == "Alice"
        assert chat["text"] == "hello table"


def test_game_against_bots_reaches_my_turn(client):
    with client.websocket_connect("/ws") as ws:
        my_id = join(ws, "Alice")[0]["player_id"]
        for _ in range(2):
            send(ws, "add_bot", difficulty="medium")
            ws.receive_json()

        send(ws, "start", seed=3)
        versions = []
        while True:
            state = ws.receive_json()["state"]
            versions.append(state["version"])
            if state["status"] == "finished" or state["current_player_id"] == my_id:
                break

        # One snapshot per step, in order
        assert versions == sorted(versions)
        assert len(set(versions)) == len(versions)


def test_rejected_action_sends_nothing(client):
    with client.websocket_connect("/ws") as ws:
        join(ws, "Alice")

        # Passing before the game starts is silently ignored
        send(ws, "pass")
        send(ws, "request_state")
        snapshot = ws.receive_json()
        assert snapshot["type"] == "state_full"
        assert snapshot["state"]["status"] == "waiting"
