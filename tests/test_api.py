"""Tests for the HTTP endpoints and admin-secret authentication."""

import random

import pytest
from fastapi.testclient import TestClient

import config
from engine.game import load_game
from engine.grid import create_grid
from models.agents import AgentState
from models.game_state import GameState

ADMIN = {"X-Admin-Secret": "change-me-in-production"}


def _make_state() -> GameState:
    gs = GameState(
        game_id="test",
        rows=6,
        columns=6,
        grid=create_grid(6, 6),
        goal=(5, 5),
        agents={"a": AgentState(id="a", name="Alice", position=(0, 0), points=4)},
    )
    gs.rules.collectible_spawn_min_completion = 1.0
    return gs


@pytest.fixture
def client(tmp_path):
    """Test client over a small hand-built game, saving to a temp file."""
    from main import app

    old_save_file = config.SAVE_FILE
    old_secret = config.ADMIN_SECRET
    config.SAVE_FILE = str(tmp_path / "game_state.json")
    config.ADMIN_SECRET = "change-me-in-production"
    app.state.game = _make_state()
    app.state.rng = random.Random(42)

    yield TestClient(app)

    config.SAVE_FILE = old_save_file
    config.ADMIN_SECRET = old_secret


class TestAuth:
    """Tests for require_admin()."""

    def test_missing_secret(self, client):
        resp = client.post("/game/turn/begin")
        assert resp.status_code == 422

    def test_wrong_secret(self, client):
        resp = client.post("/game/turn/begin", headers={"X-Admin-Secret": "nope"})
        assert resp.status_code == 403

    def test_read_endpoints_are_public(self, client):
        assert client.get("/game/state").status_code == 200
        assert client.get("/game/log").status_code == 200
        assert client.get("/health").json() == {"healthy": True}


class TestLobby:
    """Tests for joining and leaving."""

    def test_join(self, client):
        resp = client.post("/game/agents", json={"agent_id": "b", "name": "Bob"}, headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["message"].startswith("Added player **Bob**")
        assert "b" in load_game(config.SAVE_FILE).agents

    def test_join_twice(self, client):
        resp = client.post("/game/agents", json={"agent_id": "a", "name": "Alice"}, headers=ADMIN)
        assert resp.status_code == 409

    def test_leave(self, client):
        resp = client.delete("/game/agents/a", headers=ADMIN)
        assert resp.status_code == 200
        assert client.get("/game/state").json()["agents"] == []

    def test_leave_unknown(self, client):
        resp = client.delete("/game/agents/ghost", headers=ADMIN)
        assert resp.status_code == 404


class TestTurnFlow:
    """Tests for submitting decisions and driving a turn."""

    def test_begin_submit_tick_end(self, client):
        resp = client.post("/game/turn/begin", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["turn"] == 1

        resp = client.post("/game/agents/a/decision", json={"text": "down down"}, headers=ADMIN)
        body = resp.json()
        assert body["success"]
        assert body["new_location"] == "C1"
        state = client.get("/game/state").json()
        assert state["decisions"] == {"a": ["down", "down"]}
        assert state["paths"] == {"a": ["A1", "B1", "C1"]}

        continue_processing = True
        while continue_processing:
            resp = client.post("/game/turn/tick", headers=ADMIN)
            assert resp.status_code == 200
            continue_processing = resp.json()["continue_processing"]

        resp = client.post("/game/turn/end", headers=ADMIN)
        assert resp.status_code == 200
        assert "took a step" in resp.json()["summary"]

        state = client.get("/game/state").json()
        assert state["agents"][0]["position"] == [2, 0]
        assert state["agents"][0]["points"] == 2
        assert len(client.get("/game/log").json()) >= 1

    def test_rejected_decision_is_200(self, client):
        resp = client.post("/game/agents/a/decision", json={"text": "dance"}, headers=ADMIN)
        assert resp.status_code == 200
        assert not resp.json()["success"]
        assert "invalid action" in resp.json()["error"]

    def test_decision_for_unknown_agent(self, client):
        resp = client.post("/game/agents/ghost/decision", json={"text": "up"}, headers=ADMIN)
        assert resp.status_code == 404

    def test_prize_and_claim(self, client):
        resp = client.post("/game/agents/a/prize", json={"prize_type": "streak"}, headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["messages"][0].startswith("Congrats, you've just been awarded a **trap**")

        resp = client.post("/game/agents/a/message", json={"text": "claim key"}, headers=ADMIN)
        assert resp.json()["messages"] == []

    def test_invalid_prize_type(self, client):
        resp = client.post("/game/agents/a/prize", json={"prize_type": "lottery"}, headers=ADMIN)
        assert resp.status_code == 422

    def test_help(self, client):
        body = client.get("/game/help").json()
        assert "`punch`" in body["help"]
        assert body["debug"].startswith("Week 0")


class TestStateSnapshot:
    """Tests for GET /game/state."""

    def test_grid_is_integer_tiles(self, client):
        state = client.get("/game/state").json()
        assert state["rows"] == 6
        assert state["goal"] == "F6"
        assert state["grid"][0] == [0, 0, 0, 0, 0, 0]
