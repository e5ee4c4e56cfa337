"""Tests for turn setup/teardown, joins and leaves, prizes, and claims."""

import random

import pytest

from engine.grid import create_grid
from engine.lifecycle import (
    add_agent,
    award_prize,
    begin_turn,
    debug_text,
    end_turn,
    handle_message,
    instructions_text,
    reminders,
    remove_agent,
)
from engine.parser import parse_decision
from engine.resolution import resolve_turn
from models.agents import AgentState, ItemType
from models.game_state import GameEvent, GameState, PrizeType, TileType


def _make_agent(agent_id: str, position: tuple[int, int], points: float = 5, **fields) -> AgentState:
    return AgentState(id=agent_id, name=agent_id.capitalize(), position=position, points=points, **fields)


def _make_state(*agents: AgentState) -> GameState:
    """10x10 empty map with the goal at the bottom-right and coin spawning disabled."""
    gs = GameState(
        game_id="test",
        rows=10,
        columns=10,
        grid=create_grid(10, 10),
        goal=(9, 9),
        agents={agent.id: agent for agent in agents},
    )
    gs.rules.collectible_spawn_min_completion = 1.0
    return gs


class TestBeginTurn:
    """Tests for begin_turn()."""

    def test_resets_status_and_queues_defaults(self):
        gs = _make_state(_make_agent("alice", (0, 0), points=3, stuns=2, invincible=True, warped=True))
        gs.lines = []
        begin_turn(gs, random.Random(42))
        alice = gs.agents["alice"]
        assert gs.turn == 1
        assert gs.tick == 0
        assert alice.origin == (0, 0)
        assert not alice.stunned
        assert not alice.invincible
        assert not alice.warped
        assert len(gs.decisions["alice"]) == 3

    def test_no_points_means_knocked_out(self):
        gs = _make_state(_make_agent("alice", (0, 0), points=0.5))
        begin_turn(gs, random.Random(42))
        assert gs.agents["alice"].stuns == 1
        assert "alice" not in gs.decisions

    def test_finished_agents_get_no_default(self):
        gs = _make_state(_make_agent("alice", (9, 9), finished=True))
        gs.finishers = ["alice"]
        begin_turn(gs, random.Random(42))
        assert gs.decisions == {}

    def test_home_stretch_multiplier(self):
        gs = _make_state(
            _make_agent("alice", (9, 9), finished=True),
            _make_agent("bob", (0, 0), points=5),
            _make_agent("carol", (8, 9), points=5),
            _make_agent("dave", (0, 1), points=5),
        )
        gs.finishers = ["alice"]
        begin_turn(gs, random.Random(42))
        assert gs.home_stretch
        assert gs.agents["bob"].multiplier == gs.rules.home_stretch_multiplier
        assert gs.agents["carol"].multiplier is None

    def test_rich_stragglers_get_no_multiplier(self):
        gs = _make_state(
            _make_agent("alice", (9, 9), finished=True),
            _make_agent("bob", (0, 0), points=50),
        )
        gs.finishers = ["alice"]
        begin_turn(gs, random.Random(42))
        assert gs.agents["bob"].multiplier is None

    def test_dangling_hazard_owner_removed(self):
        gs = _make_state(_make_agent("alice", (0, 0)))
        gs.hazard_owners = {"C3": "alice", "D4": "alice"}
        gs.grid[2][2] = TileType.HIDDEN_HAZARD
        begin_turn(gs, random.Random(42))
        assert gs.hazard_owners == {"C3": "alice"}

    def test_collectibles_spawn_late_in_season(self):
        gs = _make_state(_make_agent("alice", (8, 8)), _make_agent("bob", (0, 0)))
        gs.rules.collectible_spawn_min_completion = 0.25
        begin_turn(gs, random.Random(42))
        assert any(TileType.COLLECTIBLE in row for row in gs.grid)


class TestEndTurn:
    """Tests for end_turn()."""

    def test_clears_offers_and_summarizes(self):
        gs = _make_state(
            _make_agent("alice", (0, 0), item_offers=[ItemType.KEY, ItemType.STAR]),
            _make_agent("bob", (5, 5)),
        )
        begin_turn(gs, random.Random(42))
        resolve_turn(gs, random.Random(42))
        summary = end_turn(gs)
        assert gs.agents["alice"].item_offers is None
        assert summary.turn == 1
        assert "took a step" in summary.summary
        assert summary.standings[0].startswith("1. **Bob**")

    def test_only_this_turns_events(self):
        gs = _make_state(_make_agent("alice", (0, 0)))
        gs.turn = 2
        gs.event_log = [
            GameEvent(turn=1, tick=1, description="old news", timestamp="2024-01-01T00:00:00Z"),
            GameEvent(turn=2, tick=1, description="fresh", timestamp="2024-01-08T00:00:00Z"),
            GameEvent(turn=2, tick=2, description="fresh", timestamp="2024-01-08T00:00:00Z"),
        ]
        summary = end_turn(gs)
        assert summary.summary == "fresh _(x2)_"

    def test_standings_mark_finished(self):
        gs = _make_state(_make_agent("alice", (9, 9), finished=True, rank=1))
        gs.finishers = ["alice"]
        assert end_turn(gs).standings == ["1. **Alice** (finished, 5 points)"]


class TestAddAgent:
    """Tests for add_agent()."""

    def test_spawns_near_stragglers(self):
        gs = _make_state(_make_agent("alice", (8, 8)), _make_agent("dave", (7, 7)), _make_agent("bob", (1, 1)))
        gs.turn = 4
        text = add_agent(gs, "carol", "Carol", random.Random(42))
        carol = gs.agents["carol"]
        assert carol.points == gs.rules.starter_points + 4
        assert abs(carol.position[0] - 1) <= 1 and abs(carol.position[1] - 1) <= 1
        assert text == f"Added player **Carol** near **Bob** with **{gs.rules.starter_points + 4}** starter points"

    def test_empty_game_spawns_on_top_edge(self):
        gs = _make_state()
        text = add_agent(gs, "alice", "Alice", random.Random(42))
        assert gs.agents["alice"].position[0] == 0
        assert " at `A" in text

    def test_duplicate_rejected(self):
        gs = _make_state(_make_agent("alice", (0, 0)))
        with pytest.raises(ValueError, match="already in the game"):
            add_agent(gs, "alice", "Alice")


class TestRemoveAgent:
    """Tests for remove_agent()."""

    def test_removes_owned_traps_and_queue(self):
        gs = _make_state(_make_agent("alice", (0, 0)), _make_agent("bob", (5, 5)))
        gs.grid[3][3] = TileType.HIDDEN_HAZARD
        gs.grid[4][4] = TileType.HAZARD
        gs.hazard_owners = {"D4": "alice", "E5": "bob"}
        gs.decisions["alice"] = parse_decision("down")
        remove_agent(gs, "alice")
        assert "alice" not in gs.agents
        assert "alice" not in gs.decisions
        assert gs.grid[3][3] == TileType.EMPTY
        assert gs.grid[4][4] == TileType.HAZARD
        assert gs.hazard_owners == {"E5": "bob"}

    def test_missing(self):
        with pytest.raises(ValueError, match="not found"):
            remove_agent(_make_state(), "ghost")


class TestPrizes:
    """Tests for award_prize() and item claims."""

    def test_first_place_offers_two_items(self):
        gs = _make_state(_make_agent("alice", (0, 0)))
        messages = award_prize(gs, "alice", PrizeType.SUBMISSIONS_1, "Congrats", random.Random(42))
        offers = gs.agents["alice"].item_offers
        assert len(offers) == 2
        assert ItemType.TRAP not in offers
        assert "DM me to claim" in messages[0]

    def test_second_place_awards_one_item(self):
        gs = _make_state(_make_agent("alice", (0, 0)))
        award_prize(gs, "alice", PrizeType.SUBMISSIONS_2_TIED, "Congrats", random.Random(42))
        assert sum(gs.agents["alice"].items.values()) == 1

    def test_other_prizes_award_a_trap(self):
        gs = _make_state(_make_agent("alice", (0, 0)))
        messages = award_prize(gs, "alice", PrizeType.STREAK, "Nice streak")
        assert gs.agents["alice"].items == {ItemType.TRAP: 1}
        assert messages[0].startswith("Nice streak, you've just been awarded a **trap**!")

    def test_finished_agents_only_get_placeables(self):
        gs = _make_state(_make_agent("alice", (9, 9), finished=True))
        award_prize(gs, "alice", PrizeType.SUBMISSIONS_1, "Congrats", random.Random(42))
        assert set(gs.agents["alice"].item_offers) == {ItemType.OBSTACLE, ItemType.TRAP}

    def test_unknown_agent(self):
        assert award_prize(_make_state(), "ghost", PrizeType.STREAK, "Hi") == []

    def test_claim_offered_item(self):
        gs = _make_state(_make_agent("alice", (0, 0), item_offers=[ItemType.KEY, ItemType.OBSTACLE]))
        messages = handle_message(gs, "alice", "  Claim Boulder ")
        assert gs.agents["alice"].items == {ItemType.OBSTACLE: 1}
        assert gs.agents["alice"].item_offers is None
        assert messages[0].startswith("Nice choice")

    def test_claim_item_not_offered(self):
        gs = _make_state(_make_agent("alice", (0, 0), item_offers=[ItemType.KEY, ItemType.OBSTACLE]))
        messages = handle_message(gs, "alice", "claim star")
        assert "Invalid claim attempt" in messages[0]
        assert gs.agents["alice"].items == {}
        assert gs.agents["alice"].item_offers == [ItemType.KEY, ItemType.OBSTACLE]

    def test_no_offer_means_no_reply(self):
        gs = _make_state(_make_agent("alice", (0, 0)))
        assert handle_message(gs, "alice", "claim key") == []


class TestPlayerText:
    """Tests for reminders(), instructions_text() and debug_text()."""

    def test_reminders(self):
        gs = _make_state(
            _make_agent("alice", (0, 0), items={ItemType.TRAP: 2, ItemType.KEY: 1}),
            _make_agent("bob", (9, 9), finished=True),
            _make_agent("carol", (5, 5)),
        )
        results = reminders(gs)
        assert results["alice"] == "Good morning! Reminder: your inventory contains 2 **traps** and a **key**"
        assert "place **traps**" in results["bob"]
        assert "carol" not in results

    def test_instructions_during_home_stretch(self):
        gs = _make_state(_make_agent("alice", (9, 9), finished=True))
        gs.finishers = ["alice"]
        gs.home_stretch = True
        assert instructions_text(gs).startswith("**Alice** has already reached the goal")

    def test_default_instructions(self):
        assert "DM me" in instructions_text(_make_state())

    def test_debug_text_lists_queues(self):
        gs = _make_state(_make_agent("alice", (0, 0), rank=1))
        gs.turn = 3
        gs.decisions["alice"] = parse_decision("up punch")
        lines = debug_text(gs).split("\n")
        assert lines[0].startswith("Week 3, Action 0, ")
        assert lines[1] == "**Alice**: `⬆️🥊`"
