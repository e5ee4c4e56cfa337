"""Tests for server-chosen default decisions."""

import random

from engine.grid import create_grid
from engine.npc import default_decisions_toward_goal
from models.agents import AgentState
from models.game_state import GameState, TileType


def _make_state(points: float = 3, position: tuple[int, int] = (0, 0)) -> GameState:
    """A 1x6 corridor with the goal at the far right."""
    return GameState(
        game_id="test",
        rows=1,
        columns=6,
        grid=create_grid(1, 6),
        goal=(0, 5),
        agents={"a": AgentState(id="a", name="Alice", position=position, points=points)},
    )


class TestDefaultDecisions:
    """Tests for default_decisions_toward_goal()."""

    def test_truncated_to_points(self):
        actions = default_decisions_toward_goal(_make_state(points=3), "a", random.Random(42))
        assert [action.kind for action in actions] == ["right", "right", "right"]

    def test_fractional_points_floor(self):
        actions = default_decisions_toward_goal(_make_state(points=2.9), "a", random.Random(42))
        assert len(actions) == 2

    def test_whole_path_when_rich(self):
        actions = default_decisions_toward_goal(_make_state(points=50), "a", random.Random(42))
        assert len(actions) == 5

    def test_no_points(self):
        assert default_decisions_toward_goal(_make_state(points=0.5), "a") == []

    def test_finished(self):
        gs = _make_state()
        gs.agents["a"].finished = True
        assert default_decisions_toward_goal(gs, "a") == []

    def test_locked_doorway_is_never_entered(self):
        gs = _make_state()
        gs.grid[0][2] = TileType.DOORWAY
        gs.doorway_costs = {"A3": 1}
        assert default_decisions_toward_goal(gs, "a") == []

    def test_detours_around_occupied_tiles(self):
        gs = GameState(
            game_id="test",
            rows=3,
            columns=5,
            grid=create_grid(3, 5),
            goal=(1, 4),
            agents={
                "a": AgentState(id="a", name="Alice", position=(1, 0), points=10),
                "b": AgentState(id="b", name="Bob", position=(1, 2), points=0),
            },
        )
        actions = default_decisions_toward_goal(gs, "a", random.Random(42))
        # Four straight steps would cross Bob; the detour takes six
        assert len(actions) == 6
