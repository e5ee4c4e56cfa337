"""Tests for A* search, weight maps, and the softlock check."""

import math

from engine.grid import create_grid
from engine.pathfinding import (
    astar,
    can_all_agents_reach_goal,
    map_fairness,
    num_steps_between,
    search,
    search_to_goal,
    weight_map,
)
from models.agents import AgentState
from models.game_state import GameState, TileType


def _make_corridor() -> GameState:
    """A 3x5 map whose only route is a corridor along row 1 through a doorway at B3."""
    grid = create_grid(3, 5, TileType.WALL)
    for c in range(5):
        grid[1][c] = TileType.EMPTY
    grid[1][2] = TileType.DOORWAY
    return GameState(
        game_id="test",
        rows=3,
        columns=5,
        grid=grid,
        goal=(1, 4),
        doorway_costs={"B3": 5},
        agents={"a": AgentState(id="a", name="Alice", position=(1, 0), points=3)},
    )


class TestAstar:
    """Tests for astar()."""

    def test_open_grid_cost_is_manhattan(self):
        weights = [[1] * 4 for _ in range(4)]
        result = astar(weights, (0, 0), (3, 3))
        assert result.success
        assert result.cost == 6
        assert len(result.steps) == 6
        assert result.steps[-1] == (3, 3)
        assert (0, 0) not in result.steps

    def test_semantic_steps(self):
        weights = [[1] * 3]
        result = astar(weights, (0, 0), (0, 2))
        assert result.semantic_steps == ["right", "right"]

    def test_unreachable(self):
        weights = [[1, None, 1]]
        result = astar(weights, (0, 0), (0, 2))
        assert not result.success
        assert math.isinf(result.cost)

    def test_start_equals_goal(self):
        result = astar([[1]], (0, 0), (0, 0))
        assert result.success
        assert result.cost == 0
        assert result.steps == []


class TestWeightMap:
    """Tests for weight_map()."""

    def test_locked_doorway_blocks_without_use_doorways(self):
        gs = _make_corridor()
        assert weight_map(gs)[1][2] is None
        assert not search_to_goal(gs, (1, 0)).success

    def test_locked_doorway_costs_double_with_use_doorways(self):
        gs = _make_corridor()
        assert weight_map(gs, use_doorways=True)[1][2] == 10
        assert search_to_goal(gs, (1, 0), use_doorways=True).cost == 13

    def test_occupied_surcharge(self):
        gs = _make_corridor()
        gs.grid[1][2] = TileType.OPENED_DOORWAY
        gs.agents["a"].position = (1, 3)
        assert weight_map(gs, occupied_surcharge=4)[1][3] == 5

    def test_hypothetical_obstacles(self):
        gs = _make_corridor()
        assert weight_map(gs, use_doorways=True, obstacles=[(1, 3)])[1][3] is None


class TestReachability:
    """Tests for can_all_agents_reach_goal()."""

    def test_reachable_through_doorway(self):
        assert can_all_agents_reach_goal(_make_corridor())

    def test_obstacle_on_bridge_softlocks(self):
        assert not can_all_agents_reach_goal(_make_corridor(), [(1, 3)])

    def test_finished_agents_ignored(self):
        gs = _make_corridor()
        gs.agents["a"].finished = True
        assert can_all_agents_reach_goal(gs, [(1, 3)])


class TestSearchHelpers:
    """Tests for num_steps_between() / map_fairness()."""

    def test_num_steps_counts_tiles_entered(self):
        gs = _make_corridor()
        assert num_steps_between(gs, (1, 0), (1, 4)) == 4
        assert search(gs, (1, 4), (1, 4)).steps == []

    def test_fairness_single_agent_is_one(self):
        gs = _make_corridor()
        gs.grid[1][2] = TileType.OPENED_DOORWAY
        fairness = map_fairness(gs)
        assert fairness.min == fairness.max
        assert fairness.fairness == 1.0
