"""Weighted-grid A* search and the cost queries built on it."""

from __future__ import annotations

import heapq
import math
import random
from typing import TYPE_CHECKING

from pydantic import BaseModel

from engine.agents import get_agent, is_occupied, unfinished_agent_ids
from engine.grid import (
    CARDINAL_OFFSETS,
    direction_of_offset,
    is_walkable_tile,
    location_to_string,
)
from models.game_state import Location, TileType

if TYPE_CHECKING:
    from models.game_state import GameState

WeightMap = list[list[int | None]]  # None = impassable


class PathResult(BaseModel):
    """Outcome of a shortest-path search."""
    success: bool
    cost: float                     # math.inf when unreachable
    steps: list[tuple[int, int]]    # Locations entered, excluding the start
    semantic_steps: list[str]       # "up"/"down"/"left"/"right" per step


class MapFairness(BaseModel):
    """How evenly a generated map treats the starting agents."""
    min: float
    max: float
    naive: float                    # Cost from the top-centre, ignoring doorways
    fairness: float                 # min / max
    description: str


def weight_map(
    game_state: GameState,
    use_doorways: bool = False,
    occupied_surcharge: int = 0,
    obstacles: list[Location] | None = None,
) -> WeightMap:
    """Derive per-tile step costs from the grid.

    Args:
        game_state: The game.
        use_doorways: Treat locked doorways as passable at twice their cost.
        occupied_surcharge: Extra cost for tiles with an agent on them.
        obstacles: Locations to treat as impassable, for hypothetical checks.

    Returns:
        weights[row][column], None where the tile cannot be entered.
    """
    blocked = {tuple(loc) for loc in obstacles or []}
    weights: WeightMap = []
    for r, row in enumerate(game_state.grid):
        weight_row: list[int | None] = []
        for c, tile in enumerate(row):
            if (r, c) in blocked:
                weight_row.append(None)
                continue
            if use_doorways and tile == TileType.DOORWAY:
                cost = game_state.doorway_costs.get(location_to_string((r, c)))
                if cost is not None:
                    weight_row.append(cost * 2)
                    continue
            if is_walkable_tile(tile):
                if occupied_surcharge and is_occupied(game_state, (r, c)):
                    weight_row.append(1 + occupied_surcharge)
                else:
                    weight_row.append(1)
                continue
            weight_row.append(None)
        weights.append(weight_row)
    return weights


def manhattan(a: Location, b: Location) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def astar(
    weights: WeightMap,
    start: Location,
    goal: Location,
    rng: random.Random | None = None,
) -> PathResult:
    """A* over a weight map with a Manhattan heuristic.

    The start tile's own weight is ignored, so searches may begin on an
    impassable tile. Passing an rng randomizes tie-breaking between equally
    good frontier nodes; without one the search is deterministic.
    """
    start = tuple(start)
    goal = tuple(goal)
    rows = len(weights)
    columns = len(weights[0]) if weights else 0

    def passable(node: Location) -> bool:
        r, c = node
        return 0 <= r < rows and 0 <= c < columns and weights[r][c] is not None

    if not passable(goal) and start != goal:
        return PathResult(success=False, cost=math.inf, steps=[], semantic_steps=[])

    counter = 0
    open_heap: list[tuple[float, float, int, Location]] = [
        (manhattan(start, goal), 0.0, counter, start)
    ]
    parent: dict[Location, Location] = {}
    g_score: dict[Location, float] = {start: 0}
    closed: set[Location] = set()

    while open_heap:
        _, _, _, node = heapq.heappop(open_heap)
        if node in closed:
            continue
        if node == goal:
            steps = []
            while node != start:
                steps.append(node)
                node = parent[node]
            steps.reverse()
            semantic = []
            previous = start
            for step in steps:
                semantic.append(direction_of_offset((step[0] - previous[0], step[1] - previous[1])))
                previous = step
            return PathResult(success=True, cost=g_score[goal], steps=steps, semantic_steps=semantic)
        closed.add(node)
        for dr, dc in CARDINAL_OFFSETS:
            neighbor = (node[0] + dr, node[1] + dc)
            if neighbor in closed or not passable(neighbor):
                continue
            tentative = g_score[node] + weights[neighbor[0]][neighbor[1]]
            if tentative >= g_score.get(neighbor, math.inf):
                continue
            g_score[neighbor] = tentative
            parent[neighbor] = node
            counter += 1
            tiebreak = rng.random() if rng else 0.0
            heapq.heappush(open_heap, (tentative + manhattan(neighbor, goal), tiebreak, counter, neighbor))

    return PathResult(success=False, cost=math.inf, steps=[], semantic_steps=[])


def search(
    game_state: GameState,
    start: Location,
    goal: Location,
    use_doorways: bool = False,
    occupied_surcharge: int = 0,
    obstacles: list[Location] | None = None,
    rng: random.Random | None = None,
) -> PathResult:
    weights = weight_map(game_state, use_doorways, occupied_surcharge, obstacles)
    return astar(weights, start, goal, rng)


def search_to_goal(game_state: GameState, start: Location, **options) -> PathResult:
    return search(game_state, start, game_state.goal, **options)


def approximate_cost_to_goal(game_state: GameState, location: Location) -> float:
    """Doorway-aware cost to the goal, lightly penalizing occupied tiles."""
    return search_to_goal(
        game_state,
        location,
        use_doorways=True,
        occupied_surcharge=game_state.rules.ranking_occupied_surcharge,
    ).cost


def cost_to_goal_for_agent(game_state: GameState, agent_id: str) -> float:
    agent = get_agent(game_state, agent_id)
    return approximate_cost_to_goal(game_state, agent.position)


def num_steps_between(game_state: GameState, start: Location, end: Location) -> int:
    return len(search(game_state, start, end, use_doorways=True).steps)


def can_all_agents_reach_goal(game_state: GameState, obstacles: list[Location] | None = None) -> bool:
    """Softlock check: would every unfinished agent still have a path to the goal?

    Args:
        game_state: The game.
        obstacles: Hypothetical new impassable tiles.
    """
    weights = weight_map(game_state, use_doorways=True, obstacles=obstacles)
    for agent_id in unfinished_agent_ids(game_state):
        agent = game_state.agents[agent_id]
        if not astar(weights, agent.position, game_state.goal).success:
            return False
    return True


def map_fairness(game_state: GameState) -> MapFairness:
    """Compare the best and worst agent costs to the goal."""
    costs = [cost_to_goal_for_agent(game_state, agent_id) for agent_id in game_state.agents]
    low = min(costs) if costs else 0
    high = max(costs) if costs else 0
    naive = search_to_goal(game_state, (0, game_state.columns // 2)).cost
    fairness = low / high if high and not math.isinf(high) else 0.0
    return MapFairness(
        min=low,
        max=high,
        naive=naive,
        fairness=fairness,
        description=f"[{low}, {high}] = {100 * fairness:.1f}% [naive {naive}]",
    )
