"""Rankings, season progress, and spawn-point searches."""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING

from engine.agents import agents_at, get_points, is_occupied, unfinished_agent_ids
from engine.dice import shuffled
from engine.grid import (
    SURROUNDING_OFFSETS,
    adjacent_locations,
    all_locations,
    is_goal,
    is_hazard,
    is_tile,
    is_walkable,
    offset_location,
)
from engine.pathfinding import approximate_cost_to_goal, cost_to_goal_for_agent
from models.game_state import Location, TileType

if TYPE_CHECKING:
    from models.game_state import GameState


def refresh_ranks(game_state: GameState) -> None:
    """Recompute every agent's rank.

    Finished agents rank by finish order. Everyone else ranks below them by
    ascending cost to the goal, ties broken by descending points.
    """
    rank = 0
    for agent_id in game_state.finishers:
        if agent_id in game_state.agents:
            rank += 1
            game_state.agents[agent_id].rank = rank
    remaining = unfinished_agent_ids(game_state)
    costs = {agent_id: cost_to_goal_for_agent(game_state, agent_id) for agent_id in remaining}
    remaining.sort(key=lambda agent_id: (costs[agent_id], -get_points(game_state, agent_id)))
    for agent_id in remaining:
        rank += 1
        game_state.agents[agent_id].rank = rank


def ordered_agent_ids(game_state: GameState) -> list[str]:
    return sorted(game_state.agents, key=lambda agent_id: game_state.agents[agent_id].rank)


def ordered_unfinished_agent_ids(game_state: GameState) -> list[str]:
    return [agent_id for agent_id in ordered_agent_ids(game_state) if not game_state.agents[agent_id].finished]


def top_unfinished_agent_id(game_state: GameState) -> str | None:
    ordered = ordered_unfinished_agent_ids(game_state)
    return ordered[0] if ordered else None


def unfinished_agents_closest_to_goal(game_state: GameState) -> list[str]:
    """Unfinished agents ordered by cost to the goal, best first."""
    remaining = unfinished_agent_ids(game_state)
    costs = {agent_id: cost_to_goal_for_agent(game_state, agent_id) for agent_id in remaining}
    return sorted(remaining, key=lambda agent_id: costs[agent_id])


def needs_handicap(game_state: GameState, agent_id: str) -> bool:
    """True for agents in the bottom half of the ranks with few points."""
    agent = game_state.agents.get(agent_id)
    if agent is None:
        return False
    return (
        agent.rank > len(game_state.agents) // 2
        and agent.points < game_state.rules.handicap_points_threshold
    )


def is_season_complete(game_state: GameState) -> bool:
    return len(game_state.finishers) >= game_state.rules.max_finishers


def season_completion(game_state: GameState) -> float:
    """Fraction of the spawn-to-goal distance the leading agent has covered."""
    if is_season_complete(game_state):
        return 1.0
    leader = top_unfinished_agent_id(game_state)
    if leader is None:
        return 0.0
    spawn_cost = approximate_cost_to_goal(game_state, (0, 0))
    leader_cost = cost_to_goal_for_agent(game_state, leader)
    if not spawn_cost or math.isinf(spawn_cost) or math.isinf(leader_cost):
        return 0.0
    return 1 - leader_cost / spawn_cost


# ---------------------------------------------------------------------------
# Spawn and displacement searches
# ---------------------------------------------------------------------------


def is_shovable(game_state: GameState, location: Location) -> bool:
    """True if an agent could be pushed onto this location."""
    return is_walkable(game_state, location) and not is_occupied(game_state, location)


def spawnable_location_around_agent(
    game_state: GameState,
    agent_id: str,
    rng: random.Random | None = None,
) -> Location | None:
    """A random vacant, walkable, non-goal tile in the 3x3 box around an agent."""
    agent = game_state.agents[agent_id]
    if agent.finished:
        return None
    for offset in shuffled(SURROUNDING_OFFSETS, rng):
        location = offset_location(agent.position, offset)
        if (
            is_walkable(game_state, location)
            and not is_occupied(game_state, location)
            and not is_goal(game_state, location)
        ):
            return location
    return None


def spawnable_location_around_agents(
    game_state: GameState,
    agent_ids: list[str],
    rng: random.Random | None = None,
) -> tuple[Location, str] | None:
    """Try agents in random order; return (location, agent_id) for the first hit."""
    for agent_id in shuffled(agent_ids, rng):
        location = spawnable_location_around_agent(game_state, agent_id, rng)
        if location is not None:
            return location, agent_id
    return None


def best_vacant_adjacent_location(game_state: GameState, location: Location) -> Location | None:
    """The adjacent vacant, walkable, hazard-free tile closest to the goal."""
    best = None
    lowest = math.inf
    for neighbor in adjacent_locations(game_state, location):
        if is_shovable(game_state, neighbor) and not is_hazard(game_state, neighbor):
            cost = approximate_cost_to_goal(game_state, neighbor)
            if cost < lowest:
                best = neighbor
                lowest = cost
    return best


def random_vacant_locations_behind(
    game_state: GameState,
    agent_id: str,
    n: int,
    rng: random.Random | None = None,
) -> list[Location]:
    """Up to n random empty tiles less than 75% of the way to an agent's progress."""
    vacant = [
        location for location in all_locations(game_state)
        if is_tile(game_state, location, TileType.EMPTY) and not agents_at(game_state, location)
    ]
    vacant = shuffled(vacant, rng)
    total_cost = approximate_cost_to_goal(game_state, (0, 0))
    agent_cost = cost_to_goal_for_agent(game_state, agent_id)
    if math.isinf(total_cost) or math.isinf(agent_cost):
        return []
    threshold = math.floor((total_cost - agent_cost) * 0.75)

    results = []
    while vacant and len(results) < n:
        location = vacant.pop()
        progress = total_cost - approximate_cost_to_goal(game_state, location)
        if progress < threshold:
            results.append(location)
    return results
