"""Server-chosen default actions for agents who don't submit a decision."""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING

from engine.agents import get_agent
from engine.pathfinding import search_to_goal
from models.actions import MoveAction

if TYPE_CHECKING:
    from models.actions import Action
    from models.game_state import GameState


# ---------------------------------------------------------------------------
# Default decisions, queued at the start of every turn
# ---------------------------------------------------------------------------


def default_decisions_toward_goal(
    game_state: GameState,
    agent_id: str,
    rng: random.Random | None = None,
) -> list[Action]:
    """The first floor(points) steps of the agent's shortest path to the goal.

    Occupied tiles are surcharged so that agents bunched together fan out
    instead of queueing through the same corridor. Locked doorways are
    impassable here, so the result never walks into one.

    Args:
        game_state: The game.
        agent_id: The agent to plan for.
        rng: Optional Random instance to break ties between equal paths.

    Returns:
        A possibly empty list of move actions.
    """
    agent = get_agent(game_state, agent_id)
    budget = math.floor(agent.points)
    if budget < 1 or agent.finished:
        return []
    result = search_to_goal(
        game_state,
        agent.position,
        occupied_surcharge=game_state.rules.default_occupied_surcharge,
        rng=rng,
    )
    if not result.success:
        return []
    return [MoveAction(kind=direction) for direction in result.semantic_steps[:budget]]
