"""Agent state accessors: occupancy, points, inventory, and stuns."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from models.agents import AgentState, ItemType
from models.game_state import Location

if TYPE_CHECKING:
    from models.game_state import GameState

logger = logging.getLogger(__name__)


def get_agent(game_state: GameState, agent_id: str) -> AgentState:
    """Look up an agent by id.

    Raises:
        ValueError: If the agent is not in the game.
    """
    agent = game_state.agents.get(agent_id)
    if agent is None:
        raise ValueError(f"Agent {agent_id} is not in the game")
    return agent


def display_name(game_state: GameState, agent_id: str) -> str:
    agent = game_state.agents.get(agent_id)
    return agent.name if agent else agent_id or "Unknown Agent"


def display_names(game_state: GameState, agent_ids: list[str]) -> list[str]:
    return [display_name(game_state, agent_id) for agent_id in agent_ids]


def unfinished_agent_ids(game_state: GameState) -> list[str]:
    return [agent_id for agent_id, agent in game_state.agents.items() if not agent.finished]


def other_agent_ids(game_state: GameState, agent_id: str) -> list[str]:
    return [other for other in game_state.agents if other != agent_id]


# ---------------------------------------------------------------------------
# Occupancy (finished agents have effectively left the board)
# ---------------------------------------------------------------------------


def agents_at(game_state: GameState, location: Location) -> list[str]:
    """Ids of unfinished agents standing on a location."""
    target = tuple(location)
    return [
        agent_id for agent_id, agent in game_state.agents.items()
        if not agent.finished and tuple(agent.position) == target
    ]


def is_occupied(game_state: GameState, location: Location) -> bool:
    return len(agents_at(game_state, location)) > 0


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


def get_points(game_state: GameState, agent_id: str) -> float:
    agent = game_state.agents.get(agent_id)
    return agent.points if agent else 0


def get_multiplier(game_state: GameState, agent_id: str) -> int:
    agent = game_state.agents.get(agent_id)
    if agent is None or agent.multiplier is None:
        return 1
    return agent.multiplier


def add_points(game_state: GameState, agent_id: str, points: float) -> None:
    """Add (or deduct) points, applying the agent's multiplier to gains only.

    A NaN amount is a caller bug; it is logged and treated as a zero award.
    """
    if points is None or math.isnan(points):
        logger.warning(
            "Tried to award %s points to %s, ignoring",
            points, display_name(game_state, agent_id),
        )
        return
    agent = get_agent(game_state, agent_id)
    multiplier = get_multiplier(game_state, agent_id) if points > 0 else 1
    agent.points = round(agent.points + points * multiplier, game_state.rules.points_precision)


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


def get_item_count(game_state: GameState, agent_id: str, item: ItemType) -> int:
    agent = game_state.agents.get(agent_id)
    if agent is None:
        return 0
    return agent.items.get(ItemType(item), 0)


def has_any_item(game_state: GameState, agent_id: str) -> bool:
    return any(get_item_count(game_state, agent_id, item) > 0 for item in ItemType)


def add_item(game_state: GameState, agent_id: str, item: ItemType, count: int = 1) -> None:
    agent = get_agent(game_state, agent_id)
    item = ItemType(item)
    agent.items[item] = agent.items.get(item, 0) + count


def consume_item(game_state: GameState, agent_id: str, item: ItemType) -> None:
    """Remove one of an item; a no-op if the agent has none."""
    agent = get_agent(game_state, agent_id)
    item = ItemType(item)
    remaining = agent.items.get(item, 0) - 1
    if remaining > 0:
        agent.items[item] = remaining
    else:
        agent.items.pop(item, None)


# ---------------------------------------------------------------------------
# Stuns
# ---------------------------------------------------------------------------


def consume_stun(game_state: GameState, agent_id: str) -> None:
    agent = game_state.agents.get(agent_id)
    if agent is not None and agent.stuns > 0:
        agent.stuns -= 1
