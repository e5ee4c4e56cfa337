"""Engine facade for external drivers, plus game persistence."""

from __future__ import annotations

import json
import os
import random
from pathlib import Path
from typing import Protocol

from engine import agents, lifecycle, resolution, rules
from engine.generation import create_best_game
from engine.pathfinding import MapFairness, map_fairness
from models.actions import DecisionResult, TickResult, TurnSummary
from models.game_state import GameState, GameVariant, PrizeType


class MinigameEngine(Protocol):
    """Operations a driver (chat bot, HTTP API, test) may call on a game."""

    state: GameState

    def begin_turn(self) -> None: ...
    def submit_decision(self, agent_id: str, text: str) -> DecisionResult: ...
    def process_tick(self) -> TickResult: ...
    def process_decisions(self) -> TickResult: ...
    def end_turn(self) -> TurnSummary: ...
    def add_agent(self, agent_id: str, name: str) -> str: ...
    def remove_agent(self, agent_id: str) -> None: ...
    def award_prize(self, agent_id: str, prize_type: PrizeType, intro: str) -> list[str]: ...
    def handle_message(self, agent_id: str, text: str) -> list[str]: ...
    def add_points(self, agent_id: str, points: float) -> None: ...
    def get_points(self, agent_id: str) -> float: ...
    def reminders(self) -> dict[str, str]: ...
    def help_text(self) -> str: ...
    def instructions_text(self) -> str: ...
    def debug_text(self) -> str: ...


class MazeEngine:
    """Turn engine shared by the maze and dungeon variants.

    The variants differ only in how their maps are generated and where late
    joiners spawn, both of which are decided from state.variant.
    """

    def __init__(self, state: GameState, rng: random.Random | None = None):
        self.state = state
        self.rng = rng or random.Random()

    def begin_turn(self) -> None:
        lifecycle.begin_turn(self.state, self.rng)

    def submit_decision(self, agent_id: str, text: str) -> DecisionResult:
        return rules.submit_decision(self.state, agent_id, text)

    def process_tick(self) -> TickResult:
        return resolution.process_tick(self.state, self.rng)

    def process_decisions(self) -> TickResult:
        return resolution.process_decisions(self.state, self.rng)

    def end_turn(self) -> TurnSummary:
        return lifecycle.end_turn(self.state)

    def add_agent(self, agent_id: str, name: str) -> str:
        return lifecycle.add_agent(self.state, agent_id, name, self.rng)

    def remove_agent(self, agent_id: str) -> None:
        lifecycle.remove_agent(self.state, agent_id)

    def award_prize(self, agent_id: str, prize_type: PrizeType, intro: str) -> list[str]:
        return lifecycle.award_prize(self.state, agent_id, prize_type, intro, self.rng)

    def handle_message(self, agent_id: str, text: str) -> list[str]:
        return lifecycle.handle_message(self.state, agent_id, text)

    def add_points(self, agent_id: str, points: float) -> None:
        agents.add_points(self.state, agent_id, points)

    def get_points(self, agent_id: str) -> float:
        return agents.get_points(self.state, agent_id)

    def reminders(self) -> dict[str, str]:
        return lifecycle.reminders(self.state)

    def help_text(self) -> str:
        return lifecycle.help_text(self.state)

    def instructions_text(self) -> str:
        return lifecycle.instructions_text(self.state)

    def debug_text(self) -> str:
        return lifecycle.debug_text(self.state)

    def fairness(self) -> MapFairness:
        return map_fairness(self.state)


_ENGINES: dict[GameVariant, type[MazeEngine]] = {
    GameVariant.MAZE: MazeEngine,
    GameVariant.DUNGEON: MazeEngine,
}


def create_engine(state: GameState, rng: random.Random | None = None) -> MinigameEngine:
    """Wrap a game state in the engine for its variant."""
    return _ENGINES[GameVariant(state.variant)](state, rng)


def new_engine(
    agent_list: list[tuple[str, str]],
    variant: GameVariant = GameVariant.MAZE,
    rng: random.Random | None = None,
    **options,
) -> MinigameEngine:
    """Generate the fairest of several maps and wrap it in an engine."""
    rng = rng or random.Random()
    return create_engine(create_best_game(agent_list, variant, rng, **options), rng)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def save_game(game_state: GameState, path: str) -> None:
    """Persist game state to a JSON file.

    Writes to a temporary file first, then renames for atomicity.

    Args:
        game_state: The game state to save.
        path: File path to write to.
    """
    tmp_path = path + ".tmp"
    data = game_state.model_dump(mode="json")
    with open(tmp_path, "w") as f:
        json.dump(data, f)
    os.replace(tmp_path, path)


def load_game(path: str) -> GameState | None:
    """Load game state from a JSON file.

    Returns:
        The loaded GameState, or None if the file doesn't exist.
    """
    if not Path(path).exists():
        return None
    with open(path) as f:
        data = json.load(f)
    return GameState.model_validate(data)
