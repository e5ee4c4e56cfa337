"""Game state, tile grid, and event models for the Labyrinth server."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

import config
from models.actions import Action
from models.agents import AgentState

Location = tuple[int, int]  # (row, column)


class TileType(int, Enum):
    """Contents of a single grid tile."""
    INVALID = -1                    # Returned for out-of-bounds lookups
    EMPTY = 0
    WALL = 1
    DOORWAY = 2                     # Locked
    OPENED_DOORWAY = 3
    CHEST = 4
    HIDDEN_HAZARD = 5
    HAZARD = 6                      # Revealed
    OBSTACLE = 7                    # Player-placed, immovable
    COLLECTIBLE = 8


class GameVariant(str, Enum):
    """Map layouts sharing the same turn-resolution engine."""
    MAZE = "maze"                   # Tall organic maze, goal at the bottom
    DUNGEON = "dungeon"             # Square radial maze, goal in the centre


class PrizeType(str, Enum):
    """Outcomes reported by the external season-scoring logic."""
    SUBMISSIONS_1 = "submissions1"
    SUBMISSIONS_1_TIED = "submissions1-tied"
    SUBMISSIONS_2 = "submissions2"
    SUBMISSIONS_2_TIED = "submissions2-tied"
    SUBMISSIONS_3 = "submissions3"
    SUBMISSIONS_3_TIED = "submissions3-tied"
    STREAK = "streak"
    NIGHTMARE = "nightmare"


class RenderStyle(str, Enum):
    """Styles the external renderer knows how to draw."""
    PLAIN = "plain"
    WARP = "warp"
    RED = "red"
    RAINBOW = "rainbow"


class RenderLine(BaseModel):
    """A movement trail segment drawn on the board snapshot."""
    start: Location
    end: Location
    style: RenderStyle = RenderStyle.PLAIN
    over: bool = False              # Drawn above agent avatars


class RuleSettings(BaseModel):
    """Balance constants, snapshotted into each game at creation."""
    starter_points: int = config.STARTER_POINTS
    max_pauses: int = config.MAX_PAUSES
    max_warps: int = config.MAX_WARPS
    warp_rich_multiplier: int = config.WARP_RICH_MULTIPLIER
    punch_cost: int = config.PUNCH_COST
    punch_success_chance: float = config.PUNCH_SUCCESS_CHANCE
    punch_stuns: int = config.PUNCH_STUNS
    trample_stuns: int = config.TRAMPLE_STUNS
    auto_punch_min_points: int = config.AUTO_PUNCH_MIN_POINTS
    auto_punch_stuns: int = config.AUTO_PUNCH_STUNS
    collectible_place_cost: int = config.COLLECTIBLE_PLACE_COST
    collectible_values: tuple[int, ...] = config.COLLECTIBLE_VALUES
    home_stretch_multiplier: int = config.HOME_STRETCH_MULTIPLIER
    handicap_points_threshold: int = config.HANDICAP_POINTS_THRESHOLD
    default_occupied_surcharge: int = config.DEFAULT_OCCUPIED_SURCHARGE
    ranking_occupied_surcharge: int = config.RANKING_OCCUPIED_SURCHARGE
    fast_tick_max_agents: int = config.FAST_TICK_MAX_AGENTS
    points_precision: int = config.POINTS_PRECISION
    collectible_spawn_min_completion: float = config.COLLECTIBLE_SPAWN_MIN_COMPLETION
    collectible_spawn_range: tuple[int, int] = config.COLLECTIBLE_SPAWN_RANGE
    max_finishers: int = config.MAX_FINISHERS


class GameEvent(BaseModel):
    """A logged summary of one resolution tick."""
    turn: int
    tick: int
    description: str
    timestamp: datetime


class GameState(BaseModel):
    """The full, serializable state of a game."""
    game_id: str
    name: str = "Labyrinth"
    variant: GameVariant = GameVariant.MAZE
    season: int = 1
    turn: int = 0
    tick: int = 0                   # Resolution ticks within the current turn
    rows: int
    columns: int
    grid: list[list[TileType]]      # 2D grid [row][column]
    goal: Location
    doorway_costs: dict[str, int] = {}    # location string -> unlock cost
    hazard_owners: dict[str, str] = {}    # location string -> agent_id
    agents: dict[str, AgentState] = {}    # agent_id -> AgentState
    decisions: dict[str, list[Action]] = {}  # agent_id -> pending queue
    finishers: list[str] = []       # Append-only, defines placement order
    home_stretch: bool = False
    lines: list[RenderLine] = []
    event_log: list[GameEvent] = []
    rules: RuleSettings = Field(default_factory=RuleSettings)
