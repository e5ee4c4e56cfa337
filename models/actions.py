"""Action tokens and the result models handed back to the driver."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    """Every action an agent can queue."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    PAUSE = "pause"
    UNLOCK = "unlock"
    LOCK = "lock"
    SEAL = "seal"                   # Item-gated
    KEY = "key"                     # Item-gated, free unlock
    PUNCH = "punch"
    WARP = "warp"
    STAR = "star"                   # Item-gated
    TRAP = "trap"                   # Item-gated placement
    OBSTACLE = "obstacle"           # Item-gated placement
    COLLECTIBLE = "collectible"     # Finished agents only
    CHARGE = "charge"               # Item-gated


DIRECTION_OFFSETS: dict[str, tuple[int, int]] = {
    "up": (-1, 0),
    "down": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}


class MoveAction(BaseModel):
    """A single step in one of the four directions."""
    kind: Literal["up", "down", "left", "right"]

    @property
    def offset(self) -> tuple[int, int]:
        return DIRECTION_OFFSETS[self.kind]


class DoorwayAction(BaseModel):
    """unlock/lock/seal/key, on one doorway or on every adjacent one."""
    kind: Literal["unlock", "lock", "seal", "key"]
    target: tuple[int, int] | None = None


class PlacementAction(BaseModel):
    """Place a trap, obstacle or collectible on a specific tile."""
    kind: Literal["trap", "obstacle", "collectible"]
    target: tuple[int, int]


class ChargeAction(BaseModel):
    """Rush in a straight line to the target tile in one action."""
    kind: Literal["charge"] = "charge"
    target: tuple[int, int]


class BasicAction(BaseModel):
    """Untargeted actions: pause, punch, warp and star."""
    kind: Literal["pause", "punch", "warp", "star"]


Action = Annotated[
    Union[MoveAction, DoorwayAction, PlacementAction, ChargeAction, BasicAction],
    Field(discriminator="kind"),
]


class DecisionResult(BaseModel):
    """The engine's response after validating a submitted decision."""
    success: bool
    agent_id: str
    description: str                # Human-readable confirmation or rejection
    actions: list[str] = []         # Normalized tokens that were queued
    new_location: str | None = None  # "???" when warping
    cost: float = 0
    warnings: list[str] = []
    error: str | None = None        # If the submission was rejected


class TickResult(BaseModel):
    """Outcome of one (or several fast-pathed) resolution ticks."""
    turn: int
    tick: int
    statements: list[str]
    summary: str
    continue_processing: bool
    continue_immediately: bool = False


class TurnSummary(BaseModel):
    """What the driver receives when a turn is closed."""
    turn: int
    summary: str
    standings: list[str]
