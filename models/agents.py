"""Agent (player) state and inventory models."""

from enum import Enum

from pydantic import BaseModel


class ItemType(str, Enum):
    """Inventory items that unlock special actions."""
    TRAP = "trap"
    OBSTACLE = "obstacle"
    SEAL = "seal"
    KEY = "key"
    STAR = "star"
    CHARGE = "charge"


class AgentState(BaseModel):
    """A participant in the labyrinth."""
    id: str
    name: str
    position: tuple[int, int]       # (row, column)
    points: float = 0
    rank: int = 0
    finished: bool = False
    stuns: int = 0                  # Ticks remaining incapacitated
    invincible: bool = False
    warped: bool = False            # Warped during the current turn
    origin: tuple[int, int] | None = None  # Snapshot at the top of the turn
    multiplier: int | None = None   # Active point multiplier, if any
    items: dict[ItemType, int] = {}
    item_offers: list[ItemType] | None = None

    @property
    def stunned(self) -> bool:
        return self.stuns > 0
