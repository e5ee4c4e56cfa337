"""Tile grid semantics, coordinate addressing, and geometry helpers."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from models.actions import DIRECTION_OFFSETS
from models.game_state import Location, TileType

if TYPE_CHECKING:
    from models.game_state import GameState

WALKABLE_TILES = frozenset({
    TileType.EMPTY,
    TileType.OPENED_DOORWAY,
    TileType.CHEST,
    TileType.HIDDEN_HAZARD,
    TileType.HAZARD,
    TileType.COLLECTIBLE,
})

CARDINAL_OFFSETS: list[tuple[int, int]] = [(-1, 0), (1, 0), (0, -1), (0, 1)]
SURROUNDING_OFFSETS: list[tuple[int, int]] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
]

_LOCATION_PATTERN = re.compile(r"^([a-zA-Z]+)([0-9]+)$")


def create_grid(rows: int, columns: int, fill: TileType = TileType.EMPTY) -> list[list[TileType]]:
    """Create a rows x columns grid filled with a single tile type.

    Args:
        rows: Number of rows.
        columns: Number of columns.
        fill: Tile type for every cell.

    Returns:
        2D list indexed as grid[row][column].
    """
    return [[fill for _ in range(columns)] for _ in range(rows)]


# ---------------------------------------------------------------------------
# Location strings ("A12" = row 0, column 11)
# ---------------------------------------------------------------------------


def to_letter_id(n: int) -> str:
    """Convert a 0-based index to a spreadsheet-style letter id (0 -> A, 26 -> AA)."""
    letters = ""
    n += 1
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def from_letter_id(letters: str) -> int:
    """Inverse of to_letter_id()."""
    n = 0
    for ch in letters.upper():
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n - 1


def location_to_string(location: Location) -> str:
    r, c = location
    return f"{to_letter_id(r)}{c + 1}"


def parse_location(text: str | None) -> Location | None:
    """Parse a location string like "b12" into (row, column).

    Returns:
        The location, or None if the text isn't a location string. Bounds
        are not checked here.
    """
    if not text:
        return None
    match = _LOCATION_PATTERN.match(text.strip())
    if not match:
        return None
    return (from_letter_id(match.group(1)), int(match.group(2)) - 1)


# ---------------------------------------------------------------------------
# Tile queries
# ---------------------------------------------------------------------------


def in_bounds(game_state: GameState, location: Location) -> bool:
    r, c = location
    return 0 <= r < game_state.rows and 0 <= c < game_state.columns


def tile_at(game_state: GameState, location: Location) -> TileType:
    """Return the tile at a location, or INVALID when out of bounds."""
    if not in_bounds(game_state, location):
        return TileType.INVALID
    r, c = location
    return game_state.grid[r][c]


def set_tile(game_state: GameState, location: Location, tile: TileType) -> None:
    r, c = location
    game_state.grid[r][c] = tile


def is_tile(game_state: GameState, location: Location, tile: TileType) -> bool:
    return tile_at(game_state, location) == tile


def is_walkable_tile(tile: TileType) -> bool:
    return tile in WALKABLE_TILES


def is_walkable(game_state: GameState, location: Location) -> bool:
    """True if the location is in bounds and its tile can be stepped on.

    Walls, locked doorways and obstacles block movement.
    """
    return is_walkable_tile(tile_at(game_state, location))


def is_goal(game_state: GameState, location: Location) -> bool:
    return tuple(location) == tuple(game_state.goal)


def is_hazard(game_state: GameState, location: Location) -> bool:
    return tile_at(game_state, location) in (TileType.HAZARD, TileType.HIDDEN_HAZARD)


def is_placeable(game_state: GameState, location: Location) -> bool:
    """Traps, obstacles and collectibles go on empty tiles, hidden hazards, or collectibles."""
    return tile_at(game_state, location) in (
        TileType.EMPTY,
        TileType.HIDDEN_HAZARD,
        TileType.COLLECTIBLE,
    )


def is_sealable(game_state: GameState, location: Location) -> bool:
    return tile_at(game_state, location) in (TileType.DOORWAY, TileType.OPENED_DOORWAY)


def is_doorway(game_state: GameState, location: Location) -> bool:
    """True for locked, unlocked, or sealed doorways (anything with a recorded cost)."""
    return in_bounds(game_state, location) and location_to_string(location) in game_state.doorway_costs


def get_doorway_cost(game_state: GameState, location: Location) -> int | None:
    return game_state.doorway_costs.get(location_to_string(location))


def all_locations(game_state: GameState) -> list[Location]:
    return [(r, c) for r in range(game_state.rows) for c in range(game_state.columns)]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def offset_location(location: Location, offset: tuple[int, int]) -> Location:
    return (location[0] + offset[0], location[1] + offset[1])


def adjacent_locations(game_state: GameState, location: Location) -> list[Location]:
    """All in-bounds locations in the four-directional neighborhood."""
    result = []
    for offset in CARDINAL_OFFSETS:
        neighbor = offset_location(location, offset)
        if in_bounds(game_state, neighbor):
            result.append(neighbor)
    return result


def adjacent_or_override(
    game_state: GameState,
    location: Location,
    override: Location | None,
) -> list[Location]:
    """Just the override location if given, else every adjacent location."""
    if override is not None:
        return [override]
    return adjacent_locations(game_state, location)


def is_adjacent(a: Location, b: Location) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def is_next_to_doorway(game_state: GameState, location: Location) -> bool:
    return any(is_doorway(game_state, loc) for loc in adjacent_locations(game_state, location))


def normalized_offset(start: Location, end: Location) -> tuple[int, int]:
    """Unit offset from start toward end along a shared row or column.

    Raises:
        ValueError: If the locations don't share exactly one axis.
    """
    if start[0] != end[0] and start[1] == end[1]:
        return (1, 0) if start[0] < end[0] else (-1, 0)
    if start[0] == end[0] and start[1] != end[1]:
        return (0, 1) if start[1] < end[1] else (0, -1)
    raise ValueError(f"{start} and {end} are not in the same row or column")


def direction_of_offset(offset: tuple[int, int]) -> str:
    for direction, other in DIRECTION_OFFSETS.items():
        if tuple(offset) == other:
            return direction
    raise ValueError(f"Offset {offset} is not a cardinal direction")


def direction_to(start: Location, end: Location) -> str:
    if start[0] > end[0]:
        return "up"
    if start[0] < end[0]:
        return "down"
    if start[1] < end[1]:
        return "right"
    if start[1] > end[1]:
        return "left"
    raise ValueError(f"No cardinal direction from {start} to itself")


def orthogonal_locations(location: Location, offset: tuple[int, int]) -> list[Location]:
    """The two locations beside `location`, perpendicular to `offset`."""
    dr, dc = offset
    return [
        (location[0] + dc, location[1] - dr),
        (location[0] - dc, location[1] + dr),
    ]


def locations_between(game_state: GameState, start: Location, end: Location) -> list[Location]:
    """Locations stepped through going straight from start to end, excluding start.

    Raises:
        ValueError: If the locations aren't aligned or either is out of bounds.
    """
    if not in_bounds(game_state, start) or not in_bounds(game_state, end):
        raise ValueError(f"Cannot walk from {start} to {end}, out of bounds")
    offset = normalized_offset(start, end)
    result = []
    current = tuple(start)
    while current != tuple(end):
        current = offset_location(current, offset)
        result.append(current)
    return result


def next_location(location: Location, action) -> Location:
    """Where an agent would stand after an action, ignoring collisions."""
    if action.kind in DIRECTION_OFFSETS:
        return offset_location(location, DIRECTION_OFFSETS[action.kind])
    if action.kind == "charge":
        return tuple(action.target)
    return tuple(location)


def sequence_of_locations(start: Location, actions: list) -> list[Location]:
    """Project the path a queued decision would trace, for decision previews."""
    result = [tuple(start)]
    previous = tuple(start)
    for action in actions:
        location = next_location(previous, action)
        if location != previous:
            result.append(location)
        previous = location
    return result
