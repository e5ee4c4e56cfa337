"""Procedural map generation for both labyrinth variants."""

from __future__ import annotations

import logging
import math
import random

import config
from engine.dice import chance, shuffled
from engine.grid import CARDINAL_OFFSETS, create_grid, location_to_string
from engine.pathfinding import map_fairness, search_to_goal
from engine.standings import refresh_ranks
from models.agents import AgentState
from models.game_state import GameState, GameVariant, Location, RuleSettings, TileType

logger = logging.getLogger(__name__)

CORNER_OFFSETS = ((-1, -1), (1, 1), (-1, 1), (1, -1))
MAX_TRIES_PER_MAP = 1000

# (free neighbours, chance to skip carving into the tile)
ADJACENT_SKIP_CHANCES = {4: 0.95, 3: 0.95, 2: 0.75}
CORNER_SKIP_CHANCES = {4: 0.95, 3: 0.9, 2: 0.75, 1: 0.6}


# ---------------------------------------------------------------------------
# Organic maze (tall, goal at the bottom)
# ---------------------------------------------------------------------------


class _OrganicCarver:
    """Randomized depth-first carving that avoids wide-open areas."""

    def __init__(self, rows: int, columns: int, rng: random.Random):
        self.rows = rows
        self.columns = columns
        self.rng = rng
        self.grid = create_grid(rows, columns, TileType.WALL)

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.columns

    def is_open(self, r: int, c: int) -> bool:
        return self.in_bounds(r, c) and self.grid[r][c] == TileType.EMPTY

    def is_wall(self, r: int, c: int) -> bool:
        return not self.in_bounds(r, c) or self.grid[r][c] == TileType.WALL

    def is_landlocked(self, r: int, c: int) -> bool:
        return not any(self.is_open(r + dr, c + dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1))

    def free_adjacents(self, r: int, c: int) -> int:
        return sum(1 for dr, dc in CARDINAL_OFFSETS if self.is_open(r + dr, c + dc))

    def free_corners(self, r: int, c: int) -> int:
        return sum(1 for dr, dc in CORNER_OFFSETS if self.is_open(r + dr, c + dc))

    def is_critical_corner(self, r: int, c: int) -> bool:
        """Carving here would join two paths that only touch diagonally."""
        for dr, dc in CORNER_OFFSETS:
            if (
                self.is_open(r + dr, c + dc)
                and not self.is_open(r, c + dc)
                and not self.is_open(r + dr, c)
            ):
                return True
        return False

    def is_potential_doorway(self, r: int, c: int) -> bool:
        vertical = self.is_wall(r, c - 1) and self.is_wall(r, c + 1) and self.is_open(r - 1, c) and self.is_open(r + 1, c)
        horizontal = self.is_open(r, c - 1) and self.is_open(r, c + 1) and self.is_wall(r - 1, c) and self.is_wall(r + 1, c)
        return vertical or horizontal

    def is_2x2(self, r: int, c: int) -> bool:
        for dr, dc in CORNER_OFFSETS:
            if self.is_wall(r, c) and self.is_wall(r + dr, c) and self.is_wall(r, c + dc) and self.is_wall(r + dr, c + dc):
                return True
        return False

    def should_enter(self, r: int, c: int, offset: tuple[int, int]) -> bool:
        dr, dc = offset
        nr, nc = r + dr, c + dc
        if not self.in_bounds(nr, nc) or self.grid[nr][nc] == TileType.EMPTY:
            return False
        if self.is_critical_corner(nr, nc):
            return False
        skip = ADJACENT_SKIP_CHANCES.get(self.free_adjacents(nr, nc))
        if skip is not None and chance(skip, self.rng):
            return False
        skip = CORNER_SKIP_CHANCES.get(self.free_corners(nr, nc))
        if skip is not None and chance(skip, self.rng):
            return False
        # Usually avoid breaking into an existing path
        n2r, n2c = r + 2 * dr, c + 2 * dc
        return chance(0.5, self.rng) or not self.in_bounds(n2r, n2c) or self.grid[n2r][n2c] != TileType.EMPTY

    def carve_from(self, r: int, c: int) -> None:
        self.grid[r][c] = TileType.EMPTY
        stack = [(r, c, (0, 0), shuffled(list(CARDINAL_OFFSETS), self.rng))]
        while stack:
            r, c, previous, offsets = stack[-1]
            if not offsets:
                stack.pop()
                continue
            offset = offsets.pop(0)
            # Going straight is usually saved for last
            if offset == previous and chance(0.75, self.rng):
                offsets.append(offset)
                continue
            if self.should_enter(r, c, offset):
                nr, nc = r + offset[0], c + offset[1]
                self.grid[nr][nc] = TileType.EMPTY
                stack.append((nr, nc, offset, shuffled(list(CARDINAL_OFFSETS), self.rng)))

    def generate(self) -> list[list[TileType]]:
        self.carve_from(0, 0)
        for r in range(self.rows):
            for c in range(self.columns):
                if self.is_landlocked(r, c):
                    self.carve_from(r, c)
        for r in shuffled(list(range(self.rows)), self.rng):
            for c in shuffled(list(range(self.columns)), self.rng):
                if self.is_2x2(r, c) and not self.is_critical_corner(r, c):
                    self.grid[r][c] = TileType.EMPTY
        for r in range(self.rows):
            for c in range(self.columns):
                if chance(0.66, self.rng) and self.is_wall(r, c) and self.is_potential_doorway(r, c):
                    self.grid[r][c] = TileType.DOORWAY
        return self.grid


def generate_organic_maze(rows: int, columns: int, rng: random.Random | None = None) -> list[list[TileType]]:
    """Carve a tall organic maze of winding one-tile corridors with doorways."""
    return _OrganicCarver(rows, columns, rng or random.Random()).generate()


def initial_location_along_top(seq: int, columns: int, spawn_height: int) -> Location:
    """Spawn slot for the seq-th agent, fanning out from the top centre."""
    r = spawn_height - 1
    c = columns // 2 + (r % 2)
    dc = 0
    for _ in range(seq):
        dc = dc + 2 if dc > 0 else dc - 2
        c += dc
        dc *= -1
        if c < 0 or c >= columns:
            r -= 1
            c = columns // 2 + (r % 2)
            dc = 0
    return (max(r, 0), c)


def _try_create_maze(
    agents: list[tuple[str, str]],
    rows: int,
    columns: int,
    rng: random.Random,
) -> tuple[list[list[TileType]], dict[str, int], Location, list[Location]]:
    grid = generate_organic_maze(rows, columns, rng)

    spawn_height = max(1, math.ceil(len(agents) * 2 / columns))
    for r in range(min(spawn_height, rows)):
        for c in range(columns):
            grid[r][c] = TileType.EMPTY

    # Deeper doorways cost more
    doorway_costs = {}
    for r in range(rows):
        for c in range(columns):
            if grid[r][c] == TileType.DOORWAY:
                doorway_costs[location_to_string((r, c))] = rng.randint(1, r + 1)

    goal = (rows - 2, columns // 2)
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            grid[goal[0] + dr][goal[1] + dc] = TileType.EMPTY

    spawns = [initial_location_along_top(j, columns, spawn_height) for j in range(len(agents))]
    return grid, doorway_costs, goal, spawns


# ---------------------------------------------------------------------------
# Dungeon (square, goal in the centre)
# ---------------------------------------------------------------------------


def _dungeon_doorway_cost(distance: float, centre: int, rng: random.Random) -> int | None:
    """Inner rings get rarer, pricier doorways; the outer ring cheap, common ones."""
    if distance < centre * 0.35:
        if chance(0.3, rng):
            return max(rng.randint(1, 15), rng.randint(1, 15))
    elif distance < centre * 0.8:
        if chance(0.075, rng):
            return rng.randrange(1, 16, 2)
    elif chance(0.25, rng):
        return min(rng.randint(1, 15), rng.randint(1, 15))
    return None


def generate_dungeon(size: int, rng: random.Random | None = None) -> tuple[list[list[TileType]], dict[str, int]]:
    """Carve a radial dungeon on a two-tile lattice outwards from the centre.

    Args:
        size: Width and height. Must be 1 mod 4 so the lattice hits the centre and the edges.
        rng: Optional Random instance for seeded generation.

    Returns:
        (grid, doorway_costs)

    Raises:
        ValueError: If size is not 1 mod 4.
    """
    if size < 5 or size % 4 != 1:
        raise ValueError(f"Dungeon size must be 1 mod 4 and at least 5, got {size}")
    rng = rng or random.Random()
    grid = create_grid(size, size, TileType.WALL)
    doorway_costs: dict[str, int] = {}
    centre = size // 2
    edge = size - 1
    lattice_offsets = [(dr * 2, dc * 2) for dr, dc in CARDINAL_OFFSETS]

    def is_wall(r: int, c: int) -> bool:
        return not (0 <= r < size and 0 <= c < size) or grid[r][c] != TileType.EMPTY

    grid[centre][centre] = TileType.EMPTY
    stack = [(centre, centre, (0, 0), shuffled(lattice_offsets, rng))]
    while stack:
        r, c, previous, offsets = stack[-1]
        if not offsets:
            stack.pop()
            continue
        dr, dc = offsets.pop(0)
        if (dr, dc) == previous and chance(0.5, rng):
            offsets.append((dr, dc))
            continue
        nr, nc = r + dr, c + dc
        hr, hc = r + dr // 2, c + dc // 2
        if not (0 <= nr < size and 0 <= nc < size):
            continue
        if grid[nr][nc] == TileType.WALL:
            grid[hr][hc] = TileType.EMPTY
            grid[nr][nc] = TileType.EMPTY
            stack.append((nr, nc, (dr, dc), shuffled(lattice_offsets, rng)))
        elif grid[hr][hc] == TileType.WALL:
            # A wall between two carved cells
            distance = math.hypot(centre - hr, centre - hc)
            if r in (0, edge) or c in (0, edge):
                if chance(0.25, rng):
                    grid[hr][hc] = TileType.EMPTY
            elif distance < centre:
                if chance(0.02, rng):
                    grid[hr][hc] = TileType.EMPTY
                else:
                    cost = _dungeon_doorway_cost(distance, centre, rng)
                    if cost is not None:
                        grid[hr][hc] = TileType.DOORWAY
                        doorway_costs[location_to_string((hr, hc))] = cost

    for r in range(centre - 1, centre + 2):
        for c in range(centre - 1, centre + 2):
            if grid[r][c] == TileType.DOORWAY:
                doorway_costs.pop(location_to_string((r, c)), None)
            grid[r][c] = TileType.EMPTY

    # Isolated wall pillars just get in the way
    for r in range(size):
        for c in range(size):
            if (
                grid[r][c] == TileType.WALL
                and not is_wall(r + 1, c) and not is_wall(r - 1, c)
                and not is_wall(r, c + 1) and not is_wall(r, c - 1)
            ):
                grid[r][c] = TileType.EMPTY

    return grid, doorway_costs


def initial_location_radial(seq: int, rows: int, columns: int) -> Location:
    """Spawn slot for the seq-th agent, spread outwards from the four edge midpoints."""
    base_positions = [(0, columns // 2), (rows // 2, columns - 1), (rows - 1, columns // 2), (rows // 2, 0)]
    offsets = [(0, 4), (4, 0), (0, -4), (-4, 0)]
    side = seq % 4
    rank_on_side = seq // 4
    direction = 1 if rank_on_side % 2 == 0 else -1
    magnitude = (rank_on_side + 1) // 2
    r = base_positions[side][0] + offsets[side][0] * magnitude * direction
    c = base_positions[side][1] + offsets[side][1] * magnitude * direction
    return (min(max(r, 0), rows - 1), min(max(c, 0), columns - 1))


# ---------------------------------------------------------------------------
# Game creation
# ---------------------------------------------------------------------------


def _build_state(
    agents: list[tuple[str, str]],
    variant: GameVariant,
    grid: list[list[TileType]],
    doorway_costs: dict[str, int],
    goal: Location,
    spawns: list[Location],
    game_id: str,
    name: str,
    season: int,
) -> GameState:
    rules = RuleSettings()
    agent_states = {}
    for j, (agent_id, agent_name) in enumerate(agents):
        agent_states[agent_id] = AgentState(
            id=agent_id,
            name=agent_name,
            position=spawns[j],
            rank=j + 1,
            points=rules.starter_points,
        )
    game_state = GameState(
        game_id=game_id,
        name=name,
        variant=variant,
        season=season,
        rows=len(grid),
        columns=len(grid[0]),
        grid=grid,
        goal=goal,
        doorway_costs=doorway_costs,
        agents=agent_states,
        rules=rules,
    )
    refresh_ranks(game_state)
    return game_state


def _reachable_from_all(game_state: GameState, starts: list[Location], use_doorways: bool) -> bool:
    return all(
        search_to_goal(game_state, start, use_doorways=use_doorways).success
        for start in starts
    )


def create_game(
    agents: list[tuple[str, str]],
    variant: GameVariant = GameVariant.MAZE,
    rng: random.Random | None = None,
    rows: int | None = None,
    columns: int | None = None,
    game_id: str = config.GAME_ID,
    name: str = config.GAME_NAME,
    season: int = 1,
) -> GameState:
    """Generate a single playable map, regenerating until it is connected.

    Args:
        agents: (agent_id, display name) pairs in spawn order.
        variant: Which map layout to generate.
        rng: Optional Random instance for seeded generation.
        rows: Map height (maze) or size (dungeon). Defaults from config.
        columns: Map width (maze only). Defaults from config.

    Returns:
        A fresh GameState at turn 0.

    Raises:
        RuntimeError: If no connected map could be generated.
    """
    rng = rng or random.Random()
    variant = GameVariant(variant)

    for _ in range(MAX_TRIES_PER_MAP):
        if variant == GameVariant.DUNGEON:
            size = rows or config.DUNGEON_SIZE
            grid, doorway_costs = generate_dungeon(size, rng)
            goal = (size // 2, size // 2)
            spawns = [initial_location_radial(j, size, size) for j in range(len(agents))]
        else:
            maze_rows = rows or config.MAZE_ROWS
            maze_columns = columns or config.MAZE_COLUMNS
            grid, doorway_costs, goal, spawns = _try_create_maze(agents, maze_rows, maze_columns, rng)

        game_state = _build_state(agents, variant, grid, doorway_costs, goal, spawns, game_id, name, season)
        if variant == GameVariant.DUNGEON:
            valid = _reachable_from_all(game_state, spawns, use_doorways=True)
        else:
            corners = [(0, 0), (game_state.rows - 1, 0), (0, game_state.columns - 1)]
            valid = _reachable_from_all(game_state, corners, use_doorways=False)
        if valid:
            return game_state

    raise RuntimeError(f"Could not generate a connected {variant.value} map")


def create_best_game(
    agents: list[tuple[str, str]],
    variant: GameVariant = GameVariant.MAZE,
    rng: random.Random | None = None,
    attempts: int = config.GENERATION_ATTEMPTS,
    min_naive: float = config.MIN_NAIVE_COST,
    **options,
) -> GameState:
    """Generate several maps and keep the fairest one.

    Maps whose naive spawn-to-goal cost is below min_naive don't count as
    attempts. Among the rest, the map with the highest best-to-worst agent
    cost ratio wins.

    Raises:
        RuntimeError: If not a single map met the minimum naive cost.
    """
    rng = rng or random.Random()
    best: GameState | None = None
    best_fairness = -1.0
    valid_attempts = 0
    tries = 0
    while valid_attempts < attempts:
        tries += 1
        if tries > attempts * MAX_TRIES_PER_MAP:
            break
        candidate = create_game(agents, variant, rng, **options)
        fairness = map_fairness(candidate)
        if fairness.naive < min_naive:
            continue
        valid_attempts += 1
        logger.info("Attempt %d: %s", valid_attempts, fairness.description)
        if fairness.fairness > best_fairness:
            best_fairness = fairness.fairness
            best = candidate

    if best is None:
        raise RuntimeError(f"No generated map reached a naive cost of {min_naive}")
    return best
