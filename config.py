"""Server-wide configuration constants for the Labyrinth server."""

import os

DATA_DIR = os.environ.get("DATA_DIR", ".")  # Persistent data directory
SAVE_FILE = os.path.join(DATA_DIR, "game_state.json")
GAME_NAME = "Clouded Labyrinth"  # Name of the single persistent game
GAME_ID = "labyrinth"            # Fixed game ID
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
ADMIN_SECRET = os.environ.get("ADMIN_SECRET", "change-me-in-production")

# Map generation
DEFAULT_VARIANT = os.environ.get("GAME_VARIANT", "maze")
MAZE_ROWS = 33
MAZE_COLUMNS = 19
DUNGEON_SIZE = 41           # Square, odd so the goal sits in the exact centre
GENERATION_ATTEMPTS = 20    # Valid maps compared when picking the fairest
MIN_NAIVE_COST = 80         # Reject maps whose naive spawn-to-goal cost is lower

# Balance
STARTER_POINTS = 3
MAX_PAUSES = 3
MAX_WARPS = 3
WARP_RICH_MULTIPLIER = 4   # Too rich to warp above this many warp costs
PUNCH_COST = 2
PUNCH_SUCCESS_CHANCE = 0.75
PUNCH_STUNS = 3
TRAMPLE_STUNS = 3
AUTO_PUNCH_MIN_POINTS = 4   # Enough to punch and still walk past
AUTO_PUNCH_STUNS = 1
COLLECTIBLE_PLACE_COST = 4
COLLECTIBLE_VALUES = (1, 2, 2, 3, 3, 4)
HOME_STRETCH_MULTIPLIER = 2
HANDICAP_POINTS_THRESHOLD = 20
DEFAULT_OCCUPIED_SURCHARGE = 4  # Spreads out default paths
RANKING_OCCUPIED_SURCHARGE = 1
FAST_TICK_MAX_AGENTS = 3
POINTS_PRECISION = 2
COLLECTIBLE_SPAWN_MIN_COMPLETION = 0.25
COLLECTIBLE_SPAWN_RANGE = (15, 35)
MAX_FINISHERS = 3
