"""Shared test setup.

main.py loads (or generates) the singleton game at import time. Point it at a
scratch data directory holding a small pre-generated map so importing the app
in API tests doesn't generate a full-size map.
"""

import os
import random
import tempfile

os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="labyrinth-tests-")

from engine.game import save_game  # noqa: E402
from engine.generation import create_game  # noqa: E402
from models.game_state import GameVariant  # noqa: E402

save_game(
    create_game([], GameVariant.MAZE, random.Random(0), rows=12, columns=9),
    os.path.join(os.environ["DATA_DIR"], "game_state.json"),
)
