"""FastAPI app entry point for the Labyrinth server."""

import logging
import random

from fastapi import FastAPI

from api.game import router as game_router
from api.lobby import router as lobby_router
from config import DEFAULT_VARIANT, GAME_ID, GAME_NAME, LOG_LEVEL, SAVE_FILE
from engine.game import load_game
from engine.generation import create_best_game

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Labyrinth Server",
    description="Simultaneous-turn maze race engine for chat-driven agents",
    version="0.1.0",
)

app.state.rng = random.Random()

# Load or create the singleton game
loaded = load_game(SAVE_FILE)
if loaded is not None:
    app.state.game = loaded
    logger.info("Loaded game %s at turn %d", loaded.game_id, loaded.turn)
else:
    app.state.game = create_best_game(
        [], DEFAULT_VARIANT, app.state.rng, game_id=GAME_ID, name=GAME_NAME,
    )
    logger.info("Created new %s game %s", DEFAULT_VARIANT, GAME_ID)

app.include_router(lobby_router, prefix="/game", tags=["Lobby"])
app.include_router(game_router, prefix="/game", tags=["Game"])


@app.get("/")
def root() -> dict:
    """Root endpoint returning server info."""
    return {"name": "Labyrinth Server", "version": "0.1.0", "status": "running"}


@app.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"healthy": True}
