"""Agent join and leave endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

import config
from auth import require_admin
from engine.game import MinigameEngine, create_engine, save_game

router = APIRouter()


class JoinGameRequest(BaseModel):
    """Request body for adding an agent to the game."""
    agent_id: str
    name: str


class JoinGameResponse(BaseModel):
    """Response after adding an agent."""
    agent_id: str
    message: str


def _get_engine(request: Request) -> MinigameEngine:
    """Wrap the singleton game in an engine sharing the app's RNG."""
    return create_engine(request.app.state.game, request.app.state.rng)


@router.post("/agents", response_model=JoinGameResponse, dependencies=[Depends(require_admin)])
def join_game(body: JoinGameRequest, request: Request) -> JoinGameResponse:
    """Add a late joiner near the stragglers."""
    engine = _get_engine(request)
    try:
        message = engine.add_agent(body.agent_id, body.name)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    save_game(engine.state, config.SAVE_FILE)
    return JoinGameResponse(agent_id=body.agent_id, message=message)


@router.delete("/agents/{agent_id}", dependencies=[Depends(require_admin)])
def leave_game(agent_id: str, request: Request) -> dict:
    """Remove an agent and any traps they own."""
    engine = _get_engine(request)
    try:
        engine.remove_agent(agent_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    save_game(engine.state, config.SAVE_FILE)
    return {"message": f"Removed agent {agent_id}"}
