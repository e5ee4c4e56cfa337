"""Decision submission, turn driving, state retrieval, and game log endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

import config
from auth import require_admin
from engine.game import MinigameEngine, create_engine, save_game
from engine.grid import location_to_string, sequence_of_locations
from engine.parser import format_action
from models.actions import DecisionResult, TickResult, TurnSummary
from models.game_state import GameState, PrizeType

router = APIRouter()


class TextRequest(BaseModel):
    """Free text sent by an agent, e.g. "up up unlock" or "claim key"."""
    text: str


class PrizeRequest(BaseModel):
    """Request body for awarding a weekly prize."""
    prize_type: PrizeType
    intro: str = "Congrats"


class MessagesResponse(BaseModel):
    """Messages to relay back to an agent."""
    messages: list[str]


def _get_game(request: Request) -> GameState:
    """Get the singleton game from app state."""
    return request.app.state.game


def _get_engine(request: Request) -> MinigameEngine:
    return create_engine(_get_game(request), request.app.state.rng)


def _require_agent(game_state: GameState, agent_id: str) -> None:
    if agent_id not in game_state.agents:
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found")


@router.get("/state")
def get_game_state(request: Request) -> dict:
    """Everything an external renderer needs to draw the board."""
    game_state = _get_game(request)
    return {
        "game_id": game_state.game_id,
        "name": game_state.name,
        "variant": game_state.variant.value,
        "turn": game_state.turn,
        "tick": game_state.tick,
        "rows": game_state.rows,
        "columns": game_state.columns,
        "goal": location_to_string(game_state.goal),
        "grid": [[int(tile) for tile in row] for row in game_state.grid],
        "doorway_costs": game_state.doorway_costs,
        "agents": [agent.model_dump(mode="json") for agent in game_state.agents.values()],
        "decisions": {
            agent_id: [format_action(action) for action in queue]
            for agent_id, queue in game_state.decisions.items()
        },
        "paths": {
            agent_id: [
                location_to_string(location)
                for location in sequence_of_locations(game_state.agents[agent_id].position, queue)
            ]
            for agent_id, queue in game_state.decisions.items()
            if agent_id in game_state.agents
        },
        "finishers": game_state.finishers,
        "lines": [line.model_dump(mode="json") for line in game_state.lines],
    }


@router.post(
    "/agents/{agent_id}/decision",
    response_model=DecisionResult,
    dependencies=[Depends(require_admin)],
)
def submit_decision(agent_id: str, body: TextRequest, request: Request) -> DecisionResult:
    """Validate an agent's decision and queue it if valid.

    A rejected decision is still a 200 response with success=False, since the
    rejection text is meant to be relayed to the agent.
    """
    engine = _get_engine(request)
    _require_agent(engine.state, agent_id)
    result = engine.submit_decision(agent_id, body.text)
    if result.success:
        save_game(engine.state, config.SAVE_FILE)
    return result


@router.post(
    "/agents/{agent_id}/message",
    response_model=MessagesResponse,
    dependencies=[Depends(require_admin)],
)
def send_message(agent_id: str, body: TextRequest, request: Request) -> MessagesResponse:
    """Handle a non-decision message, such as claiming an offered item."""
    engine = _get_engine(request)
    _require_agent(engine.state, agent_id)
    messages = engine.handle_message(agent_id, body.text)
    save_game(engine.state, config.SAVE_FILE)
    return MessagesResponse(messages=messages)


@router.post(
    "/agents/{agent_id}/prize",
    response_model=MessagesResponse,
    dependencies=[Depends(require_admin)],
)
def award_prize(agent_id: str, body: PrizeRequest, request: Request) -> MessagesResponse:
    engine = _get_engine(request)
    _require_agent(engine.state, agent_id)
    messages = engine.award_prize(agent_id, body.prize_type, body.intro)
    save_game(engine.state, config.SAVE_FILE)
    return MessagesResponse(messages=messages)


@router.post("/turn/begin", dependencies=[Depends(require_admin)])
def begin_turn(request: Request) -> dict:
    """Start a new turn and return the per-agent reminders."""
    engine = _get_engine(request)
    engine.begin_turn()
    save_game(engine.state, config.SAVE_FILE)
    return {
        "turn": engine.state.turn,
        "instructions": engine.instructions_text(),
        "reminders": engine.reminders(),
    }


@router.post("/turn/tick", response_model=TickResult, dependencies=[Depends(require_admin)])
def process_tick(request: Request) -> TickResult:
    """Process one tick (or several back to back, when nothing eventful happens)."""
    engine = _get_engine(request)
    result = engine.process_decisions()
    save_game(engine.state, config.SAVE_FILE)
    return result


@router.post("/turn/end", response_model=TurnSummary, dependencies=[Depends(require_admin)])
def end_turn(request: Request) -> TurnSummary:
    engine = _get_engine(request)
    summary = engine.end_turn()
    save_game(engine.state, config.SAVE_FILE)
    return summary


@router.get("/log")
def get_game_log(request: Request) -> list[dict]:
    """Get the event log for the whole game."""
    game_state = _get_game(request)
    return [event.model_dump(mode="json") for event in game_state.event_log]


@router.get("/help")
def get_help(request: Request) -> dict:
    engine = _get_engine(request)
    return {
        "help": engine.help_text(),
        "instructions": engine.instructions_text(),
        "debug": engine.debug_text(),
    }
