"""Action costs and decision validation.

Validation never touches the grid or any agent's state. Only a fully valid
submission is written to the agent's decision queue.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from engine.agents import get_agent, get_item_count
from engine.grid import (
    adjacent_or_override,
    get_doorway_cost,
    in_bounds,
    is_adjacent,
    is_doorway,
    is_goal,
    is_next_to_doorway,
    is_placeable,
    is_sealable,
    is_tile,
    is_walkable,
    location_to_string,
    locations_between,
    offset_location,
)
from engine.parser import InvalidDecisionError, format_action, parse_decision
from engine.pathfinding import can_all_agents_reach_goal
from models.actions import Action, DecisionResult
from models.agents import ItemType
from models.game_state import Location, TileType

if TYPE_CHECKING:
    from models.game_state import GameState

logger = logging.getLogger(__name__)

PLACEMENT_KINDS = {"trap", "obstacle", "collectible"}
MOVEMENT_KINDS = {"up", "down", "left", "right"}


def warp_cost(game_state: GameState) -> int:
    """Warping gets pricier as the season goes on."""
    return math.ceil(game_state.turn / 2)


def _doorway_cost_sum(game_state: GameState, locations: list[Location], tile: TileType) -> int:
    total = 0
    for location in locations:
        if is_tile(game_state, location, tile):
            cost = get_doorway_cost(game_state, location)
            total += cost if cost is not None else 0
    return total


def action_cost(game_state: GameState, action: Action, location: Location) -> int:
    """Point cost of performing an action from a location.

    Args:
        game_state: The game.
        action: The action.
        location: Where the agent stands when performing it.

    Returns:
        The cost in points. Item actions are free.
    """
    kind = action.kind
    if kind in MOVEMENT_KINDS:
        return 1
    if kind == "unlock":
        targets = adjacent_or_override(game_state, location, action.target)
        return _doorway_cost_sum(game_state, targets, TileType.DOORWAY)
    if kind == "lock":
        targets = adjacent_or_override(game_state, location, action.target)
        return _doorway_cost_sum(game_state, targets, TileType.OPENED_DOORWAY)
    if kind == "punch":
        return game_state.rules.punch_cost
    if kind == "warp":
        return warp_cost(game_state)
    if kind == "collectible":
        return game_state.rules.collectible_place_cost
    return 0


def _validate_doorway_action(
    game_state: GameState,
    location: Location,
    target: Location | None,
    kind: str,
) -> None:
    here = location_to_string(location)
    if target is not None:
        there = location_to_string(target)
        if not is_doorway(game_state, target):
            raise InvalidDecisionError(f"You can't {kind} **{there}**, as it's not a doorway!")
        if not is_adjacent(location, target):
            raise InvalidDecisionError(
                f"You can't {kind} **{there}** from **{here}**, as those locations aren't adjacent!"
            )
    if not is_next_to_doorway(game_state, location):
        raise InvalidDecisionError(
            f'You can\'t use "{kind}" at **{here}**, as there\'d be no doorway near you to {kind}!'
        )


def validate_decision(
    game_state: GameState,
    agent_id: str,
    text: str,
) -> tuple[list[Action], DecisionResult]:
    """Parse and validate a decision without committing it.

    Args:
        game_state: The game.
        agent_id: The submitting agent.
        text: Raw whitespace-separated action tokens.

    Returns:
        (actions, result) where result holds the projected location,
        total cost, and any non-fatal warnings.

    Raises:
        InvalidDecisionError: With a human-readable reason, if any rule fails.
        ValueError: If the agent is not in the game.
    """
    agent = get_agent(game_state, agent_id)
    rules = game_state.rules

    if agent.stunned:
        raise InvalidDecisionError(
            "Don't you remember? You were knocked out for having no points! "
            "No action for you this week, my friend..."
        )
    if agent.points < 0:
        raise InvalidDecisionError("Oh dear... looks like you have negative points buddy, nice try...")

    actions = parse_decision(text)
    kinds = [action.kind for action in actions]

    if kinds.count("pause") > rules.max_pauses:
        raise InvalidDecisionError(f"You can pause no more than {rules.max_pauses} times per turn")

    warping = "warp" in kinds
    if warping:
        if agent.points > warp_cost(game_state) * rules.warp_rich_multiplier:
            raise InvalidDecisionError(
                "Don't you think you're a little rich to be warping? "
                "When I was your age, I WALKED all the way to the goal..."
            )
        if any(kind != "warp" for kind in kinds):
            raise InvalidDecisionError("If you warp this turn, ALL your actions must be warps")
        if len(kinds) > rules.max_warps:
            raise InvalidDecisionError(f"You may only warp at most {rules.max_warps} times per turn")

    if agent.finished and any(kind not in PLACEMENT_KINDS for kind in kinds):
        raise InvalidDecisionError(
            "You've already finished, the only action you can take now is to place "
            "traps, obstacles, and collectibles"
        )

    for item in ItemType:
        available = get_item_count(game_state, agent_id, item)
        if kinds.count(item.value) > available:
            raise InvalidDecisionError(
                f"You're trying to use more **{item.value}** items than you currently have! "
                f"You only have **{available}**"
            )

    obstacle_targets = [action.target for action in actions if action.kind == "obstacle"]
    if obstacle_targets and not can_all_agents_reach_goal(game_state, obstacle_targets):
        raise InvalidDecisionError(
            "You can't place an obstacle in a location that would permanently trap players! "
            "Please pick another location..."
        )

    location = tuple(agent.position)
    cost = 0
    warnings: list[str] = []

    for action in actions:
        kind = action.kind
        target = getattr(action, "target", None)
        if kind == "collectible" and not agent.finished:
            raise InvalidDecisionError(f"`{format_action(action)}` is an invalid action!")
        if target is not None and not in_bounds(game_state, target):
            raise InvalidDecisionError(f"Location **{location_to_string(target)}** is out-of-bounds!")

        cost += action_cost(game_state, action, location)

        if kind in MOVEMENT_KINDS:
            destination = offset_location(location, action.offset)
            if is_tile(game_state, destination, TileType.DOORWAY):
                warnings.append(
                    f"⚠️ Doorway at **{location_to_string(destination)}** must be unlocked, "
                    "whether by you or someone else."
                )
            elif not is_walkable(game_state, destination):
                raise InvalidDecisionError("You cannot move there!")
            location = destination
        elif kind in ("unlock", "key"):
            _validate_doorway_action(game_state, location, target, kind)
            warnings.append(
                "ℹ️ Doorways are halved in cost when unlocked, so subsequent actions "
                "taken on a doorway you unlock will be cheaper."
            )
        elif kind == "lock":
            _validate_doorway_action(game_state, location, target, kind)
            warnings.append(
                "ℹ️ Doorways are halved in cost when unlocked, so you may end up "
                "spending fewer points than expected."
            )
        elif kind == "seal":
            _validate_doorway_action(game_state, location, target, kind)
            for candidate in adjacent_or_override(game_state, location, target):
                if is_sealable(game_state, candidate) and not can_all_agents_reach_goal(game_state, [candidate]):
                    raise InvalidDecisionError(
                        f'Using "seal" at **{location_to_string(location)}** would cause '
                        "some players to become permanently trapped!"
                    )
        elif kind in PLACEMENT_KINDS:
            if is_goal(game_state, target):
                raise InvalidDecisionError(f"You can't place a {kind} on the goal!")
            if not is_placeable(game_state, target):
                raise InvalidDecisionError(
                    f"Can't place a {kind} at **{location_to_string(target)}**, try a different spot."
                )
        elif kind == "charge":
            target = tuple(target)
            if target == location:
                raise InvalidDecisionError("You can't charge at yourself, you silly goose!")
            if target[0] != location[0] and target[1] != location[1]:
                raise InvalidDecisionError(
                    "You must charge to a location in the same row or column "
                    "at which you would use the charge!"
                )
            for intermediate in locations_between(game_state, location, target):
                if not is_walkable(game_state, intermediate):
                    raise InvalidDecisionError(
                        f"You can't charge to **{location_to_string(target)}**, as obstacle at "
                        f"**{location_to_string(intermediate)}** is in the way!"
                    )
            location = target
        # pause, punch, warp and star need no further checks

    if cost > agent.points:
        warnings.append(
            f"⚠️ You currently have **{math.floor(agent.points)}** points, yet these actions cost "
            f"**{cost}**. Unless you collect points mid-turn, you'll be KO'ed when you run out of points."
        )

    new_location = "???" if warping else location_to_string(location)
    description = (
        f"Valid actions, your new location will be **{new_location}**. "
        f"This will consume **{cost}** of your **{math.floor(agent.points)}** points if successful."
    )
    if warnings:
        description += " _BUT PLEASE NOTE THE FOLLOWING:_\n" + "\n".join(warnings)

    result = DecisionResult(
        success=True,
        agent_id=agent_id,
        description=description,
        actions=[format_action(action) for action in actions],
        new_location=new_location,
        cost=cost,
        warnings=warnings,
    )
    return actions, result


def submit_decision(game_state: GameState, agent_id: str, text: str) -> DecisionResult:
    """Validate a decision and, only if valid, replace the agent's queue with it.

    Returns:
        DecisionResult; on rejection success is False and error holds the reason.

    Raises:
        ValueError: If the agent is not in the game.
    """
    try:
        actions, result = validate_decision(game_state, agent_id, text)
    except InvalidDecisionError as e:
        return DecisionResult(
            success=False,
            agent_id=agent_id,
            description=str(e),
            error=str(e),
        )

    game_state.decisions[agent_id] = actions
    logger.info("Queued %d action(s) for %s", len(actions), agent_id)
    return result
