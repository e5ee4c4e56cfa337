"""Turn lifecycle: turn setup and teardown, joins and leaves, prizes, and player-facing text."""

from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING

from engine.agents import (
    add_item,
    display_name,
    get_item_count,
    has_any_item,
)
from engine.dice import shuffled
from engine.grid import is_hazard, location_to_string, parse_location, set_tile
from engine.npc import default_decisions_toward_goal
from engine.parser import format_symbols
from engine.standings import (
    needs_handicap,
    ordered_agent_ids,
    random_vacant_locations_behind,
    refresh_ranks,
    season_completion,
    spawnable_location_around_agents,
    top_unfinished_agent_id,
    unfinished_agents_closest_to_goal,
)
from engine.text import collapse_redundant_strings, natural_join
from models.actions import TurnSummary
from models.agents import AgentState, ItemType
from models.game_state import GameVariant, Location, PrizeType, TileType

if TYPE_CHECKING:
    from models.game_state import GameState

logger = logging.getLogger(__name__)

ITEM_INSTRUCTIONS = {
    ItemType.TRAP: (
        "You can place a `trap` at a particular location as an action e.g. `trap:b12`. "
        "If a player ends their turn on a trap, they will be sent back to where they started that week's turn. "
        "Traps are invisible until triggered. Each time this trap is triggered, you will be given **1** point "
        'for each "step" back your victim has to travel.'
    ),
    ItemType.OBSTACLE: (
        "You can place an `obstacle` at a particular location as an action e.g. `obstacle:b12`. "
        "The obstacle will act as an immovable barrier that cannot be destroyed, "
        "unless it causes players to become permanently trapped."
    ),
    ItemType.SEAL: (
        "You can use `seal` as an action to permanently seal any locked/unlocked doorway in the 4 squares "
        "adjacent to you. Once a doorway is sealed, it is effectively a wall and cannot be unlocked. "
        "Optionally, seal one specific location e.g. `seal:b12`"
    ),
    ItemType.STAR: (
        "You can use `star` as an action to make yourself invincible for the remainder of the week's turn. "
        "While invincible, walking into other players will knock them out (you won't bump into them). "
        "Also, you cannot be punched and you cannot fall into traps."
    ),
    ItemType.KEY: (
        "You can use `key` as an action to unlock all doorways in the 4 squares adjacent to you (at no cost), "
        "or optionally one specific location e.g. `key:b12`. If you use the key but no doorways are opened, "
        "then it will not be consumed. Any doorway you unlock using the key will thereafter be halved in cost, "
        "as with the standard `unlock` move."
    ),
    ItemType.CHARGE: (
        "You can use `charge` to charge as far as you want in a particular direction in one single move "
        "(e.g. `charge:b12` to charge to location `B12`). Any players standing in the way will be knocked out "
        "and you will not bump into them. There must be a path to the target location and it must be directly "
        "up, down, left, or right from you."
    ),
}

FIRST_PLACE_PRIZES = {PrizeType.SUBMISSIONS_1, PrizeType.SUBMISSIONS_1_TIED}
SECOND_PLACE_PRIZES = {PrizeType.SUBMISSIONS_2, PrizeType.SUBMISSIONS_2_TIED}

# Older item names still accepted in claims
ITEM_ALIASES = {"boulder": ItemType.OBSTACLE.value}


def item_instructions(item: ItemType) -> str:
    return ITEM_INSTRUCTIONS.get(
        item, "Not sure what this item is, I don't recognize it. Please reach out to the admin!"
    )


# ---------------------------------------------------------------------------
# Turn setup and teardown
# ---------------------------------------------------------------------------


def begin_turn(game_state: GameState, rng: random.Random | None = None) -> None:
    """Start a new turn.

    Resets per-turn status, hands out home-stretch multipliers, queues a
    default walk toward the goal for every unfinished agent, and knocks out
    anyone starting the turn without a point to spend.
    """
    rng = rng or random.Random()
    game_state.turn += 1
    game_state.tick = 0
    game_state.decisions = {}
    game_state.lines = []
    refresh_ranks(game_state)

    if not game_state.home_stretch and game_state.finishers:
        game_state.home_stretch = True

    for agent_id, agent in game_state.agents.items():
        agent.origin = agent.position
        agent.stuns = 0
        agent.invincible = False
        agent.warped = False
        agent.multiplier = None
        if game_state.home_stretch and needs_handicap(game_state, agent_id):
            agent.multiplier = game_state.rules.home_stretch_multiplier
        if agent.finished:
            continue
        if agent.points >= 1:
            actions = default_decisions_toward_goal(game_state, agent_id, rng)
            if actions:
                game_state.decisions[agent_id] = actions
        else:
            agent.stuns = 1

    _remove_dangling_hazard_owners(game_state)
    _spawn_collectibles(game_state, rng)
    logger.info("Began turn %d with %d default decision(s)", game_state.turn, len(game_state.decisions))


def _remove_dangling_hazard_owners(game_state: GameState) -> None:
    for key, owner_id in list(game_state.hazard_owners.items()):
        location = parse_location(key)
        if location is None or not is_hazard(game_state, location):
            del game_state.hazard_owners[key]
            logger.warning(
                "Deleted owner %s for nonexistent trap at %s",
                display_name(game_state, owner_id), key,
            )


def _spawn_collectibles(game_state: GameState, rng: random.Random) -> None:
    """Later in the season, scatter coins behind the leader to help stragglers."""
    completion = season_completion(game_state)
    if completion <= game_state.rules.collectible_spawn_min_completion:
        return
    leader = top_unfinished_agent_id(game_state)
    if leader is None:
        return
    low, high = game_state.rules.collectible_spawn_range
    count = math.floor(completion * rng.randint(low, high))
    locations = random_vacant_locations_behind(game_state, leader, count, rng)
    for location in locations:
        set_tile(game_state, location, TileType.COLLECTIBLE)
    logger.info("Spawned %d collectible(s) at %.0f%% completion", len(locations), completion * 100)


def end_turn(game_state: GameState) -> TurnSummary:
    """Close the turn: wipe unclaimed offers and summarize what happened."""
    for agent in game_state.agents.values():
        agent.item_offers = None

    descriptions = [event.description for event in game_state.event_log if event.turn == game_state.turn]
    summary = "\n".join(collapse_redundant_strings(descriptions))
    return TurnSummary(turn=game_state.turn, summary=summary, standings=standings_lines(game_state))


def standings_lines(game_state: GameState) -> list[str]:
    lines = []
    for agent_id in ordered_agent_ids(game_state):
        agent = game_state.agents[agent_id]
        status = "finished" if agent.finished else location_to_string(agent.position)
        lines.append(f"{agent.rank}. **{agent.name}** ({status}, {agent.points:g} points)")
    return lines


# ---------------------------------------------------------------------------
# Joining and leaving
# ---------------------------------------------------------------------------


def _spawn_edge_location(game_state: GameState, rng: random.Random) -> Location:
    if game_state.variant == GameVariant.DUNGEON:
        last_row = game_state.rows - 1
        last_column = game_state.columns - 1
        candidates = [
            (0, game_state.columns // 2),
            (game_state.rows // 2, last_column),
            (last_row, game_state.columns // 2),
            (game_state.rows // 2, 0),
        ]
        return rng.choice(candidates)
    return (0, rng.randrange(game_state.columns))


def add_agent(game_state: GameState, agent_id: str, name: str, rng: random.Random | None = None) -> str:
    """Add a late joiner near the stragglers.

    Returns:
        Log text describing where the agent spawned.

    Raises:
        ValueError: If the agent is already in the game.
    """
    if agent_id in game_state.agents:
        raise ValueError(f"Agent {name} is already in the game")
    rng = rng or random.Random()

    closest = unfinished_agents_closest_to_goal(game_state)
    tail = len(closest) // 3
    worst = closest[-tail:] if tail else closest
    found = spawnable_location_around_agents(game_state, worst, rng)
    if found is not None:
        location, near_id = found
        location_text = f"near **{display_name(game_state, near_id)}**"
    else:
        location = _spawn_edge_location(game_state, rng)
        location_text = f"at `{location_to_string(location)}`"

    points = game_state.rules.starter_points + game_state.turn
    game_state.agents[agent_id] = AgentState(
        id=agent_id,
        name=name,
        position=location,
        points=points,
        rank=len(game_state.agents) + 1,
    )
    refresh_ranks(game_state)
    logger.info("Added agent %s at %s", name, location_to_string(location))
    return f"Added player **{name}** {location_text} with **{points}** starter points"


def remove_agent(game_state: GameState, agent_id: str) -> None:
    """Remove an agent along with their queue and any traps they own.

    Raises:
        ValueError: If the agent is not in the game.
    """
    if agent_id not in game_state.agents:
        raise ValueError(f"Agent {agent_id} not found")
    name = display_name(game_state, agent_id)
    del game_state.agents[agent_id]
    game_state.decisions.pop(agent_id, None)
    for key, owner_id in list(game_state.hazard_owners.items()):
        if owner_id != agent_id:
            continue
        location = parse_location(key)
        if location is not None:
            set_tile(game_state, location, TileType.EMPTY)
            logger.info("Deleted trap at %s for removed agent %s", key, name)
        else:
            logger.warning("Couldn't remove trap at %s for removed agent %s", key, name)
        del game_state.hazard_owners[key]


# ---------------------------------------------------------------------------
# Prizes
# ---------------------------------------------------------------------------


def _good_items(game_state: GameState, agent_id: str) -> list[ItemType]:
    if game_state.agents[agent_id].finished:
        return [ItemType.OBSTACLE, ItemType.TRAP]
    return [item for item in ItemType if item != ItemType.TRAP]


def award_item(game_state: GameState, agent_id: str, item: ItemType, intro: str) -> list[str]:
    if agent_id not in game_state.agents:
        return []
    item = ItemType(item)
    add_item(game_state, agent_id, item)
    count = get_item_count(game_state, agent_id, item)
    logger.info("Awarded %s to %s", item.value, display_name(game_state, agent_id))
    return [
        f"{intro}, you've just been awarded a **{item.value}**! Your inventory now contains "
        f"**{count}**. {item_instructions(item)}"
    ]


def offer_items(game_state: GameState, agent_id: str, items: list[ItemType], intro: str) -> list[str]:
    if agent_id not in game_state.agents:
        return []
    game_state.agents[agent_id].item_offers = list(items)
    names = [item.value for item in items]
    texts = [
        f"{intro}, as a reward you may pick one of the following items: "
        f"{natural_join(names, conjunction='or', bold=True)}. DM me to claim the item of your choice! "
        "(e.g. `claim ITEM`). This offer is valid until the turn ends."
    ]
    texts.extend(f"**{item.value}:** {item_instructions(item)}" for item in items)
    logger.info("Offered %s to %s", ", ".join(names), display_name(game_state, agent_id))
    return texts


def award_prize(
    game_state: GameState,
    agent_id: str,
    prize_type: PrizeType,
    intro: str,
    rng: random.Random | None = None,
) -> list[str]:
    """Grant or offer items based on how the agent placed in the week's scoring.

    Returns:
        Messages for the agent; empty if the agent isn't in the game.
    """
    if agent_id not in game_state.agents:
        return []
    rng = rng or random.Random()
    prize_type = PrizeType(prize_type)
    good_items = _good_items(game_state, agent_id)
    if prize_type in FIRST_PLACE_PRIZES:
        return offer_items(game_state, agent_id, shuffled(good_items, rng)[:2], intro)
    if prize_type in SECOND_PLACE_PRIZES:
        return award_item(game_state, agent_id, rng.choice(good_items), intro)
    return award_item(game_state, agent_id, ItemType.TRAP, intro)


def handle_message(game_state: GameState, agent_id: str, text: str) -> list[str]:
    """Handle a free-text message that isn't a decision; currently only item claims."""
    agent = game_state.agents.get(agent_id)
    if agent is None or not agent.item_offers:
        return []
    sanitized = text.lower().strip()
    if not sanitized.startswith("claim"):
        return []
    claimed = sanitized[len("claim"):].strip()
    claimed = ITEM_ALIASES.get(claimed, claimed)
    offered = [item.value for item in agent.item_offers]
    if claimed in offered:
        agent.item_offers = None
        return award_item(game_state, agent_id, ItemType(claimed), "Nice choice")
    options = natural_join([f"`claim {item}`" for item in offered], conjunction="or")
    return [f"Invalid claim attempt bro, please say {options}"]


# ---------------------------------------------------------------------------
# Player-facing text
# ---------------------------------------------------------------------------


def reminders(game_state: GameState) -> dict[str, str]:
    """Per-agent start-of-turn reminders about inventory and finished-agent actions."""
    results = {}
    for agent_id, agent in game_state.agents.items():
        statements = []
        if agent.points >= 1 and has_any_item(game_state, agent_id):
            inventory = [
                f"a **{item.value}**" if count == 1 else f"{count} **{item.value}s**"
                for item, count in agent.items.items()
                if count > 0
            ]
            statements.append("your inventory contains " + natural_join(inventory))
        if agent.finished:
            statements.append(
                "since you've completed the maze, all you can do is place **traps**, **obstacles**, "
                "and **collectibles** (e.g. `collectible:b12`)"
            )
        if statements:
            results[agent_id] = "Good morning! Reminder: " + natural_join(statements)
    return results


def instructions_text(game_state: GameState) -> str:
    finishers = [agent_id for agent_id in game_state.finishers if agent_id in game_state.agents]
    if game_state.home_stretch and finishers:
        multiplier = game_state.rules.home_stretch_multiplier
        text = f"All players in _blue_ have a **{multiplier}x** point multiplier for the next week"
        if len(finishers) == 1:
            return (
                f"**{display_name(game_state, finishers[0])}** has already reached the goal, "
                f"so the race for 2nd and 3rd is on! {text}"
            )
        return (
            f"**{display_name(game_state, finishers[0])}** and **{display_name(game_state, finishers[1])}** "
            f"have already reached the goal, so the race for 3rd is on! {text}"
        )
    return (
        "Choose your moves by sending me a DM with your desired sequence of actions. "
        'You have until tomorrow morning to choose. DM me _"help"_ for more info.'
    )


def help_text(game_state: GameState) -> str:
    rules = game_state.rules
    return (
        "Here are the possible actions you may take and their associated costs:\n"
        "`up`, `down`, `left`, `right`: move one step in such direction. Costs `1`\n"
        "`unlock`: open all doorways adjacent to you (or just one e.g. `unlock:b12`). "
        "Cost is denoted on each doorway, and is reduced with each unlock\n"
        "`lock`: close all doorways adjacent to you (or just one e.g. `lock:b12`). Cost is denoted on each doorway\n"
        f"`punch`: {rules.punch_success_chance:.0%} chance of knocking out any player adjacent to you, "
        f"stunning them for `{rules.punch_stuns}` moves. Some of their money may fall onto the floor "
        f"around them. Costs `{rules.punch_cost}`\n"
        "`warp`: warp to a random player. Costs `0.5` for each week that has elapsed\n"
        "`pause`: do nothing. Free\n\n"
        "Misc Rules:\n"
        "1. If you do not choose your actions, actions will be chosen for you (use `pause` to do nothing instead).\n"
        "2. In a given turn, one action is processed from each player in a _semi-random_ order until all players "
        "have no actions left.\n"
        "3. You cannot walk over/past other players unless they are KO'ed or you are walking into each other head-on.\n"
        "4. Players starting their turn with less than one point are KO'ed the entire turn.\n"
        "5. If you somehow walk into a wall, your turn is ended.\n"
        "6. If you walk into another player and they have no more actions remaining, you will shove them forward. "
        "If you cannot shove them forward, you will shove them to either side. If neither side is vacant, "
        f"you will auto-punch them for {rules.punch_cost} points (if you have {rules.auto_punch_min_points}+ points). "
        "If you cannot afford to auto-punch, your turn will be ended early.\n"
        "7. If your turn is ended early due to any of these reasons, you will only lose points for each action taken.\n"
        "8. If you warp, you will be KO'ed at the end of your turn so that others can walk past you.\n"
        "9. If you warp multiple times in one turn, all subsequent warps will only go through if it brings you "
        "closer to the goal.\n\n"
        "Send me a DM with your chosen actions e.g. `up right unlock right pause right punch lock:b12 down`"
    )


def debug_text(game_state: GameState) -> str:
    completion = round(season_completion(game_state) * 100, 2)
    lines = [f"Week {game_state.turn}, Action {game_state.tick}, {completion:g}% Complete"]
    for agent_id in ordered_agent_ids(game_state):
        queue = game_state.decisions.get(agent_id)
        if queue is not None:
            lines.append(f"**{display_name(game_state, agent_id)}**: `{format_symbols(queue)}`")
    return "\n".join(lines)
