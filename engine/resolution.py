"""Simultaneous turn resolution: one action per agent per tick."""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from engine.agents import (
    add_points,
    agents_at,
    consume_item,
    consume_stun,
    display_name,
    display_names,
    is_occupied,
    other_agent_ids,
    unfinished_agent_ids,
)
from engine.dice import chance, shuffle_with_dependencies, shuffled
from engine.grid import (
    adjacent_locations,
    adjacent_or_override,
    direction_of_offset,
    direction_to,
    is_goal,
    is_hazard,
    is_placeable,
    is_sealable,
    is_tile,
    is_walkable,
    location_to_string,
    locations_between,
    normalized_offset,
    offset_location,
    orthogonal_locations,
    set_tile,
)
from engine.pathfinding import approximate_cost_to_goal, can_all_agents_reach_goal, num_steps_between
from engine.rules import MOVEMENT_KINDS, action_cost
from engine.standings import (
    best_vacant_adjacent_location,
    is_shovable,
    refresh_ranks,
    spawnable_location_around_agents,
)
from engine.text import collapse_redundant_strings, natural_join, rank_string
from models.actions import Action, TickResult
from models.agents import ItemType
from models.game_state import GameEvent, Location, RenderLine, RenderStyle, TileType

if TYPE_CHECKING:
    from models.game_state import GameState

logger = logging.getLogger(__name__)

IDLE_SUMMARY = "Dogs sat around with their hands in their pockets..."


def has_pending_decisions(game_state: GameState, agent_id: str) -> bool:
    return len(game_state.decisions.get(agent_id, [])) > 0


def next_decided_action(game_state: GameState, agent_id: str) -> Action | None:
    queue = game_state.decisions.get(agent_id)
    return queue[0] if queue else None


def add_render_line(
    game_state: GameState,
    start: Location,
    end: Location,
    style: RenderStyle = RenderStyle.PLAIN,
) -> None:
    over = style in (RenderStyle.WARP, RenderStyle.RED)
    game_state.lines.append(RenderLine(start=tuple(start), end=tuple(end), style=style, over=over))


def decision_order(game_state: GameState, rng: random.Random | None = None) -> list[str]:
    """Shuffle agents so anyone stepping into an occupied tile goes after its occupant."""
    dependencies: dict[str, str] = {}
    for agent_id, agent in game_state.agents.items():
        action = next_decided_action(game_state, agent_id)
        if action is None or action.kind not in MOVEMENT_KINDS:
            continue
        blockers = agents_at(game_state, offset_location(agent.position, action.offset))
        # Skip dependencies that would form a two-agent cycle
        if blockers and dependencies.get(blockers[0]) != agent_id:
            dependencies[agent_id] = blockers[0]
    return shuffle_with_dependencies(list(game_state.agents), dependencies, rng)


class _Tick:
    """Mutable bookkeeping for a single resolution tick."""

    def __init__(self, game_state: GameState, rng: random.Random):
        self.state = game_state
        self.rules = game_state.rules
        self.rng = rng
        self.statements: list[str] = []
        self.step_users: list[str] = []
        self.bump_goners: list[str] = []
        self.bumpers: dict[str, str] = {}
        self.end_turn = False

    # -- statements ---------------------------------------------------------

    def flush(self) -> None:
        """Emit the collapsible step/bump statements gathered so far."""
        if self.step_users:
            if len(self.step_users) == 1:
                self.statements.append(f"**{self.step_users[0]}** took a step")
            else:
                self.statements.append(f"**{len(self.step_users)}** players took a step")
            self.step_users = []
        if self.bump_goners:
            names = natural_join(display_names(self.state, self.bump_goners), bold=True)
            self.statements.append(f"{names} bumped into someone and gave up")
            self.bump_goners = []

    def say(self, statement: str) -> None:
        self.flush()
        self.statements.append(statement)

    def name(self, agent_id: str) -> str:
        return display_name(self.state, agent_id)

    # -- movement -----------------------------------------------------------

    def move_agent_to(self, agent_id: str, location: Location) -> None:
        """Move an agent and apply tile triggers.

        Collectibles and the goal trigger immediately. Hazards and the
        shared-tile shuffle only trigger once the agent's queue is empty.
        """
        agent = self.state.agents.get(agent_id)
        if agent is None or agent.finished:
            return
        agent.position = tuple(location)
        here = agent.position

        if is_tile(self.state, here, TileType.COLLECTIBLE):
            set_tile(self.state, here, TileType.EMPTY)
            value = self.rng.choice(self.rules.collectible_values)
            add_points(self.state, agent_id, value)
            self.say(f"**{agent.name}** collected a gold coin worth **${value}**")

        if is_goal(self.state, here):
            agent.finished = True
            self.state.finishers.append(agent_id)
            place = rank_string(len(self.state.finishers))
            self.say(f"**{agent.name}** reached the goal for _{place} place_")
            return

        if has_pending_decisions(self.state, agent_id):
            return

        if not agent.invincible and self._trigger_hazard(agent_id):
            return

        others = [other for other in agents_at(self.state, agent.position) if other != agent_id]
        if others:
            other = self.state.agents[others[0]]
            spot = best_vacant_adjacent_location(self.state, agent.position)
            if spot is not None:
                if agent.stunned and other.stunned:
                    self.say(f"**{agent.name}'s** corpse rolled off **{other.name}'s** and over to the side")
                elif agent.stunned:
                    self.say(f"**{other.name}** kicked **{agent.name}'s** lifeless body over to the side")
                elif other.stunned:
                    # The one still standing keeps the tile
                    self.say(f"**{agent.name}** kicked **{other.name}'s** lifeless body over to the side")
                    self.move_agent_to(others[0], spot)
                    return
                else:
                    self.say(f"**{agent.name}** got off the shoulders of **{other.name}** and stepped aside")
                self.move_agent_to(agent_id, spot)

    def _trigger_hazard(self, agent_id: str) -> bool:
        """Reveal and spring a trap under the agent. Returns True if they were sent back."""
        agent = self.state.agents[agent_id]
        here = agent.position
        key = location_to_string(here)
        owner_id = self.state.hazard_owners.get(key)
        hazard_text = f"**{self.name(owner_id)}'s** trap" if owner_id else "a trap"

        if is_tile(self.state, here, TileType.HIDDEN_HAZARD):
            set_tile(self.state, here, TileType.HAZARD)
            if owner_id:
                self.say(f"**{agent.name}** revealed a hidden trap placed by **{self.name(owner_id)}**")
            else:
                self.say(f"**{agent.name}** revealed a hidden trap")

        if not is_tile(self.state, here, TileType.HAZARD):
            return False
        destination = agent.origin
        # Standing on a hazard at the origin would loop forever
        if destination is None or tuple(destination) == here:
            logger.info("Hazard at %s not triggered for %s (origin=%s)", key, agent.name, destination)
            return False

        progress_lost = num_steps_between(self.state, destination, here) or 1
        agent.stuns = 1
        logger.info("%s triggered %s at %s (progress lost: %d)", agent.name, hazard_text, key, progress_lost)
        self.say(
            f"**{agent.name}** stepped on {hazard_text} and was sent back to "
            f"**{location_to_string(destination)}**"
        )
        if owner_id and owner_id in self.state.agents:
            add_points(self.state, owner_id, progress_lost)
            self.say(f"**{self.name(owner_id)}** earned **${progress_lost}** for trapping")
        add_render_line(self.state, here, destination, RenderStyle.RED)
        self.move_agent_to(agent_id, destination)
        return True

    def step(self, agent_id: str, offset: tuple[int, int]) -> bool:
        """Resolve one step, including collisions. Returns True if the action is consumed."""
        agent = self.state.agents[agent_id]
        current = agent.position
        destination = offset_location(current, offset)
        announce_step = True
        add_render_line(
            self.state, current, destination,
            RenderStyle.RAINBOW if agent.invincible else RenderStyle.PLAIN,
        )

        blockers = agents_at(self.state, destination)
        if blockers:
            blocker_id = blockers[0]
            blocker = self.state.agents[blocker_id]
            if agent.invincible and not blocker.invincible:
                blocker.stuns = self.rules.trample_stuns
                announce_step = False
                self.say(f"**{agent.name}** trampled **{blocker.name}**")
            else:
                self.bumpers[agent_id] = blocker_id
                ring = self._waiting_ring(agent_id)
                if self.bumpers.get(blocker_id) == agent_id:
                    announce_step = False
                    self.say(f"**{agent.name}** walked past **{blocker.name}**")
                elif ring:
                    self._rotate(ring)
                    return True
                elif blocker.stunned:
                    announce_step = False
                    self.say(f"**{agent.name}** stepped over the knocked-out body of **{blocker.name}**")
                elif has_pending_decisions(self.state, blocker_id):
                    # Wait for the blocker to move first
                    return False
                else:
                    return self._shove(agent_id, blocker_id, current, destination)

        if is_walkable(self.state, destination):
            if announce_step:
                self.step_users.append(agent.name)
            self.move_agent_to(agent_id, destination)
            return True

        self.say(f"**{agent.name}** walked into a wall and gave up")
        self.end_turn = True
        return False

    def _waiting_ring(self, agent_id: str) -> list[str] | None:
        """Agents waiting on each other in a loop that closes back at agent_id.

        Returns the ring starting at agent_id, each member stepping into the
        next one's tile, or None if the bump chain doesn't loop back.
        """
        ring = [agent_id]
        current = self.bumpers.get(agent_id)
        while current is not None and current not in ring:
            ring.append(current)
            current = self.bumpers.get(current)
        if current != agent_id:
            return None
        for i, member_id in enumerate(ring):
            member = self.state.agents[member_id]
            action = next_decided_action(self.state, member_id)
            if member.stunned or action is None or action.kind not in MOVEMENT_KINDS:
                return None
            ahead = self.state.agents[ring[(i + 1) % len(ring)]]
            if offset_location(member.position, action.offset) != ahead.position:
                return None
        return ring

    def _rotate(self, ring: list[str]) -> None:
        """Move every agent in a waiting ring into the next one's tile at once.

        The first member is the one being processed; the rest already waited
        this tick, so their actions are paid for and popped here.
        """
        costs = {
            member_id: action_cost(
                self.state, self.state.decisions[member_id][0], self.state.agents[member_id].position,
            )
            for member_id in ring[1:]
        }
        destinations = [self.state.agents[ring[(i + 1) % len(ring)]].position for i in range(len(ring))]
        for member_id, destination in zip(ring, destinations):
            self.state.agents[member_id].position = destination
        self.say(f"{natural_join(display_names(self.state, ring), bold=True)} shuffled around each other")
        logger.info("Rotated a ring of %d agents", len(ring))

        self.move_agent_to(ring[0], destinations[0])
        for member_id, destination in zip(ring[1:], destinations[1:]):
            member = self.state.agents[member_id]
            self.pop_action(member_id, costs[member_id])
            self.move_agent_to(member_id, destination)
            if member.finished:
                self.state.decisions.pop(member_id, None)
            if not has_pending_decisions(self.state, member_id) and member.warped:
                member.stuns = 1

    def _shove(self, agent_id: str, blocker_id: str, current: Location, destination: Location) -> bool:
        agent = self.state.agents[agent_id]
        blocker = self.state.agents[blocker_id]
        offset = normalized_offset(current, destination)
        forward = offset_location(destination, offset)
        sides = [loc for loc in orthogonal_locations(destination, offset) if is_shovable(self.state, loc)]

        # The mover goes first so the blocker's triggers see both positions
        if is_shovable(self.state, forward):
            self.say(f"**{agent.name}** shoved **{blocker.name}** {direction_of_offset(offset)}ward")
            self.move_agent_to(agent_id, destination)
            self.move_agent_to(blocker_id, forward)
            return True
        if sides:
            side = shuffled(sides, self.rng)[0]
            self.say(f"**{agent.name}** shoved **{blocker.name}** to the side")
            self.move_agent_to(agent_id, destination)
            self.move_agent_to(blocker_id, side)
            return True
        if agent.points >= self.rules.auto_punch_min_points:
            blocker.stuns = self.rules.auto_punch_stuns
            add_points(self.state, agent_id, -self.rules.punch_cost)
            self.say(f"**{agent.name}** slapped **{blocker.name}** onto the floor")
            return False
        self.bump_goners.append(agent_id)
        self.end_turn = True
        return False

    # -- doorways -----------------------------------------------------------

    def unlock(self, agent_id: str, target: Location | None) -> int:
        agent = self.state.agents[agent_id]
        unlocked = 0
        for location in adjacent_or_override(self.state, agent.position, target):
            if is_tile(self.state, location, TileType.DOORWAY):
                set_tile(self.state, location, TileType.OPENED_DOORWAY)
                unlocked += 1
                key = location_to_string(location)
                cost = self.state.doorway_costs.get(key)
                if cost is not None:
                    self.state.doorway_costs[key] = max(1, math.ceil(cost / 2))
        if unlocked == 1:
            self.say(f"**{agent.name}** unlocked a doorway")
        else:
            self.say(f"**{agent.name}** unlocked **{unlocked}** doorways")
        return unlocked

    def lock(self, agent_id: str, target: Location | None) -> bool:
        agent = self.state.agents[agent_id]
        locked = 0
        for location in adjacent_or_override(self.state, agent.position, target):
            if is_tile(self.state, location, TileType.OPENED_DOORWAY):
                set_tile(self.state, location, TileType.DOORWAY)
                locked += 1
        if locked == 1:
            self.say(f"**{agent.name}** locked a doorway")
        else:
            self.say(f"**{agent.name}** locked **{locked}** doorways")
        return True

    def seal(self, agent_id: str, target: Location | None) -> bool:
        agent = self.state.agents[agent_id]
        sealable = [
            location for location in adjacent_or_override(self.state, agent.position, target)
            if is_sealable(self.state, location)
        ]
        if not can_all_agents_reach_goal(self.state, sealable):
            agent.stuns = 1
            self.end_turn = True
            self.say(f"**{agent.name}** got knocked out trying to softlock the game (tried to permanently seal doorways)")
            return False
        for location in sealable:
            set_tile(self.state, location, TileType.WALL)
        if len(sealable) == 1:
            self.say(f"**{agent.name}** sealed a doorway")
        else:
            self.say(f"**{agent.name}** sealed **{len(sealable)}** doorways")
        consume_item(self.state, agent_id, ItemType.SEAL)
        return True

    # -- other actions ------------------------------------------------------

    def punch(self, agent_id: str) -> bool:
        agent = self.state.agents[agent_id]
        near_agent = False
        for location in adjacent_locations(self.state, agent.position):
            for other_id in agents_at(self.state, location):
                other = self.state.agents[other_id]
                if other.stunned:
                    continue
                near_agent = True
                if other.invincible:
                    self.say(f"**{agent.name}** threw fists at the invincible **{other.name}** to no avail")
                elif chance(self.rules.punch_success_chance, self.rng):
                    other.stuns = self.rules.punch_stuns
                    spots = [
                        loc for loc in adjacent_locations(self.state, other.position)
                        if is_tile(self.state, loc, TileType.EMPTY) and not is_occupied(self.state, loc)
                    ]
                    num_coins = max(0, min(len(spots), math.floor(other.points)))
                    if num_coins > 0:
                        for spot in shuffled(spots, self.rng)[:num_coins]:
                            set_tile(self.state, spot, TileType.COLLECTIBLE)
                        add_points(self.state, other_id, -num_coins)
                        self.say(
                            f"**{agent.name}** knocked out **{other.name}** "
                            f"(shaking **${num_coins}** from their pockets onto the floor)"
                        )
                    else:
                        self.say(f"**{agent.name}** knocked out **{other.name}**")
                else:
                    self.say(f"**{agent.name}** tried to punch **{other.name}** and missed")
        if not near_agent:
            self.say(f"**{agent.name}** swung at the air")
        return True

    def warp(self, agent_id: str) -> bool:
        agent = self.state.agents[agent_id]
        found = spawnable_location_around_agents(self.state, other_agent_ids(self.state, agent_id), self.rng)
        if found is None:
            logger.warning("No warp destination available for %s", agent.name)
            agent.stuns = 1
            self.end_turn = True
            self.say(f"**{agent.name}** tried to warp but there was nobody to warp to")
            return False
        location, near_id = found
        first_warp = not agent.warped
        closer = approximate_cost_to_goal(self.state, location) < approximate_cost_to_goal(self.state, agent.position)
        if first_warp or closer:
            add_render_line(self.state, agent.position, location, RenderStyle.WARP)
            agent.warped = True
            self.say(f"**{agent.name}** warped to **{self.name(near_id)}**")
            self.move_agent_to(agent_id, location)
        else:
            self.say(f"**{agent.name}** avoided warping to **{self.name(near_id)}**")
        return True

    def place(self, agent_id: str, kind: str, target: Location) -> bool:
        agent = self.state.agents[agent_id]
        key = location_to_string(target)

        if kind == "obstacle" and not can_all_agents_reach_goal(self.state, [target]):
            agent.stuns = 1
            self.end_turn = True
            self.say(f"**{agent.name}** got knocked out trying to softlock the game (tried to place an obstacle at **{key}**)")
            return False
        if kind == "collectible" and is_hazard(self.state, target):
            return True
        if is_goal(self.state, target) or not is_placeable(self.state, target):
            self.say(f"**{agent.name}** couldn't place a {kind} at **{key}**, something got there first")
            return True

        if kind == "trap":
            set_tile(self.state, target, TileType.HIDDEN_HAZARD)
            self.state.hazard_owners[key] = agent_id
            consume_item(self.state, agent_id, ItemType.TRAP)
            logger.info("%s placed a trap at %s", agent.name, key)
        elif kind == "obstacle":
            set_tile(self.state, target, TileType.OBSTACLE)
            self.state.hazard_owners.pop(key, None)
            consume_item(self.state, agent_id, ItemType.OBSTACLE)
            self.say(f"**{agent.name}** placed an obstacle at **{key}**")
        else:
            set_tile(self.state, target, TileType.COLLECTIBLE)
            self.state.hazard_owners.pop(key, None)
            self.say(f"**{agent.name}** placed a coin at **{key}**")
        return True

    def charge(self, agent_id: str, target: Location) -> bool:
        agent = self.state.agents[agent_id]
        start = agent.position
        # The agent may have been knocked off the charge line since submitting
        if start == target or (start[0] != target[0] and start[1] != target[1]):
            logger.warning(
                "%s can't charge from %s to %s, dropping it",
                agent.name, location_to_string(start), location_to_string(target),
            )
            self.say(f"**{agent.name}** lost their footing and couldn't charge")
            return True
        direction = direction_to(start, target)
        consume_item(self.state, agent_id, ItemType.CHARGE)
        trampled: list[str] = []
        moved = 0

        def charge_text(slammed: bool) -> str:
            text = (
                f"**{agent.name}** charged like a {'dumbass' if slammed else 'madman'} "
                f"**{moved}** space{'' if moved == 1 else 's'} {direction}ward"
            )
            if slammed:
                text += " (slamming into a wall and knocking themself out)"
            if trampled:
                text += f", trampling {natural_join(display_names(self.state, trampled), bold=True)}"
            return text

        for location in locations_between(self.state, start, target):
            if not is_walkable(self.state, location):
                add_render_line(self.state, start, agent.position, RenderStyle.RED)
                self.say(charge_text(True))
                agent.stuns = 1
                self.end_turn = True
                return True
            for other_id in agents_at(self.state, location):
                if other_id != agent_id:
                    self.state.agents[other_id].stuns = self.rules.trample_stuns
                    trampled.append(other_id)
            self.move_agent_to(agent_id, location)
            moved += 1
            if agent.finished:
                break

        add_render_line(self.state, start, agent.position, RenderStyle.RED)
        self.say(charge_text(False))
        return True

    def execute(self, agent_id: str, action: Action) -> bool:
        """Apply one action. Returns True if it should be removed from the queue."""
        agent = self.state.agents[agent_id]
        kind = action.kind
        if kind in MOVEMENT_KINDS:
            return self.step(agent_id, action.offset)
        if kind == "pause":
            return True
        if kind == "unlock":
            self.unlock(agent_id, action.target)
            return True
        if kind == "key":
            if self.unlock(agent_id, action.target) > 0:
                consume_item(self.state, agent_id, ItemType.KEY)
            return True
        if kind == "lock":
            return self.lock(agent_id, action.target)
        if kind == "seal":
            return self.seal(agent_id, action.target)
        if kind == "punch":
            return self.punch(agent_id)
        if kind == "warp":
            return self.warp(agent_id)
        if kind == "star":
            agent.invincible = True
            consume_item(self.state, agent_id, ItemType.STAR)
            self.say(f"**{agent.name}** used a star to become invincible")
            return True
        if kind in ("trap", "obstacle", "collectible"):
            return self.place(agent_id, kind, tuple(action.target))
        if kind == "charge":
            return self.charge(agent_id, tuple(action.target))
        logger.warning("Unknown action %s for %s, dropping it", kind, agent.name)
        return True

    def pop_action(self, agent_id: str, cost: int) -> None:
        """Charge for and remove the agent's front action."""
        add_points(self.state, agent_id, -cost)
        queue = self.state.decisions.get(agent_id)
        if queue:
            queue.pop(0)
            if not queue:
                del self.state.decisions[agent_id]

    def process_agent(self, agent_id: str) -> None:
        """Pop and execute the agent's next action, then run end-of-turn triggers."""
        agent = self.state.agents[agent_id]
        started_finished = agent.finished
        self.end_turn = False

        if agent.stunned:
            return

        action = self.state.decisions[agent_id][0]
        cost = action_cost(self.state, action, agent.position)
        if cost > agent.points:
            del self.state.decisions[agent_id]
            agent.stuns = 1
            self.say(f"**{agent.name}** ran out of action points and fainted")
            return

        if self.execute(agent_id, action):
            self.pop_action(agent_id, cost)

        if not started_finished and agent.finished:
            self.end_turn = True
        if self.end_turn:
            self.state.decisions.pop(agent_id, None)

        if not has_pending_decisions(self.state, agent_id):
            if agent.warped:
                agent.stuns = 1
            # Re-run tile triggers now that the queue is empty
            self.move_agent_to(agent_id, agent.position)


def process_tick(game_state: GameState, rng: random.Random | None = None) -> TickResult:
    """Advance every agent with pending actions by at most one action.

    Args:
        game_state: The game, mutated in place.
        rng: Optional Random instance for seeded/testing resolution.

    Returns:
        TickResult with the tick's statements, a prose summary, and the
        continuation flags for the driver.
    """
    rng = rng or random.Random()
    game_state.tick += 1
    tick = _Tick(game_state, rng)

    for agent_id in [a for a in game_state.decisions if a not in game_state.agents]:
        logger.warning("Dropping decisions for unknown agent %s", agent_id)
        del game_state.decisions[agent_id]

    regained = []
    # Stuns wear off for every stunned unfinished agent, queued or not
    for agent_id in unfinished_agent_ids(game_state):
        agent = game_state.agents[agent_id]
        if agent.stunned:
            consume_stun(game_state, agent_id)
            if not agent.stunned:
                regained.append(agent_id)
    if regained:
        tick.say(f"{natural_join(display_names(game_state, regained), bold=True)} regained consciousness")

    num_processed = 0
    for agent_id in decision_order(game_state, rng):
        if has_pending_decisions(game_state, agent_id):
            num_processed += 1
            tick.process_agent(agent_id)
        elif agent_id in game_state.decisions:
            logger.warning("Removing empty decision queue for %s", display_name(game_state, agent_id))
            del game_state.decisions[agent_id]

    tick.flush()
    refresh_ranks(game_state)

    continue_processing = len(game_state.decisions) > 0
    continue_immediately = (
        continue_processing
        and num_processed <= game_state.rules.fast_tick_max_agents
        and len(tick.statements) == 1
        and "took a step" in tick.statements[0]
        and all(queue[0].kind in MOVEMENT_KINDS for queue in game_state.decisions.values())
    )
    summary = natural_join(tick.statements, conjunction="then") or IDLE_SUMMARY
    game_state.event_log.append(GameEvent(
        turn=game_state.turn,
        tick=game_state.tick,
        description=summary,
        timestamp=datetime.now(timezone.utc),
    ))

    return TickResult(
        turn=game_state.turn,
        tick=game_state.tick,
        statements=tick.statements,
        summary=summary,
        continue_processing=continue_processing,
        continue_immediately=continue_immediately,
    )


def process_decisions(game_state: GameState, rng: random.Random | None = None) -> TickResult:
    """Run ticks back to back for as long as the fast path allows.

    Returns:
        The combined result; repeated summaries are collapsed ("x took a step _(x3)_").
    """
    rng = rng or random.Random()
    results = [process_tick(game_state, rng)]
    while results[-1].continue_processing and results[-1].continue_immediately:
        results.append(process_tick(game_state, rng))

    if len(results) == 1:
        return results[0]
    last = results[-1]
    return TickResult(
        turn=last.turn,
        tick=last.tick,
        statements=[statement for result in results for statement in result.statements],
        summary="\n".join(collapse_redundant_strings([result.summary for result in results])),
        continue_processing=last.continue_processing,
        continue_immediately=last.continue_immediately,
    )


def resolve_turn(game_state: GameState, rng: random.Random | None = None) -> list[TickResult]:
    """Tick until no agent has pending actions (for drivers that don't pace ticks)."""
    rng = rng or random.Random()
    results = []
    while game_state.decisions:
        results.append(process_tick(game_state, rng))
    return results
