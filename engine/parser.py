"""Free-text decision grammar: "up right unlock:b12 trap:c4" -> list of actions."""

from pydantic import TypeAdapter

from engine.grid import location_to_string, parse_location
from models.actions import Action, ActionType

# Older command names still accepted from players
ACTION_ALIASES = {
    "boulder": ActionType.OBSTACLE.value,
    "coin": ActionType.COLLECTIBLE.value,
}

TARGET_REQUIRED = {"trap", "obstacle", "collectible", "charge"}
TARGET_OPTIONAL = {"unlock", "lock", "seal", "key"}

ACTION_SYMBOLS = {
    "up": "⬆️",
    "down": "⬇️",
    "left": "⬅️",
    "right": "➡️",
    "pause": "⏸️",
    "unlock": "🔓",
    "lock": "🔒",
    "seal": "🦭",
    "key": "🔑",
    "punch": "🥊",
    "warp": "🎱",
    "star": "⭐",
    "trap": "🕳️",
    "obstacle": "🪨",
    "collectible": "🪙",
    "charge": "🏈",
}

_action_adapter = TypeAdapter(Action)


class InvalidDecisionError(ValueError):
    """A submitted decision was rejected; the message is shown to the agent."""


class ActionParseError(InvalidDecisionError):
    """A token could not be understood at all."""


def tokenize(text: str) -> list[str]:
    return [token.lower() for token in text.split()]


def parse_token(token: str) -> Action:
    """Parse a single "name" or "name:location" token.

    Raises:
        ActionParseError: For unknown names, missing or malformed locations,
            or a location given to an action that takes none.
    """
    name, _, arg = token.lower().partition(":")
    name = ACTION_ALIASES.get(name, name)
    try:
        ActionType(name)
    except ValueError:
        raise ActionParseError(f"`{token}` is an invalid action!") from None

    if not arg:
        if name in TARGET_REQUIRED:
            if name == "charge":
                raise ActionParseError("You must specify a location to charge to! (e.g. `charge:b12`)")
            raise ActionParseError(
                f"You must specify a location at which to place a {name}! (e.g. `{name}:b12`)"
            )
        return _action_adapter.validate_python({"kind": name})

    if name not in TARGET_REQUIRED and name not in TARGET_OPTIONAL:
        raise ActionParseError(f"`{token}` is an invalid action!")
    target = parse_location(arg)
    if target is None:
        raise ActionParseError(f"**{arg.upper()}** is not a valid location on the map!")
    return _action_adapter.validate_python({"kind": name, "target": target})


def parse_decision(text: str) -> list[Action]:
    """Parse a whitespace-separated decision into a list of actions.

    Raises:
        ActionParseError: If the text is empty or any token is invalid.
    """
    tokens = tokenize(text)
    if not tokens:
        raise ActionParseError("You must choose at least one action!")
    return [parse_token(token) for token in tokens]


def format_action(action: Action) -> str:
    """Render an action back into its canonical token, e.g. "trap:B12"."""
    target = getattr(action, "target", None)
    if target is None:
        return action.kind
    return f"{action.kind}:{location_to_string(target)}"


def format_symbols(actions: list[Action]) -> str:
    return "".join(ACTION_SYMBOLS[action.kind] for action in actions)
