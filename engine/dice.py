"""Randomness helpers. Every draw goes through an explicit Random instance."""

import random


def chance(probability: float, rng: random.Random | None = None) -> bool:
    """Return True with the given probability (0.0 - 1.0)."""
    rng = rng or random.Random()
    return rng.random() < probability


def shuffled(items: list, rng: random.Random | None = None) -> list:
    """Return a shuffled copy of items, leaving the input untouched."""
    rng = rng or random.Random()
    result = list(items)
    rng.shuffle(result)
    return result


def shuffle_with_dependencies(
    items: list[str],
    dependencies: dict[str, str],
    rng: random.Random | None = None,
) -> list[str]:
    """Shuffle items so that every item comes after the item it depends on.

    Args:
        items: Items to order.
        dependencies: item -> the item that must precede it. Entries that
            point outside `items` are ignored, and cycles are broken
            arbitrarily at the point they are detected.
        rng: Optional Random instance for seeded/testing shuffles.

    Returns:
        A new list containing every item exactly once.
    """
    rng = rng or random.Random()
    order = shuffled(items, rng)
    members = set(order)
    placed: set[str] = set()
    result: list[str] = []

    for item in order:
        # Walk up the dependency chain, then place from the root down
        chain = []
        current = item
        while current in members and current not in placed and current not in chain:
            chain.append(current)
            current = dependencies.get(current)
            if current is None:
                break
        for link in reversed(chain):
            placed.add(link)
            result.append(link)

    return result
