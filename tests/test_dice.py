"""Tests for randomness helpers and the dependency-respecting shuffle."""

import random

from engine.dice import chance, shuffle_with_dependencies, shuffled


class TestChance:
    """Tests for chance()."""

    def test_extremes(self):
        rng = random.Random(42)
        assert all(chance(1.0, rng) for _ in range(50))
        assert not any(chance(0.0, rng) for _ in range(50))

    def test_seeded_is_deterministic(self):
        a = [chance(0.5, random.Random(7)) for _ in range(5)]
        b = [chance(0.5, random.Random(7)) for _ in range(5)]
        assert a == b


class TestShuffled:
    """Tests for shuffled()."""

    def test_returns_copy(self):
        items = [1, 2, 3, 4, 5]
        result = shuffled(items, random.Random(42))
        assert items == [1, 2, 3, 4, 5]
        assert sorted(result) == items


class TestShuffleWithDependencies:
    """Tests for shuffle_with_dependencies()."""

    def test_dependency_precedes_dependent(self):
        for seed in range(30):
            order = shuffle_with_dependencies(["a", "b", "c", "d"], {"a": "b", "b": "c"}, random.Random(seed))
            assert sorted(order) == ["a", "b", "c", "d"]
            assert order.index("c") < order.index("b") < order.index("a")

    def test_unknown_dependency_ignored(self):
        order = shuffle_with_dependencies(["a", "b"], {"a": "ghost"}, random.Random(42))
        assert sorted(order) == ["a", "b"]

    def test_cycle_still_places_everyone(self):
        order = shuffle_with_dependencies(["a", "b", "c"], {"a": "b", "b": "a"}, random.Random(42))
        assert sorted(order) == ["a", "b", "c"]

    def test_no_dependencies_is_a_permutation(self):
        items = [str(i) for i in range(10)]
        order = shuffle_with_dependencies(items, {}, random.Random(42))
        assert sorted(order) == sorted(items)
