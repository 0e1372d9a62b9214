import unittest
from collections import Counter

from drawkit.errors import (
    EmptyPoolError,
    InvalidCountError,
    MissingFieldError,
    NoRangesError,
    UnknownStrategyError,
)
from drawkit.flexible import DrawPool, Strategy
from drawkit.items import Item
from drawkit.random_source import RandomSource


class ScriptedRandom(RandomSource):
    """Replays queued values; falls back to the lowest possible value."""

    def __init__(self, ints=(), floats=()):
        super().__init__(seed=0)
        self.ints = list(ints)
        self.floats = list(floats)

    def randint(self, a, b):
        return self.ints.pop(0) if self.ints else a

    def randbelow(self, n):
        return self.ints.pop(0) if self.ints else 0

    def random(self):
        return self.floats.pop(0) if self.floats else 0.0


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class DrawPoolTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.items = [
            {"name": "item1", "weight": 10, "min": 1, "max": 50, "time": "daily"},
            {"name": "item2", "weight": 20, "min": 5, "max": 25, "time": "weekly"},
        ]
        self.names = [{"name": "item1"}, {"name": "item2"}]


class ProbabilityDrawTests(DrawPoolTestCase):
    def test_probability_draw_returns_a_pool_member(self) -> None:
        pool = DrawPool(self.items, rng=RandomSource(seed=1))
        self.assertIn(pool.draw("probability"), {"item1", "item2"})
        self.assertEqual(len(pool.items), 2)

    def test_probability_frequencies_follow_weights(self) -> None:
        pool = DrawPool(self.items, rng=RandomSource(seed=99))
        trials = 15000
        counts = Counter(pool.draw(Strategy.PROBABILITY) for _ in range(trials))
        self.assertAlmostEqual(counts["item2"] / trials, 2 / 3, delta=0.03)

    def test_fractional_weights_are_supported(self) -> None:
        pool = DrawPool(
            [{"name": "a", "weight": 0.25}, {"name": "b", "weight": 0.75}],
            rng=RandomSource(seed=5),
        )
        trials = 10000
        counts = Counter(pool.draw("probability") for _ in range(trials))
        self.assertAlmostEqual(counts["b"] / trials, 0.75, delta=0.03)

    def test_weighted_batch_draws_independently(self) -> None:
        pool = DrawPool(self.items, rng=RandomSource(seed=2))
        result = pool.draw("weightedBatch", 2)
        self.assertEqual(len(result), 2)
        for name in result:
            self.assertIn(name, {"item1", "item2"})
        self.assertEqual(len(pool.items), 2)

        repeats = DrawPool([{"name": "only", "weight": 1}], rng=RandomSource(seed=2))
        self.assertEqual(repeats.draw("weightedBatch", 3), ["only", "only", "only"])

    def test_weighted_batch_frequencies_follow_weights(self) -> None:
        pool = DrawPool(
            [{"name": "a", "weight": 1}, {"name": "b", "weight": 3}],
            rng=RandomSource(seed=21),
        )
        counts = Counter()
        for _ in range(2000):
            counts.update(pool.draw("weightedBatch", 5))
        self.assertAlmostEqual(counts["b"] / 10000, 0.75, delta=0.03)

    def test_batch_counts_must_be_positive(self) -> None:
        pool = DrawPool(self.items, rng=RandomSource(seed=2))
        with self.assertRaises(InvalidCountError):
            pool.draw("weightedBatch", 0)
        with self.assertRaises(InvalidCountError):
            pool.draw("batched", -1)


class EliminationDrawTests(DrawPoolTestCase):
    def test_elimination_returns_each_item_once(self) -> None:
        pool = DrawPool(self.names, rng=RandomSource(seed=4))
        drawn = [pool.draw("elimination"), pool.draw("elimination")]
        self.assertCountEqual(drawn, ["item1", "item2"])
        with self.assertRaisesRegex(
            EmptyPoolError, "Items array must contain at least one item."
        ):
            pool.draw("elimination")

    def test_elimination_over_larger_pool(self) -> None:
        names = [f"n{i}" for i in range(25)]
        pool = DrawPool([{"name": n} for n in names], rng=RandomSource(seed=8))
        drawn = [pool.draw("elimination") for _ in names]
        self.assertCountEqual(drawn, names)
        with self.assertRaises(EmptyPoolError):
            pool.draw("elimination")

    def test_weighted_elimination_returns_each_item_once(self) -> None:
        pool = DrawPool(self.items, rng=RandomSource(seed=6))
        drawn = [pool.draw("weightedElimination"), pool.draw("weightedElimination")]
        self.assertCountEqual(drawn, ["item1", "item2"])
        with self.assertRaises(EmptyPoolError):
            pool.draw("weightedElimination")

    def test_weighted_elimination_first_pick_follows_weights(self) -> None:
        rng = RandomSource(seed=31)
        items = [{"name": "a", "weight": 1}, {"name": "b", "weight": 3}]
        trials = 10000
        counts = Counter(
            DrawPool(items, rng=rng).draw("weightedElimination") for _ in range(trials)
        )
        self.assertAlmostEqual(counts["b"] / trials, 0.75, delta=0.03)

    def test_empty_pool_raises_without_validation(self) -> None:
        pool = DrawPool([], check=False)
        with self.assertRaises(EmptyPoolError):
            pool.draw("probability")

    def test_batched_without_replacement_draws_both_items(self) -> None:
        pool = DrawPool(self.names, rng=RandomSource(seed=3))
        result = pool.draw("batched", 2, False)
        self.assertEqual(len(result), 2)
        self.assertCountEqual(result, ["item1", "item2"])
        self.assertEqual(pool.items, [])

    def test_batched_stops_when_pool_runs_out(self) -> None:
        pool = DrawPool(self.names, rng=RandomSource(seed=3))
        self.assertCountEqual(pool.draw("batched", 5), ["item1", "item2"])

    def test_batched_with_replacement_keeps_pool(self) -> None:
        pool = DrawPool(self.names, rng=RandomSource(seed=3))
        result = pool.draw("batched", 5, with_replacement=True)
        self.assertEqual(len(result), 5)
        self.assertTrue(set(result) <= {"item1", "item2"})
        self.assertEqual(len(pool.items), 2)

    def test_batched_with_replacement_is_uniform(self) -> None:
        pool = DrawPool(self.names, rng=RandomSource(seed=12))
        result = pool.draw("batched", 10000, with_replacement=True)
        self.assertAlmostEqual(Counter(result)["item1"] / 10000, 0.5, delta=0.03)


class CyclicDrawTests(DrawPoolTestCase):
    def test_round_robin_cycles_in_order(self) -> None:
        pool = DrawPool(self.names, rng=ScriptedRandom())
        drawn = [pool.draw("roundRobin") for _ in range(4)]
        self.assertEqual(drawn, ["item1", "item2", "item1", "item2"])

    def test_sequential_cycles_in_order(self) -> None:
        pool = DrawPool(self.names, rng=RandomSource(seed=11))
        drawn = [pool.draw("sequential") for _ in range(4)]
        self.assertEqual(drawn, ["item1", "item2", "item1", "item2"])

    def test_round_robin_and_sequential_share_a_cursor(self) -> None:
        pool = DrawPool(self.names)
        self.assertEqual(pool.draw("roundRobin"), "item1")
        self.assertEqual(pool.draw("sequential"), "item2")
        self.assertEqual(pool.cursor, 0)

    def test_cursor_stays_valid_after_pool_shrinks(self) -> None:
        pool = DrawPool(
            [{"name": "a"}, {"name": "b"}, {"name": "c"}], rng=ScriptedRandom(ints=[0])
        )
        pool.draw("roundRobin")
        pool.draw("roundRobin")
        self.assertEqual(pool.draw("elimination"), "a")
        self.assertEqual(pool.draw("roundRobin"), "b")
        self.assertEqual(pool.draw("roundRobin"), "c")

    def test_instances_do_not_share_state(self) -> None:
        first = DrawPool(self.names)
        second = DrawPool(self.names)
        first.draw("roundRobin")
        self.assertEqual(second.draw("roundRobin"), "item1")
        first.draw("elimination")
        self.assertEqual(len(second.items), 2)


class CumulativeDrawTests(DrawPoolTestCase):
    def test_highest_score_wins_and_resets(self) -> None:
        pool = DrawPool(self.names, rng=ScriptedRandom(ints=[5, 7, 3]))
        self.assertEqual(pool.draw("cumulative"), "item2")
        self.assertEqual(pool.cumulative_scores, {"item1": 5, "item2": 0})
        self.assertEqual(pool.last_picked_name, "item2")
        # Only item1 is topped up on the next round.
        self.assertEqual(pool.draw("cumulative"), "item1")
        self.assertEqual(pool.cumulative_scores, {"item1": 0, "item2": 0})

    def test_ties_go_to_the_first_item(self) -> None:
        pool = DrawPool(self.names, rng=ScriptedRandom(ints=[9, 9]))
        self.assertEqual(pool.draw("cumulative"), "item1")

    def test_never_repeats_consecutively(self) -> None:
        pool = DrawPool(
            [{"name": "a"}, {"name": "b"}, {"name": "c"}], rng=RandomSource(seed=21)
        )
        drawn = [pool.draw("cumulative") for _ in range(300)]
        for previous, current in zip(drawn, drawn[1:]):
            self.assertNotEqual(previous, current)
        self.assertEqual(set(drawn), {"a", "b", "c"})

    def test_eliminated_items_are_not_reintroduced(self) -> None:
        pool = DrawPool(
            [{"name": "a"}, {"name": "b"}, {"name": "c"}], rng=RandomSource(seed=13)
        )
        pool.draw("cumulative")
        removed = pool.draw("elimination")
        remaining = {item.name for item in pool.items}
        for _ in range(20):
            self.assertIn(pool.draw("cumulative"), remaining)
        self.assertIn(removed, pool.cumulative_scores)


class TimeBasedDrawTests(DrawPoolTestCase):
    def test_records_pick_time_and_keeps_pool_order(self) -> None:
        clock = FakeClock(1000.0)
        pool = DrawPool(self.items, rng=RandomSource(seed=1), clock=clock)
        picked = pool.draw("timeBased")
        self.assertIn(picked, {"item1", "item2"})
        self.assertEqual(pool.last_picked_timestamps, {picked: 1000.0})
        self.assertEqual([item.name for item in pool.items], ["item1", "item2"])

    def test_due_items_are_scanned_first(self) -> None:
        clock = FakeClock(1000.0)
        items = [
            {"name": "a", "weight": 1, "time": "minute"},
            {"name": "b", "weight": 1, "time": "minute"},
        ]
        # A ticket of 1 always lands on whichever item is scanned first.
        pool = DrawPool(items, rng=ScriptedRandom(ints=[1, 1, 1]), clock=clock)
        self.assertEqual(pool.draw("timeBased"), "a")
        clock.now = 1010.0
        self.assertEqual(pool.draw("timeBased"), "b")
        clock.now = 1100.0
        self.assertEqual(pool.draw("timeBased"), "a")

    def test_heavier_items_are_scanned_first_within_due_state(self) -> None:
        items = [
            {"name": "light", "weight": 1, "time": "daily"},
            {"name": "heavy", "weight": 5, "time": "daily"},
        ]
        pool = DrawPool(items, rng=ScriptedRandom(ints=[1]), clock=FakeClock(10**6))
        self.assertEqual(pool.draw("timeBased"), "heavy")

    def test_frequencies_follow_weights_once_every_item_is_due(self) -> None:
        clock = FakeClock(0.0)
        items = [
            {"name": "a", "weight": 1, "time": "monthly"},
            {"name": "b", "weight": 3, "time": "minute"},
        ]
        pool = DrawPool(items, rng=RandomSource(seed=41), clock=clock)
        trials = 10000
        counts = Counter()
        for _ in range(trials):
            # Past the longest threshold, so recency never reorders the scan.
            clock.now += 10**7
            counts[pool.draw("timeBased")] += 1
        self.assertAlmostEqual(counts["b"] / trials, 0.75, delta=0.03)

    def test_requires_time_field(self) -> None:
        pool = DrawPool([{"name": "a", "weight": 1}])
        with self.assertRaises(MissingFieldError):
            pool.draw("timeBased")


class RangeWeightedDrawTests(DrawPoolTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ranges = [
            {"name": "item1", "min": 1, "max": 50, "weight": 10},
            {"name": "item2", "min": 5, "max": 25, "weight": 15},
        ]

    def test_value_falls_inside_selected_range(self) -> None:
        pool = DrawPool(self.ranges, check=False, rng=ScriptedRandom(ints=[11], floats=[0.5]))
        self.assertEqual(pool.draw("rangeWeighted"), 15.0)

    def test_values_stay_within_bounds(self) -> None:
        pool = DrawPool(self.ranges, rng=RandomSource(seed=17))
        for _ in range(500):
            value = pool.draw("rangeWeighted")
            self.assertGreaterEqual(value, 1)
            self.assertLessEqual(value, 50)

    def test_items_without_ranges_raise(self) -> None:
        pool = DrawPool(self.names, check=False)
        with self.assertRaises(NoRangesError):
            pool.draw("rangeWeighted")

    def test_ranges_are_computed_once(self) -> None:
        pool = DrawPool(self.ranges + [{"name": "plain"}], check=False)
        self.assertEqual([item.name for item in pool.ranges], ["item1", "item2"])


class DrawPoolInterfaceTests(DrawPoolTestCase):
    def test_unknown_strategy_raises(self) -> None:
        with self.assertRaisesRegex(UnknownStrategyError, "Unknown draw type: lottery"):
            DrawPool(self.names).draw("lottery")

    def test_check_can_run_on_demand(self) -> None:
        pool = DrawPool(self.names)
        pool.check()
        pool.check("elimination")
        with self.assertRaises(MissingFieldError) as ctx:
            pool.check("probability")
        self.assertEqual(ctx.exception.fields, ("weight",))

    def test_accepts_item_objects(self) -> None:
        pool = DrawPool([Item(name="x", weight=1)], rng=RandomSource(seed=1))
        self.assertEqual(pool.draw(Strategy.PROBABILITY), "x")


if __name__ == "__main__":
    unittest.main()
