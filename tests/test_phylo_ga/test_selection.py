"""
Tests for selection mechanisms.
"""

import unittest

import numpy as np

from phylo_ga.selection import (
    SELECTIONS,
    BinaryTournamentSelection,
    RouletteWheelSelection,
    SelectionError,
    TruncationSelection,
    best_index,
    better,
    create_selection,
    roulette_probabilities,
)

from .helpers import FixedFitness


def fitnesses(individuals):
    return [individual.fitness for individual in individuals]


class TestComparisons(unittest.TestCase):
    """Test the fitness comparison helpers."""

    def test_better(self):
        """Test both fitness directions."""
        low, high = FixedFitness(1), FixedFitness(9)
        self.assertIs(better(low, high, low_good=True), low)
        self.assertIs(better(low, high, low_good=False), high)

    def test_better_tie_goes_to_second(self):
        """Test that ties favour the second argument."""
        first, second = FixedFitness(3, "first"), FixedFitness(3, "second")
        self.assertIs(better(first, second, low_good=True), second)
        self.assertIs(better(first, second, low_good=False), second)

    def test_best_index_tie_goes_to_first(self):
        """Test that the earliest of equally fit individuals wins."""
        pool = [FixedFitness(5), FixedFitness(1, "a"), FixedFitness(1, "b")]
        self.assertEqual(best_index(pool, low_good=True), 1)
        self.assertEqual(best_index(pool, low_good=False), 0)


class TestTruncationSelection(unittest.TestCase):
    """Test truncation selection."""

    def setUp(self):
        self.pool = [FixedFitness(value) for value in (5, 1, 3, 2, 4)]
        self.selection = TruncationSelection(low_good=True)

    def test_selects_best(self):
        """Test that the best individuals are kept, best first."""
        self.assertEqual(fitnesses(self.selection.select(self.pool, 2)), [1, 2])

    def test_high_good(self):
        """Test the reversed fitness direction."""
        selection = TruncationSelection(low_good=False)
        self.assertEqual(fitnesses(selection.select(self.pool, 2)), [5, 4])

    def test_low_good_override(self):
        """Test overriding the direction per call."""
        self.assertEqual(fitnesses(self.selection.select(self.pool, 1, low_good=False)), [5])

    def test_whole_pool_sorted(self):
        """Test that asking for everything returns the pool best to worst."""
        self.assertEqual(fitnesses(self.selection.select(self.pool, 5)), [1, 2, 3, 4, 5])
        self.assertEqual(fitnesses(self.selection.select(self.pool, 50)), [1, 2, 3, 4, 5])

    def test_pool_untouched(self):
        """Test that the snapshot passed in is not modified."""
        before = list(self.pool)
        self.selection.select(self.pool, 3)
        self.assertEqual(self.pool, before)

    def test_no_duplicates(self):
        """Test that truncation never picks an individual twice."""
        chosen = self.selection.select(self.pool, 4)
        self.assertEqual(len(set(map(id, chosen))), 4)


class TestBinaryTournamentSelection(unittest.TestCase):
    """Test binary tournament selection."""

    def setUp(self):
        self.rng = np.random.default_rng(42)
        self.pool = [FixedFitness(value) for value in range(10)]

    def test_count(self):
        """Test the number of winners, which may exceed the pool size."""
        selection = BinaryTournamentSelection(low_good=True, rng=self.rng)
        chosen = selection.select(self.pool, 25)
        self.assertEqual(len(chosen), 25)
        for individual in chosen:
            self.assertIn(individual, self.pool)

    def test_distinct_contestants(self):
        """Test that with two individuals the better one always wins."""
        pool = [FixedFitness(1), FixedFitness(9)]
        low = BinaryTournamentSelection(low_good=True, rng=self.rng)
        high = BinaryTournamentSelection(low_good=False, rng=self.rng)

        self.assertEqual(set(fitnesses(low.select(pool, 20))), {1})
        self.assertEqual(set(fitnesses(high.select(pool, 20))), {9})

    def test_worst_never_wins(self):
        """Test that the worst individual can never win a tournament."""
        selection = BinaryTournamentSelection(low_good=True, rng=self.rng)
        self.assertNotIn(9, fitnesses(selection.select(self.pool, 200)))

    def test_single_individual(self):
        """Test a pool of one."""
        only = FixedFitness(3)
        selection = BinaryTournamentSelection(low_good=True, rng=self.rng)
        self.assertEqual(selection.select([only], 3), [only, only, only])


class TestRouletteWheelSelection(unittest.TestCase):
    """Test roulette wheel selection."""

    def setUp(self):
        self.rng = np.random.default_rng(42)

    def test_probabilities_high_good(self):
        """Test fitness-proportional probabilities, most likely first."""
        low, high = FixedFitness(1), FixedFitness(3)
        pairs = roulette_probabilities([low, high], low_good=False)

        self.assertIs(pairs[0][0], high)
        self.assertAlmostEqual(pairs[0][1], 0.75)
        self.assertAlmostEqual(pairs[1][1], 0.25)

    def test_probabilities_low_good(self):
        """Test that low fitness gets the complementary probability."""
        low, high = FixedFitness(1), FixedFitness(3)
        pairs = roulette_probabilities([low, high], low_good=True)

        self.assertIs(pairs[0][0], low)
        self.assertAlmostEqual(pairs[0][1], 0.75)

    def test_zero_total(self):
        """Test that an all-zero population gets uniform probabilities."""
        pairs = roulette_probabilities([FixedFitness(0), FixedFitness(0)], low_good=False)
        self.assertEqual([probability for _, probability in pairs], [0.5, 0.5])

    def test_count(self):
        """Test that exactly count individuals are accepted."""
        pool = [FixedFitness(value) for value in (4, 6, 8, 10)]
        selection = RouletteWheelSelection(low_good=True, rng=self.rng)
        chosen = selection.select(pool, 12)

        self.assertEqual(len(chosen), 12)
        for individual in chosen:
            self.assertIn(individual, pool)

    def test_single_individual(self):
        """Test that a pool of one is always selected, in either direction."""
        only = FixedFitness(5)
        for low_good in (True, False):
            selection = RouletteWheelSelection(low_good=low_good, rng=self.rng)
            self.assertEqual(selection.select([only], 3), [only, only, only])

    def test_no_positive_probability(self):
        """Test that undefined fitness leaves nothing to accept."""
        pool = [FixedFitness(float("nan")), FixedFitness(float("nan"))]
        selection = RouletteWheelSelection(low_good=False, rng=self.rng)
        with self.assertRaises(SelectionError):
            selection.select(pool, 1)

    def test_sweep_limit(self):
        """Test that the sweep cap stops a wheel that almost never accepts."""
        pool = [FixedFitness(1), FixedFitness(1e12)]
        selection = RouletteWheelSelection(low_good=False, rng=self.rng, max_sweeps=1)
        with self.assertRaises(SelectionError):
            selection.select(pool, 5)


class TestSelectionCommon(unittest.TestCase):
    """Test behavior shared by all mechanisms and the registry."""

    def test_zero_count(self):
        """Test that a non-positive count selects nobody."""
        pool = [FixedFitness(1), FixedFitness(2)]
        for name in SELECTIONS:
            selection = create_selection(name, True, np.random.default_rng(0))
            self.assertEqual(selection.select(pool, 0), [])
            self.assertEqual(selection.select(pool, -3), [])

    def test_empty_pool(self):
        """Test that selecting from nobody fails."""
        for name in SELECTIONS:
            selection = create_selection(name, True, np.random.default_rng(0))
            with self.assertRaises(SelectionError):
                selection.select([], 1)

    def test_create_selection(self):
        """Test construction by configuration name."""
        self.assertIsInstance(create_selection("truncation", True), TruncationSelection)
        self.assertIsInstance(create_selection("tournament", True), BinaryTournamentSelection)
        roulette = create_selection("roulette", False)
        self.assertIsInstance(roulette, RouletteWheelSelection)
        self.assertFalse(roulette.low_good)

    def test_unknown_selection(self):
        """Test that unknown names are rejected."""
        with self.assertRaises(KeyError):
            create_selection("lottery", True)


if __name__ == '__main__':
    unittest.main()
