"""
Selection mechanisms.

All strategies take a snapshot of individuals and return a new list of the
requested length. Reading fitness may block on pending fitness tasks, but
no strategy ever modifies an individual.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Type

import numpy as np

from .individual import Individual


class SelectionError(Exception):
    """Raised when a selection cannot be carried out."""
    pass


def better(first: Individual, second: Individual, low_good: bool) -> Individual:
    """Return the fitter of two individuals; ties go to the second."""
    if (low_good and first.fitness < second.fitness) or \
            (not low_good and first.fitness > second.fitness):
        return first
    return second


def best_index(individuals: Sequence[Individual], low_good: bool) -> int:
    """Index of the fittest individual; the first one wins ties."""
    best = 0
    best_fitness = individuals[0].fitness
    for index in range(1, len(individuals)):
        fitness = individuals[index].fitness
        if (low_good and fitness < best_fitness) or (not low_good and fitness > best_fitness):
            best = index
            best_fitness = fitness
    return best


class Selection:
    """
    Base selection mechanism.

    Args:
        low_good: True if lower fitness values are better
        rng: Random number generator (a fresh one if omitted)
    """

    name = "selection"

    def __init__(self, low_good: bool, rng: Optional[np.random.Generator] = None):
        self.low_good = low_good
        self.rng = rng if rng is not None else np.random.default_rng()

    def select(self, individuals: Sequence[Individual], count: int,
               low_good: Optional[bool] = None) -> List[Individual]:
        """
        Choose count individuals from the snapshot.

        Args:
            individuals: Population snapshot
            count: Number of individuals wanted; <= 0 selects none
            low_good: Override for the configured fitness direction

        Returns:
            List of selected individuals
        """
        if low_good is None:
            low_good = self.low_good
        if count <= 0:
            return []
        if not individuals:
            raise SelectionError(f"{self.name}: cannot select {count} from an empty pool")
        return self._select(list(individuals), count, low_good)

    def _select(self, individuals: List[Individual], count: int,
                low_good: bool) -> List[Individual]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(low_good={self.low_good})"


class TruncationSelection(Selection):
    """
    Keep the best individuals.

    Repeatedly removes the best remaining individual until count have been
    collected. Asking for the whole pool (or more) returns every
    individual ordered best to worst.
    """

    name = "truncation"

    def _select(self, individuals, count, low_good):
        remaining = list(individuals)
        chosen = []
        for _ in range(min(count, len(remaining))):
            chosen.append(remaining.pop(best_index(remaining, low_good)))
        return chosen


class BinaryTournamentSelection(Selection):
    """Pick two distinct individuals at random, keep the better; repeat count times."""

    name = "tournament"

    def _select(self, individuals, count, low_good):
        return [self.choose_individual(individuals, low_good) for _ in range(count)]

    def choose_individual(self, individuals: Sequence[Individual], low_good: bool) -> Individual:
        size = len(individuals)
        first = int(self.rng.integers(0, size))
        second = int(self.rng.integers(0, size))
        if size > 1:
            while second == first:
                second = int(self.rng.integers(0, size))
        return better(individuals[first], individuals[second], low_good)


def roulette_probabilities(individuals: Sequence[Individual],
                           low_good: bool) -> List[Tuple[Individual, float]]:
    """
    Pair each individual with its roulette selection probability.

    Probability is fitness / total fitness, or 1 minus that when low
    fitness is better. Pairs are sorted from most to least likely.
    """
    fitnesses = np.array([individual.fitness for individual in individuals], dtype=float)
    total = fitnesses.sum()
    if total == 0:
        probabilities = np.full(len(fitnesses), 1.0 / len(fitnesses))
    else:
        probabilities = fitnesses / total
    if low_good:
        probabilities = 1.0 - probabilities

    pairs = list(zip(individuals, probabilities.tolist()))
    pairs.sort(key=lambda pair: pair[1], reverse=True)
    return pairs


class RouletteWheelSelection(Selection):
    """
    Fitness-proportional selection by repeated sweeps.

    Candidates are swept from most to least likely; each gets an
    independent trial with its own probability. Sweeps repeat until count
    individuals are accepted, so an individual can be accepted more than
    once. A pool of one is returned count times.

    Args:
        low_good: True if lower fitness values are better
        rng: Random number generator
        max_sweeps: Upper bound on sweeps before giving up
    """

    name = "roulette"

    def __init__(self, low_good: bool, rng: Optional[np.random.Generator] = None,
                 max_sweeps: int = 10000):
        super().__init__(low_good, rng)
        self.max_sweeps = max_sweeps

    def _select(self, individuals, count, low_good):
        # Under low_good a lone candidate has probability 0
        if len(individuals) == 1:
            return [individuals[0]] * count

        pairs = roulette_probabilities(individuals, low_good)
        if not any(probability > 0 for _, probability in pairs):
            raise SelectionError(
                "roulette: no individual has a positive selection probability"
            )

        chosen = []
        sweeps = 0
        while len(chosen) < count:
            if sweeps >= self.max_sweeps:
                raise SelectionError(
                    f"roulette: only {len(chosen)} of {count} accepted "
                    f"after {self.max_sweeps} sweeps"
                )
            for individual, probability in pairs:
                if len(chosen) >= count:
                    break
                if self.rng.random() < probability:
                    chosen.append(individual)
            sweeps += 1
        return chosen


SELECTIONS: Dict[str, Type[Selection]] = {
    TruncationSelection.name: TruncationSelection,
    BinaryTournamentSelection.name: BinaryTournamentSelection,
    RouletteWheelSelection.name: RouletteWheelSelection,
}


def create_selection(name: str, low_good: bool,
                     rng: Optional[np.random.Generator] = None) -> Selection:
    """
    Build a selection mechanism from its configuration name.

    Raises:
        KeyError: If name is not registered
    """
    try:
        selection_cls = SELECTIONS[name]
    except KeyError:
        raise KeyError(
            f"Unknown selection mechanism: '{name}'. "
            f"Available: {', '.join(sorted(SELECTIONS))}"
        ) from None
    return selection_cls(low_good, rng)
