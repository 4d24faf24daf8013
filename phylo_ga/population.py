"""
Population and the generational transition.

A population holds one generation of individuals together with the
crossover/mutation rates, elitism, maximum size and the two selection
mechanisms that drive undergo_generation().
"""

import time
from typing import List, Optional, Sequence, Type

import numpy as np

from .data_models import Taxon
from .individual import Individual
from .scheduler import RunContext
from .selection import Selection, best_index


class PopulationError(Exception):
    """Raised when a generation cannot be produced from the current settings."""
    pass


class Population:
    """
    A generation of individuals of a single type.

    Args:
        crossover_rate: Fraction of the population selected as parents, [0, 1]
        mutation_rate: Per-node mutation probability, [0, 1]
        elitism: Fraction of the parent pool carried over unchanged, [0, 1]
        max_size: Maximum population size; None means unbounded
        parent_selection: Mechanism picking parents and elites
        survivor_selection: Mechanism reducing offspring to the next generation
        low_good: True if lower fitness values are better
        rng: Random number generator for pairing and genetic operators
    """

    def __init__(self,
                 crossover_rate: float,
                 mutation_rate: float,
                 elitism: float,
                 max_size: Optional[int],
                 parent_selection: Selection,
                 survivor_selection: Selection,
                 low_good: bool = True,
                 rng: Optional[np.random.Generator] = None):
        self.crossover_rate = crossover_rate
        self.mutation_rate = mutation_rate
        self.elitism = elitism
        self.max_size = max_size
        self.parent_selection = parent_selection
        self.survivor_selection = survivor_selection
        self.low_good = low_good
        self.rng = rng if rng is not None else np.random.default_rng()

        self.individuals: List[Individual] = []
        self.generation = 0

        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self._stats_generation: Optional[int] = None
        self._stats = (0.0, 0.0, 0.0)

    def add_individual(self, individual: Individual) -> None:
        """Add an individual, ignoring any size limit."""
        self.individuals.append(individual)
        self._stats_generation = None

    def seed_random(self, context: RunContext, individual_type: Type[Individual],
                    taxa: Sequence[Taxon], count: Optional[int] = None) -> None:
        """
        Fill the population with randomly generated individuals.

        Args:
            context: Run context owning the fitness scheduler
            individual_type: Individual class providing a random() constructor
            taxa: Taxa to build trees from
            count: How many to create (defaults to max_size)
        """
        if count is None:
            count = self.max_size
        if count is None or count < 1:
            raise PopulationError("Seeding needs a positive count or max_size")
        for _ in range(count):
            self.add_individual(individual_type.random(context, taxa, self.rng))

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self):
        return iter(self.individuals)

    def _crossover(self, parents: List[Individual]) -> List[Individual]:
        """Breed each parent with a different, randomly chosen parent."""
        if len(parents) < 2:
            return []

        children = []
        for index, parent in enumerate(parents):
            mate = index
            while mate == index:
                mate = int(self.rng.integers(0, len(parents)))
            children.append(parent.breed(parents[mate], self.rng))
        return children

    def _mutation(self, pool: List[Individual]) -> List[Individual]:
        """Mutated copies of the pool; individuals that did not mutate are skipped."""
        mutants = []
        for individual in pool:
            mutant = individual.mutate(self.mutation_rate, self.rng)
            if mutant is not None:
                mutants.append(mutant)
        return mutants

    def undergo_generation(self) -> None:
        """
        Replace the population with the next generation.

        1. Select int(crossover_rate * size) parents.
        2. Breed the parents and mutate the original population, repeating
           until at least max_size offspring exist.
        3. Add int(elitism * len(parents)) elites from the parent pool.
        4. Reduce offspring plus elites to max_size by survivor selection.

        Raises:
            GenotypeCastError: If incompatible individuals were bred
            PopulationError: If a round produces no offspring while more
                are still needed
        """
        self.start_time = time.time()
        original = self.individuals

        parents = self.parent_selection.select(
            original, int(self.crossover_rate * len(original))
        )

        offspring: List[Individual] = []
        target = self.max_size if self.max_size is not None else 1
        while len(offspring) < target:
            produced = self._crossover(parents) + self._mutation(original)
            if not produced:
                raise PopulationError(
                    f"Generation {self.generation} produced no offspring "
                    f"({len(parents)} parents, mutation rate {self.mutation_rate}); "
                    f"increase crossover_rate or mutation_rate"
                )
            offspring.extend(produced)

        offspring.extend(self.parent_selection.select(
            parents, int(self.elitism * len(parents))
        ))

        if self.max_size is None:
            self.individuals = offspring
        else:
            self.individuals = self.survivor_selection.select(offspring, self.max_size)

        self.generation += 1
        self._stats_generation = None
        self.end_time = time.time()

    def best_individual(self) -> Individual:
        return self.individuals[best_index(self.individuals, self.low_good)]

    def worst_individual(self) -> Individual:
        return self.individuals[best_index(self.individuals, not self.low_good)]

    def _compute_stats(self):
        if self._stats_generation != self.generation:
            fitnesses = np.array([individual.fitness for individual in self.individuals])
            best = fitnesses.min() if self.low_good else fitnesses.max()
            worst = fitnesses.max() if self.low_good else fitnesses.min()
            self._stats = (float(best), float(fitnesses.mean()), float(worst))
            self._stats_generation = self.generation
        return self._stats

    @property
    def best_fitness(self) -> float:
        return self._compute_stats()[0]

    @property
    def average_fitness(self) -> float:
        return self._compute_stats()[1]

    @property
    def worst_fitness(self) -> float:
        return self._compute_stats()[2]

    @property
    def last_runtime(self) -> Optional[float]:
        """Seconds spent in the most recent generational transition."""
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    def summary(self) -> str:
        lines = []
        if self.last_runtime is not None:
            lines.append(f"Generation #{self.generation - 1} runtime: {self.last_runtime:.3f}s")
        lines.append(f"Generation #: {self.generation}")
        lines.append(f"Best fitness: {self.best_fitness}")
        lines.append(f"Avg fitness: {self.average_fitness}")
        lines.append(f"Worst fitness: {self.worst_fitness}")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        text = self.summary()
        text += f"Individuals ({len(self.individuals)} total):\n"
        for individual in self.individuals:
            text += str(individual)
        return text
