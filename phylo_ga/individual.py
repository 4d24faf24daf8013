"""
Individuals of the GA population.

An individual couples a genotype with a fitness value that is computed
asynchronously on the run's FitnessScheduler. Construction never blocks;
reading the fitness blocks only on that individual's own task.
Individuals are never modified after construction: breeding and mutation
always produce new ones.
"""

from typing import Dict, Optional, Sequence, Type

import numpy as np

from .data_models import FitnessState, Taxon
from .genotype import Genotype, GenotypeCastError, PhylogeneticTreeGenotype
from .sankoff import parsimony_score
from .scheduler import RunContext


class Individual:
    """Base individual; subclasses implement calculate_fitness()."""

    def __init__(self, context: RunContext, genotype: Genotype):
        self.context = context
        self.genotype = genotype
        self.id = context.next_id()
        self._future = context.scheduler.submit(self.id, self.calculate_fitness)

    def calculate_fitness(self) -> float:
        raise NotImplementedError

    @property
    def fitness(self) -> float:
        """Fitness value, waiting for the background computation if needed."""
        return self._future.result()

    @property
    def fitness_state(self) -> FitnessState:
        if self._future.done():
            return FitnessState.READY
        if self._future.running():
            return FitnessState.COMPUTING
        return FitnessState.PENDING

    def breed(self, other: "Individual", rng: np.random.Generator) -> "Individual":
        """
        Cross this individual's genotype with another's.

        Args:
            other: Co-parent of the same individual type
            rng: Random number generator

        Returns:
            New individual of the same type

        Raises:
            GenotypeCastError: If the individuals or genotypes are incompatible
        """
        if type(self) is not type(other):
            raise GenotypeCastError(
                f"Different individual types tried to breed: "
                f"{type(self).__name__} and {type(other).__name__}"
            )
        child_genotype = self.genotype.crossover(other.genotype, rng)
        return type(self)(self.context, child_genotype)

    def mutate(self, rate: float, rng: np.random.Generator) -> Optional["Individual"]:
        """
        Mutated copy of this individual, or None if no mutation happened.
        """
        mutated = self.genotype.mutate(rate, rng)
        if mutated is None:
            return None
        return type(self)(self.context, mutated)

    def __str__(self) -> str:
        return (
            f"Individual ID: {self.id}\n"
            f"\t Phenotype: {self.genotype}\n"
            f"\t Fitness: {self.fitness}\n"
            f"\t Source: {self.genotype.source.value}\n"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, state={self.fitness_state.value})"


class PhylogeneticTreeIndividual(Individual):
    """Individual whose fitness is the Sankoff parsimony cost of its tree (lower is better)."""

    @classmethod
    def random(cls, context: RunContext, taxa: Sequence[Taxon],
               rng: np.random.Generator) -> "PhylogeneticTreeIndividual":
        return cls(context, PhylogeneticTreeGenotype.from_taxa(taxa, rng))

    def calculate_fitness(self) -> float:
        return parsimony_score(self.genotype.tree)

    @property
    def cherry_count(self) -> int:
        """Number of sibling leaf pairs in the tree."""
        return self.genotype.cherry_count()


INDIVIDUALS: Dict[str, Type[Individual]] = {
    "phylogenetic_tree": PhylogeneticTreeIndividual,
}


def get_individual_type(name: str) -> Type[Individual]:
    """
    Look up an individual type by configuration name.

    Raises:
        KeyError: If name is not registered
    """
    try:
        return INDIVIDUALS[name]
    except KeyError:
        raise KeyError(
            f"Unknown individual type: '{name}'. "
            f"Available: {', '.join(sorted(INDIVIDUALS))}"
        ) from None
