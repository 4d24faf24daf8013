"""
Phylogenetic GA

A genetic algorithm that evolves rooted binary trees over a set of aligned
taxa, scoring each tree by its Sankoff parsimony cost (lower is better).

Key Features:
- Arena-backed tree genotype with structure-preserving crossover and mutation
- Sankoff dynamic-programming scorer over parsimony-informative sites
- Fitness computed asynchronously on a shared, bounded worker pool
- Truncation, binary tournament and roulette-wheel selection
- YAML run configuration with a command-line entry point

Modules:
- tree: Binary tree with parent back-references
- data_models: Taxon, ParsimonyItem and enums
- genotype: Random tree construction, crossover and mutation
- sankoff: Parsimony scoring and informative-site detection
- scheduler: Fitness worker pool and run context
- individual: Individuals with asynchronously computed fitness
- selection: Selection mechanisms
- population: Generational transition and statistics
- terminators: Termination conditions
- printers: Progress reporters and fitness history
- environment: Run driver
- msa_io: ClustalW and FASTA alignment readers
- visualization: Fitness history plots
- cli: Run configuration and command-line interface
"""

__version__ = "0.1.0"

from .data_models import Taxon, ParsimonyItem, Source, FitnessState
from .tree import Tree
from .genotype import PhylogeneticTreeGenotype, GenotypeCastError, DegenerateTreeError
from .individual import PhylogeneticTreeIndividual
from .population import Population
from .scheduler import RunContext
from .environment import Environment

__all__ = [
    "Taxon",
    "ParsimonyItem",
    "Source",
    "FitnessState",
    "Tree",
    "PhylogeneticTreeGenotype",
    "GenotypeCastError",
    "DegenerateTreeError",
    "PhylogeneticTreeIndividual",
    "Population",
    "RunContext",
    "Environment",
]
