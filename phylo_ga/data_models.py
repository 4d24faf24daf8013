"""
Data models for the phylogenetic GA.

Core records shared across the package: taxa read from an alignment, the
per-node parsimony payload stored in tree nodes, and small enums tagging
genotype origin and fitness progress.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

NUM_NUCLEOTIDES = 4


class Source(Enum):
    """Where a genotype came from. Informational only."""
    UNDEFINED = "undefined"
    INITIAL = "initial"
    MUTATION = "mutation"
    CROSSOVER = "crossover"


class FitnessState(Enum):
    """Progress of an individual's fitness computation."""
    PENDING = "pending"
    COMPUTING = "computing"
    READY = "ready"


@dataclass(frozen=True)
class Taxon:
    """
    An observed species and its aligned sequence.

    Attributes:
        name: Taxon identifier from the alignment
        sequence: Aligned sequence, trimmed to parsimony-informative columns
    """
    name: str
    sequence: str

    def __len__(self) -> int:
        return len(self.sequence)


@dataclass(eq=False)
class ParsimonyItem:
    """
    Payload stored in each phylogenetic tree node.

    Leaves carry a taxon name and its informative points; ancestor
    (internal) nodes carry neither. Every item owns a 4-element scratch
    array used by the Sankoff dynamic program, one slot per nucleotide.

    Attributes:
        name: Taxon name (None for ancestors)
        sequence: Informative points of the taxon (None for ancestors)
        is_ancestor: True for inferred internal nodes
        scores: Sankoff scratch space
    """
    name: Optional[str] = None
    sequence: Optional[str] = None
    is_ancestor: bool = True
    scores: np.ndarray = field(default_factory=lambda: np.zeros(NUM_NUCLEOTIDES))

    @classmethod
    def ancestor(cls) -> "ParsimonyItem":
        """Create an unlabeled ancestor item."""
        return cls()

    @classmethod
    def from_taxon(cls, taxon: Taxon) -> "ParsimonyItem":
        """Create a leaf item for the given taxon."""
        return cls(name=taxon.name, sequence=taxon.sequence, is_ancestor=False)

    @property
    def is_taxon(self) -> bool:
        return not self.is_ancestor

    def copy(self) -> "ParsimonyItem":
        """
        Copy name, sequence and ancestor flag; scratch scores start zeroed.

        Returns:
            New independent ParsimonyItem
        """
        return ParsimonyItem(
            name=self.name,
            sequence=self.sequence,
            is_ancestor=self.is_ancestor,
        )

    def reset_scores(self) -> None:
        self.scores.fill(0.0)

    def __str__(self) -> str:
        return self.name if self.name is not None else ""
