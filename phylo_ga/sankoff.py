"""
Sankoff parsimony scoring.

Computes the minimum weighted number of substitutions needed to explain one
alignment column on a fixed tree, and sums that cost over every
parsimony-informative column. Also holds the informative-site test used to
trim alignments before genotypes are built.
"""

from typing import List, Sequence

import numpy as np

from .data_models import Taxon
from .tree import Tree

NUCLEOTIDES = "ACGT"

# Transitions (A<->G, C<->T) cost 1, transversions cost 2
COST_MATRIX = np.array([
    [0.0, 2.0, 1.0, 2.0],
    [2.0, 0.0, 2.0, 1.0],
    [1.0, 2.0, 0.0, 2.0],
    [2.0, 1.0, 2.0, 0.0],
])


def nucleotide_index(symbol: str) -> int:
    """
    Position of a nucleotide in NUCLEOTIDES.

    Raises:
        ValueError: If symbol is not one of A, C, G, T
    """
    index = NUCLEOTIDES.find(symbol.upper()) if len(symbol) == 1 else -1
    if index < 0:
        raise ValueError(f"Unknown nucleotide: {symbol!r}")
    return index


def cost(first: str, second: str, cost_matrix: np.ndarray = COST_MATRIX) -> float:
    """Substitution cost between two nucleotides."""
    return float(cost_matrix[nucleotide_index(first), nucleotide_index(second)])


def clear_scores(tree: Tree) -> None:
    """Reset every node's scratch array to zero."""
    for node in tree:
        tree.item(node).reset_scores()


def score_site(tree: Tree, site: int, cost_matrix: np.ndarray = COST_MATRIX) -> float:
    """
    Sankoff cost of one alignment column on the given tree.

    Nodes are visited in post-order so children are always scored before
    their parent. A leaf scores 0 for its observed nucleotide and +inf for
    the rest; an internal node scores, for each candidate nucleotide x,
    the sum over both children of min_y(cost(x, y) + child[y]).

    Args:
        tree: Tree of ParsimonyItems
        site: Column index into each taxon's informative points
        cost_matrix: 4x4 substitution cost matrix

    Returns:
        Minimum cost at the root

    Raises:
        ValueError: If a leaf holds a symbol other than A, C, G, T
    """
    clear_scores(tree)

    for node in tree:
        item = tree.item(node)
        if item.is_taxon:
            item.scores.fill(np.inf)
            item.scores[nucleotide_index(item.sequence[site])] = 0.0
        else:
            total = np.zeros(len(NUCLEOTIDES))
            for child in (tree.left(node), tree.right(node)):
                if child is None:
                    continue
                child_scores = tree.item(child).scores
                total += np.min(cost_matrix + child_scores[np.newaxis, :], axis=1)
            item.scores[:] = total

    return float(np.min(tree.item(tree.root).scores))


def parsimony_score(tree: Tree, cost_matrix: np.ndarray = COST_MATRIX) -> float:
    """
    Total Sankoff cost over every informative column.

    Lower is better.

    Args:
        tree: Tree of ParsimonyItems whose leaves hold equal-length sequences
        cost_matrix: 4x4 substitution cost matrix

    Returns:
        Sum of per-column costs
    """
    num_sites = 0
    for node in tree:
        item = tree.item(node)
        if item.is_taxon:
            num_sites = len(item.sequence)
            break

    total = 0.0
    for site in range(num_sites):
        total += score_site(tree, site, cost_matrix)
    clear_scores(tree)
    return total


def is_informative_site(column: Sequence[str]) -> bool:
    """
    Whether a single alignment column is parsimony-informative.

    A column qualifies when no taxon has a gap (or any non-ACGT symbol)
    and at least two distinct nucleotides each appear at least twice.
    """
    counts = [0] * len(NUCLEOTIDES)
    for symbol in column:
        index = NUCLEOTIDES.find(symbol.upper())
        if index < 0:
            return False
        counts[index] += 1
    counts.sort()
    return counts[-1] >= 2 and counts[-2] >= 2


def informative_site_mask(sequences: Sequence[str]) -> np.ndarray:
    """
    Boolean mask of informative columns for a set of aligned sequences.

    Args:
        sequences: Equal-length aligned sequences

    Returns:
        Array of shape (num_columns,) with True for informative columns
    """
    if not sequences or not sequences[0]:
        return np.zeros(0, dtype=bool)

    matrix = np.array([list(seq.upper()) for seq in sequences])
    counts = np.stack([(matrix == symbol).sum(axis=0) for symbol in NUCLEOTIDES])
    has_gap = counts.sum(axis=0) < matrix.shape[0]

    ranked = np.sort(counts, axis=0)
    return ~has_gap & (ranked[-1] >= 2) & (ranked[-2] >= 2)


def trim_to_informative(taxa: Sequence[Taxon]) -> List[Taxon]:
    """
    Drop every non-informative column from each taxon's sequence.

    Args:
        taxa: Taxa with equal-length aligned sequences

    Returns:
        New list of Taxon objects holding only informative points
    """
    mask = informative_site_mask([taxon.sequence for taxon in taxa])
    keep = np.flatnonzero(mask)
    trimmed = []
    for taxon in taxa:
        sequence = taxon.sequence.upper()
        trimmed.append(Taxon(taxon.name, "".join(sequence[i] for i in keep)))
    return trimmed
