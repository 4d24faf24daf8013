"""
Shared fixtures for the phylogenetic GA tests.
"""

from phylo_ga.data_models import ParsimonyItem, Taxon
from phylo_ga.tree import Tree


def make_taxa(*sequences, prefix="t"):
    """Taxa named t0, t1, ... with the given sequences."""
    return [Taxon(f"{prefix}{i}", seq) for i, seq in enumerate(sequences)]


def build_tree(shape):
    """
    Build a tree from nested 2-tuples of taxon names.

    Each leaf's sequence equals its name, so ("AA", ("AT", "TT")) gives
    three taxa with two-site sequences.
    """
    tree = Tree()

    def _build(node_shape):
        if isinstance(node_shape, tuple):
            left, right = node_shape
            node = tree.add_node(ParsimonyItem.ancestor())
            tree.set_left(node, _build(left))
            tree.set_right(node, _build(right))
            return node
        return tree.add_node(ParsimonyItem.from_taxon(Taxon(node_shape, node_shape)))

    tree.root = _build(shape)
    return tree


class FixedFitness:
    """Stand-in individual with a precomputed fitness."""

    def __init__(self, fitness, label=None):
        self.fitness = fitness
        self.label = label if label is not None else fitness

    def __repr__(self):
        return f"FixedFitness({self.label!r}, {self.fitness})"
