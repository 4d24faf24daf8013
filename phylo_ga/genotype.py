"""
Genotypes for the phylogenetic GA.

A genotype owns one tree of ParsimonyItems with taxa at the leaves and
unlabeled ancestors internally. Crossover and mutation always work on a
deep copy, so the parent genotype stays usable by concurrently breeding
siblings and by its own fitness task.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np

from .data_models import ParsimonyItem, Source, Taxon
from .tree import Tree


class GenotypeCastError(Exception):
    """Raised when incompatible genotypes or individuals are bred together."""
    pass


class DegenerateTreeError(ValueError):
    """Raised when a tree operation has no valid input to work on."""
    pass


class Genotype:
    """Base genotype: a source tag plus crossover and mutation operators."""

    def __init__(self, source: Source = Source.UNDEFINED):
        self.source = source

    @property
    def phenotype(self):
        raise NotImplementedError

    def crossover(self, other: "Genotype", rng: np.random.Generator) -> "Genotype":
        raise NotImplementedError

    def mutate(self, prob: float, rng: np.random.Generator) -> Optional["Genotype"]:
        raise NotImplementedError


class _RandomTreeBuilder:
    """
    Grows a random tree for one create_random_tree() call.

    The remaining-taxa and remaining-ancestors budgets live on the builder,
    so nothing leaks between calls.
    """

    def __init__(self, taxa: Sequence[Taxon], rng: np.random.Generator):
        self.rng = rng
        self.taxa = list(taxa)
        self.remaining_taxa = len(self.taxa)
        self.remaining_ancestors = len(self.taxa) - 1
        self.tree = Tree()

    def build(self) -> Tree:
        if self.remaining_taxa == 1:
            self.tree.root = self._make_taxon()
            return self.tree

        self.tree.root = self._make_ancestor()
        self._populate(self.tree.root)
        return self.tree

    def _make_taxon(self) -> int:
        taxon = self.taxa.pop()
        self.remaining_taxa -= 1
        return self.tree.add_node(ParsimonyItem.from_taxon(taxon))

    def _make_ancestor(self) -> int:
        self.remaining_ancestors -= 1
        return self.tree.add_node(ParsimonyItem.ancestor())

    def _coin(self) -> bool:
        return bool(self.rng.integers(0, 2) == 0)

    def _make_either(self) -> int:
        if self.remaining_ancestors == 0 or self._coin():
            return self._make_taxon()
        return self._make_ancestor()

    def _populate(self, node: int) -> None:
        tree = self.tree

        first = self._make_either()
        first_is_taxon = tree.item(first).is_taxon

        # Once one side is a leaf, grow the other side while ancestors remain
        if first_is_taxon and self.remaining_ancestors > 0:
            second = self._make_ancestor()
        else:
            second = self._make_either()

        if self._coin():
            tree.set_left(node, first)
            tree.set_right(node, second)
        else:
            tree.set_right(node, first)
            tree.set_left(node, second)

        ancestors = [child for child in (first, second) if tree.item(child).is_ancestor]
        if len(ancestors) == 2 and self._coin():
            ancestors.reverse()
        for child in ancestors:
            self._populate(child)


def create_random_tree(taxa: Sequence[Taxon], rng: np.random.Generator) -> Tree:
    """
    Build a random rooted binary tree over the given taxa.

    Each taxon becomes exactly one leaf and the tree has len(taxa) - 1
    ancestor nodes. The input sequence is not modified.

    Args:
        taxa: Taxa to place at the leaves
        rng: Random number generator

    Returns:
        New Tree of ParsimonyItems

    Raises:
        DegenerateTreeError: If taxa is empty
    """
    if not taxa:
        raise DegenerateTreeError("Cannot build a tree from an empty taxon list")
    return _RandomTreeBuilder(taxa, rng).build()


class PhylogeneticTreeGenotype(Genotype):
    """
    Genotype holding a phylogenetic tree.

    Node and taxon counts are cached at construction; the tree is never
    edited in place after that.
    """

    def __init__(self, tree: Tree, source: Source = Source.UNDEFINED):
        super().__init__(source)
        self.tree = tree
        self.node_count = tree.node_count()
        self.taxon_count = tree.leaf_count()

    @classmethod
    def from_taxa(cls, taxa: Sequence[Taxon], rng: np.random.Generator) -> "PhylogeneticTreeGenotype":
        """Create a randomly shaped genotype over the given taxa."""
        return cls(create_random_tree(taxa, rng), source=Source.INITIAL)

    @property
    def phenotype(self) -> Tree:
        return self.tree

    def taxa_names(self) -> List[str]:
        """Taxon names in post-order."""
        return taxa_order(self.tree, self.tree.root)

    def crossover(self, other: Genotype, rng: np.random.Generator) -> "PhylogeneticTreeGenotype":
        """
        Subtree-transplant crossover.

        A random internal subtree of a copy of this tree is chosen, and its
        leaves are reordered to follow the relative order in which the
        other parent lists the same taxa. The subtree keeps its shape and
        its set of taxa, so the child always holds exactly this parent's
        taxa.

        Args:
            other: Genotype to take the taxon ordering from
            rng: Random number generator

        Returns:
            New genotype tagged Source.CROSSOVER

        Raises:
            GenotypeCastError: If other is not the same genotype variant
            DegenerateTreeError: If this tree has no internal node
        """
        if type(self) is not type(other):
            raise GenotypeCastError(
                f"Incompatible genotypes tried to cross: "
                f"{type(self).__name__} and {type(other).__name__}"
            )
        if self.node_count < 3:
            raise DegenerateTreeError("Crossover needs a tree with at least one internal node")

        new_tree = self.tree.copy()
        subtree = new_tree.random_node(rng)
        while not new_tree.is_internal(subtree):
            subtree = new_tree.random_node(rng)

        subtree_nodes = taxa_nodes(new_tree, subtree)
        current = taxa_order(new_tree, subtree)
        wanted_order = [
            name for name in taxa_order(other.tree, other.tree.root)
            if name in subtree_nodes
        ]

        for position, wanted in enumerate(wanted_order):
            present = current[position]
            if present == wanted:
                continue
            # Leaves under one subtree are always in distinct subtrees of each other
            new_tree.swap(subtree_nodes[present], subtree_nodes[wanted])
            wanted_position = current.index(wanted)
            current[position], current[wanted_position] = wanted, present

        return PhylogeneticTreeGenotype(new_tree, source=Source.CROSSOVER)

    def mutate(self, prob: float, rng: np.random.Generator) -> Optional["PhylogeneticTreeGenotype"]:
        """
        Swap-based mutation on a copy of this tree.

        Every node independently flips a coin with probability prob; the
        number of successes is the number of swap events. Each event swaps
        two random nodes that are not ancestor/descendant of each other.

        Args:
            prob: Per-node mutation probability
            rng: Random number generator

        Returns:
            New genotype tagged Source.MUTATION, or None if no event fired

        Raises:
            DegenerateTreeError: If an event fires on a tree with fewer
                than three nodes, where no valid swap pair exists
        """
        num_mutations = int(np.count_nonzero(rng.random(self.node_count) < prob))
        if num_mutations == 0:
            return None
        if self.node_count < 3:
            raise DegenerateTreeError("Mutation needs a tree with at least three nodes")

        new_tree = self.tree.copy()
        nodes = new_tree.post_order()
        for _ in range(num_mutations):
            while True:
                first = nodes[rng.integers(0, len(nodes))]
                second = nodes[rng.integers(0, len(nodes))]
                if first != second and new_tree.in_distinct_subtrees(first, second):
                    break
            new_tree.swap(first, second)

        return PhylogeneticTreeGenotype(new_tree, source=Source.MUTATION)

    def cherry_count(self) -> int:
        return self.tree.cherry_count()

    def __str__(self) -> str:
        return str(self.tree)


def taxa_order(tree: Tree, root: int) -> List[str]:
    """Names of the taxa under root, left to right in post-order."""
    return [
        tree.item(node).name
        for node in tree.post_order(root)
        if tree.item(node).is_taxon
    ]


def taxa_nodes(tree: Tree, root: int) -> Dict[str, int]:
    """Map each taxon name under root to its leaf node."""
    return {
        tree.item(node).name: node
        for node in tree.post_order(root)
        if tree.item(node).is_taxon
    }
