"""
Tests for random tree construction and the tree genotype operators.
"""

import unittest

import numpy as np

from phylo_ga.data_models import Source
from phylo_ga.genotype import (
    DegenerateTreeError,
    Genotype,
    GenotypeCastError,
    PhylogeneticTreeGenotype,
    create_random_tree,
    taxa_nodes,
    taxa_order,
)

from .helpers import build_tree, make_taxa


class OtherGenotype(Genotype):
    """A genotype of a different variant."""
    pass


class TestRandomTree(unittest.TestCase):
    """Test create_random_tree."""

    def setUp(self):
        self.rng = np.random.default_rng(42)
        self.taxa = make_taxa("AAGG", "AAGC", "TTCC", "TTCG", "ATGC", "TAGC")

    def test_shape(self):
        """Test leaf and ancestor counts over many random trees."""
        for _ in range(25):
            tree = create_random_tree(self.taxa, self.rng)
            self.assertEqual(tree.leaf_count(), 6)
            self.assertEqual(tree.node_count(), 11)

            for node in tree:
                item = tree.item(node)
                self.assertEqual(item.is_taxon, tree.is_leaf(node))
                if tree.is_internal(node):
                    self.assertIsNotNone(tree.left(node))
                    self.assertIsNotNone(tree.right(node))

    def test_each_taxon_once(self):
        """Test that every taxon appears exactly once."""
        tree = create_random_tree(self.taxa, self.rng)
        names = taxa_order(tree, tree.root)
        self.assertEqual(sorted(names), sorted(taxon.name for taxon in self.taxa))

    def test_input_untouched(self):
        """Test that the taxon list is not consumed."""
        before = list(self.taxa)
        create_random_tree(self.taxa, self.rng)
        self.assertEqual(self.taxa, before)

    def test_deterministic_with_seed(self):
        """Test that equal seeds give equal trees."""
        first = create_random_tree(self.taxa, np.random.default_rng(7))
        second = create_random_tree(self.taxa, np.random.default_rng(7))
        self.assertEqual(first.to_newick(), second.to_newick())

    def test_two_taxa(self):
        """Test the smallest tree with an ancestor."""
        tree = create_random_tree(self.taxa[:2], self.rng)
        self.assertEqual(tree.node_count(), 3)
        self.assertTrue(tree.item(tree.root).is_ancestor)

    def test_single_taxon(self):
        """Test that one taxon gives a single leaf."""
        tree = create_random_tree(self.taxa[:1], self.rng)
        self.assertEqual(tree.node_count(), 1)
        self.assertTrue(tree.is_leaf(tree.root))

    def test_empty_taxa(self):
        """Test that an empty taxon list is rejected."""
        with self.assertRaises(DegenerateTreeError):
            create_random_tree([], self.rng)


class TestCrossover(unittest.TestCase):
    """Test subtree-transplant crossover."""

    def setUp(self):
        self.rng = np.random.default_rng(42)
        self.taxa = make_taxa("AAGG", "AAGC", "TTCC", "TTCG", "ATGC", "TAGC")

    def test_preserves_taxa(self):
        """Test that the child holds exactly this parent's taxa."""
        for _ in range(20):
            first = PhylogeneticTreeGenotype.from_taxa(self.taxa, self.rng)
            second = PhylogeneticTreeGenotype.from_taxa(self.taxa, self.rng)
            child = first.crossover(second, self.rng)

            self.assertEqual(sorted(child.taxa_names()), sorted(first.taxa_names()))
            self.assertEqual(child.node_count, first.node_count)
            self.assertEqual(child.source, Source.CROSSOVER)

    def test_parents_untouched(self):
        """Test that crossover works on a copy."""
        first = PhylogeneticTreeGenotype.from_taxa(self.taxa, self.rng)
        second = PhylogeneticTreeGenotype.from_taxa(self.taxa, self.rng)
        first_before = str(first)
        second_before = str(second)

        first.crossover(second, self.rng)

        self.assertEqual(str(first), first_before)
        self.assertEqual(str(second), second_before)

    def test_follows_other_order(self):
        """Test that the chosen subtree takes the other parent's taxon order."""
        first = PhylogeneticTreeGenotype(build_tree((("a", "b"), ("c", "d"))))
        second = PhylogeneticTreeGenotype(build_tree((("d", "c"), ("b", "a"))))

        # Whole tree, the (a, b) cherry or the (c, d) cherry
        expected = {
            ("d", "c", "b", "a"),
            ("b", "a", "c", "d"),
            ("a", "b", "d", "c"),
        }
        seen = set()
        for _ in range(30):
            child = first.crossover(second, self.rng)
            order = tuple(child.taxa_names())
            self.assertIn(order, expected)
            seen.add(order)
        self.assertIn(("d", "c", "b", "a"), seen)

    def test_partner_with_other_taxa(self):
        """Test that a partner over different taxa cannot change the child's taxa."""
        first = PhylogeneticTreeGenotype(build_tree((("a", "b"), ("c", "d"))))
        second = PhylogeneticTreeGenotype(build_tree((("x", "c"), ("y", "a"))))

        for _ in range(10):
            child = first.crossover(second, self.rng)
            self.assertEqual(sorted(child.taxa_names()), ["a", "b", "c", "d"])

    def test_incompatible_genotypes(self):
        """Test that a different genotype variant is rejected."""
        first = PhylogeneticTreeGenotype.from_taxa(self.taxa, self.rng)
        with self.assertRaises(GenotypeCastError):
            first.crossover(OtherGenotype(), self.rng)

    def test_degenerate_tree(self):
        """Test that a single-leaf tree cannot cross."""
        single = PhylogeneticTreeGenotype.from_taxa(self.taxa[:1], self.rng)
        with self.assertRaises(DegenerateTreeError):
            single.crossover(single, self.rng)


class TestMutation(unittest.TestCase):
    """Test swap-based mutation."""

    def setUp(self):
        self.rng = np.random.default_rng(42)
        self.taxa = make_taxa("AAGG", "AAGC", "TTCC", "TTCG", "ATGC", "TAGC")
        self.genotype = PhylogeneticTreeGenotype.from_taxa(self.taxa, self.rng)

    def test_zero_probability(self):
        """Test that no event means no mutant."""
        for _ in range(10):
            self.assertIsNone(self.genotype.mutate(0.0, self.rng))

    def test_certain_mutation(self):
        """Test a mutant when every node fires."""
        mutant = self.genotype.mutate(1.0, self.rng)

        self.assertIsNotNone(mutant)
        self.assertEqual(mutant.source, Source.MUTATION)
        self.assertEqual(sorted(mutant.taxa_names()), sorted(self.genotype.taxa_names()))
        self.assertEqual(mutant.node_count, self.genotype.node_count)
        self.assertEqual(mutant.taxon_count, 6)

    def test_mutation_changes_tree(self):
        """Test that every certain mutation moves nodes and leaves the original intact."""
        before = str(self.genotype)
        for _ in range(5):
            mutant = self.genotype.mutate(1.0, self.rng)
            self.assertNotEqual(str(mutant), before)
        self.assertEqual(str(self.genotype), before)

    def test_small_tree_mutation_changes_tree(self):
        """Test certain mutation on the smallest trees that can mutate."""
        for size in (3, 4):
            genotype = PhylogeneticTreeGenotype.from_taxa(self.taxa[:size], self.rng)
            before = str(genotype)
            for _ in range(20):
                self.assertNotEqual(str(genotype.mutate(1.0, self.rng)), before)

    def test_degenerate_tree(self):
        """Test that a single leaf cannot mutate."""
        single = PhylogeneticTreeGenotype.from_taxa(self.taxa[:1], self.rng)
        with self.assertRaises(DegenerateTreeError):
            single.mutate(1.0, self.rng)


class TestGenotypeHelpers(unittest.TestCase):
    """Test taxon listing helpers."""

    def test_taxa_order_and_nodes(self):
        """Test post-order taxon names and the name to node map."""
        tree = build_tree((("a", "b"), "c"))
        self.assertEqual(taxa_order(tree, tree.root), ["a", "b", "c"])
        self.assertEqual(taxa_order(tree, tree.left(tree.root)), ["a", "b"])

        nodes = taxa_nodes(tree, tree.root)
        self.assertEqual(set(nodes), {"a", "b", "c"})
        self.assertEqual(tree.item(nodes["c"]).name, "c")

    def test_cherry_count(self):
        """Test the genotype's cherry count."""
        genotype = PhylogeneticTreeGenotype(build_tree((("a", "b"), ("c", "d"))))
        self.assertEqual(genotype.cherry_count(), 2)
        self.assertIs(genotype.phenotype, genotype.tree)


if __name__ == '__main__':
    unittest.main()
