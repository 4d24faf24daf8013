"""
Arena-backed binary tree.

Nodes live in an index-addressable slot table owned by the Tree. Child and
parent links are slot indices, so back-references never create ownership
cycles and swaps are O(1) link updates.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np


@dataclass
class TreeNode:
    """A single slot in the tree arena."""
    item: Any = None
    left: Optional[int] = None
    right: Optional[int] = None
    parent: Optional[int] = None


class Tree:
    """
    Binary tree of typed items with parent back-references.

    Default traversal order is post-order (left, right, self). Traversals
    are materialised into lists eagerly; trees in this domain hold tens
    to low hundreds of nodes.
    """

    def __init__(self):
        self.nodes: List[TreeNode] = []
        self.root: Optional[int] = None

    def add_node(self, item: Any = None) -> int:
        """
        Add a detached node to the arena.

        Args:
            item: Payload to store in the node

        Returns:
            Index of the new node
        """
        self.nodes.append(TreeNode(item=item))
        return len(self.nodes) - 1

    def set_left(self, node: int, child: int) -> None:
        """Set the left child of node and point the child back at node."""
        self.nodes[node].left = child
        self.nodes[child].parent = node

    def set_right(self, node: int, child: int) -> None:
        """Set the right child of node and point the child back at node."""
        self.nodes[node].right = child
        self.nodes[child].parent = node

    def left(self, node: int) -> Optional[int]:
        return self.nodes[node].left

    def right(self, node: int) -> Optional[int]:
        return self.nodes[node].right

    def parent(self, node: int) -> Optional[int]:
        return self.nodes[node].parent

    def item(self, node: int) -> Any:
        return self.nodes[node].item

    def is_leaf(self, node: int) -> bool:
        """A node is a leaf iff both children are empty."""
        slot = self.nodes[node]
        return slot.left is None and slot.right is None

    def is_internal(self, node: int) -> bool:
        return not self.is_leaf(node)

    def post_order(self, node: Optional[int] = None) -> List[int]:
        """
        Collect node indices in post-order (left, right, self).

        Args:
            node: Subtree root (defaults to the tree root)

        Returns:
            List of node indices
        """
        if node is None:
            node = self.root
        order: List[int] = []
        if node is not None:
            self._post_order(node, order)
        return order

    def _post_order(self, node: int, order: List[int]) -> None:
        slot = self.nodes[node]
        if slot.left is not None:
            self._post_order(slot.left, order)
        if slot.right is not None:
            self._post_order(slot.right, order)
        order.append(node)

    def __iter__(self):
        return iter(self.post_order())

    def __len__(self) -> int:
        return self.node_count()

    def node_count(self, node: Optional[int] = None) -> int:
        """Count nodes in the subtree rooted at node (default: whole tree)."""
        if node is None:
            node = self.root
            if node is None:
                return 0
        slot = self.nodes[node]
        count = 1
        if slot.left is not None:
            count += self.node_count(slot.left)
        if slot.right is not None:
            count += self.node_count(slot.right)
        return count

    def leaf_count(self, node: Optional[int] = None) -> int:
        """Count leaves in the subtree rooted at node (default: whole tree)."""
        if node is None:
            node = self.root
            if node is None:
                return 0
        if self.is_leaf(node):
            return 1
        slot = self.nodes[node]
        count = 0
        if slot.left is not None:
            count += self.leaf_count(slot.left)
        if slot.right is not None:
            count += self.leaf_count(slot.right)
        return count

    def contains_in_subtree(self, candidate: int, root: int) -> bool:
        """True if candidate occurs in the post-order walk rooted at root."""
        return candidate in self.post_order(root)

    def in_distinct_subtrees(self, a: int, b: int) -> bool:
        """True if neither node is an ancestor (or the same node) of the other."""
        return (not self.contains_in_subtree(a, b)
                and not self.contains_in_subtree(b, a))

    def cherry_count(self, node: Optional[int] = None) -> int:
        """Count internal nodes whose two children are both leaves."""
        if node is None:
            node = self.root
            if node is None:
                return 0
        if self.is_leaf(node):
            return 0
        left, right = self.left(node), self.right(node)
        if (left is not None and right is not None
                and self.is_leaf(left) and self.is_leaf(right)):
            return 1
        count = 0
        if left is not None:
            count += self.cherry_count(left)
        if right is not None:
            count += self.cherry_count(right)
        return count

    def nth_node(self, n: int) -> int:
        """Get the n-th node of the post-order traversal."""
        return self.post_order()[n]

    def random_node(self, rng: np.random.Generator) -> int:
        """Pick a node uniformly at random."""
        order = self.post_order()
        return order[rng.integers(0, len(order))]

    def swap(self, a: int, b: int) -> None:
        """
        Exchange the positions of two nodes among their parents' children.

        Both subtrees move intact. The caller must ensure the nodes are in
        distinct subtrees (see in_distinct_subtrees) and that neither is
        the root; violating this corrupts the tree and is not checked.

        Args:
            a: First node
            b: Second node
        """
        parent_a = self.nodes[a].parent
        parent_b = self.nodes[b].parent

        a_on_left = self.nodes[parent_a].left == a
        b_on_left = self.nodes[parent_b].left == b

        if a_on_left:
            self.set_left(parent_a, b)
        else:
            self.set_right(parent_a, b)

        if b_on_left:
            self.set_left(parent_b, a)
        else:
            self.set_right(parent_b, a)

    def copy(self) -> "Tree":
        """
        Deep copy the reachable tree.

        Items are duplicated through their own copy() method, so the new
        tree never shares node or item identity with this one.

        Returns:
            New Tree with the same shape and item payloads
        """
        clone = Tree()
        if self.root is not None:
            clone.root = self._copy_subtree(self.root, clone)
        return clone

    def _copy_subtree(self, node: int, clone: "Tree") -> int:
        slot = self.nodes[node]
        item = slot.item.copy() if hasattr(slot.item, "copy") else slot.item
        new_node = clone.add_node(item)
        if slot.left is not None:
            clone.set_left(new_node, self._copy_subtree(slot.left, clone))
        if slot.right is not None:
            clone.set_right(new_node, self._copy_subtree(slot.right, clone))
        return new_node

    def to_newick(self) -> str:
        """Render as a Newick string, e.g. ((a, b), c);"""
        return self._render(self.root) + ";"

    def _render(self, node: Optional[int]) -> str:
        if node is None:
            return ""
        if self.is_leaf(node):
            item = self.nodes[node].item
            return "" if item is None else str(item)
        return "(" + self._render(self.left(node)) + ", " + self._render(self.right(node)) + ")"

    def __str__(self) -> str:
        return self._render(self.root)
