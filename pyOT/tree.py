from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .errors import ConfigurationConflict, OutOfMemory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeNode:
    """One node of the offset tree. Children are ignored for leaves."""

    id: int
    left_id: int = 0
    right_id: int = 0
    is_leaf: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _reserve_nodes(count: int) -> List[Optional[TreeNode]]:
    return [None] * count


class MinDepthBinaryTree:
    """Minimum depth binary tree over ``leaf_count`` leaves.

    Leaves take ids ``[0, k)`` and internal nodes ``[k, 2k - 2]`` in the
    order they are created. Every internal node is created after both of
    its children, so its id is larger than theirs and a scan by
    decreasing id visits parents before children.

    Attributes
    ----------
    nodes : tuple of TreeNode
        All nodes, indexed by id.
    root_id : Optional[int]
        Id of the root, ``None`` when there are fewer than two leaves.
    """

    def __init__(self) -> None:
        self.nodes: Tuple[TreeNode, ...] = ()
        self.root_id: Optional[int] = None
        self._num_leaf_nodes = 0
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def leaf_count(self) -> int:
        return self._num_leaf_nodes

    def build_tree(self, leaf_count: int) -> "MinDepthBinaryTree":
        """Build the tree with a bottom-up tournament over the leaves.

        Consecutive candidates are paired into new internal nodes each
        round; an odd trailing candidate moves on to the next round
        unchanged. Calling this again with the same count does nothing.
        """
        try:
            leaf_count = operator.index(leaf_count)
        except TypeError:
            raise ValueError(f"leaf_count must be an integer, got {leaf_count!r}") from None
        if leaf_count < 0:
            raise ValueError(f"leaf_count must be >= 0, got {leaf_count}")

        if self._initialized:
            if leaf_count != self._num_leaf_nodes:
                raise ConfigurationConflict(leaf_count, self._num_leaf_nodes)
            return self

        # degenerate cases of 0 and 1 actions
        if leaf_count == 0:
            self._publish((), None, 0)
            return self

        try:
            nodes = _reserve_nodes(2 * leaf_count - 1)
            for i in range(leaf_count):
                nodes[i] = TreeNode(i, 0, 0, True)
            tournaments = list(range(leaf_count))
            next_id = leaf_count
            while len(tournaments) > 1:
                new_tournaments = []
                for j in range(len(tournaments) // 2):
                    left = tournaments[2 * j]
                    right = tournaments[2 * j + 1]
                    nodes[next_id] = TreeNode(next_id, left, right, False)
                    new_tournaments.append(next_id)
                    next_id += 1
                if len(tournaments) % 2 == 1:
                    new_tournaments.append(tournaments[-1])
                tournaments = new_tournaments
        except (MemoryError, OverflowError) as exc:
            raise OutOfMemory(leaf_count, str(exc)) from exc

        built = tuple(nodes)
        _check_parent_order(built)
        root_id = tournaments[0] if leaf_count > 1 else None
        self._publish(built, root_id, leaf_count)
        logger.debug(
            "Built offset tree: %d leaves, %d internal nodes, root=%s",
            leaf_count, len(built) - leaf_count, root_id,
        )
        return self

    def _publish(self, nodes: Tuple[TreeNode, ...], root_id: Optional[int], leaf_count: int) -> None:
        self.nodes = nodes
        self.root_id = root_id
        self._num_leaf_nodes = leaf_count
        self._initialized = True

    def internal_node_count(self) -> int:
        return len(self.nodes) - self._num_leaf_nodes

    def leaf_node_count(self) -> int:
        return self._num_leaf_nodes

    def node_depths(self) -> np.ndarray:
        """Number of edges from the root to every node, indexed by id."""
        depths = np.zeros(len(self.nodes), dtype=int)
        for node in reversed(self.nodes):
            if node.is_leaf:
                break
            depths[node.left_id] = depths[node.id] + 1
            depths[node.right_id] = depths[node.id] + 1
        return depths

    def leaf_depths(self) -> np.ndarray:
        return self.node_depths()[: self._num_leaf_nodes]

    def depth(self) -> int:
        if self._num_leaf_nodes == 0:
            return 0
        return int(np.max(self.leaf_depths()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leaf_count": self._num_leaf_nodes,
            "root_id": self.root_id,
            "nodes": [node.to_dict() for node in self.nodes],
        }

    def print_tree(self) -> None:
        if not self._initialized:
            print("Tree not initialized")
            return
        if self.root_id is None:
            for node in self.nodes:
                print(f"Leaf: action={node.id}")
            return

        stack = [(self.root_id, 0)]
        while stack:
            node_id, depth = stack.pop()
            node = self.nodes[node_id]
            indent = "  " * depth
            if node.is_leaf:
                print(f"{indent}Leaf: action={node.id}")
            else:
                print(f"{indent}Node {node.id}: left={node.left_id}, right={node.right_id}")
                stack.append((node.right_id, depth + 1))
                stack.append((node.left_id, depth + 1))


def _check_parent_order(nodes: Tuple[TreeNode, ...]) -> None:
    for node in nodes:
        if not node.is_leaf:
            if node.id <= node.left_id or node.id <= node.right_id:
                raise RuntimeError(
                    f"internal node {node.id} must follow its children "
                    f"({node.left_id}, {node.right_id})"
                )


def build_tree(leaf_count: int) -> MinDepthBinaryTree:
    """Return a new tree built over ``leaf_count`` leaves."""
    return MinDepthBinaryTree().build_tree(leaf_count)
