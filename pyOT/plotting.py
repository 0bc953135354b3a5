from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import matplotlib.pyplot as plt

from .tree import MinDepthBinaryTree


def _layout_tree(tree: MinDepthBinaryTree) -> Dict[int, Tuple[float, float]]:
    # leaves keep their declaration order left to right
    depths = tree.node_depths()
    xs: Dict[int, float] = {}
    positions: Dict[int, Tuple[float, float]] = {}
    for node in tree.nodes:
        if node.is_leaf:
            xs[node.id] = float(node.id)
        else:
            xs[node.id] = (xs[node.left_id] + xs[node.right_id]) / 2
        positions[node.id] = (xs[node.id], -float(depths[node.id]))
    return positions


def plot_tree(
    tree: MinDepthBinaryTree,
    scores: Optional[Sequence[float]] = None,
    ax: Optional[plt.Axes] = None,
) -> plt.Axes:
    """Draw the tree topology, optionally annotating leaves with scores."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 5))
    positions = _layout_tree(tree)

    for node in tree.nodes:
        if node.is_leaf:
            continue
        x, y = positions[node.id]
        for child in (node.left_id, node.right_id):
            cx, cy = positions[child]
            ax.plot([x, cx], [y, cy], color="0.6")

    for node in tree.nodes:
        x, y = positions[node.id]
        if node.is_leaf:
            label = f"a{node.id}" if scores is None else f"a{node.id}\n{scores[node.id]:.2f}"
        else:
            label = str(node.id)
        ax.scatter([x], [y], s=200, color="#2a9d8f" if node.is_leaf else "#264653")
        ax.text(x, y, label, ha="center", va="center", color="white", fontsize=8)

    ax.set_axis_off()
    ax.set_title(f"Offset tree ({tree.leaf_node_count()} actions)", fontsize=12)
    return ax
