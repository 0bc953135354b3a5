"""pyOT: offset tree reduction for k-way action scoring.

The offset tree turns a k-action scoring problem into k - 1 binary
decisions arranged in a minimum depth tree, and combines the per-node
probabilities into one probability per action.
"""

from .errors import ConfigurationConflict, OffsetTreeError, OutOfMemory
from .offset_tree import ActionScore, OffsetTree, PredictionBuffers, predict_scores
from .tree import MinDepthBinaryTree, TreeNode, build_tree

__all__ = [
    "ActionScore",
    "ConfigurationConflict",
    "MinDepthBinaryTree",
    "OffsetTree",
    "OffsetTreeError",
    "OutOfMemory",
    "PredictionBuffers",
    "TreeNode",
    "build_tree",
    "predict_scores",
]
