from __future__ import annotations

import json
import logging
import threading
from typing import Any, Dict, List, NamedTuple, Optional

import numpy as np

from .scorers import Scorer, as_pair
from .tree import MinDepthBinaryTree

logger = logging.getLogger(__name__)


class ActionScore(NamedTuple):
    action: int
    score: float


class PredictionBuffer:
    """``(left_mass, right_mass)`` rows for internal nodes, addressed by node id.

    Internal node ids start at ``offset`` (the leaf count), so row
    ``node_id - offset`` holds that node's pair.
    """

    def __init__(self, size: int, offset: int) -> None:
        self.offset = offset
        self.data = np.zeros((size, 2), dtype=float)

    def __len__(self) -> int:
        return self.data.shape[0]

    def __getitem__(self, node_id: int) -> np.ndarray:
        return self.data[node_id - self.offset]

    def __setitem__(self, node_id: int, pair) -> None:
        self.data[node_id - self.offset] = pair


class PredictionBuffers:
    """Scratch storage for one predict call: node pairs and leaf scores."""

    def __init__(self, leaf_count: int = 0) -> None:
        self.pairs = PredictionBuffer(0, 0)
        self.scores = np.zeros(0, dtype=float)
        self.resize(leaf_count)

    def resize(self, leaf_count: int) -> None:
        internal = max(leaf_count - 1, 0)
        if len(self.pairs) != internal or self.pairs.offset != leaf_count:
            logger.debug("Allocating prediction buffers for %d actions", leaf_count)
            self.pairs = PredictionBuffer(internal, leaf_count)
        if self.scores.shape[0] != leaf_count:
            self.scores = np.zeros(leaf_count, dtype=float)

    @property
    def leaf_count(self) -> int:
        return self.scores.shape[0]


class ScratchPool:
    """Hands out one ``PredictionBuffers`` per calling thread."""

    def __init__(self) -> None:
        self._local = threading.local()

    def get(self, leaf_count: int) -> PredictionBuffers:
        buffers = getattr(self._local, "buffers", None)
        if buffers is None:
            buffers = PredictionBuffers(leaf_count)
            self._local.buffers = buffers
        else:
            buffers.resize(leaf_count)
        return buffers


def predict_scores(
    tree: MinDepthBinaryTree,
    scorer: Scorer,
    buffers: Optional[PredictionBuffers] = None,
) -> np.ndarray:
    """Return one probability per leaf of ``tree``.

    ``scorer(node_id)`` is called once per internal node and must return
    ``(p_left, p_right)``. Each leaf's score is the product of the branch
    probabilities on its path from the root.
    """
    k = tree.leaf_node_count()
    if buffers is None:
        buffers = PredictionBuffers(k)
    else:
        buffers.resize(k)

    scores = buffers.scores
    scores.fill(0.0)
    if k == 0:
        return scores.copy()
    if k == 1:
        scores[0] = 1.0
        return scores.copy()

    pairs = buffers.pairs
    for node_id in range(k, k + tree.internal_node_count()):
        pairs[node_id] = as_pair(scorer(node_id))

    nodes = tree.nodes
    for node in reversed(nodes):
        # leaves form the low end of the id range
        if node.is_leaf:
            break

        left_p, right_p = pairs[node.id]
        if nodes[node.left_id].is_leaf:
            scores[node.left_id] = left_p
        else:
            pairs[node.left_id] *= left_p

        if nodes[node.right_id].is_leaf:
            scores[node.right_id] = right_p
        else:
            pairs[node.right_id] *= right_p

    return scores.copy()


def to_action_scores(scores) -> List[ActionScore]:
    return [ActionScore(idx, float(score)) for idx, score in enumerate(scores)]


def learn(tree: MinDepthBinaryTree, scorer: Scorer, example: Any) -> None:
    raise NotImplementedError("Offset tree learn() is not yet implemented.")


class OffsetTree:
    """Offset tree reduction from k actions to k - 1 binary problems.

    Parameters
    ----------
    num_actions : Optional[int]
        Number of actions. When given the tree is built immediately;
        otherwise call ``init`` later.
    """

    def __init__(self, num_actions: Optional[int] = None) -> None:
        self.binary_tree = MinDepthBinaryTree()
        self._scratch = ScratchPool()
        if num_actions is not None:
            self.init(num_actions)

    def init(self, num_actions: int) -> "OffsetTree":
        self.binary_tree.build_tree(num_actions)
        return self

    @property
    def num_actions(self) -> int:
        return self.binary_tree.leaf_node_count()

    def learner_count(self) -> int:
        return self.binary_tree.internal_node_count()

    def _check_initialized(self) -> None:
        if not self.binary_tree.initialized:
            raise RuntimeError("Offset tree is not initialized.")

    def predict(self, scorer: Scorer, buffers: Optional[PredictionBuffers] = None) -> np.ndarray:
        self._check_initialized()
        if buffers is None:
            buffers = self._scratch.get(self.num_actions)
        return predict_scores(self.binary_tree, scorer, buffers)

    def predict_action_scores(self, scorer: Scorer) -> List[ActionScore]:
        return to_action_scores(self.predict(scorer))

    def learn(self, scorer: Scorer, example: Any) -> None:
        learn(self.binary_tree, scorer, example)

    def get_params(self, deep: bool = True) -> Dict[str, Any]:
        return {"num_actions": self.num_actions if self.binary_tree.initialized else None}

    def to_dict(self) -> Dict[str, Any]:
        self._check_initialized()
        return self.binary_tree.to_dict()

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)
