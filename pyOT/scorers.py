from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

ArrayLike = Union[np.ndarray, Sequence[float]]
Scorer = Callable[[int], Tuple[float, float]]


def as_pair(result) -> Tuple[float, float]:
    """Coerce a scorer result into a ``(p_left, p_right)`` pair of floats."""
    values = np.asarray(result, dtype=float).reshape(-1)
    if values.size != 2:
        raise ValueError(f"Scorer must return exactly two scores, got {values.size}")
    return float(values[0]), float(values[1])


def _sigmoid(z: float) -> float:
    if z >= 0:
        return float(1.0 / (1.0 + np.exp(-z)))
    ez = np.exp(z)
    return float(ez / (1.0 + ez))


class LinearNodeScorer:
    """Logistic binary scorer with one weight row per internal node.

    Parameters
    ----------
    leaf_count : int
        Number of actions; internal node ``i`` uses row ``i - leaf_count``.
    weights : array of shape (leaf_count - 1, n_features)
    bias : optional array of shape (leaf_count - 1,)
    """

    def __init__(self, leaf_count: int, weights: ArrayLike, bias: Optional[ArrayLike] = None) -> None:
        W = np.asarray(weights, dtype=float)
        if W.ndim == 1:
            W = W.reshape(-1, 1)
        if W.ndim != 2:
            raise ValueError("weights must be 2D.")
        if W.shape[0] != max(leaf_count - 1, 0):
            raise ValueError(
                f"Expected {max(leaf_count - 1, 0)} weight rows for {leaf_count} actions, got {W.shape[0]}"
            )
        b = np.zeros(W.shape[0]) if bias is None else np.asarray(bias, dtype=float).reshape(-1)
        if b.shape[0] != W.shape[0]:
            raise ValueError("bias must have one entry per internal node.")

        self.leaf_count = int(leaf_count)
        self.weights = W
        self.bias = b
        self._x: Optional[np.ndarray] = None

    @classmethod
    def random(cls, leaf_count: int, n_features: int, random_state: Optional[int] = None) -> "LinearNodeScorer":
        rng = np.random.default_rng(random_state)
        rows = max(leaf_count - 1, 0)
        return cls(leaf_count, rng.normal(size=(rows, n_features)), rng.normal(size=rows))

    def bind(self, x: ArrayLike) -> "LinearNodeScorer":
        """Set the feature vector used by subsequent calls."""
        x_arr = np.asarray(x, dtype=float).reshape(-1)
        if x_arr.shape[0] != self.weights.shape[1]:
            raise ValueError(f"Expected {self.weights.shape[1]} features, got {x_arr.shape[0]}")
        self._x = x_arr
        return self

    def __call__(self, node_id: int) -> Tuple[float, float]:
        if self._x is None:
            raise RuntimeError("No features bound; call bind(x) first.")
        row = node_id - self.leaf_count
        p_right = _sigmoid(float(self.weights[row] @ self._x + self.bias[row]))
        return 1.0 - p_right, p_right
