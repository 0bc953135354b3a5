import numpy as np
import pytest

from pyOT.offset_tree import PredictionBuffers, predict_scores
from pyOT.tree import build_tree


class RecordingScorer:
    def __init__(self, table=None, rng=None):
        self.table = table or {}
        self.rng = rng
        self.calls = []

    def __call__(self, node_id):
        self.calls.append(node_id)
        if node_id in self.table:
            return self.table[node_id]
        p = float(self.rng.uniform()) if self.rng is not None else 0.5
        return p, 1.0 - p


def test_four_action_scores():
    tree = build_tree(4)
    scorer = RecordingScorer({6: (0.9, 0.1), 4: (0.6, 0.4), 5: (0.3, 0.7)})
    scores = predict_scores(tree, scorer)
    np.testing.assert_allclose(scores, [0.54, 0.36, 0.03, 0.07])
    assert scores.sum() == pytest.approx(1.0)
    assert scorer.calls == [4, 5, 6]


def test_three_action_scores():
    tree = build_tree(3)
    scorer = RecordingScorer({3: (0.25, 0.75), 4: (0.8, 0.2)})
    scores = predict_scores(tree, scorer)
    np.testing.assert_allclose(scores, [0.8 * 0.25, 0.8 * 0.75, 0.2])
    assert scorer.calls == [3, 4]


def test_empty_tree_returns_no_scores():
    scorer = RecordingScorer()
    scores = predict_scores(build_tree(0), scorer)
    assert scores.shape == (0,)
    assert scorer.calls == []


def test_single_action_gets_all_mass():
    scorer = RecordingScorer()
    scores = predict_scores(build_tree(1), scorer)
    assert scores.tolist() == [1.0]
    assert scorer.calls == []


@pytest.mark.parametrize("k", [2, 3, 5, 7, 16, 33, 100])
def test_scores_form_distribution(k):
    rng = np.random.default_rng(k)
    tree = build_tree(k)
    scorer = RecordingScorer(rng=rng)
    scores = predict_scores(tree, scorer)
    assert scores.shape == (k,)
    assert scores.sum() == pytest.approx(1.0)
    assert np.all(scores >= 0)
    assert sorted(scorer.calls) == list(range(k, 2 * k - 1))


def test_score_is_product_along_path():
    rng = np.random.default_rng(3)
    tree = build_tree(11)
    table = {}
    for node_id in range(11, 21):
        p = float(rng.uniform())
        table[node_id] = (p, 1.0 - p)
    scores = predict_scores(tree, RecordingScorer(table))

    parent = {}
    for node in tree.nodes[11:]:
        parent[node.left_id] = (node.id, 0)
        parent[node.right_id] = (node.id, 1)
    for leaf in range(11):
        expected, current = 1.0, leaf
        while current in parent:
            node_id, side = parent[current]
            expected *= table[node_id][side]
            current = node_id
        assert scores[leaf] == pytest.approx(expected)


def test_scores_are_not_renormalized():
    tree = build_tree(2)
    scores = predict_scores(tree, lambda node_id: (0.5, 0.7))
    np.testing.assert_allclose(scores, [0.5, 0.7])


def test_buffers_are_reused_without_aliasing():
    tree = build_tree(4)
    buffers = PredictionBuffers(4)
    pairs = buffers.pairs
    first = predict_scores(tree, RecordingScorer({6: (0.9, 0.1), 4: (0.6, 0.4), 5: (0.3, 0.7)}), buffers)
    second = predict_scores(tree, lambda node_id: (0.5, 0.5), buffers)
    assert buffers.pairs is pairs
    np.testing.assert_allclose(first, [0.54, 0.36, 0.03, 0.07])
    np.testing.assert_allclose(second, [0.25] * 4)


def test_buffers_resize_for_other_tree():
    buffers = PredictionBuffers(2)
    scores = predict_scores(build_tree(5), lambda node_id: (0.5, 0.5), buffers)
    assert buffers.leaf_count == 5
    assert len(buffers.pairs) == 4
    assert scores.sum() == pytest.approx(1.0)


def test_prediction_does_not_mutate_tree():
    tree = build_tree(9)
    before = tree.nodes
    predict_scores(tree, lambda node_id: (0.3, 0.7))
    assert tree.nodes == before


def test_scorer_must_return_two_values():
    with pytest.raises(ValueError):
        predict_scores(build_tree(3), lambda node_id: (1.0,))
