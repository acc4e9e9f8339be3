from __future__ import annotations

import numpy as np
import pytest

from halfspace_detector.exceptions import ConfigurationError, InputError
from halfspace_detector.orchestrator import TreeOrchestrator, perturb_bounds
from halfspace_detector.utils import Sample


def make_orchestrator(seed: int = 7, **overrides) -> TreeOrchestrator:
    params = dict(
        n_trees=10,
        max_depth=6,
        window_size=20,
        n_dimensions=2,
        min_bounds=[0.0, 0.0],
        max_bounds=[10.0, 10.0],
        size_limit=3,
    )
    params.update(overrides)
    return TreeOrchestrator(**params, rng=seed)


@pytest.fixture
def cluster() -> np.ndarray:
    rng = np.random.default_rng(123)
    return rng.normal(loc=5.0, scale=0.2, size=(120, 2))


def test_builds_requested_number_of_trees_with_max_depth():
    orchestrator = make_orchestrator(n_trees=12, max_depth=5)

    assert len(orchestrator.trees) == 12
    for tree in orchestrator.trees:
        assert max(node.depth for node in tree.nodes()) == 5
        assert tree.node(0).is_root


def test_perturbed_domain_covers_original_bounds():
    rng = np.random.default_rng(0)
    for _ in range(200):
        low, high = perturb_bounds([0.0, -5.0], [10.0, 5.0], rng)
        assert (low <= np.array([-5.0, -10.0])).all()
        assert (high >= np.array([15.0, 10.0])).all()


def test_perturbation_of_degenerate_dimension_is_a_point():
    rng = np.random.default_rng(1)
    low, high = perturb_bounds([3.0], [3.0], rng)
    assert low[0] == high[0] == 3.0


def test_perturbation_formula_for_low_and_high_draws():
    class FixedDraws:
        def __init__(self, values):
            self._values = iter(values)

        def random(self):
            return next(self._values)

    low, high = perturb_bounds([0.0, 0.0], [10.0, 10.0], FixedDraws([0.25, 0.75]))

    # r < 0.5 spreads by 2 * (1 - r) * distance, otherwise by 2 * r * distance
    assert low[0] == pytest.approx(2.5 - 15.0)
    assert high[0] == pytest.approx(2.5 + 15.0)
    assert low[1] == pytest.approx(7.5 - 15.0)
    assert high[1] == pytest.approx(7.5 + 15.0)


def test_original_bounds_are_not_modified():
    orchestrator = make_orchestrator()
    assert orchestrator.min_bounds == (0.0, 0.0)
    assert orchestrator.max_bounds == (10.0, 10.0)


def test_same_seed_gives_identical_scores(cluster):
    first = make_orchestrator(seed=42)
    second = make_orchestrator(seed=42)

    for tree_a, tree_b in zip(first.trees, second.trees):
        assert np.array_equal(tree_a.split_value, tree_b.split_value, equal_nan=True)
    assert [first.insert_sample(p) for p in cluster] == [second.insert_sample(p) for p in cluster]


def test_window_rollover_happens_before_scoring_the_filling_sample():
    orchestrator = make_orchestrator(window_size=3)
    point = [5.0, 5.0]

    assert orchestrator.insert_sample(point) == 0
    assert orchestrator.insert_sample(point) == 0
    assert orchestrator.window_counter == 2

    orchestrator.insert_sample(point)

    assert orchestrator.window_counter == 0
    for tree in orchestrator.trees:
        root = tree.node(0)
        assert root.reference_mass == 2
        assert root.latest_mass == 1


def test_ensemble_score_is_independent_of_tree_order(cluster):
    forward = make_orchestrator(seed=9)
    backward = make_orchestrator(seed=9)
    backward.trees.reverse()

    assert [forward.insert_sample(p) for p in cluster] == [backward.insert_sample(p) for p in cluster]


def test_score_trees_matches_insert_without_learning(cluster):
    orchestrator = make_orchestrator()
    for point in cluster[:50]:
        orchestrator.insert_sample(point)
    latest = [tree.latest_mass.copy() for tree in orchestrator.trees]

    per_tree = orchestrator.score_trees([5.0, 5.0])

    assert len(per_tree) == orchestrator.n_trees
    for tree, before in zip(orchestrator.trees, latest):
        assert np.array_equal(tree.latest_mass, before)
    assert sum(per_tree) == orchestrator.insert_sample([5.0, 5.0])


def test_dense_region_scores_higher_than_empty_region(cluster):
    orchestrator = make_orchestrator()
    scores = [orchestrator.insert_sample(point) for point in cluster]

    assert np.median(scores[40:]) > 0
    assert sum(orchestrator.score_trees([0.0, 10.0])) < np.median(scores[40:])


def test_accepts_sample_objects():
    orchestrator = make_orchestrator()
    assert orchestrator.insert_sample(Sample.create([5.0, 5.0])) == 0
    assert orchestrator.trees[0].node(0).latest_mass == 1


@pytest.mark.parametrize(
    "sample",
    [[1.0], [1.0, 2.0, 3.0], [[1.0, 2.0]], ["a", "b"], [np.nan, 1.0], 5.0],
)
def test_malformed_sample_is_rejected_before_any_update(sample):
    orchestrator = make_orchestrator()
    for point in ([5.0, 5.0], [4.0, 6.0]):
        orchestrator.insert_sample(point)
    latest = [tree.latest_mass.copy() for tree in orchestrator.trees]
    reference = [tree.reference_mass.copy() for tree in orchestrator.trees]

    with pytest.raises(InputError):
        orchestrator.insert_sample(sample)

    assert orchestrator.window_counter == 2
    for tree, lat, ref in zip(orchestrator.trees, latest, reference):
        assert np.array_equal(tree.latest_mass, lat)
        assert np.array_equal(tree.reference_mass, ref)


@pytest.mark.parametrize(
    "overrides",
    [
        {"n_trees": 0},
        {"max_depth": -1},
        {"window_size": 0},
        {"n_dimensions": 0},
        {"size_limit": 0},
        {"min_bounds": [0.0], "max_bounds": [10.0, 10.0]},
        {"min_bounds": [0.0, 11.0]},
        {"max_bounds": [10.0, float("inf")]},
        {"window_size": 2.5},
        {"size_limit": 0.5},
        {"n_trees": 2.5},
        {"n_trees": None},
        {"max_depth": 1.5},
        {"n_dimensions": True},
    ],
)
def test_invalid_construction_parameters_raise(overrides):
    with pytest.raises(ConfigurationError):
        make_orchestrator(**overrides)


def test_render_labels_every_tree():
    orchestrator = make_orchestrator(n_trees=3, max_depth=1)
    text = str(orchestrator)

    assert "Tree Nr. 0" in text and "Tree Nr. 2" in text
    assert orchestrator.render(1) == orchestrator.trees[1].render()
    assert "n_trees=3" in repr(orchestrator)


def test_numpy_integer_parameters_are_accepted():
    orchestrator = make_orchestrator(n_trees=np.int64(4), window_size=np.int32(5))
    assert len(orchestrator.trees) == 4
