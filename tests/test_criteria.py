import tracemalloc

import numpy as np
import pytest

from criteria import GiniCriterion, VarianceCriterion, get_criterion
from exceptions import ConfigurationError, NumericError


def test_gini_impurity_of_pure_and_balanced_sets():
    gini = GiniCriterion()

    assert gini.impurity(np.array([3, 3, 3])) == 0.0
    assert gini.impurity(np.array([0, 0, 1, 1])) == pytest.approx(0.5)
    assert gini.impurity(np.array([0, 1, 2])) == pytest.approx(2.0 / 3.0)


def test_gini_score_weights_sides_by_size():
    gini = GiniCriterion()

    assert gini.score([0, 0], [1, 1]) == pytest.approx(0.0)
    # left [0, 1] has impurity 0.5 and half the rows
    assert gini.score([0, 1], [1, 1]) == pytest.approx(-0.25)


def test_gini_accepts_non_numeric_labels():
    assert GiniCriterion().impurity(np.array(["a", "b", "a", "b"])) == pytest.approx(0.5)


def test_variance_impurity_is_mean_squared_error():
    variance = VarianceCriterion()

    assert variance.impurity(np.array([1.0, 2.0, 3.0, 4.0])) == pytest.approx(1.25)
    assert variance.score([1.0, 2.0], [3.0, 4.0]) == pytest.approx(-0.25)


def test_empty_side_contributes_nothing():
    assert GiniCriterion().score([], [0, 1]) == pytest.approx(-0.5)
    assert VarianceCriterion().score([], []) == 0.0


def test_gini_split_scores_match_pairwise_score():
    gini = GiniCriterion()
    targets = np.array([0, 0, 1, 0, 2, 1, 1, 2])
    n_left = np.arange(1, targets.size)

    vectorized = gini.split_scores(targets, n_left)
    expected = [gini.score(targets[:k], targets[k:]) for k in n_left]

    np.testing.assert_allclose(vectorized, expected, atol=1e-12)


def test_gini_split_scores_with_many_classes():
    rng = np.random.default_rng(8)
    gini = GiniCriterion()
    targets = rng.integers(0, 40, size=120)
    n_left = np.arange(1, targets.size)

    vectorized = gini.split_scores(targets, n_left)
    expected = [gini.score(targets[:k], targets[k:]) for k in n_left]

    np.testing.assert_allclose(vectorized, expected, atol=1e-12)


def test_gini_split_scores_memory_is_linear_in_rows():
    # one class per row: a rows x classes count table would need ~128 MB here
    targets = np.random.default_rng(0).permutation(4000)
    n_left = np.arange(1, targets.size)

    tracemalloc.start()
    try:
        GiniCriterion().split_scores(targets, n_left)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    assert peak < 8 * 1024 * 1024


def test_variance_split_scores_match_pairwise_score():
    rng = np.random.default_rng(5)
    variance = VarianceCriterion()
    targets = rng.normal(loc=100.0, scale=3.0, size=25)
    n_left = np.arange(1, targets.size)

    vectorized = variance.split_scores(targets, n_left)
    expected = [variance.score(targets[:k], targets[k:]) for k in n_left]

    np.testing.assert_allclose(vectorized, expected, atol=1e-9)


def test_variance_rejects_missing_targets():
    with pytest.raises(NumericError):
        VarianceCriterion().split_scores(np.array([1.0, np.nan, 2.0]), np.array([1, 2]))


def test_get_criterion_by_task():
    assert isinstance(get_criterion("classification"), GiniCriterion)
    assert isinstance(get_criterion("regression"), VarianceCriterion)


def test_unsupported_task_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        get_criterion("ranking")
    with pytest.raises(ValueError):
        get_criterion("entropy")
