import numpy as np
import pytest

from bagging import bootstrap_indices, bootstrap_sample, sample_features, spawn_tree_rngs
from exceptions import ConfigurationError, DimensionMismatchError


@pytest.mark.parametrize("n_samples", [1, 2, 7, 100])
def test_bootstrap_sample_keeps_the_input_size(n_samples):
    X = np.arange(n_samples * 2, dtype=np.float64).reshape(n_samples, 2)
    y = X[:, 0].copy()

    Xs, ys = bootstrap_sample(X, y, None, np.random.default_rng(0))

    assert Xs.shape == X.shape
    assert ys.shape == y.shape
    # rows and labels stay paired
    np.testing.assert_array_equal(Xs[:, 0], ys)
    assert set(ys.tolist()) <= set(y.tolist())


def test_bootstrap_draws_with_replacement():
    idx = bootstrap_indices(100, 100, np.random.default_rng(4))

    assert idx.shape == (100,)
    assert idx.min() >= 0 and idx.max() < 100
    assert np.unique(idx).size < 100


def test_bootstrap_does_not_touch_the_inputs():
    X = np.arange(12, dtype=np.float64).reshape(6, 2)
    y = np.arange(6)
    X_before, y_before = X.copy(), y.copy()

    Xs, _ = bootstrap_sample(X, y, 6, np.random.default_rng(1))
    Xs[:] = -1.0

    np.testing.assert_array_equal(X, X_before)
    np.testing.assert_array_equal(y, y_before)


def test_bootstrap_rejects_mismatched_inputs():
    with pytest.raises(DimensionMismatchError):
        bootstrap_sample(np.zeros((5, 1)), np.zeros(4), None, np.random.default_rng(0))


def test_bootstrap_rejects_empty_data():
    with pytest.raises(DimensionMismatchError):
        bootstrap_indices(0, None, np.random.default_rng(0))


def test_tree_streams_are_reproducible_and_independent():
    first = [rng.integers(0, 1_000_000, size=5) for rng in spawn_tree_rngs(42, 3)]
    second = [rng.integers(0, 1_000_000, size=5) for rng in spawn_tree_rngs(42, 3)]

    for a, b in zip(first, second):
        np.testing.assert_array_equal(a, b)
    assert not np.array_equal(first[0], first[1])
    assert not np.array_equal(first[1], first[2])


def test_tree_stream_does_not_depend_on_ensemble_size():
    small = spawn_tree_rngs(3, 2)[1].integers(0, 1_000_000, size=8)
    large = spawn_tree_rngs(3, 50)[1].integers(0, 1_000_000, size=8)

    np.testing.assert_array_equal(small, large)


def test_spawn_rejects_non_positive_tree_count():
    with pytest.raises(ConfigurationError):
        spawn_tree_rngs(0, 0)


def test_sample_features_with_replacement_may_repeat():
    rng = np.random.default_rng(0)
    draws = [sample_features(2, 2, rng) for _ in range(50)]

    assert all(d.shape == (2,) for d in draws)
    assert all(0 <= f < 2 for d in draws for f in d)
    # accepted quirk: some draws evaluate fewer distinct features than requested
    assert any(d[0] == d[1] for d in draws)


def test_sample_features_distinct():
    rng = np.random.default_rng(0)
    for _ in range(20):
        draw = sample_features(5, 3, rng, distinct=True)
        assert np.unique(draw).size == 3


@pytest.mark.parametrize("max_features", [0, 4])
def test_sample_features_bounds(max_features):
    with pytest.raises(ConfigurationError):
        sample_features(3, max_features, np.random.default_rng(0))
