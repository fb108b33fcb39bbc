import numpy as np
import pytest

from criteria import GiniCriterion, VarianceCriterion
from exceptions import NumericError
from splitter import Splitter


def test_regression_split_at_the_middle():
    X = np.array([[1.0], [2.0], [3.0], [4.0]])
    y = np.array([1.0, 2.0, 3.0, 4.0])

    result = Splitter(VarianceCriterion()).find_best_split(X, y, [0])

    assert result is not None
    assert result.feature == 0
    assert result.threshold == pytest.approx(2.5)
    assert (result.n_left, result.n_right) == (2, 2)
    assert result.score == pytest.approx(-0.25)


def test_picks_the_separating_feature():
    X = np.array([[5.0, 0.0], [3.0, 0.0], [4.0, 1.0], [1.0, 1.0]])
    y = np.array([0, 0, 1, 1])

    result = Splitter(GiniCriterion()).find_best_split(X, y, [0, 1])

    assert result.feature == 1
    assert result.threshold == pytest.approx(0.5)
    assert result.score == pytest.approx(0.0)


def test_ties_keep_the_first_candidate_feature():
    X = np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
    y = np.array([0, 0, 1])

    first_one = Splitter(GiniCriterion()).find_best_split(X, y, [1, 0])
    first_zero = Splitter(GiniCriterion()).find_best_split(X, y, [0, 1])

    assert first_one.feature == 1
    assert first_zero.feature == 0
    assert first_one.threshold == first_zero.threshold == pytest.approx(2.5)


def test_ties_keep_the_lowest_threshold():
    # both 1.5 and 3.5 isolate one row of the minority label
    X = np.array([[1.0], [2.0], [3.0], [4.0]])
    y = np.array([1, 0, 0, 1])

    result = Splitter(GiniCriterion()).find_best_split(X, y, [0])

    assert result.threshold == pytest.approx(1.5)


def test_repeated_values_do_not_create_degenerate_thresholds():
    X = np.array([[1.0], [1.0], [2.0], [2.0]])
    y = np.array([0, 0, 1, 1])

    splitter = Splitter(GiniCriterion())
    result = splitter.find_best_split(X, y, [0])

    assert result.threshold == pytest.approx(1.5)
    assert result.n_left == 2
    assert splitter.metrics.thresholds_evaluated == 1


def test_unsorted_input_is_handled():
    X = np.array([[4.0], [1.0], [3.0], [2.0]])
    y = np.array([1, 0, 1, 0])

    result = Splitter(GiniCriterion()).find_best_split(X, y, [0])

    assert result.threshold == pytest.approx(2.5)
    assert result.score == pytest.approx(0.0)


def test_no_viable_split_is_reported_as_none():
    splitter = Splitter(GiniCriterion())
    X = np.array([[1.0, 7.0], [1.0, 8.0], [1.0, 9.0]])
    y = np.array([0, 1, 0])

    assert splitter.find_best_split(X, y, [0]) is None
    assert splitter.find_best_split(X, y, [0, 0]) is None
    assert splitter.find_best_split(X, y, []) is None
    assert splitter.metrics.no_viable_split == 3
    assert splitter.metrics.searches == 3


def test_duplicate_candidates_match_single_candidate():
    rng = np.random.default_rng(2)
    X = rng.normal(size=(30, 3))
    y = (X[:, 1] > 0.2).astype(np.int64)

    once = Splitter(GiniCriterion()).find_best_split(X, y, [1])
    twice = Splitter(GiniCriterion()).find_best_split(X, y, [1, 1])

    assert once == twice


def test_inputs_are_not_modified():
    X = np.array([[3.0, 1.0], [1.0, 2.0], [2.0, 0.0]])
    y = np.array([1, 0, 1])
    X_before, y_before = X.copy(), y.copy()

    Splitter(GiniCriterion()).find_best_split(X, y, [0, 1])

    np.testing.assert_array_equal(X, X_before)
    np.testing.assert_array_equal(y, y_before)


def test_missing_feature_values_raise():
    X = np.array([[1.0], [np.nan], [3.0]])
    y = np.array([0, 1, 1])

    with pytest.raises(NumericError) as exc_info:
        Splitter(GiniCriterion()).find_best_split(X, y, [0])
    assert exc_info.value.columns == [0]
