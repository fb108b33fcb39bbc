import pytest

from exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    EmptyPartitionError,
    ForestError,
    NotTrainedError,
    NumericError,
    TrainingCancelledError,
)


@pytest.mark.parametrize(
    "exc_type, builtin",
    [
        (ConfigurationError, ValueError),
        (DimensionMismatchError, ValueError),
        (EmptyPartitionError, RuntimeError),
        (NotTrainedError, RuntimeError),
        (NumericError, ValueError),
        (TrainingCancelledError, RuntimeError),
    ],
)
def test_hierarchy(exc_type, builtin):
    assert issubclass(exc_type, ForestError)
    assert issubclass(exc_type, builtin)


def test_attributes():
    err = ConfigurationError("bad", parameter="n_trees", value=0)
    assert (err.parameter, err.value) == ("n_trees", 0)

    err = DimensionMismatchError("bad", expected=3, actual=2)
    assert (err.expected, err.actual) == (3, 2)

    assert EmptyPartitionError(depth=4).depth == 4
    assert NumericError("bad").columns == []
    assert "fitted" in str(NotTrainedError())


def test_cancelled_message():
    err = TrainingCancelledError(trees_completed=2, reason="deadline")

    assert err.trees_completed == 2
    assert str(err) == "training stopped (deadline) after 2 tree(s)"
