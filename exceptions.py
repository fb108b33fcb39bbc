"""Exceptions raised by the forest trainer.

Every error derives from ForestError, so callers can catch the whole family
at once. Each class also subclasses the builtin that the same condition would
naturally raise (ValueError for bad input, RuntimeError for bad state), so
code written against plain builtins keeps working.

- ConfigurationError: invalid hyperparameters or an unsupported task kind.
- DimensionMismatchError: ragged matrix, label/row count mismatch, or a
  prediction sample whose width disagrees with the training data.
- EmptyPartitionError: a tree build step received zero rows.
- NotTrainedError: prediction requested on a forest with no trees.
- NumericError: unresolved missing values (NaN) reached the split search.
- TrainingCancelledError: a cancellation token fired between tree builds.
"""

from __future__ import annotations


class ForestError(Exception):
    """Base class for all errors raised by this project."""


class ConfigurationError(ForestError, ValueError):
    """Raised when hyperparameters are invalid.

    Attributes:
        parameter (str | None): Name of the offending parameter, if known.
        value (object): The rejected value.

    Examples:
        >>> err = ConfigurationError("n_trees must be positive", parameter="n_trees", value=0)
        >>> err.parameter
        'n_trees'
    """

    parameter: str | None
    value: object

    def __init__(self, message: str, *, parameter: str | None = None, value: object = None) -> None:
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class DimensionMismatchError(ForestError, ValueError):
    """Raised when array shapes disagree.

    Attributes:
        expected (int | None): The size that was required.
        actual (int | None): The size that was received.
    """

    expected: int | None
    actual: int | None

    def __init__(self, message: str, *, expected: int | None = None, actual: int | None = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class EmptyPartitionError(ForestError, RuntimeError):
    """Raised when a tree build step receives zero rows.

    The caller chain never produces empty partitions; this guards the builder
    boundary against direct misuse.
    """

    depth: int | None

    def __init__(self, message: str = "cannot build a node from zero rows", *, depth: int | None = None) -> None:
        super().__init__(message)
        self.depth = depth


class NotTrainedError(ForestError, RuntimeError):
    """Raised when predicting with a forest that has not been fitted."""

    def __init__(self, message: str = "forest must be fitted before prediction") -> None:
        super().__init__(message)


class NumericError(ForestError, ValueError):
    """Raised when NaN or infinite values reach the training or split search.

    Attributes:
        columns (list[int]): Feature columns holding non-finite values, when
            the check was done column-wise.
    """

    columns: list[int]

    def __init__(self, message: str, *, columns: list[int] | None = None) -> None:
        super().__init__(message)
        self.columns = list(columns) if columns is not None else []


class TrainingCancelledError(ForestError, RuntimeError):
    """Raised when a cancellation token stops training.

    No partial ensemble is kept; the forest stays in its pre-fit state.

    Attributes:
        trees_completed (int): Trees that had finished when the token fired.
        reason (str): "cancelled" or "deadline".
    """

    trees_completed: int
    reason: str

    def __init__(self, trees_completed: int, reason: str) -> None:
        super().__init__(f"training stopped ({reason}) after {trees_completed} tree(s)")
        self.trees_completed = trees_completed
        self.reason = reason
