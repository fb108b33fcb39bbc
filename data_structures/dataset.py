from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

import numpy as np

from exceptions import ConfigurationError, DimensionMismatchError, NumericError

Task = Literal["classification", "regression"]
TASKS: Final[frozenset[str]] = frozenset({"classification", "regression"})


def check_task(task: str) -> None:
    if task not in TASKS:
        raise ConfigurationError(
            f"task must be one of: {', '.join(sorted(TASKS))}; got {task!r}",
            parameter="task",
            value=task,
        )


def as_feature_matrix(X) -> np.ndarray:
    """Copy ``X`` into a float64 2-D array, rejecting ragged, non-numeric or empty input."""
    try:
        matrix = np.array(X, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        try:
            cells = np.array(X, dtype=object)
        except ValueError:
            cells = None
        # a ragged input collapses to a 1-D array of rows
        if cells is None or cells.ndim < 2:
            raise DimensionMismatchError(f"feature matrix must be rectangular: {exc}") from exc
        raise NumericError(f"feature matrix contains non-numeric values: {exc}") from exc

    if matrix.ndim != 2:
        raise DimensionMismatchError(f"X must be a 2D array, got {matrix.ndim} dimension(s)", expected=2, actual=matrix.ndim)
    if matrix.shape[0] == 0:
        raise DimensionMismatchError("X must contain at least one row", actual=0)
    if matrix.shape[1] == 0:
        raise DimensionMismatchError("X must contain at least one feature column", actual=0)
    return matrix


def check_finite(matrix: np.ndarray) -> None:
    bad = ~np.isfinite(matrix)
    if np.any(bad):
        columns = [int(c) for c in np.flatnonzero(np.any(bad, axis=0))]
        raise NumericError(
            f"feature matrix contains missing or infinite values in columns {columns}; impute them before training",
            columns=columns,
        )


def intern_labels(y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Map labels to integer codes. Returns ``(classes, codes)`` with ``classes[codes] == y``."""
    classes, codes = np.unique(y, return_inverse=True)
    return classes, np.asarray(codes, dtype=np.intp).reshape(-1)


def majority_code(codes: np.ndarray, n_classes: int | None = None) -> int:
    """Most frequent code; ties go to the code that appears first in ``codes``."""
    codes = np.asarray(codes, dtype=np.intp)
    counts = np.bincount(codes, minlength=n_classes or 0)
    winners = np.flatnonzero(counts == counts.max())
    if winners.size == 1:
        return int(winners[0])
    first_seen = [int(np.argmax(codes == w)) for w in winners]
    return int(winners[int(np.argmin(first_seen))])


@dataclass(frozen=True)
class Dataset:
    """Read-only feature matrix and label vector.

    ``targets`` is what the trees are grown on: integer class codes for
    classification, float64 values for regression. ``classes`` decodes codes
    back to the caller's labels and is None for regression.
    """

    X: np.ndarray
    y: np.ndarray
    task: Task
    targets: np.ndarray
    classes: np.ndarray | None

    @classmethod
    def from_arrays(cls, X, y, task: Task = "classification") -> Dataset:
        check_task(task)
        matrix = as_feature_matrix(X)

        labels = np.array(y)
        if labels.ndim == 2 and labels.shape[1] == 1:
            labels = labels[:, 0]
        if labels.ndim != 1:
            raise DimensionMismatchError("y must be one-dimensional", expected=1, actual=labels.ndim)
        if labels.shape[0] != matrix.shape[0]:
            raise DimensionMismatchError(
                f"y has {labels.shape[0]} labels but X has {matrix.shape[0]} rows",
                expected=matrix.shape[0],
                actual=labels.shape[0],
            )

        if task == "regression":
            try:
                labels = labels.astype(np.float64)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError("regression labels must be numeric", parameter="task", value=task) from exc
            if not np.all(np.isfinite(labels)):
                raise NumericError("regression labels contain missing or infinite values")
            targets = labels
            classes = None
        else:
            if labels.dtype.kind == "f" and np.any(np.isnan(labels)):
                raise NumericError("classification labels contain missing values")
            classes, targets = intern_labels(labels)
            classes.setflags(write=False)

        for array in (matrix, labels, targets):
            array.setflags(write=False)
        return cls(X=matrix, y=labels, task=task, targets=targets, classes=classes)

    @property
    def n_samples(self) -> int:
        return int(self.X.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.X.shape[1])

    @property
    def n_classes(self) -> int:
        return 0 if self.classes is None else int(self.classes.size)

    def __len__(self) -> int:
        return self.n_samples
