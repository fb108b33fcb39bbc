from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

import numpy as np

from data_structures.dataset import check_task
from exceptions import NumericError


class ImpurityCriterion(ABC):
    """Split quality measure. Higher scores are better.

    ``score`` is the negated size-weighted impurity of the two sides;
    ``split_scores`` evaluates many thresholds of one sorted column at once and
    must agree with ``score`` on every threshold.
    """

    name: ClassVar[str]

    @abstractmethod
    def impurity(self, labels: np.ndarray) -> float:
        ...

    @abstractmethod
    def split_scores(self, sorted_targets: np.ndarray, n_left: np.ndarray) -> np.ndarray:
        """Scores of the splits that put the first ``n_left[k]`` targets on the left."""

    def score(self, left_labels, right_labels) -> float:
        left = np.asarray(left_labels)
        right = np.asarray(right_labels)
        total = left.size + right.size
        if total == 0:
            return 0.0

        weighted = 0.0
        if left.size:
            weighted += (left.size / total) * self.impurity(left)
        if right.size:
            weighted += (right.size / total) * self.impurity(right)
        return -weighted


class GiniCriterion(ImpurityCriterion):
    name = "gini"

    def impurity(self, labels: np.ndarray) -> float:
        labels = np.asarray(labels)
        if labels.size == 0:
            return 0.0
        _, counts = np.unique(labels, return_counts=True)
        p = counts / float(labels.size)
        return float(1.0 - np.sum(p * p))

    def split_scores(self, sorted_targets: np.ndarray, n_left: np.ndarray) -> np.ndarray:
        codes = np.asarray(sorted_targets, dtype=np.intp)
        n_left = np.asarray(n_left, dtype=np.intp)
        n = codes.size
        totals = np.bincount(codes)

        # rank[i]: rows of the same class before row i. Adding row i to the
        # left side grows its sum of squared class counts by 2 * rank[i] + 1.
        by_class = np.argsort(codes, kind="stable")
        starts = np.cumsum(totals) - totals
        rank = np.empty(n, dtype=np.int64)
        rank[by_class] = np.arange(n) - starts[codes[by_class]]

        left_sq = np.cumsum(2 * rank + 1)[n_left - 1].astype(np.float64)
        # sum_c (T_c - L_c)^2 = sum_c T_c^2 - 2 * sum_c T_c L_c + sum_c L_c^2
        cross = np.cumsum(totals[codes])[n_left - 1].astype(np.float64)
        right_sq = float(np.sum(totals.astype(np.float64) ** 2)) - 2.0 * cross + left_sq

        n_l = n_left.astype(np.float64)
        n_r = float(n) - n_l
        gini_l = 1.0 - left_sq / (n_l * n_l)
        gini_r = 1.0 - right_sq / (n_r * n_r)
        return -((n_l / n) * gini_l + (n_r / n) * gini_r)


class VarianceCriterion(ImpurityCriterion):
    name = "variance"

    def impurity(self, labels: np.ndarray) -> float:
        values = np.asarray(labels, dtype=np.float64)
        if values.size == 0:
            return 0.0
        if np.any(np.isnan(values)):
            raise NumericError("regression targets contain missing values")
        return float(np.mean((values - values.mean()) ** 2))

    def split_scores(self, sorted_targets: np.ndarray, n_left: np.ndarray) -> np.ndarray:
        values = np.asarray(sorted_targets, dtype=np.float64)
        if np.any(np.isnan(values)):
            raise NumericError("regression targets contain missing values")
        n_left = np.asarray(n_left, dtype=np.intp)
        n = values.size

        # centering keeps the sum-of-squares identity well conditioned
        centered = values - values.mean()
        csum = np.cumsum(centered)
        csum2 = np.cumsum(centered * centered)

        n_l = n_left.astype(np.float64)
        n_r = float(n) - n_l
        sum_l = csum[n_left - 1]
        sq_l = csum2[n_left - 1]
        sum_r = csum[-1] - sum_l
        sq_r = csum2[-1] - sq_l

        var_l = np.maximum(sq_l / n_l - (sum_l / n_l) ** 2, 0.0)
        var_r = np.maximum(sq_r / n_r - (sum_r / n_r) ** 2, 0.0)
        return -((n_l / n) * var_l + (n_r / n) * var_r)


_CRITERIA: dict[str, type[ImpurityCriterion]] = {
    "classification": GiniCriterion,
    "regression": VarianceCriterion,
}


def get_criterion(task: str) -> ImpurityCriterion:
    check_task(task)
    return _CRITERIA[task]()
