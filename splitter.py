from __future__ import annotations

from dataclasses import dataclass
import time

import numpy as np

from criteria import ImpurityCriterion
from exceptions import NumericError


@dataclass(frozen=True)
class SplitResult:
    feature: int
    threshold: float
    score: float
    n_left: int
    n_right: int


@dataclass
class SplitSearchMetrics:
    searches: int = 0
    features_evaluated: int = 0
    thresholds_evaluated: int = 0
    no_viable_split: int = 0
    time_spent_sec: float = 0.0


class Splitter:
    """Exhaustive threshold search over a node's candidate features.

    Thresholds are midpoints between adjacent sorted column values; a row goes
    left when its value is strictly below the threshold. Ties keep the first
    candidate feature, then the lowest threshold.
    """

    def __init__(self, criterion: ImpurityCriterion) -> None:
        self.criterion = criterion
        self.metrics = SplitSearchMetrics()

    def _feature_thresholds(self, column: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        order = np.argsort(column, kind="stable")
        values = column[order]

        # midpoints of equal neighbours reproduce the previous distinct split
        distinct = values[1:] != values[:-1]
        thresholds = ((values[:-1] + values[1:]) * 0.5)[distinct]

        n_left = np.searchsorted(values, thresholds, side="left")
        valid = (n_left > 0) & (n_left < values.size)
        return order, thresholds[valid], n_left[valid]

    def find_best_split(
        self,
        X: np.ndarray,
        y: np.ndarray,
        candidate_features,
    ) -> SplitResult | None:
        """Best ``(feature, threshold)`` for the rows of ``X``, or None when no split separates them."""
        t0 = time.perf_counter()
        self.metrics.searches += 1

        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y)
        n_samples = X.shape[0]

        best: SplitResult | None = None
        for feature in candidate_features:
            feature = int(feature)
            column = X[:, feature]
            if np.any(np.isnan(column)):
                raise NumericError(
                    f"feature {feature} contains missing values; impute them before training",
                    columns=[feature],
                )
            self.metrics.features_evaluated += 1

            order, thresholds, n_left = self._feature_thresholds(column)
            if thresholds.size == 0:
                continue
            self.metrics.thresholds_evaluated += int(thresholds.size)

            scores = self.criterion.split_scores(y[order], n_left)
            k = int(np.argmax(scores))
            if best is None or scores[k] > best.score:
                best = SplitResult(
                    feature=feature,
                    threshold=float(thresholds[k]),
                    score=float(scores[k]),
                    n_left=int(n_left[k]),
                    n_right=int(n_samples - n_left[k]),
                )

        if best is None:
            self.metrics.no_viable_split += 1
        self.metrics.time_spent_sec += time.perf_counter() - t0
        return best
