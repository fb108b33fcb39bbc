from __future__ import annotations

from dataclasses import dataclass
import threading
import time

import numpy as np
from joblib import Parallel, delayed

from bagging import bootstrap_indices, spawn_tree_rngs
from data_structures.dataset import Dataset, Task, check_finite, check_task, majority_code
from data_structures.tree import DecisionTree
from exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    NotTrainedError,
    TrainingCancelledError,
)
from forest_logging import logger
from tree_builder import TreeBuilder, TreeBuilderParams


@dataclass
class ForestParams:
    n_trees: int = 10
    max_depth: int = 5
    max_features: int = 2
    task: Task = "classification"

    bootstrap: bool = True  # off: every tree sees the full training set
    distinct_features: bool = False
    n_jobs: int | None = 1  # joblib semantics, -1 uses every core
    random_state: int | None = 0

    def __post_init__(self) -> None:
        if self.n_trees <= 0:
            raise ConfigurationError("n_trees must be positive", parameter="n_trees", value=self.n_trees)
        if self.max_depth < 0:
            raise ConfigurationError("max_depth must be >= 0", parameter="max_depth", value=self.max_depth)
        if self.max_features < 1:
            raise ConfigurationError("max_features must be >= 1", parameter="max_features", value=self.max_features)
        check_task(self.task)
        if self.n_jobs == 0:
            raise ConfigurationError("n_jobs must not be 0", parameter="n_jobs", value=self.n_jobs)


class CancellationToken:
    """Stops a running ``fit`` before the next tree build starts.

    A tree that is already being grown always finishes; the fit then fails
    with ``TrainingCancelledError`` instead of returning a partial ensemble.
    """

    def __init__(self, deadline: float | None = None) -> None:
        # deadline is a time.monotonic() timestamp
        self.deadline = deadline
        self._event = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._event.set()

    @property
    def reason(self) -> str | None:
        if self._event.is_set():
            return "cancelled"
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return "deadline"
        return None

    @property
    def cancelled(self) -> bool:
        return self.reason is not None


class RandomForest:
    """Bagged ensemble of decision trees for classification or regression."""

    def __init__(self, params: ForestParams | None = None) -> None:
        self.params = params or ForestParams()

        self._trees: tuple[DecisionTree, ...] = ()
        self.classes_: np.ndarray | None = None
        self.n_features_: int | None = None
        self.metrics: dict = {}

    @property
    def trees(self) -> tuple[DecisionTree, ...]:
        return self._trees

    @property
    def is_fitted(self) -> bool:
        return len(self._trees) > 0

    def _tree_params(self) -> TreeBuilderParams:
        return TreeBuilderParams(
            max_depth=self.params.max_depth,
            max_features=self.params.max_features,
            task=self.params.task,
            distinct_features=self.params.distinct_features,
        )

    def _build_one(
        self,
        tree_idx: int,
        dataset: Dataset,
        rng: np.random.Generator,
        cancel_token: CancellationToken | None,
        progress: dict,
    ) -> tuple[DecisionTree, dict]:
        if cancel_token is not None:
            reason = cancel_token.reason
            if reason is not None:
                with progress["lock"]:
                    completed = progress["completed"]
                raise TrainingCancelledError(trees_completed=completed, reason=reason)

        t0 = time.perf_counter()
        if self.params.bootstrap:
            rows = bootstrap_indices(dataset.n_samples, dataset.n_samples, rng)
        else:
            rows = np.arange(dataset.n_samples, dtype=np.intp)

        # each tree trains on its own copy of the sampled rows
        builder = TreeBuilder(
            X=dataset.X[rows],
            targets=dataset.targets[rows],
            params=self._tree_params(),
            rng=rng,
            classes=dataset.classes,
        )
        tree = builder.build_tree()

        with progress["lock"]:
            progress["completed"] += 1
        tree_metrics = {
            "tree_idx": tree_idx,
            "n_unique_rows": int(np.unique(rows).size),
            "nodes_visited": builder.metrics.nodes_visited,
            "nodes_split": builder.metrics.nodes_split,
            "leaves": builder.metrics.leaves,
            "forced_leaves": builder.metrics.forced_leaves,
            "depth": tree.depth,
            "split_search_time_sec": builder.metrics.split_search_time_sec,
            "build_time_sec": time.perf_counter() - t0,
        }
        logger.debug("Built tree", **tree_metrics)
        return tree, tree_metrics

    def fit(self, X, y, *, cancel_token: CancellationToken | None = None) -> RandomForest:
        dataset = Dataset.from_arrays(X, y, task=self.params.task)
        if self.params.max_features > dataset.n_features:
            raise ConfigurationError(
                f"max_features must be in [1, {dataset.n_features}], got {self.params.max_features}",
                parameter="max_features",
                value=self.params.max_features,
            )
        check_finite(dataset.X)

        logger.info(
            "Training random forest",
            n_trees=self.params.n_trees,
            task=self.params.task,
            n_samples=dataset.n_samples,
            n_features=dataset.n_features,
            n_jobs=self.params.n_jobs,
        )
        t0 = time.perf_counter()

        rngs = spawn_tree_rngs(self.params.random_state, self.params.n_trees)
        progress = {"completed": 0, "lock": threading.Lock()}
        try:
            results = Parallel(n_jobs=self.params.n_jobs, require="sharedmem")(
                delayed(self._build_one)(i, dataset, rngs[i], cancel_token, progress)
                for i in range(self.params.n_trees)
            )
        except TrainingCancelledError as exc:
            logger.warning("Training cancelled", reason=exc.reason, trees_completed=exc.trees_completed)
            raise

        self._trees = tuple(tree for tree, _ in results)
        self.classes_ = dataset.classes
        self.n_features_ = dataset.n_features
        self.metrics = {
            "fit_time_sec": time.perf_counter() - t0,
            "total_nodes": sum(len(tree) for tree in self._trees),
            "forced_leaves": sum(m["forced_leaves"] for _, m in results),
            "split_search_time_sec": sum(m["split_search_time_sec"] for _, m in results),
            "tree_metrics": [m for _, m in results],
        }
        logger.info(
            "Random forest trained",
            n_trees=len(self._trees),
            total_nodes=self.metrics["total_nodes"],
            fit_time_sec=round(self.metrics["fit_time_sec"], 4),
        )
        return self

    def _check_sample(self, sample) -> np.ndarray:
        if not self.is_fitted:
            raise NotTrainedError()
        row = np.asarray(sample, dtype=np.float64)
        if row.ndim != 1 or row.shape[0] != self.n_features_:
            actual = row.shape[0] if row.ndim == 1 else row.size
            raise DimensionMismatchError(
                f"sample has {actual} feature(s) but the forest was trained on {self.n_features_}",
                expected=self.n_features_,
                actual=int(actual),
            )
        check_finite(row.reshape(1, -1))
        return row

    def _aggregate(self, leaf_values: list):
        if self.params.task == "classification":
            code = majority_code(np.asarray(leaf_values, dtype=np.intp), len(self.classes_))
            return self.classes_[code]
        return float(np.mean(leaf_values))

    def predict_sample(self, sample):
        """Aggregate prediction for one feature row.

        Classification: majority vote over the trees; a tie goes to the class
        voted for by the lowest-numbered tree among the tied classes.
        Regression: mean of the tree outputs.
        """
        row = self._check_sample(sample)
        return self._aggregate([tree.leaf_value_for_row(row) for tree in self._trees])

    def predict(self, X) -> np.ndarray:
        if not self.is_fitted:
            raise NotTrainedError()
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        if X.ndim != 2 or X.shape[1] != self.n_features_:
            raise DimensionMismatchError(
                f"X has {X.shape[-1]} feature(s) but the forest was trained on {self.n_features_}",
                expected=self.n_features_,
                actual=int(X.shape[-1]),
            )
        check_finite(X)

        preds = [self._aggregate([tree.leaf_value_for_row(row) for tree in self._trees]) for row in X]
        if self.params.task == "classification":
            return np.asarray(preds, dtype=self.classes_.dtype)
        return np.asarray(preds, dtype=np.float64)

