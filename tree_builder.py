from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from bagging import sample_features
from criteria import get_criterion
from data_structures.dataset import Task, check_task, majority_code
from data_structures.tree import DecisionTree, Leaf, Node, Split
from exceptions import ConfigurationError, DimensionMismatchError, EmptyPartitionError
from forest_logging import logger
from splitter import SplitResult, Splitter


@dataclass
class TreeBuildMetrics:
    nodes_visited: int = 0
    nodes_split: int = 0
    leaves: int = 0
    forced_leaves: int = 0
    max_depth_reached: int = 0
    split_search_time_sec: float = 0.0
    node_metrics: list[dict] = field(default_factory=list)


@dataclass
class TreeBuilderParams:
    max_depth: int = 5
    max_features: int = 1
    task: Task = "classification"
    distinct_features: bool = False  # off: features are drawn with replacement per node
    record_node_metrics: bool = False

    def __post_init__(self) -> None:
        check_task(self.task)
        if self.max_depth < 0:
            raise ConfigurationError("max_depth must be >= 0", parameter="max_depth", value=self.max_depth)
        if self.max_features < 1:
            raise ConfigurationError("max_features must be >= 1", parameter="max_features", value=self.max_features)


@dataclass
class _PendingNode:
    index: int
    rows: np.ndarray
    depth: int  # distance from the root


class TreeBuilder:
    """Grows one CART-style tree over the rows of ``(X, targets)``.

    ``targets`` are integer class codes for classification and float values
    for regression. The build keeps an explicit stack instead of recursing; the
    left child is always expanded before the right one, so random feature draws
    happen in depth-first pre-order.
    """

    def __init__(
        self,
        X: np.ndarray,
        targets: np.ndarray,
        params: TreeBuilderParams,
        rng: np.random.Generator | None = None,
        classes: np.ndarray | None = None,
    ) -> None:
        self.X = np.asarray(X, dtype=np.float64)
        self.targets = np.asarray(targets)
        if self.X.ndim != 2:
            raise DimensionMismatchError("X must be a 2D array", expected=2, actual=self.X.ndim)
        if self.targets.shape[0] != self.X.shape[0]:
            raise DimensionMismatchError(
                f"targets has {self.targets.shape[0]} values but X has {self.X.shape[0]} rows",
                expected=self.X.shape[0],
                actual=self.targets.shape[0],
            )

        self.params = params
        self.rng = rng if rng is not None else np.random.default_rng(0)
        self.classes = classes

        self.n_samples, self.n_features = self.X.shape
        if params.max_features > self.n_features:
            raise ConfigurationError(
                f"max_features must be in [1, {self.n_features}], got {params.max_features}",
                parameter="max_features",
                value=params.max_features,
            )
        if params.task == "classification":
            self.targets = self.targets.astype(np.intp)
            self.n_classes = int(classes.size) if classes is not None else int(self.targets.max(initial=-1)) + 1
        else:
            self.targets = self.targets.astype(np.float64)
            self.n_classes = 0

        self.splitter = Splitter(get_criterion(params.task))
        self.metrics = TreeBuildMetrics()

    def _leaf_value(self, rows: np.ndarray) -> float | int:
        y = self.targets[rows]
        if self.params.task == "classification":
            return majority_code(y, self.n_classes)
        return float(np.mean(y))

    def _is_terminal(self, rows: np.ndarray, depth: int) -> bool:
        if depth >= self.params.max_depth:
            return True
        y = self.targets[rows]
        if np.all(y == y[0]):
            return True
        X_node = self.X[rows]
        return bool(np.all(X_node == X_node[0]))

    def _partition_rows(self, rows: np.ndarray, split: SplitResult) -> tuple[np.ndarray, np.ndarray]:
        left_mask = self.X[rows, split.feature] < split.threshold
        return rows[left_mask], rows[~left_mask]

    def _find_best_split(self, rows: np.ndarray) -> SplitResult | None:
        candidate_features = sample_features(
            self.n_features,
            self.params.max_features,
            self.rng,
            distinct=self.params.distinct_features,
        )
        before = self.splitter.metrics.time_spent_sec
        result = self.splitter.find_best_split(self.X[rows], self.targets[rows], candidate_features)
        self.metrics.split_search_time_sec += self.splitter.metrics.time_spent_sec - before

        if self.params.record_node_metrics:
            self.metrics.node_metrics.append(
                {
                    "node_size": int(rows.size),
                    "candidate_features": [int(f) for f in candidate_features],
                    "feature": None if result is None else result.feature,
                    "score": None if result is None else result.score,
                }
            )
        return result

    def _make_leaf(self, pending: _PendingNode) -> Leaf:
        self.metrics.leaves += 1
        self.metrics.max_depth_reached = max(self.metrics.max_depth_reached, pending.depth)
        return Leaf(value=self._leaf_value(pending.rows), n_samples=int(pending.rows.size))

    def build_tree(self, rows: np.ndarray | None = None) -> DecisionTree:
        if rows is None:
            rows = np.arange(self.n_samples, dtype=np.intp)
        else:
            rows = np.asarray(rows, dtype=np.intp)

        nodes: list[Node | None] = [None]
        stack = [_PendingNode(index=0, rows=rows, depth=0)]

        while stack:
            pending = stack.pop()
            self.metrics.nodes_visited += 1

            if pending.rows.size == 0:
                raise EmptyPartitionError(depth=pending.depth)

            if self._is_terminal(pending.rows, pending.depth):
                nodes[pending.index] = self._make_leaf(pending)
                continue

            split = self._find_best_split(pending.rows)
            if split is None:
                self.metrics.forced_leaves += 1
                logger.trace("No viable split, forcing leaf", depth=pending.depth, node_size=int(pending.rows.size))
                nodes[pending.index] = self._make_leaf(pending)
                continue

            left_rows, right_rows = self._partition_rows(pending.rows, split)
            left_index = len(nodes)
            right_index = left_index + 1
            nodes.extend([None, None])
            nodes[pending.index] = Split(
                feature=split.feature,
                threshold=split.threshold,
                left=left_index,
                right=right_index,
                n_samples=int(pending.rows.size),
            )
            self.metrics.nodes_split += 1
            logger.trace(
                "Split node",
                depth=pending.depth,
                feature=split.feature,
                threshold=split.threshold,
                n_left=int(left_rows.size),
                n_right=int(right_rows.size),
            )

            stack.append(_PendingNode(index=right_index, rows=right_rows, depth=pending.depth + 1))
            stack.append(_PendingNode(index=left_index, rows=left_rows, depth=pending.depth + 1))

        assert all(node is not None for node in nodes)
        return DecisionTree(nodes=nodes, n_features=self.n_features, task=self.params.task, classes=self.classes)
