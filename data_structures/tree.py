from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np

from data_structures.dataset import Task


@dataclass(frozen=True)
class Leaf:
    # class code for classification, mean target for regression
    value: float | int
    n_samples: int


@dataclass(frozen=True)
class Split:
    feature: int
    threshold: float
    left: int
    right: int
    n_samples: int


Node = Leaf | Split


class DecisionTree:
    """Binary decision tree stored as an arena of nodes, root at index 0.

    Rows with ``sample[feature] < threshold`` go to ``left``, all others to
    ``right``. The tree is never modified after construction.
    """

    root: int = 0

    def __init__(
        self,
        nodes: Sequence[Node],
        n_features: int,
        task: Task,
        classes: np.ndarray | None = None,
    ) -> None:
        if not nodes:
            raise ValueError("a tree needs at least one node")
        self.nodes: tuple[Node, ...] = tuple(nodes)
        self.n_features = n_features
        self.task = task
        self.classes = classes

    def apply_row(self, sample: np.ndarray) -> int:
        """Index of the leaf reached by ``sample``."""
        index = self.root
        node = self.nodes[index]
        while isinstance(node, Split):
            index = node.left if sample[node.feature] < node.threshold else node.right
            node = self.nodes[index]
        return index

    def leaf_value_for_row(self, sample: np.ndarray) -> float | int:
        """Raw leaf value: a class code for classification trees."""
        leaf = self.nodes[self.apply_row(sample)]
        assert isinstance(leaf, Leaf)
        return leaf.value

    def predict_row(self, sample: np.ndarray):
        value = self.leaf_value_for_row(sample)
        if self.classes is not None:
            return self.classes[value]
        return value

    def predict_batch(self, X: np.ndarray) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        if self.classes is not None:
            codes = np.array([self.leaf_value_for_row(row) for row in X], dtype=np.intp)
            return self.classes[codes]
        preds = np.zeros(X.shape[0], dtype=np.float64)
        for i in range(X.shape[0]):
            preds[i] = self.leaf_value_for_row(X[i])
        return preds

    def iter_leaves(self) -> Iterator[tuple[int, Leaf, int]]:
        """Yield ``(index, leaf, depth)`` for every leaf, left to right."""
        stack = [(self.root, 0)]
        while stack:
            index, depth = stack.pop()
            node = self.nodes[index]
            if isinstance(node, Leaf):
                yield index, node, depth
            else:
                stack.append((node.right, depth + 1))
                stack.append((node.left, depth + 1))

    @property
    def depth(self) -> int:
        """Edge count of the longest root-to-leaf path."""
        return max(depth for _, _, depth in self.iter_leaves())

    @property
    def n_leaves(self) -> int:
        return sum(1 for node in self.nodes if isinstance(node, Leaf))

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DecisionTree):
            return NotImplemented
        same_classes = (self.classes is None and other.classes is None) or (
            self.classes is not None and other.classes is not None and np.array_equal(self.classes, other.classes)
        )
        return self.nodes == other.nodes and self.task == other.task and same_classes

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DecisionTree(task={self.task!r}, nodes={len(self.nodes)}, leaves={self.n_leaves}, depth={self.depth})"
