"""
Data structures for the bagged tree ensemble.

Dataset wraps the validated, read-only training arrays; DecisionTree stores a
grown tree as an arena of Leaf and Split nodes addressed by index.
"""

from data_structures.dataset import TASKS, Dataset, Task, check_task, intern_labels, majority_code
from data_structures.tree import DecisionTree, Leaf, Node, Split

__all__ = [
    "TASKS",
    "Dataset",
    "DecisionTree",
    "Leaf",
    "Node",
    "Split",
    "Task",
    "check_task",
    "intern_labels",
    "majority_code",
]
