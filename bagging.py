import numpy as np

from exceptions import ConfigurationError, DimensionMismatchError


def spawn_tree_rngs(random_state: int | None, n_trees: int) -> list[np.random.Generator]:
    """One independent generator per tree, all derived from ``random_state``.

    Tree ``i`` always receives the same stream for a given seed, whatever order
    or thread the trees are later built in.
    """
    if n_trees <= 0:
        raise ConfigurationError("n_trees must be positive", parameter="n_trees", value=n_trees)
    children = np.random.SeedSequence(random_state).spawn(n_trees)
    return [np.random.default_rng(child) for child in children]


def bootstrap_indices(n_samples: int, size: int | None, rng: np.random.Generator) -> np.ndarray:
    """Draw ``size`` row indices uniformly with replacement from ``[0, n_samples)``."""
    if n_samples <= 0:
        raise DimensionMismatchError("cannot bootstrap an empty dataset", actual=n_samples)
    size = n_samples if size is None else size
    if size <= 0:
        raise ConfigurationError("bootstrap size must be positive", parameter="size", value=size)
    return rng.integers(0, n_samples, size=size)


def bootstrap_sample(
    X: np.ndarray,
    y: np.ndarray,
    size: int | None,
    rng: np.random.Generator,
) -> tuple[np.ndarray, np.ndarray]:
    """Bootstrap resample of ``(X, y)``; duplicates are expected.

    Fancy indexing copies, so the caller's arrays are never reordered.
    """
    X = np.asarray(X)
    y = np.asarray(y)
    if X.shape[0] != y.shape[0]:
        raise DimensionMismatchError(
            f"y has {y.shape[0]} labels but X has {X.shape[0]} rows",
            expected=X.shape[0],
            actual=y.shape[0],
        )
    idx = bootstrap_indices(X.shape[0], size, rng)
    return X[idx], y[idx]


def sample_features(
    n_features: int,
    max_features: int,
    rng: np.random.Generator,
    distinct: bool = False,
) -> np.ndarray:
    """Candidate feature indices for one node.

    By default indices are drawn with replacement, so a node may see fewer
    than ``max_features`` distinct features. ``distinct=True`` samples without
    replacement.
    """
    if not (1 <= max_features <= n_features):
        raise ConfigurationError(
            f"max_features must be in [1, {n_features}], got {max_features}",
            parameter="max_features",
            value=max_features,
        )
    if distinct:
        return np.asarray(rng.choice(n_features, size=max_features, replace=False), dtype=np.intp)
    return np.asarray(rng.integers(0, n_features, size=max_features), dtype=np.intp)
