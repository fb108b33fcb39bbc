import argparse
import time
import sys
from pathlib import Path

import numpy as np

# Allow running as: python experiments/quick_forest_eval.py
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from evaluation import evaluate
from forest import ForestParams, RandomForest
from forest_logging import enable_logging
from tabular import impute_missing_values, load_csv, train_test_split


def _subsample(X, y, max_samples, rng):
    if max_samples is None or X.shape[0] <= max_samples:
        return X, y
    idx = rng.choice(X.shape[0], size=max_samples, replace=False)
    return X[idx], y[idx]


def _with_missing(X, fraction, rng):
    if fraction <= 0.0:
        return X
    X = X.copy()
    X[rng.uniform(size=X.shape) < fraction] = np.nan
    return X


def _load_sklearn_dataset(name):
    try:
        if name == "diabetes":
            from sklearn.datasets import load_diabetes

            ds = load_diabetes()
            return ds.data.astype(np.float64), ds.target.astype(np.float64), "regression"

        if name == "breast_cancer":
            from sklearn.datasets import load_breast_cancer

            ds = load_breast_cancer()
            return ds.data.astype(np.float64), ds.target.astype(np.int64), "classification"

    except ModuleNotFoundError as e:
        raise ModuleNotFoundError(
            "Dataset requires scikit-learn, which is not installed. "
            "Use synthetic_reg/synthetic_clf, a CSV path, or install the datasets extra."
        ) from e

    raise ValueError("Unsupported sklearn dataset")


def load_dataset(name: str, random_state: int, max_samples: int | None, missing_fraction: float):
    rng = np.random.default_rng(random_state)
    key = name.lower()

    if key in {"diabetes", "breast_cancer"}:
        X, y, task = _load_sklearn_dataset(key)
    elif key == "synthetic_reg":
        n_samples = 1500
        n_features = 8
        X = rng.normal(size=(n_samples, n_features))
        w = rng.normal(size=n_features)
        y = X @ w + np.sin(2.0 * X[:, 0]) + rng.normal(scale=0.5, size=n_samples)
        task = "regression"
    elif key == "synthetic_clf":
        n_samples = 1500
        n_features = 8
        X = rng.normal(size=(n_samples, n_features))
        w = rng.normal(size=n_features)
        logits = X @ w + 0.5 * rng.normal(size=n_samples)
        y = (logits > 0.0).astype(np.int64)
        task = "classification"
    elif key.endswith(".csv"):
        data = load_csv(name)
        X, y = data.X, data.y
        task = "classification" if y.dtype.kind in {"i", "u", "b", "U", "O"} else "regression"
    else:
        raise ValueError(f"Unknown dataset '{name}'. Choose from: diabetes, breast_cancer, synthetic_reg, synthetic_clf, or a path ending in .csv")

    X = _with_missing(X.astype(np.float64), missing_fraction, rng)
    X, y = _subsample(X, y, max_samples=max_samples, rng=rng)
    return X, y, task


def evaluate_one(X, y, task, n_trees, max_depth, max_features, n_jobs, random_state, distinct_features):
    X = impute_missing_values(X)
    X_train, y_train, X_test, y_test = train_test_split(
        X,
        y,
        train_fraction=0.8,
        rng=np.random.default_rng(random_state),
    )

    params = ForestParams(
        n_trees=n_trees,
        max_depth=max_depth,
        max_features=min(max_features, X.shape[1]),
        task=task,
        distinct_features=distinct_features,
        n_jobs=n_jobs,
        random_state=random_state,
    )
    model = RandomForest(params)
    t0 = time.perf_counter()
    model.fit(X_train, y_train)
    fit_time = time.perf_counter() - t0

    return {
        "fit_time_sec": fit_time,
        "metrics": evaluate(model, X_test, y_test),
        "total_nodes": model.metrics["total_nodes"],
        "forced_leaves": model.metrics["forced_leaves"],
        "split_search_time_sec": model.metrics["split_search_time_sec"],
        "tree_metrics": model.metrics["tree_metrics"],
    }


def summarize_tree_metrics(tree_metrics):
    if not tree_metrics:
        return {"avg_depth": 0.0, "avg_leaves": 0.0, "avg_unique_rows": 0.0}
    return {
        "avg_depth": float(np.mean([m["depth"] for m in tree_metrics])),
        "avg_leaves": float(np.mean([m["leaves"] for m in tree_metrics])),
        "avg_unique_rows": float(np.mean([m["n_unique_rows"] for m in tree_metrics])),
    }


def main():
    parser = argparse.ArgumentParser(description="Quick random forest checks on small datasets")
    parser.add_argument(
        "--datasets",
        type=str,
        default="synthetic_reg,synthetic_clf",
        help="Comma-separated: diabetes, breast_cancer, synthetic_reg, synthetic_clf, or paths to headered CSV files (label in last column)",
    )
    parser.add_argument("--max-samples", type=int, default=1500)
    parser.add_argument("--missing-fraction", type=float, default=0.0, help="Blank out this share of synthetic feature cells")
    parser.add_argument("--n-trees", type=int, default=10)
    parser.add_argument("--max-depth", type=int, default=5)
    parser.add_argument("--max-features", type=int, default=2)
    parser.add_argument("--n-jobs", type=int, default=1)
    parser.add_argument("--distinct-features", action="store_true", help="Sample node features without replacement")
    parser.add_argument("--random-state", type=int, default=42)
    parser.add_argument("--log-level", type=str, default=None, help="Enable logging at this level, e.g. INFO or DEBUG")

    args = parser.parse_args()

    datasets = [d.strip() for d in args.datasets.split(",") if d.strip()]
    if not datasets:
        raise ValueError("No datasets provided")

    handle = enable_logging(level=args.log_level) if args.log_level else None
    try:
        for ds_name in datasets:
            X, y, task = load_dataset(ds_name, args.random_state, args.max_samples, args.missing_fraction)
            print(f"\nDataset={ds_name} task={task} n={X.shape[0]} d={X.shape[1]}")

            out = evaluate_one(
                X,
                y,
                task=task,
                n_trees=args.n_trees,
                max_depth=args.max_depth,
                max_features=args.max_features,
                n_jobs=args.n_jobs,
                random_state=args.random_state,
                distinct_features=args.distinct_features,
            )
            print(
                "RandomForest"
                f" time={out['fit_time_sec']:.3f}s"
                f" split_search_time={out['split_search_time_sec']:.3f}s"
                f" nodes={out['total_nodes']}"
                f" forced_leaves={out['forced_leaves']}"
                f" metrics={out['metrics']}"
            )
            diag = summarize_tree_metrics(out["tree_metrics"])
            print(
                "  diagnostics"
                f" avg_depth={diag['avg_depth']:.2f}"
                f" avg_leaves={diag['avg_leaves']:.1f}"
                f" avg_unique_rows={diag['avg_unique_rows']:.1f}"
            )
    finally:
        if handle is not None:
            handle.disable()


if __name__ == "__main__":
    main()
