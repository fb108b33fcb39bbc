"""Tabular input helpers: CSV loading, mean imputation and train/test split.

These sit upstream of ``RandomForest.fit``: the forest itself rejects any
missing value, so data read with ``load_csv`` must go through
``impute_missing_values`` first.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from exceptions import ConfigurationError, DimensionMismatchError, NumericError
from forest_logging import logger

MISSING_MARKER = "?"


@dataclass(frozen=True)
class TabularData:
    X: np.ndarray
    y: np.ndarray
    feature_names: list[str]
    label_name: str


def _encode_feature_column(series: pd.Series) -> np.ndarray:
    if pd.api.types.is_bool_dtype(series):
        return series.astype(np.int8).to_numpy(dtype=np.float64)
    if pd.api.types.is_numeric_dtype(series):
        return series.to_numpy(dtype=np.float64)

    # string columns become first-seen codes; missing stays NaN
    codes, _ = pd.factorize(series, sort=False, use_na_sentinel=True)
    arr = codes.astype(np.float64)
    arr[arr < 0] = np.nan
    return arr


def load_csv(
    path: str | Path,
    label_column: str | None = None,
    missing_marker: str = MISSING_MARKER,
    separator: str = ",",
) -> TabularData:
    """Read a headered delimited file into a float feature matrix and a label vector.

    The label is ``label_column`` or, when omitted, the last column. Cells equal
    to ``missing_marker`` and blank cells become NaN in the feature matrix; non-numeric feature
    columns are encoded as integer codes in order of first appearance.
    """
    df = pd.read_csv(path, sep=separator, na_values=[missing_marker])
    if df.shape[1] < 2:
        raise DimensionMismatchError(f"{path} needs at least one feature column and a label column", actual=df.shape[1])

    label_name = label_column if label_column is not None else df.columns[-1]
    if label_name not in df.columns:
        raise ConfigurationError(f"label column {label_name!r} not found in {path}", parameter="label_column", value=label_name)

    y_series = df[label_name]
    n_missing_labels = int(y_series.isna().sum())
    if n_missing_labels:
        raise NumericError(f"label column {label_name!r} has {n_missing_labels} missing value(s)")

    X_df = df.drop(columns=[label_name])
    feature_names = [str(col) for col in X_df.columns]
    X = np.column_stack([_encode_feature_column(X_df[col]) for col in X_df.columns]).astype(np.float64, copy=False)
    y = y_series.to_numpy()

    logger.info(
        "Loaded tabular data",
        path=str(path),
        n_rows=X.shape[0],
        n_features=X.shape[1],
        n_missing=int(np.isnan(X).sum()),
    )
    return TabularData(X=X, y=y, feature_names=feature_names, label_name=str(label_name))


def impute_missing_values(X: np.ndarray) -> np.ndarray:
    """Replace NaN by the mean of the observed values of its column. Returns a new array."""
    X = np.array(X, dtype=np.float64)
    if X.ndim != 2:
        raise DimensionMismatchError("X must be a 2D array", expected=2, actual=X.ndim)

    missing = np.isnan(X)
    if not np.any(missing):
        return X

    observed = np.sum(~missing, axis=0)
    empty_columns = [int(c) for c in np.flatnonzero((observed == 0) & np.any(missing, axis=0))]
    if empty_columns:
        raise NumericError(f"columns {empty_columns} have no observed values to impute from", columns=empty_columns)

    sums = np.where(missing, 0.0, X).sum(axis=0)
    means = sums / np.maximum(observed, 1)
    rows, cols = np.nonzero(missing)
    X[rows, cols] = means[cols]
    logger.debug("Imputed missing values", n_imputed=int(rows.size), columns=sorted({int(c) for c in cols}))
    return X


def train_test_split(
    X: np.ndarray,
    y: np.ndarray,
    train_fraction: float = 0.8,
    rng: np.random.Generator | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Split rows into ``(X_train, y_train, X_test, y_test)``.

    Without ``rng`` the first ``int(n * train_fraction)`` rows train and the
    rest test; with ``rng`` rows are shuffled first.
    """
    if not (0.0 < train_fraction < 1.0):
        raise ConfigurationError("train_fraction must be in (0, 1)", parameter="train_fraction", value=train_fraction)
    X = np.asarray(X)
    y = np.asarray(y)
    if X.shape[0] != y.shape[0]:
        raise DimensionMismatchError(
            f"y has {y.shape[0]} labels but X has {X.shape[0]} rows",
            expected=X.shape[0],
            actual=y.shape[0],
        )

    idx = np.arange(X.shape[0])
    if rng is not None:
        rng.shuffle(idx)
    n_train = int(X.shape[0] * train_fraction)
    train_idx, test_idx = idx[:n_train], idx[n_train:]
    return X[train_idx], y[train_idx], X[test_idx], y[test_idx]
