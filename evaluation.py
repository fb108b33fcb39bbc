import numpy as np

from exceptions import DimensionMismatchError


def _paired(y_true, y_pred) -> tuple[np.ndarray, np.ndarray]:
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if y_true.shape != y_pred.shape:
        raise DimensionMismatchError(
            f"y_true has shape {y_true.shape} but y_pred has shape {y_pred.shape}",
            expected=y_true.size,
            actual=y_pred.size,
        )
    if y_true.size == 0:
        raise DimensionMismatchError("cannot score an empty prediction set", actual=0)
    return y_true, y_pred


def accuracy(y_true, y_pred) -> float:
    y_true, y_pred = _paired(y_true, y_pred)
    return float(np.mean(y_true == y_pred))


def rmse(y_true, y_pred) -> float:
    y_true, y_pred = _paired(y_true, y_pred)
    return float(np.sqrt(np.mean((y_true.astype(np.float64) - y_pred.astype(np.float64)) ** 2)))


def r2_score(y_true, y_pred) -> float:
    y_true, y_pred = _paired(y_true, y_pred)
    y_true = y_true.astype(np.float64)
    ss_res = float(np.sum((y_true - y_pred.astype(np.float64)) ** 2))
    ss_tot = float(np.sum((y_true - y_true.mean()) ** 2))
    if ss_tot == 0.0:
        return 1.0 if ss_res == 0.0 else 0.0
    return 1.0 - ss_res / ss_tot


def evaluate(forest, X, y) -> dict[str, float]:
    """Score a fitted forest: accuracy for classification, RMSE and R² for regression."""
    pred = forest.predict(X)
    if forest.params.task == "classification":
        return {"accuracy": accuracy(y, pred)}
    return {"rmse": rmse(y, pred), "r2": r2_score(y, pred)}
