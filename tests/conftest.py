import contextlib

import numpy as np
import pytest

from forest_logging import LoggingHandle, enable_logging


@pytest.fixture
def scenario_a():
    X = np.array([[0], [1], [1], [0], [1], [0]], dtype=np.float64)
    y = np.array([0, 1, 1, 1, 0, 1])
    return X, y


@pytest.fixture
def scenario_b():
    X = np.array([[1], [2], [3], [4]], dtype=np.float64)
    y = np.array([1.0, 2.0, 3.0, 4.0])
    return X, y


@pytest.fixture
def clf_data():
    rng = np.random.default_rng(7)
    X = rng.normal(size=(160, 4))
    y = (X[:, 0] - 0.8 * X[:, 2] + 0.2 * rng.normal(size=160) > 0.0).astype(np.int64)
    return X, y


@pytest.fixture
def reg_data():
    rng = np.random.default_rng(11)
    X = rng.normal(size=(160, 3))
    y = 1.5 * X[:, 0] + 0.3 * X[:, 2] + 0.1 * rng.normal(size=160)
    return X, y


@pytest.fixture
def log_records():
    """Enable project logging at TRACE and collect the raw loguru records."""
    records = []
    handle = enable_logging(level="TRACE", sink=lambda message: records.append(message.record))
    try:
        yield records
    finally:
        handle.disable()


@pytest.fixture(autouse=True)
def restore_logging_handles():
    saved_ids = set(LoggingHandle._active_ids)
    yield
    added_ids = LoggingHandle._active_ids - saved_ids
    for handler_id in added_ids:
        handle = LoggingHandle.__new__(LoggingHandle)
        handle.handler_id = handler_id
        with contextlib.suppress(ValueError):
            handle.disable()
