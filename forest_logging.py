"""Logging for the forest trainer, built on loguru.

The project ships as flat top-level modules, so there is no single package
prefix to switch on and off. LOGGED_MODULES lists every module that emits
records; they are all disabled at import time and re-enabled together by
``enable_logging()``.

Modules log through the ``logger`` re-exported here, which guarantees the
default-off state is applied before the first record is produced.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) so
    that ``enable_logging()`` does not produce duplicate lines. If another
    library already removed handler 0, the removal is a no-op.
"""

from __future__ import annotations

import contextlib
import sys
import threading
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

LOGGED_MODULES: Final[tuple[str, ...]] = (
    "bagging",
    "criteria",
    "data_structures",
    "evaluation",
    "forest",
    "splitter",
    "tabular",
    "tree_builder",
)

with contextlib.suppress(ValueError):
    logger.remove(0)

for _module_name in LOGGED_MODULES:
    logger.disable(_module_name)

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["short", "full"]

_SHORT_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)
_FULL_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)


def _set_modules_enabled(enabled: bool) -> None:
    for module_name in LOGGED_MODULES:
        if enabled:
            logger.enable(module_name)
        else:
            logger.disable(module_name)


class LoggingHandle:
    """Handle owning one loguru handler added by ``enable_logging``.

    Use ``disable()`` or the context manager protocol to remove the handler.
    When the last live handle is disabled the project's modules are silenced
    again.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     RandomForest(params).fit(X, y)
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove this handle's handler; silence the project if it was the last one."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                _set_modules_enabled(False)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = "INFO",
    log_format: LogFormat = "short",
    sink: object = None,
) -> LoggingHandle:
    """Enable logging for the project's modules.

    Args:
        level (LogLevel): Minimum level to emit. "INFO" reports fit start and
            end; "DEBUG" adds one line per tree; "TRACE" adds one line per node.
        log_format (LogFormat): "short" shows the function name only, "full"
            adds module and line number.
        sink (object): Where records go; defaults to ``sys.stderr``. Anything
            loguru's ``logger.add`` accepts.

    Returns:
        LoggingHandle: Handle that removes the handler when disabled.
    """
    _set_modules_enabled(True)
    format_str = _SHORT_FORMAT if log_format == "short" else _FULL_FORMAT
    handler_id = logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        filter=_is_project_record,
        format=format_str,
    )
    return LoggingHandle(handler_id)


def _is_project_record(record: Record) -> bool:
    name = record["name"]
    if name is None:
        return False
    return name.split(".")[0] in LOGGED_MODULES


__all__ = ["LOGGED_MODULES", "LoggingHandle", "enable_logging", "logger"]
