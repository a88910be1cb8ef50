"""Logging utilities for cattree.

cattree logs through loguru and keeps its records silent until a caller opts
in with ``enable_logging()``. A custom ``TOOL_CALL`` level sits between INFO
and WARNING so agent tool invocations can be surfaced without the DEBUG noise
emitted by tree induction.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) so
    that ``enable_logging()`` does not produce duplicate lines. If handler 0
    was already removed by the host application the removal is skipped.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

from cattree.config import get_settings

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

TOOL_CALL_LEVEL: Final[str] = "TOOL_CALL"
TOOL_CALL_LEVEL_NUMBER: Final[int] = 25  # Between INFO (20) and WARNING (30)

type LogLevel = Literal["TRACE", "DEBUG", "TOOL_CALL", "INFO", "WARNING", "ERROR", "CRITICAL"]

type LogFormat = Literal["short", "full"]

_FORMATS: Final[dict[str, str]] = {
    "short": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <9}</level> | "  # noqa: RUF027 - loguru format string
        "<cyan>{function}</cyan> - <level>{message}</level> {extra}"
    ),
    "full": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <9}</level> | "  # noqa: RUF027 - loguru format string
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> {extra}"
    ),
}


def _register_tool_call_level() -> None:
    """Register the TOOL_CALL level, warning if it exists with another number."""
    try:
        existing_level = logger.level(TOOL_CALL_LEVEL)
    except ValueError:
        logger.level(TOOL_CALL_LEVEL, no=TOOL_CALL_LEVEL_NUMBER, icon="🌳")
        return
    if existing_level.no != TOOL_CALL_LEVEL_NUMBER:
        warnings.warn(
            f"{TOOL_CALL_LEVEL} level already registered with numeric value {existing_level.no},"
            f" expected {TOOL_CALL_LEVEL_NUMBER}",
            stacklevel=2,
        )


_register_tool_call_level()


class LoggingHandle:
    """Owns one loguru handler added by ``enable_logging``.

    Handles are independent: disabling one removes only its own handler. The
    package logger is switched off again once the last live handle goes away.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     induce(dataset)
    """

    _live_handlers: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        """Track a freshly added handler.

        Args:
            handler_id (int): The id returned by ``logger.add``.
        """
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._live_handlers.add(handler_id)

    @property
    def active(self) -> bool:
        """Whether this handle still owns a handler."""
        return self.handler_id is not None

    def disable(self) -> None:
        """Remove this handle's handler; idempotent."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._live_handlers.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._live_handlers:
                logger.disable(PACKAGE_NAME)

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
    def live_handler_count(cls) -> int:
        """Return how many handles have not been disabled yet.

        Returns:
            int: Number of live handles.
        """
        with cls._lock:
            return len(cls._live_handlers)


def enable_logging(
    *,
    level: LogLevel | None = None,
    log_format: LogFormat = "short",
    sink: object = sys.stderr,
) -> LoggingHandle:
    """Route cattree log records to ``sink``.

    Args:
        level (LogLevel | None): Minimum level to emit. When ``None`` the
            ``log_level`` from ``cattree.config.Settings`` is used (``TOOL_CALL``
            unless overridden through ``CATTREE_LOG_LEVEL``). Use ``"DEBUG"`` to
            follow every split chosen during induction.
        log_format (LogFormat): ``"short"`` shows the function name only,
            ``"full"`` adds module and line number.
        sink (object): Any loguru-compatible sink. Defaults to stderr.

    Returns:
        LoggingHandle: Handle that removes the handler on ``disable()`` or on
            leaving a ``with`` block.
    """
    effective_level = level if level is not None else get_settings().log_level
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sink,  # type: ignore[arg-type]
        level=effective_level,
        filter=_is_cattree_record,
        format=_FORMATS[log_format],
    )
    return LoggingHandle(handler_id)


def _is_cattree_record(record: Record) -> bool:
    """Pass only records emitted from inside the cattree package.

    Args:
        record (Record): The loguru record.

    Returns:
        bool: True for cattree records.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
