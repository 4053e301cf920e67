"""Opt-in loguru logging for id3kit.

id3kit emits records through loguru but stays silent until a caller runs
`enable_logging()`. Model lifecycle events (train, load, import) use the
custom `TRAINING` level, which sits between INFO and WARNING so it is shown
by default without the per-split DEBUG detail.

Note:
    loguru installs a stderr handler with ID 0 when it is first imported.
    This module removes it so that `enable_logging()` is the only source of
    id3kit output. Handlers you add after importing id3kit are unaffected.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

from id3kit.config import get_settings

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.partition(".")[0]

TRAINING_LEVEL: Final[str] = "TRAINING"
TRAINING_LEVEL_NUMBER: Final[int] = 25

type LogLevel = Literal["TRACE", "DEBUG", "TRAINING", "INFO", "WARNING", "ERROR", "CRITICAL"]

type LogFormat = Literal["short", "full"]

_LOCATION_BY_FORMAT: Final[dict[str, str]] = {
    "short": "<cyan>{function}</cyan>",
    "full": "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
}

with contextlib.suppress(ValueError):
    logger.remove(0)


def _register_training_level() -> None:
    """Add the TRAINING level to loguru, or check an existing registration.

    loguru refuses to renumber a level, so a clash with another library's
    TRAINING level is reported as a UserWarning and the existing level is kept.
    """
    try:
        registered = logger.level(TRAINING_LEVEL)
    except ValueError:
        logger.level(TRAINING_LEVEL, no=TRAINING_LEVEL_NUMBER, icon="🌳")
        return
    if registered.no != TRAINING_LEVEL_NUMBER:
        warnings.warn(
            f"{TRAINING_LEVEL} level already registered with numeric value {registered.no};"
            f" id3kit expects {TRAINING_LEVEL_NUMBER}",
            stacklevel=2,
        )


_register_training_level()


def _line_format(log_format: LogFormat) -> str:
    """Build the loguru format string for one of the supported layouts.

    Args:
        log_format (LogFormat): "short" or "full".

    Returns:
        str: Format with timestamp, level, source location, message and extras.
    """
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
        f"{_LOCATION_BY_FORMAT[log_format]} - "
        "<level>{message}</level> {extra}"
    )


class LoggingHandle:
    """Owns one stderr handler added by `enable_logging()`.

    Handles are independent: disabling one removes only its own handler. Once
    no handle is active, the id3kit logger is disabled again.

    Examples:
        >>> with enable_logging():  # doctest: +SKIP
        ...     ID3Classifier.train(records, "play", ["outlook"])

        >>> handle = enable_logging(level="DEBUG")  # doctest: +SKIP
        >>> handle.disable()  # doctest: +SKIP
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        """Track a handler added with `logger.add()`.

        Args:
            handler_id (int): ID returned by `logger.add()`.
        """
        self.handler_id: int | None = handler_id
        with self._lock:
            self._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove this handle's handler. Safe to call more than once."""
        with self._lock:
            handler_id, self.handler_id = self.handler_id, None
            if handler_id is None:
                return
            self._active_ids.discard(handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(handler_id)
            if not self._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        """Return the handle itself.

        Returns:
            LoggingHandle: This handle.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Disable the handle when the `with` block ends, even on error.

        Args:
            exc_type (type[BaseException] | None): Exception type raised in the block, if any.
            exc_val (BaseException | None): Exception raised in the block, if any.
            exc_tb (TracebackType | None): Traceback of that exception, if any.
        """
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Count the handles that are still enabled.

        Returns:
            int: Number of active handles.
        """
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel | None = None,
    log_format: LogFormat | None = None,
) -> LoggingHandle:
    """Turn on id3kit logging to stderr.

    Args:
        level (LogLevel | None): Minimum level shown. Defaults to the
            `ID3KIT_LOG_LEVEL` setting, itself "TRAINING" unless configured.
            Use "DEBUG" to see each split decision and prediction fallback.
        log_format (LogFormat | None): "short" names only the function;
            "full" adds the module and line number. Defaults to the
            `ID3KIT_LOG_FORMAT` setting, itself "short" unless configured.

    Returns:
        LoggingHandle: Handle that removes the handler again, directly or as a
            context manager.

    Note:
        When the last active handle is disabled, `logger.disable("id3kit")`
        runs, which also silences id3kit records routed to your own handlers.
    """
    settings = get_settings()
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr,
        level=level or settings.log_level,
        filter=_from_id3kit,
        format=_line_format(log_format or settings.log_format),
    )
    return LoggingHandle(handler_id)


def _from_id3kit(record: Record) -> bool:
    """Return True for records emitted by id3kit modules.

    Args:
        record (Record): loguru record being filtered.

    Returns:
        bool: Whether the record's module belongs to id3kit.
    """
    return (record["name"] or "").startswith(PACKAGE_NAME)
