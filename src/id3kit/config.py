"""Environment-driven settings for id3kit."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class ID3Settings(BaseSettings, env_prefix="ID3KIT_", env_file=".env", env_file_encoding="utf-8", extra="ignore"):
    """Runtime settings read from `ID3KIT_*` environment variables or a `.env` file.

    Attributes:
        log_level (str): Default minimum level used by `enable_logging()` when
            no level is passed explicitly.
        log_format (Literal["short", "full"]): Default log line layout used by
            `enable_logging()` when no format is passed explicitly.

    Examples:
        >>> import os
        >>> os.environ["ID3KIT_LOG_LEVEL"] = "DEBUG"  # doctest: +SKIP
        >>> ID3Settings().log_level  # doctest: +SKIP
        'DEBUG'
    """

    log_level: Literal["TRACE", "DEBUG", "TRAINING", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="TRAINING",
        description="Default minimum log level for enable_logging().",
    )
    log_format: Literal["short", "full"] = Field(
        default="short",
        description="Default log format for enable_logging().",
    )


def get_settings() -> ID3Settings:
    """Load settings from the current environment.

    Settings are re-read on every call so that changes to the environment
    (for example in tests) take effect without restarting the interpreter.

    Returns:
        ID3Settings: Freshly loaded settings.
    """
    return ID3Settings()
