"""Logging configuration for good-base.

Provides configure_logging() to set up logging based on LoggingConfig.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from good_base.config.models import LoggingConfig

LOG_FILE_NAME = "good-base.log"

# Above CRITICAL, so nothing passes
DISABLED = logging.CRITICAL + 10

# Map of configured level names to logging module constants.
_LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "none": DISABLED,
}

_MEGABYTE = 1024 * 1024


def level_for(name: str) -> int:
    """Map a configured level name to a logging level, defaulting to INFO."""
    return _LEVEL_MAP.get(str(name).casefold(), logging.INFO)


def configure_logging(config: LoggingConfig, *, stderr: bool = True) -> Path | None:
    """Configure logging based on LoggingConfig.

    When command logging is enabled and a log directory is set, records go
    to a rotating file in that directory. Records always go to stderr when
    stderr is True, and to stderr as a fallback when the log file cannot be
    opened.

    Args:
        config: Logging configuration.
        stderr: Also log to stderr.

    Returns:
        Path of the log file in use, or None when not logging to a file.
    """
    level = level_for(config.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if level == DISABLED:
        root_logger.addHandler(logging.NullHandler())
        return None

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    log_file: Path | None = None
    if config.enable_command_logging and config.log_directory:
        file_path = Path(config.log_directory).expanduser() / LOG_FILE_NAME
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=int(config.max_log_file_size * _MEGABYTE),
                backupCount=int(config.max_log_files),
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            log_file = file_path
        except OSError as e:
            # Log file unavailable - fall back to stderr
            sys.stderr.write(f"Warning: Could not open log file {file_path}: {e}\n")

    if stderr or log_file is None:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(level)
        stderr_handler.setFormatter(formatter)
        root_logger.addHandler(stderr_handler)

    return log_file
