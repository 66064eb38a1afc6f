"""Logging setup for good-base.

Provides configure_logging() to set up logging from the resolved
logging section of the configuration.
"""

from good_base.logging.config import LOG_FILE_NAME, configure_logging, level_for

__all__ = [
    "LOG_FILE_NAME",
    "configure_logging",
    "level_for",
]
