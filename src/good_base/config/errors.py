"""Exceptions raised while resolving configuration.

Fatal at startup:
- UnsupportedPlatformError
- ConfigShapeError
- SourceLoadError from a mandatory source
- ConfigValidationError

Reported and skipped:
- SourceLoadError from an optional source
- CoercionError for a single environment variable
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from good_base.config.validation import Problem


class ConfigError(Exception):
    """Base class for configuration resolution errors."""


class UnsupportedPlatformError(ConfigError):
    """Raised when no directory convention exists for the platform."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"Unsupported platform for data directories: {platform}")


class SourceLoadError(ConfigError):
    """Raised when a configuration source cannot produce a partial config."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load config from {source}: {reason}")


class ConfigShapeError(ConfigError):
    """Raised when a loaded value is not shaped like a configuration."""


class CoercionError(ConfigError):
    """Raised when a raw string cannot be converted to its field type."""

    def __init__(self, value: str, expected: str) -> None:
        self.value = value
        self.expected = expected
        super().__init__(f"Cannot convert {value!r} to {expected}")


class ConfigValidationError(ConfigError):
    """Raised when validation finds problems that prevent startup."""

    def __init__(self, problems: list[Problem]) -> None:
        self.problems = problems
        lines = "\n".join(f"  - {p}" for p in problems)
        super().__init__(f"Configuration validation failed:\n{lines}")
