"""Validation of a merged configuration.

validate_config() never raises. Values that arrive with the wrong type
(for example from an environment override that could not be coerced to
what the field needs) are reported as problems like any other.

Problems come in two tiers:
- FATAL problems abort startup
- WARNING problems are logged and the affected feature degrades
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from good_base.config.models import DatabaseConfig, DatabaseSettings, GoodBaseConfig

VALIDATION_METHODS = ("static", "jwt", "external")
INDEX_LEVELS = ("match", "traverse", "full")
LOG_LEVELS = ("debug", "info", "warn", "error", "none")


class Severity(Enum):
    FATAL = "fatal"
    WARNING = "warning"


@dataclass(frozen=True)
class Problem:
    """A single validation finding."""

    path: str
    """Dotted path of the offending field, e.g. "server.port"."""

    message: str

    severity: Severity = Severity.FATAL

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


class _Collector:
    def __init__(self) -> None:
        self.problems: list[Problem] = []

    def fatal(self, path: str, message: str) -> None:
        self.problems.append(Problem(path, message, Severity.FATAL))

    def warn(self, path: str, message: str) -> None:
        self.problems.append(Problem(path, message, Severity.WARNING))

    def required_str(self, path: str, value: Any) -> None:
        if not _non_empty_str(value):
            self.fatal(path, "must be a non-empty string")

    def number(self, path: str, value: Any, *, minimum: float, exclusive: bool = False) -> None:
        if not _is_number(value):
            self.fatal(path, f"must be a number, got {value!r}")
        elif exclusive and value <= minimum:
            self.fatal(path, f"must be greater than {minimum}, got {value}")
        elif not exclusive and value < minimum:
            self.fatal(path, f"must be at least {minimum}, got {value}")

    def one_of(self, path: str, value: Any, allowed: tuple[str, ...]) -> None:
        if value not in allowed:
            self.fatal(path, f"must be one of {', '.join(allowed)}, got {value!r}")


def _check_database(
    c: _Collector, prefix: str, db: DatabaseConfig | DatabaseSettings
) -> None:
    c.required_str(f"{prefix}.data_directory", db.data_directory)
    c.number(f"{prefix}.max_file_size", db.max_file_size, minimum=0, exclusive=True)
    c.number(f"{prefix}.backup_interval", db.backup_interval, minimum=0)
    if db.backup_directory is not None and not isinstance(db.backup_directory, str):
        c.fatal(f"{prefix}.backup_directory", "must be a string")
    if db.enable_backups and not db.backup_directory:
        c.warn(
            f"{prefix}.backup_directory",
            "backups enabled but no backup directory set; backups are disabled",
        )


def validate_config(config: GoodBaseConfig) -> list[Problem]:
    """Check field ranges, enumerations and cross-field rules.

    Args:
        config: Fully merged configuration.

    Returns:
        Every problem found, fatal and warning. Empty means valid.
    """
    c = _Collector()

    _check_database(c, "database", config.database)
    for name, db in sorted(config.databases.items()):
        _check_database(c, f"databases.{name}", db)

    server = config.server
    c.required_str("server.host", server.host)
    if not _is_int(server.port) or not 1 <= server.port <= 65535:
        c.fatal("server.port", f"must be an integer between 1 and 65535, got {server.port!r}")
    c.number("server.request_timeout", server.request_timeout, minimum=0, exclusive=True)
    c.number("server.max_body_size", server.max_body_size, minimum=0)
    if not isinstance(server.cors_origins, list):
        c.fatal("server.cors_origins", "must be a list of origins")
    else:
        for i, origin in enumerate(server.cors_origins):
            if not _non_empty_str(origin):
                c.fatal(f"server.cors_origins[{i}]", "must be a non-empty string")
        if server.enable_cors and not server.cors_origins:
            c.warn("server.cors_origins", "CORS enabled but no origins allowed")

    auth = config.auth
    c.one_of("auth.validation_method", auth.validation_method, VALIDATION_METHODS)
    if (
        auth.required
        and auth.validation_method == "static"
        and not _non_empty_str(auth.default_token)
    ):
        c.fatal(
            "auth.default_token",
            "token required for static validation when auth required",
        )
    elif auth.validation_method == "jwt" and not _non_empty_str(auth.jwt_secret):
        c.fatal("auth.jwt_secret", "secret required for jwt validation")
    elif auth.validation_method == "external" and not _non_empty_str(
        auth.external_endpoint
    ):
        c.fatal("auth.external_endpoint", "endpoint required for external validation")

    index = config.index
    c.one_of("index.default_level", index.default_level, INDEX_LEVELS)
    c.number(
        "index.optimization_threshold",
        index.optimization_threshold,
        minimum=0,
        exclusive=True,
    )
    c.number("index.max_cache_size", index.max_cache_size, minimum=0)

    log = config.logging
    c.one_of("logging.level", log.level, LOG_LEVELS)
    c.number("logging.max_log_file_size", log.max_log_file_size, minimum=0, exclusive=True)
    c.number("logging.max_log_files", log.max_log_files, minimum=1)
    if log.enable_command_logging and not log.log_directory:
        c.warn(
            "logging.log_directory",
            "command logging enabled but no log directory set; logging to stderr only",
        )

    cli = config.cli
    c.required_str("cli.prompt", cli.prompt)
    c.number("cli.history_size", cli.history_size, minimum=1)
    c.number("cli.auth_timeout_minutes", cli.auth_timeout_minutes, minimum=0)
    if cli.persistent_history and not cli.history_file:
        c.warn(
            "cli.history_file",
            "persistent history enabled but no history file set; history is not saved",
        )

    return c.problems


def fatal_problems(problems: list[Problem]) -> list[Problem]:
    """Filter problems down to the ones that abort startup."""
    return [p for p in problems if p.severity is Severity.FATAL]
