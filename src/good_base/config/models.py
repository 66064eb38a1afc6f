"""Configuration data models.

This module defines frozen dataclasses for good-base configuration.
Instances are never mutated; merging produces new instances via
dataclasses.replace().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

ValidationMethod = Literal["static", "jwt", "external"]
IndexLevel = Literal["match", "traverse", "full"]
LogLevel = Literal["debug", "info", "warn", "error", "none"]


@dataclass(frozen=True)
class DatabaseConfig:
    """Settings for the primary database."""

    # Directory where record files are stored
    data_directory: str = ""

    # Maximum size for an individual database file (MB)
    max_file_size: int = 100

    enable_backups: bool = True

    backup_directory: str | None = None

    # Hours between automatic backups
    backup_interval: int | float = 24


@dataclass(frozen=True)
class DatabaseSettings:
    """Settings for one named database in the multi-database map.

    Path fields left as None are filled from the database's derived
    directories when the configuration is loaded.
    """

    data_directory: str | None = None
    enable_backups: bool = True
    backup_directory: str | None = None
    backup_interval: int | float = 24
    max_file_size: int = 100


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the HTTP listener."""

    host: str = "localhost"
    """Interface to bind to. Use "0.0.0.0" to accept external connections."""

    port: int = 7777

    enable_cors: bool = True

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    """Allowed CORS origins. Use specific origins in production."""

    request_timeout: int | float = 30
    """Request timeout in seconds."""

    max_body_size: int | float = 10
    """Maximum request body size in MB."""


@dataclass(frozen=True)
class AuthConfig:
    """Configuration for token authentication."""

    required: bool = False

    # Token accepted by static validation (development default)
    default_token: str | None = "dev-token-12345"

    validation_method: ValidationMethod = "static"

    jwt_secret: str | None = None

    external_endpoint: str | None = None


@dataclass(frozen=True)
class IndexConfig:
    """Configuration for the indexing engine."""

    # match: exact values, traverse: sorted keys, full: full-text
    default_level: IndexLevel = "match"

    # Number of items in an index before optimization kicks in
    optimization_threshold: int = 10000

    auto_optimize: bool = True

    enable_cache: bool = True

    # In-memory index cache size (MB)
    max_cache_size: int | float = 50


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging output."""

    level: LogLevel = "info"

    # Write command logs to files under log_directory
    enable_command_logging: bool = False

    enable_request_logging: bool = True

    log_directory: str | None = None

    # Rotation threshold (MB)
    max_log_file_size: int | float = 10

    # Number of rotated log files to keep
    max_log_files: int = 5


@dataclass(frozen=True)
class CliConfig:
    """Configuration for the interactive shell."""

    history_file: str | None = None

    history_size: int = 1000

    persistent_history: bool = True

    enable_colors: bool = True

    prompt: str = "good-base-> "

    # 0 means the auth session never expires
    auth_timeout_minutes: int | float = 30


@dataclass(frozen=True)
class GoodBaseConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    databases: dict[str, DatabaseSettings] = field(default_factory=dict)
    server: ServerConfig = field(default_factory=ServerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    cli: CliConfig = field(default_factory=CliConfig)


@dataclass(frozen=True)
class DatabaseDirectories:
    """Derived directories for one named database."""

    base: Path
    data: Path
    config: Path
    logs: Path
    cache: Path
    backups: Path

    def all(self) -> list[Path]:
        return [self.base, self.data, self.config, self.logs, self.cache, self.backups]


@dataclass(frozen=True)
class Directories:
    """Derived application directories.

    Computed fresh on each resolution pass and never persisted.
    """

    base: Path
    data: Path
    config: Path
    logs: Path
    cache: Path
    backups: Path
    databases: dict[str, DatabaseDirectories] = field(default_factory=dict)

    @property
    def databases_root(self) -> Path:
        """Parent directory of every per-database subtree."""
        return self.base / "databases"

    @property
    def auth_db(self) -> Path:
        """Path of the auth-token store."""
        return self.base / "auth.db"

    def all(self) -> list[Path]:
        """Every directory named here, app directories first."""
        paths = [self.base, self.data, self.config, self.logs, self.cache, self.backups]
        for db_dirs in self.databases.values():
            paths.extend(db_dirs.all())
        return paths


@dataclass(frozen=True)
class Setup:
    """A finalized configuration paired with its directories.

    Replaced wholesale on reload. Holders should re-read it from the
    loader rather than cache individual fields.
    """

    config: GoodBaseConfig
    directories: Directories
