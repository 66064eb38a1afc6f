"""Default configuration built from resolved directories.

Defaults are safe for local development: auth is not required, tokens are
validated statically, CORS is permissive. The result passes validation
with no problems and is the floor every source layers on top of.
"""

from __future__ import annotations

from good_base.config.models import (
    AuthConfig,
    CliConfig,
    DatabaseConfig,
    Directories,
    GoodBaseConfig,
    IndexConfig,
    LoggingConfig,
    ServerConfig,
)

HISTORY_FILE_NAME = ".good_history"


def build_defaults(directories: Directories) -> GoodBaseConfig:
    """Build the default configuration for a set of directories.

    Args:
        directories: Output of derive_directories().

    Returns:
        A complete configuration whose path fields point into directories.
    """
    return GoodBaseConfig(
        database=DatabaseConfig(
            data_directory=str(directories.data),
            max_file_size=100,
            enable_backups=True,
            backup_directory=str(directories.backups),
            backup_interval=24,
        ),
        databases={},
        server=ServerConfig(
            host="localhost",
            port=7777,
            enable_cors=True,
            cors_origins=["*"],
            request_timeout=30,
            max_body_size=10,
        ),
        auth=AuthConfig(
            required=False,
            default_token="dev-token-12345",
            validation_method="static",
        ),
        index=IndexConfig(
            default_level="match",
            optimization_threshold=10000,
            auto_optimize=True,
            enable_cache=True,
            max_cache_size=50,
        ),
        logging=LoggingConfig(
            level="info",
            enable_command_logging=False,
            enable_request_logging=True,
            log_directory=str(directories.logs),
            max_log_file_size=10,
            max_log_files=5,
        ),
        cli=CliConfig(
            history_file=str(directories.config / HISTORY_FILE_NAME),
            history_size=1000,
            persistent_history=True,
            enable_colors=True,
            prompt="good-base-> ",
            auth_timeout_minutes=30,
        ),
    )
