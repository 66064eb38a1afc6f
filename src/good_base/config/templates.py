"""Example configuration files written on first run.

A missing configuration file is normal on first run. The file source then
writes a commented example so the operator has something to edit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from good_base.config.files import ConfigFileReader

logger = logging.getLogger(__name__)

PYTHON_EXAMPLE = '''\
"""good-base configuration.

This file is executed as a Python module. It must define CONFIG, a dict
of configuration sections. Any section or field left out keeps its
default. Environment variables prefixed with GOOD_BASE_ override values
set here, e.g. GOOD_BASE_SERVER_PORT=8080.
"""

CONFIG = {
    "database": {
        # Maximum size for individual database files (MB)
        "max_file_size": 100,
        # Automatic backups
        "enable_backups": True,
        "backup_interval": 24,  # hours between backups
        # "data_directory": "/srv/good-base/data",
        # "backup_directory": "/srv/good-base/backups",
    },
    # Additional named databases; unset paths go under <base>/databases/<name>
    # "databases": {
    #     "main": {"max_file_size": 200},
    # },
    "server": {
        # Use "0.0.0.0" to accept external connections
        "host": "localhost",
        "port": 7777,
        "enable_cors": True,
        "cors_origins": ["*"],  # use specific origins in production
        "request_timeout": 30,  # seconds
        "max_body_size": 10,  # MB
    },
    "auth": {
        "required": False,
        # Token validation method: "static", "jwt" or "external"
        "validation_method": "static",
        # Change this for production!
        "default_token": "dev-token-12345",
        # "jwt_secret": "your-secret-key-here",
        # "external_endpoint": "https://auth.example.com/validate",
    },
    "index": {
        # "match", "traverse" or "full"
        "default_level": "match",
        "optimization_threshold": 10000,
        "auto_optimize": True,
        "enable_cache": True,
        "max_cache_size": 50,  # MB
    },
    "logging": {
        # "debug", "info", "warn", "error" or "none"
        "level": "info",
        "enable_command_logging": False,
        "enable_request_logging": True,
        "max_log_file_size": 10,  # MB per log file
        "max_log_files": 5,
    },
    "cli": {
        "history_size": 1000,
        "persistent_history": True,
        "enable_colors": True,
        "prompt": "good-base-> ",
        # 0 keeps the auth session until it is cleared
        "auth_timeout_minutes": 30,
    },
}
'''

TOML_EXAMPLE = """\
# good-base configuration.
#
# Any section or field left out keeps its default. Environment variables
# prefixed with GOOD_BASE_ override values set here,
# e.g. GOOD_BASE_SERVER_PORT=8080.

[database]
max_file_size = 100        # MB
enable_backups = true
backup_interval = 24       # hours between backups
# data_directory = "/srv/good-base/data"
# backup_directory = "/srv/good-base/backups"

# Additional named databases; unset paths go under <base>/databases/<name>
# [databases.main]
# max_file_size = 200

[server]
host = "localhost"         # "0.0.0.0" accepts external connections
port = 7777
enable_cors = true
cors_origins = ["*"]       # use specific origins in production
request_timeout = 30       # seconds
max_body_size = 10         # MB

[auth]
required = false
validation_method = "static"   # "static", "jwt" or "external"
default_token = "dev-token-12345"
# jwt_secret = "your-secret-key-here"
# external_endpoint = "https://auth.example.com/validate"

[index]
default_level = "match"    # "match", "traverse" or "full"
optimization_threshold = 10000
auto_optimize = true
enable_cache = true
max_cache_size = 50        # MB

[logging]
level = "info"             # "debug", "info", "warn", "error" or "none"
enable_command_logging = false
enable_request_logging = true
max_log_file_size = 10     # MB per log file
max_log_files = 5

[cli]
history_size = 1000
persistent_history = true
enable_colors = true
prompt = "good-base-> "
auth_timeout_minutes = 30  # 0 keeps the session until cleared
"""


def write_example_config(
    directory: Path, reader: ConfigFileReader, *, force: bool = False
) -> Path | None:
    """Write the reader's example configuration into directory.

    Args:
        directory: Resolved config directory.
        reader: Reader whose file name and example content to use.
        force: Overwrite an existing file.

    Returns:
        Path written, or None if the file already existed and force is False.
    """
    target = directory / reader.file_name
    if target.exists() and not force:
        logger.debug("Config file already exists: %s", target)
        return None
    directory.mkdir(parents=True, exist_ok=True)
    target.write_text(reader.example, encoding="utf-8")
    logger.info("Wrote example configuration to %s", target)
    return target
