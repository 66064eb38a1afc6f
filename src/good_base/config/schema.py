"""Typed field registry for configuration sections.

Maps every configuration field path to its semantic type. Environment
decoding looks fields up here instead of inspecting current values, so
path resolution and coercion are deterministic.
"""

from __future__ import annotations

from enum import Enum

from good_base.config.models import (
    AuthConfig,
    CliConfig,
    DatabaseConfig,
    IndexConfig,
    LoggingConfig,
    ServerConfig,
)


class FieldType(Enum):
    """Semantic type of a configuration field."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    STRING_LIST = "string list"
    OBJECT = "object"
    ANY = "any"


_B = FieldType.BOOLEAN
_N = FieldType.NUMBER
_S = FieldType.STRING
_L = FieldType.STRING_LIST

DATABASE_FIELDS: dict[str, FieldType] = {
    "data_directory": _S,
    "max_file_size": _N,
    "enable_backups": _B,
    "backup_directory": _S,
    "backup_interval": _N,
}

# Sections with a fixed set of fields
SECTION_FIELDS: dict[str, dict[str, FieldType]] = {
    "database": DATABASE_FIELDS,
    "server": {
        "host": _S,
        "port": _N,
        "enable_cors": _B,
        "cors_origins": _L,
        "request_timeout": _N,
        "max_body_size": _N,
    },
    "auth": {
        "required": _B,
        "default_token": _S,
        "validation_method": _S,
        "jwt_secret": _S,
        "external_endpoint": _S,
    },
    "index": {
        "default_level": _S,
        "optimization_threshold": _N,
        "auto_optimize": _B,
        "enable_cache": _B,
        "max_cache_size": _N,
    },
    "logging": {
        "level": _S,
        "enable_command_logging": _B,
        "enable_request_logging": _B,
        "log_directory": _S,
        "max_log_file_size": _N,
        "max_log_files": _N,
    },
    "cli": {
        "history_file": _S,
        "history_size": _N,
        "persistent_history": _B,
        "enable_colors": _B,
        "prompt": _S,
        "auth_timeout_minutes": _N,
    },
}

# Sections keyed by a user-chosen name, each entry sharing one field set
MAP_SECTIONS: dict[str, dict[str, FieldType]] = {
    "databases": DATABASE_FIELDS,
}

SECTION_NAMES: tuple[str, ...] = (
    "database",
    "databases",
    "server",
    "auth",
    "index",
    "logging",
    "cli",
)

SECTION_MODELS = {
    "database": DatabaseConfig,
    "server": ServerConfig,
    "auth": AuthConfig,
    "index": IndexConfig,
    "logging": LoggingConfig,
    "cli": CliConfig,
}

# Fields masked in change logs and API output
SECRET_FIELDS: frozenset[str] = frozenset({"auth.default_token", "auth.jwt_secret"})

# Flat variable names accepted for backwards compatibility
LEGACY_ALIASES: dict[str, tuple[str, str]] = {
    "data_dir": ("database", "data_directory"),
    "backup_dir": ("database", "backup_directory"),
    "enable_backups": ("database", "enable_backups"),
    "port": ("server", "port"),
    "host": ("server", "host"),
    "cors_origins": ("server", "cors_origins"),
    "auth_token": ("auth", "default_token"),
    "jwt_secret": ("auth", "jwt_secret"),
    "log_level": ("logging", "level"),
    "log_dir": ("logging", "log_directory"),
    "enable_file_logging": ("logging", "enable_command_logging"),
    "cli_auth_timeout": ("cli", "auth_timeout_minutes"),
}


def field_type(path: tuple[str, ...]) -> FieldType | None:
    """Look up the registered type of a field path.

    Args:
        path: ("server", "port") for fixed sections, or
            ("databases", "<name>", "max_file_size") for map sections.

    Returns:
        The field's type, or None if the path is not a registered field.
    """
    if len(path) == 2 and path[0] in SECTION_FIELDS:
        return SECTION_FIELDS[path[0]].get(path[1])
    if len(path) == 3 and path[0] in MAP_SECTIONS:
        return MAP_SECTIONS[path[0]].get(path[2])
    return None


def is_container(path: tuple[str, ...]) -> bool:
    """Return True if the path names an object that holds fields or entries.

    The root, every section, and any named entry of a map section are
    containers. Map entry names are not checked against existing entries;
    naming a new entry creates it.
    """
    if not path:
        return True
    if len(path) == 1:
        return path[0] in SECTION_NAMES
    return len(path) == 2 and path[0] in MAP_SECTIONS


def known_fields(section: str) -> dict[str, FieldType]:
    """Registered fields of a section, or of each entry of a map section."""
    if section in SECTION_FIELDS:
        return SECTION_FIELDS[section]
    return MAP_SECTIONS.get(section, {})
