"""Configuration file readers.

Two interchangeable readers sit behind ConfigFileReader:
- PythonModuleReader executes good_base_config.py and reads its CONFIG
- TomlReader parses good-base.toml with tomllib

Whatever a reader returns is shape-checked with pydantic before it is
handed to the loader.
"""

from __future__ import annotations

import importlib.util
import logging
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from good_base.config.errors import ConfigShapeError, SourceLoadError
from good_base.config.schema import SECTION_NAMES, known_fields
from good_base.config.templates import PYTHON_EXAMPLE, TOML_EXAMPLE

logger = logging.getLogger(__name__)

Number = int | float


class ConfigFileReader(ABC):
    """Loads the raw value of a configuration file."""

    file_name: str
    example: str

    @abstractmethod
    def read(self, path: Path) -> Any:
        """Read the file and return its configuration value.

        Raises:
            SourceLoadError: If the file cannot be loaded.
        """


class PythonModuleReader(ConfigFileReader):
    """Executes a Python module and returns its CONFIG attribute."""

    file_name = "good_base_config.py"
    example = PYTHON_EXAMPLE
    attribute = "CONFIG"

    def read(self, path: Path) -> Any:
        spec = importlib.util.spec_from_file_location("good_base_user_config", path)
        if spec is None or spec.loader is None:
            raise SourceLoadError(str(path), "not an importable Python file")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise SourceLoadError(str(path), f"{type(e).__name__}: {e}") from e
        if not hasattr(module, self.attribute):
            raise SourceLoadError(str(path), f"module does not define {self.attribute}")
        return getattr(module, self.attribute)


class TomlReader(ConfigFileReader):
    """Parses a TOML file."""

    file_name = "good-base.toml"
    example = TOML_EXAMPLE

    def read(self, path: Path) -> Any:
        try:
            with path.open("rb") as f:
                return tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
            raise SourceLoadError(str(path), str(e)) from e


READERS: dict[str, type[ConfigFileReader]] = {
    "python": PythonModuleReader,
    "toml": TomlReader,
}


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class DatabaseSection(_Section):
    data_directory: str | None = None
    max_file_size: Number | None = None
    enable_backups: bool | None = None
    backup_directory: str | None = None
    backup_interval: Number | None = None


class ServerSection(_Section):
    host: str | None = None
    port: Number | None = None
    enable_cors: bool | None = None
    cors_origins: list[str] | None = None
    request_timeout: Number | None = None
    max_body_size: Number | None = None


class AuthSection(_Section):
    required: bool | None = None
    default_token: str | None = None
    validation_method: str | None = None
    jwt_secret: str | None = None
    external_endpoint: str | None = None


class IndexSection(_Section):
    default_level: str | None = None
    optimization_threshold: Number | None = None
    auto_optimize: bool | None = None
    enable_cache: bool | None = None
    max_cache_size: Number | None = None


class LoggingSection(_Section):
    level: str | None = None
    enable_command_logging: bool | None = None
    enable_request_logging: bool | None = None
    log_directory: str | None = None
    max_log_file_size: Number | None = None
    max_log_files: Number | None = None


class CliSection(_Section):
    history_file: str | None = None
    history_size: Number | None = None
    persistent_history: bool | None = None
    enable_colors: bool | None = None
    prompt: str | None = None
    auth_timeout_minutes: Number | None = None


class PartialConfigModel(_Section):
    """Shape of a partial configuration loaded from a file."""

    database: DatabaseSection | None = None
    databases: dict[str, DatabaseSection] | None = None
    server: ServerSection | None = None
    auth: AuthSection | None = None
    index: IndexSection | None = None
    logging: LoggingSection | None = None
    cli: CliSection | None = None


def _drop_unknown(
    fields: Mapping[str, Any], allowed: Mapping[str, Any], where: str, source: str
) -> dict[str, Any]:
    kept = {}
    for key, value in fields.items():
        if key in allowed:
            kept[key] = value
        else:
            logger.warning("Ignoring unknown config field %s.%s in %s", where, key, source)
    return kept


def _strip_unknown(value: Mapping[str, Any], source: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for section, body in value.items():
        if section not in SECTION_NAMES:
            logger.warning("Ignoring unknown config section %r in %s", section, source)
            continue
        allowed = known_fields(section)
        if not isinstance(body, Mapping):
            raise ConfigShapeError(
                f"{source}: section {section!r} must be a mapping, "
                f"got {type(body).__name__}"
            )
        if section == "databases":
            entries = {}
            for name, entry in body.items():
                if not isinstance(entry, Mapping):
                    raise ConfigShapeError(
                        f"{source}: databases.{name} must be a mapping, "
                        f"got {type(entry).__name__}"
                    )
                entries[name] = _drop_unknown(entry, allowed, f"databases.{name}", source)
            result[section] = entries
        else:
            result[section] = _drop_unknown(body, allowed, section, source)
    return result


def check_partial_shape(value: Any, source: str) -> dict[str, Any]:
    """Validate that a loaded value is shaped like a partial configuration.

    Unknown sections and fields are logged and dropped. The value and each
    section must be mappings. Known fields must hold values of the right
    kind.

    Args:
        value: Value produced by a reader (mapping or config dataclass).
        source: Source description for messages.

    Returns:
        Partial configuration containing only the fields that were set.

    Raises:
        ConfigShapeError: If the value or a section is not a mapping.
        SourceLoadError: If a known field holds a value of the wrong type.
    """
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if not isinstance(value, Mapping):
        raise ConfigShapeError(
            f"{source}: expected a mapping of config sections, got {type(value).__name__}"
        )
    try:
        model = PartialConfigModel.model_validate(_strip_unknown(value, source))
    except ValidationError as e:
        raise SourceLoadError(source, f"invalid field value: {e}") from e
    return model.model_dump(exclude_unset=True)
