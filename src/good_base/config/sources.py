"""Configuration sources layered on top of the defaults.

Each source produces a partial configuration: a nested dict holding only
the fields it sets. The loader applies sources in ascending priority, so
a source with a higher priority overrides one with a lower priority.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from good_base.config.env import ENV_PREFIX, EnvOverride, decode_env_overrides
from good_base.config.files import (
    ConfigFileReader,
    PythonModuleReader,
    check_partial_shape,
)
from good_base.config.templates import write_example_config

logger = logging.getLogger(__name__)

PartialConfig = dict[str, Any]


class ConfigSource(ABC):
    """A provider of partial configuration.

    Attributes:
        name: Short description used in log messages.
        priority: Higher values override lower ones.
        optional: If True, a load failure is logged and the source skipped.
    """

    name: str = "source"
    priority: int = 0
    optional: bool = True

    @abstractmethod
    def load(self) -> PartialConfig | Awaitable[PartialConfig]:
        """Return this source's partial configuration.

        Implementations may be plain functions or coroutines.
        """


class FileConfigSource(ConfigSource):
    """Partial configuration read from the config file in the config directory.

    The config directory is recomputed on every resolution pass, so it can
    be passed as a callable returning the current pass's directory.
    """

    name = "config file"
    priority = 2
    optional = True

    def __init__(
        self,
        config_dir: Path | Callable[[], Path],
        reader: ConfigFileReader | None = None,
        *,
        create_example: bool = True,
    ) -> None:
        self._config_dir = config_dir
        self.reader = reader if reader is not None else PythonModuleReader()
        self.create_example = create_example
        self.created_example = False

    @property
    def path(self) -> Path:
        directory = self._config_dir() if callable(self._config_dir) else self._config_dir
        return Path(directory) / self.reader.file_name

    def _load_sync(self) -> PartialConfig:
        path = self.path
        if not path.is_file():
            logger.info("No config file at %s, using defaults", path)
            if self.create_example:
                written = write_example_config(path.parent, self.reader)
                self.created_example = written is not None
            return {}

        logger.debug("Loading config file %s", path)
        value = self.reader.read(path)
        return check_partial_shape(value, str(path))

    async def load(self) -> PartialConfig:
        """Read and shape-check the config file off the event loop.

        Returns:
            Partial configuration, or {} when the file does not exist.

        Raises:
            SourceLoadError: If the file cannot be read or imported.
            ConfigShapeError: If the file's value is not configuration-shaped.
        """
        self.created_example = False
        return await asyncio.to_thread(self._load_sync)


class EnvironmentConfigSource(ConfigSource):
    """Partial configuration decoded from GOOD_BASE_* environment variables."""

    name = "environment"
    priority = 3
    optional = True

    def __init__(
        self, env: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX
    ) -> None:
        self._env = env
        self.prefix = prefix
        self.last_report: list[EnvOverride] = []

    def load(self) -> PartialConfig:
        partial, report = decode_env_overrides(self._env, self.prefix)
        self.last_report = report
        applied = sum(1 for entry in report if entry.status == "applied")
        if applied:
            logger.debug("Applied %d environment override(s)", applied)
        return partial
