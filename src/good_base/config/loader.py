"""Configuration loader with precedence handling.

Configuration is resolved with the following precedence (highest to lowest):
1. Environment variables (GOOD_BASE_*)
2. Config file (<base>/config/good_base_config.py)
3. Default values derived from the resolved directories

The base directory itself comes from GOOD_BASE_DIR, the development switch
GOOD_BASE_ENV, or the OS convention. See config.directories.

Merging is per section and shallow: a section present in a source replaces
the fields it names and leaves the others alone. The databases map merges
per entry.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, fields, is_dataclass, replace
from pathlib import Path
from typing import Any

from good_base.config.defaults import build_defaults
from good_base.config.directories import (
    APP_NAME,
    derive_directories,
    resolve_base_directory,
)
from good_base.config.errors import (
    ConfigShapeError,
    ConfigValidationError,
    SourceLoadError,
)
from good_base.config.files import ConfigFileReader
from good_base.config.models import (
    DatabaseSettings,
    Directories,
    GoodBaseConfig,
    Setup,
)
from good_base.config.schema import SECRET_FIELDS, SECTION_MODELS, known_fields
from good_base.config.sources import (
    ConfigSource,
    EnvironmentConfigSource,
    FileConfigSource,
    PartialConfig,
)
from good_base.config.validation import (
    Problem,
    Severity,
    fatal_problems,
    validate_config,
)

logger = logging.getLogger(__name__)


def _known_values(section: str, values: Mapping[str, Any], source: str) -> dict[str, Any]:
    allowed = known_fields(section)
    kept = {}
    for key, value in values.items():
        if key in allowed:
            kept[key] = value
        else:
            logger.warning("Ignoring unknown field %s.%s from %s", section, key, source)
    return kept


def merge_partial(
    config: GoodBaseConfig, partial: PartialConfig, source: str = "source"
) -> GoodBaseConfig:
    """Layer a partial configuration on top of a full one.

    Args:
        config: Configuration to override.
        partial: Sections and fields set by one source.
        source: Source name for log messages.

    Returns:
        A new configuration. The input is not modified.

    Raises:
        ConfigShapeError: If a section in the partial is not a mapping.
    """
    changes: dict[str, Any] = {}
    for section, values in partial.items():
        if not isinstance(values, Mapping):
            raise ConfigShapeError(
                f"{source}: section {section!r} must be a mapping, "
                f"got {type(values).__name__}"
            )

        if section == "databases":
            databases = dict(changes.get("databases", config.databases))
            for name, entry in values.items():
                if not isinstance(entry, Mapping):
                    raise ConfigShapeError(
                        f"{source}: databases.{name} must be a mapping, "
                        f"got {type(entry).__name__}"
                    )
                current = databases.get(name, DatabaseSettings())
                databases[name] = replace(
                    current, **_known_values("databases", entry, source)
                )
            changes["databases"] = databases
        elif section in SECTION_MODELS:
            current = changes.get(section, getattr(config, section))
            changes[section] = replace(current, **_known_values(section, values, source))
        else:
            logger.warning("Ignoring unknown config section %r from %s", section, source)

    return replace(config, **changes) if changes else config


def _finalize_databases(config: GoodBaseConfig, directories: Directories) -> GoodBaseConfig:
    """Fill unset per-database paths from the derived database directories."""
    if not config.databases:
        return config
    databases = {}
    for name, settings in config.databases.items():
        db_dirs = directories.databases[name]
        databases[name] = replace(
            settings,
            data_directory=settings.data_directory or str(db_dirs.data),
            backup_directory=settings.backup_directory or str(db_dirs.backups),
        )
    return replace(config, databases=databases)


def _path_or_none(value: Any) -> Path | None:
    if isinstance(value, str) and value:
        return Path(value).expanduser()
    return None


def directories_to_create(config: GoodBaseConfig, directories: Directories) -> list[Path]:
    """List every directory a resolved setup needs, without duplicates.

    Includes the app directories, the configured data, backup, log and
    history locations, and each named database's subtree.
    """
    candidates: list[Path | None] = list(directories.all())
    candidates.append(_path_or_none(config.database.data_directory))
    if config.database.enable_backups:
        candidates.append(_path_or_none(config.database.backup_directory))
    candidates.append(_path_or_none(config.logging.log_directory))
    history = _path_or_none(config.cli.history_file)
    if history is not None:
        candidates.append(history.parent)
    for settings in config.databases.values():
        candidates.append(_path_or_none(settings.data_directory))
        if settings.enable_backups:
            candidates.append(_path_or_none(settings.backup_directory))

    seen: set[Path] = set()
    result = []
    for path in candidates:
        if path is not None and path not in seen:
            seen.add(path)
            result.append(path)
    return result


async def ensure_directories(paths: Iterable[Path]) -> list[Path]:
    """Create directories one at a time, off the event loop.

    Existing directories are fine. Any other OS error is logged as a
    warning and the directory skipped.

    Returns:
        Directories that could not be created.
    """
    failed = []
    for path in paths:
        try:
            await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create directory %s: %s", path, e)
            failed.append(path)
    return failed


class ConfigLoader:
    """Resolves, caches and reloads the application's configuration.

    The loader is the handle consumers hold. After a reload they read
    loader.current again rather than keeping individual values.

    Example:
        loader = ConfigLoader(env={"GOOD_BASE_DIR": "/srv/good-base"})
        setup = await loader.load()
        setup.config.server.port  # 7777 unless overridden
    """

    def __init__(
        self,
        app_name: str = APP_NAME,
        *,
        env: Mapping[str, str] | None = None,
        platform: str | None = None,
        file_reader: ConfigFileReader | None = None,
        create_example: bool = True,
        sources: Iterable[ConfigSource] | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            app_name: Application name used in directory resolution.
            env: Environment mapping. Defaults to os.environ.
            platform: Platform identity as in sys.platform.
            file_reader: Reader for the config file. Defaults to the
                Python module reader.
            create_example: Write an example config file when none exists.
            sources: Sources to use instead of the default file and
                environment sources.
        """
        self.app_name = app_name
        self._env = env
        self._platform = platform
        self._directories: Directories | None = None
        self._setup: Setup | None = None
        self._sources: list[ConfigSource] = []

        if sources is None:
            sources = [
                FileConfigSource(
                    self._config_dir, file_reader, create_example=create_example
                ),
                EnvironmentConfigSource(env),
            ]
        for source in sources:
            self.add_source(source)

    def _config_dir(self) -> Path:
        if self._directories is None:
            raise RuntimeError("config directory requested outside a resolution pass")
        return self._directories.config

    def add_source(self, source: ConfigSource) -> None:
        """Register a source. It takes effect on the next load or reload."""
        self._sources.append(source)
        self._sources.sort(key=lambda s: s.priority, reverse=True)

    @property
    def sources(self) -> tuple[ConfigSource, ...]:
        """Registered sources, highest priority first."""
        return tuple(self._sources)

    @property
    def file_source(self) -> FileConfigSource | None:
        for source in self._sources:
            if isinstance(source, FileConfigSource):
                return source
        return None

    @property
    def env_source(self) -> EnvironmentConfigSource | None:
        for source in self._sources:
            if isinstance(source, EnvironmentConfigSource):
                return source
        return None

    @property
    def current(self) -> Setup | None:
        """The cached setup, or None before the first load."""
        return self._setup

    @property
    def first_run(self) -> bool:
        """True if the last pass found no config file and wrote the example."""
        source = self.file_source
        return source is not None and source.created_example

    async def load(self) -> Setup:
        """Resolve the configuration, or return the cached result.

        Raises:
            UnsupportedPlatformError: If no directory convention applies.
            SourceLoadError: If a mandatory source fails.
            ConfigShapeError: If a source yields a malformed configuration.
        """
        if self._setup is None:
            self._setup = await self._resolve()
        return self._setup

    async def reload(self) -> Setup:
        """Discard the cached setup and resolve again from scratch.

        If resolution fails, the previous setup stays current and the
        error propagates.
        """
        setup = await self._resolve()
        self._setup = setup
        logger.info("Configuration reloaded")
        return setup

    def restore(self, setup: Setup) -> None:
        """Make a previously resolved setup current again."""
        self._setup = setup

    def validate(self, config: GoodBaseConfig | None = None) -> list[Problem]:
        """Validate a configuration, by default the current one."""
        if config is None:
            if self._setup is None:
                raise RuntimeError("configuration has not been loaded")
            config = self._setup.config
        return validate_config(config)

    async def _resolve(self) -> Setup:
        base = resolve_base_directory(
            self.app_name, env=self._env, platform=self._platform
        )
        self._directories = derive_directories(base)
        logger.debug("Resolved base directory: %s", self._directories.base)

        config = build_defaults(self._directories)
        for source in reversed(self._sources):
            partial = await self._load_source(source)
            if partial:
                config = merge_partial(config, partial, source.name)

        directories = derive_directories(base, config.databases.keys())
        config = _finalize_databases(config, directories)
        self._directories = directories

        await ensure_directories(directories_to_create(config, directories))
        return Setup(config=config, directories=directories)

    async def _load_source(self, source: ConfigSource) -> PartialConfig:
        try:
            result = source.load()
            if inspect.isawaitable(result):
                result = await result
        except ConfigShapeError:
            raise
        except SourceLoadError as e:
            if not source.optional:
                raise
            logger.warning("%s; continuing without it", e)
            return {}
        except Exception as e:
            if not source.optional:
                raise SourceLoadError(source.name, f"{type(e).__name__}: {e}") from e
            logger.warning(
                "Failed to load config from %s: %s; continuing without it",
                source.name,
                e,
            )
            return {}
        return result or {}


async def initialize_setup(loader: ConfigLoader) -> Setup:
    """Load and validate configuration for startup.

    Warnings are logged and startup continues. Fatal problems are logged
    and raised.

    Raises:
        ConfigValidationError: If any fatal problem is found.
    """
    setup = await loader.load()
    problems = loader.validate(setup.config)
    for problem in problems:
        if problem.severity is Severity.WARNING:
            logger.warning("Configuration warning: %s", problem)

    fatal = fatal_problems(problems)
    if fatal:
        for problem in fatal:
            logger.error("Configuration error: %s", problem)
        raise ConfigValidationError(fatal)
    return setup


def config_as_dict(config: GoodBaseConfig, *, redact: bool = False) -> dict[str, Any]:
    """Plain nested dict of a configuration, suitable for JSON output.

    With redact=True, secrets that are set are replaced by "****".
    """
    data = asdict(config)
    if redact:
        for path in SECRET_FIELDS:
            section, name = path.split(".")
            if data[section].get(name):
                data[section][name] = "****"
    return data


def get_config_value(config: GoodBaseConfig, key: str) -> Any:
    """Look up a value by dotted key, e.g. "server.port" or "databases.main".

    Raises:
        KeyError: If the key does not name a section, entry or field.
    """
    current: Any = config
    for part in key.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                raise KeyError(key)
            current = current[part]
        elif is_dataclass(current) and part in {f.name for f in fields(current)}:
            current = getattr(current, part)
        else:
            raise KeyError(key)
    return current
