"""Configuration reload with change detection.

Reloading resolves the configuration again from scratch and compares the
result with the previous setup. Some fields can change at runtime; others
only take effect after a restart.

Hot-Reloadable:
- logging.level - applied to the root logger immediately
- index.*, cli.* (except history_file) - read per operation
- auth.* - read per request
- server.enable_cors, server.cors_origins, server.request_timeout,
  server.max_body_size

Requires Restart:
- server.host, server.port - socket already bound
- database.data_directory, database.backup_directory - storage already open
- logging.log_directory - file handler already created
- cli.history_file - shell history already opened
- databases.<name>.data_directory, databases.<name>.backup_directory
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from good_base.config.schema import SECRET_FIELDS
from good_base.config.validation import fatal_problems
from good_base.logging import level_for

if TYPE_CHECKING:
    from good_base.config.loader import ConfigLoader
    from good_base.config.models import GoodBaseConfig

logger = logging.getLogger(__name__)


# Configuration fields that require a restart to take effect
REQUIRES_RESTART_FIELDS = frozenset(
    {
        "server.host",
        "server.port",
        "database.data_directory",
        "database.backup_directory",
        "logging.log_directory",
        "cli.history_file",
    }
)

# Fields of every named database that require a restart
REQUIRES_RESTART_DATABASE_FIELDS = frozenset({"data_directory", "backup_directory"})


@dataclass
class ReloadState:
    """Tracks configuration reload history for a running process."""

    last_reload: datetime | None = None
    """UTC timestamp of last successful reload, None if never reloaded."""

    reload_count: int = 0
    """Number of successful reloads since startup."""

    last_error: str | None = None
    """Error message from last failed reload, None if last succeeded."""

    changes_detected: list[str] = field(default_factory=list)
    """List of config fields that changed in last reload."""


@dataclass
class ReloadResult:
    """Result of a configuration reload attempt."""

    success: bool
    """Whether the reload succeeded."""

    changes: list[str]
    """List of changed configuration fields."""

    error: str | None = None
    """Error message if reload failed."""

    requires_restart: list[str] = field(default_factory=list)
    """List of changed fields that require a restart to take effect."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "changes": self.changes,
            "requires_restart": self.requires_restart,
            "error": self.error,
        }


def _get_nested_attr(obj: object, path: str) -> object:
    """Get a nested value from a configuration using dot notation.

    Args:
        obj: Configuration to read from.
        path: Dot-separated path (e.g., "server.port" or
            "databases.main.max_file_size").

    Returns:
        The value, or None if not found.
    """
    current: Any = obj
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        else:
            try:
                current = getattr(current, part)
            except AttributeError:
                return None
    return current


def _field_paths(config: GoodBaseConfig) -> list[str]:
    """Every leaf field path of a configuration, including named databases."""
    paths = []
    for section in fields(config):
        value = getattr(config, section.name)
        if is_dataclass(value):
            paths.extend(f"{section.name}.{f.name}" for f in fields(value))
        elif isinstance(value, dict):
            for name, entry in sorted(value.items()):
                paths.extend(f"{section.name}.{name}.{f.name}" for f in fields(entry))
    return paths


def _requires_restart(path: str) -> bool:
    if path in REQUIRES_RESTART_FIELDS:
        return True
    parts = path.split(".")
    return (
        len(parts) == 3
        and parts[0] == "databases"
        and parts[2] in REQUIRES_RESTART_DATABASE_FIELDS
    )


def _detect_changes(
    old_config: GoodBaseConfig, new_config: GoodBaseConfig
) -> tuple[list[str], list[str]]:
    """Detect which configuration fields changed between old and new config.

    Databases added or removed show up as changes to each of their fields.

    Args:
        old_config: Previous configuration.
        new_config: New configuration.

    Returns:
        Tuple of (changed_fields, requires_restart_fields).
    """
    changed: list[str] = []
    requires_restart: list[str] = []

    fields_to_check = _field_paths(old_config)
    for path in _field_paths(new_config):
        if path not in fields_to_check:
            fields_to_check.append(path)

    for field_path in fields_to_check:
        old_val = _get_nested_attr(old_config, field_path)
        new_val = _get_nested_attr(new_config, field_path)
        if old_val != new_val:
            changed.append(field_path)
            if _requires_restart(field_path):
                requires_restart.append(field_path)

    return changed, requires_restart


def _format_change_log(
    field_path: str, old_config: GoodBaseConfig, new_config: GoodBaseConfig
) -> str:
    """Format a change log message for a single field."""
    old_val = _get_nested_attr(old_config, field_path)
    new_val = _get_nested_attr(new_config, field_path)

    if field_path in SECRET_FIELDS:
        old_val = "****" if old_val else None
        new_val = "****" if new_val else None

    return f"{field_path}: {old_val!r} -> {new_val!r}"


class ConfigReloader:
    """Reloads configuration through a loader and reports what changed.

    Concurrent reload attempts are serialized by a lock. A reload that
    arrives while another is running returns immediately.
    """

    def __init__(self, loader: ConfigLoader, state: ReloadState | None = None) -> None:
        self._loader = loader
        self.state = state if state is not None else ReloadState()
        self._reload_lock = asyncio.Lock()

    async def reload(self) -> ReloadResult:
        """Reload configuration and compare it with the current setup.

        On any failure the previous setup stays current and the error is
        reported in the result.

        Returns:
            ReloadResult with success status and details.
        """
        if self._reload_lock.locked():
            logger.info("Config reload already in progress, skipping")
            return ReloadResult(
                success=False, changes=[], error="Reload already in progress"
            )

        async with self._reload_lock:
            start_time = time.perf_counter()
            previous = self._loader.current
            if previous is None:
                previous = await self._loader.load()

            try:
                new_setup = await self._loader.reload()
            except Exception as e:
                error = f"{type(e).__name__}: {e}"
                logger.exception("Configuration reload failed")
                self.state.last_error = error
                return ReloadResult(success=False, changes=[], error=error)

            fatal = fatal_problems(self._loader.validate(new_setup.config))
            if fatal:
                error = "; ".join(str(p) for p in fatal)
                logger.error("Reloaded configuration is invalid, keeping previous: %s", error)
                self._loader.restore(previous)
                self.state.last_error = error
                return ReloadResult(success=False, changes=[], error=error)

            changes, requires_restart = _detect_changes(previous.config, new_setup.config)
            duration = time.perf_counter() - start_time

            if not changes:
                logger.info("Configuration unchanged (duration=%.3fs)", duration)
                self.state.last_error = None
                return ReloadResult(success=True, changes=[])

            for field_path in changes:
                msg = _format_change_log(field_path, previous.config, new_setup.config)
                if field_path in requires_restart:
                    logger.warning("Configuration change requires restart: %s", msg)
                else:
                    logger.info("Configuration changed: %s", msg)

            self._apply_dynamic_updates(changes, new_setup.config)

            self.state.last_reload = datetime.now(timezone.utc)
            self.state.reload_count += 1
            self.state.last_error = None
            self.state.changes_detected = changes

            logger.info(
                "Configuration reload complete: %d change(s), %d require restart, "
                "duration=%.3fs",
                len(changes),
                len(requires_restart),
                duration,
            )
            return ReloadResult(
                success=True, changes=changes, requires_restart=requires_restart
            )

    def _apply_dynamic_updates(self, changes: list[str], new_config: GoodBaseConfig) -> None:
        if "logging.level" in changes:
            level = level_for(new_config.logging.level)
            logging.getLogger().setLevel(level)
            logger.info("Updated log level to %s", new_config.logging.level)
