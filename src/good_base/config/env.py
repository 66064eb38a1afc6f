"""Environment variable reading and override decoding.

Variables under the GOOD_BASE_ prefix map onto nested configuration paths:

- GOOD_BASE_SERVER_PORT=8080 -> server.port = 8080
- GOOD_BASE_AUTH_REQUIRED=true -> auth.required = True
- GOOD_BASE_DATABASES_MAIN_MAX_FILE_SIZE=200 -> databases.main.max_file_size = 200
- GOOD_BASE_CORS_ORIGINS=a,b -> server.cors_origins = ["a", "b"] (legacy alias)

The decoder walks the name's segments left to right. At each level it first
checks whether all remaining segments, joined, name a registered field. If
not, it consumes one segment as a nested key and descends. The shallowest
match wins.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from good_base.config.coercion import coerce_value
from good_base.config.directories import DIRECTORY_OVERRIDE_VAR, ENVIRONMENT_VAR
from good_base.config.errors import CoercionError
from good_base.config.schema import LEGACY_ALIASES, field_type, is_container

logger = logging.getLogger(__name__)

ENV_PREFIX = "GOOD_BASE_"

RESERVED_VARS = frozenset({DIRECTORY_OVERRIDE_VAR, ENVIRONMENT_VAR})


class EnvReader:
    """Environment variable reader with dependency injection support.

    Accepts an optional env mapping so code that depends on environment
    variables can be tested without modifying os.environ.

    Example:
        reader = EnvReader(env={"GOOD_BASE_SERVER_PORT": "9000", "HOME": "/root"})
        list(reader.with_prefix("GOOD_BASE_"))  # [("GOOD_BASE_SERVER_PORT", "9000")]
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def with_prefix(self, prefix: str) -> Iterator[tuple[str, str]]:
        """Yield (name, value) pairs whose name starts with prefix, sorted by name."""
        for name in sorted(self._env):
            if name.startswith(prefix):
                yield name, self._env[name]


@dataclass(frozen=True)
class EnvOverride:
    """How one prefixed environment variable was decoded."""

    variable: str
    raw: str
    path: tuple[str, ...] | None = None
    value: Any = None
    status: str = "applied"
    """One of "applied", "ignored", "skipped" or "shadowed"."""

    reason: str | None = None

    @property
    def dotted_path(self) -> str | None:
        return ".".join(self.path) if self.path else None


def resolve_env_path(segments: list[str]) -> tuple[str, ...] | None:
    """Resolve lowercase name segments to a registered field path.

    Args:
        segments: Name with the prefix stripped, lowercased, split on "_".

    Returns:
        Field path such as ("server", "port"), or None if the segments do
        not lead to a registered field.
    """
    path: tuple[str, ...] = ()
    for i, segment in enumerate(segments):
        candidate = path + ("_".join(segments[i:]),)
        if field_type(candidate) is not None:
            return candidate
        if i == len(segments) - 1:
            return None
        next_path = path + (segment,)
        if not segment or not is_container(next_path):
            return None
        path = next_path
    return None


def _assign(partial: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    current = partial
    for key in path[:-1]:
        current = current.setdefault(key, {})
    current[path[-1]] = value


def _is_set(partial: dict[str, Any], path: tuple[str, ...]) -> bool:
    current: Any = partial
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return False
        current = current[key]
    return True


def _coerce(
    name: str, raw: str, path: tuple[str, ...]
) -> tuple[bool, Any, EnvOverride | None]:
    try:
        return True, coerce_value(raw, field_type(path)), None
    except CoercionError as e:
        logger.warning("Skipping %s: %s", name, e)
        skipped = EnvOverride(name, raw, path, status="skipped", reason=str(e))
        return False, None, skipped


def decode_env_overrides(
    env: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX
) -> tuple[dict[str, Any], list[EnvOverride]]:
    """Decode prefixed environment variables into a partial configuration.

    Structural matches are applied first. Legacy flat aliases only fill
    paths that no structural match has set.

    Args:
        env: Environment mapping. Defaults to os.environ.
        prefix: Recognized variable prefix.

    Returns:
        Tuple of (partial configuration dict, per-variable decode report).
    """
    reader = EnvReader(env)
    partial: dict[str, Any] = {}
    report: list[EnvOverride] = []
    alias_hits: list[tuple[str, str, tuple[str, ...]]] = []

    for name, raw in reader.with_prefix(prefix):
        if name in RESERVED_VARS:
            continue
        key = name[len(prefix) :].lower()
        if not key:
            continue

        path = resolve_env_path(key.split("_"))
        if path is None:
            alias = LEGACY_ALIASES.get(key)
            if alias is not None:
                alias_hits.append((name, raw, alias))
            else:
                logger.debug("Ignoring unrecognized environment variable %s", name)
                report.append(
                    EnvOverride(name, raw, status="ignored", reason="no matching field")
                )
            continue

        ok, value, skipped = _coerce(name, raw, path)
        if not ok:
            report.append(skipped)
            continue
        _assign(partial, path, value)
        report.append(EnvOverride(name, raw, path, value))

    for name, raw, path in alias_hits:
        if _is_set(partial, path):
            report.append(
                EnvOverride(
                    name,
                    raw,
                    path,
                    status="shadowed",
                    reason=f"{'.'.join(path)} already set by a structural name",
                )
            )
            continue
        ok, value, skipped = _coerce(name, raw, path)
        if not ok:
            report.append(skipped)
            continue
        _assign(partial, path, value)
        report.append(EnvOverride(name, raw, path, value))

    return partial, report


def encode_env_name(path: tuple[str, ...], prefix: str = ENV_PREFIX) -> str:
    """Build the environment variable name for a field path."""
    return prefix + "_".join(path).upper()
