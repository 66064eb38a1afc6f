"""OS-specific directory resolution.

The base directory is resolved in this order (first match wins):
1. GOOD_BASE_DIR environment variable (used verbatim)
2. Development mode: GOOD_BASE_ENV is not "production" -> ./tmp/<app>
3. OS convention (macOS, Linux/XDG, Windows/APPDATA)

Any other platform is a fatal error. Backup and restore tooling relies on
predictable locations, so there is no catch-all fallback.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path, PurePosixPath, PureWindowsPath

from good_base.config.errors import UnsupportedPlatformError
from good_base.config.models import DatabaseDirectories, Directories

APP_NAME = "good-base"

# Reserved variables; the environment source never decodes these.
DIRECTORY_OVERRIDE_VAR = "GOOD_BASE_DIR"
ENVIRONMENT_VAR = "GOOD_BASE_ENV"

PRODUCTION = "production"


def _platform_family(platform: str) -> str:
    if platform == "darwin":
        return "macos"
    if platform.startswith("linux"):
        return "linux"
    if platform in ("win32", "cygwin"):
        return "windows"
    raise UnsupportedPlatformError(platform)


def _home_dir(env: Mapping[str, str]) -> str:
    return env.get("HOME") or env.get("USERPROFILE") or str(Path.home())


def is_development(env: Mapping[str, str] | None = None) -> bool:
    """Return True unless GOOD_BASE_ENV is exactly "production"."""
    env = env if env is not None else os.environ
    return env.get(ENVIRONMENT_VAR) != PRODUCTION


def resolve_base_directory(
    app_name: str = APP_NAME,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> str:
    """Resolve the application's base storage directory.

    Args:
        app_name: Directory name used under the OS data location.
        env: Environment mapping. Defaults to os.environ.
        platform: Platform identity as in sys.platform. Defaults to the
            running interpreter's.

    Returns:
        Base directory as a string, joined with the target OS separator.
        May be relative when it comes from the override or development mode.

    Raises:
        UnsupportedPlatformError: If the platform has no known convention.
    """
    env = env if env is not None else os.environ
    platform = platform if platform is not None else sys.platform

    override = env.get(DIRECTORY_OVERRIDE_VAR)
    if override:
        return override

    if is_development(env):
        return f"./tmp/{app_name}"

    family = _platform_family(platform)
    home = _home_dir(env)

    if family == "macos":
        return str(PurePosixPath(home, "Library", "Application Support", app_name))

    if family == "linux":
        xdg_data_home = env.get("XDG_DATA_HOME")
        if xdg_data_home:
            return str(PurePosixPath(xdg_data_home, app_name))
        return str(PurePosixPath(home, ".local", "share", app_name))

    appdata = env.get("APPDATA")
    if appdata:
        return str(PureWindowsPath(appdata, app_name))
    return str(PureWindowsPath(home, "AppData", "Roaming", app_name))


def derive_database_directories(root: Path, name: str) -> DatabaseDirectories:
    """Derive the fixed subdirectories for one named database."""
    base = root / name
    return DatabaseDirectories(
        base=base,
        data=base / "data",
        config=base / "config",
        logs=base / "logs",
        cache=base / "cache",
        backups=base / "backups",
    )


def derive_directories(
    base: str | os.PathLike[str], database_names: Iterable[str] = ()
) -> Directories:
    """Append the fixed subdirectory names to a base directory.

    The base is expanded and made absolute, so a relative override or the
    development ./tmp directory resolves against the working directory.

    Args:
        base: Base directory from resolve_base_directory().
        database_names: Names of configured databases to derive subtrees for.

    Returns:
        Directories with absolute paths.
    """
    root = Path(os.path.abspath(Path(base).expanduser()))
    databases_root = root / "databases"
    return Directories(
        base=root,
        data=root / "data",
        config=root / "config",
        logs=root / "logs",
        cache=root / "cache",
        backups=root / "backups",
        databases={
            name: derive_database_directories(databases_root, name)
            for name in database_names
        },
    )


def get_app_directories(
    app_name: str = APP_NAME,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Directories:
    """Resolve and derive the application directories in one call."""
    return derive_directories(
        resolve_base_directory(app_name, env=env, platform=platform)
    )
