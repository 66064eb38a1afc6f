"""Tests for base directory resolution and directory derivation."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from good_base.config.directories import (
    derive_directories,
    get_app_directories,
    is_development,
    resolve_base_directory,
)
from good_base.config.errors import UnsupportedPlatformError

PROD = {"GOOD_BASE_ENV": "production"}


class TestResolveBaseDirectoryOsConvention:
    """OS conventions apply in production mode without an override."""

    def test_macos(self) -> None:
        env = {**PROD, "HOME": "/Users/ada"}
        result = resolve_base_directory(env=env, platform="darwin")
        assert result == "/Users/ada/Library/Application Support/good-base"

    def test_linux_xdg_data_home(self) -> None:
        env = {**PROD, "HOME": "/home/ada", "XDG_DATA_HOME": "/data/xdg"}
        result = resolve_base_directory(env=env, platform="linux")
        assert result == "/data/xdg/good-base"

    def test_linux_without_xdg(self) -> None:
        env = {**PROD, "HOME": "/home/ada"}
        result = resolve_base_directory(env=env, platform="linux")
        assert result == "/home/ada/.local/share/good-base"

    def test_linux_empty_xdg_falls_back(self) -> None:
        env = {**PROD, "HOME": "/home/ada", "XDG_DATA_HOME": ""}
        result = resolve_base_directory(env=env, platform="linux2")
        assert result == "/home/ada/.local/share/good-base"

    def test_windows_appdata(self) -> None:
        env = {**PROD, "APPDATA": "C:\\Users\\ada\\AppData\\Roaming"}
        result = resolve_base_directory(env=env, platform="win32")
        assert result == "C:\\Users\\ada\\AppData\\Roaming\\good-base"

    def test_windows_without_appdata_uses_userprofile(self) -> None:
        env = {**PROD, "USERPROFILE": "C:\\Users\\ada"}
        result = resolve_base_directory(env=env, platform="win32")
        assert result == "C:\\Users\\ada\\AppData\\Roaming\\good-base"

    def test_cygwin_is_windows(self) -> None:
        env = {**PROD, "APPDATA": "C:\\AppData"}
        result = resolve_base_directory(env=env, platform="cygwin")
        assert result == "C:\\AppData\\good-base"

    def test_custom_app_name(self) -> None:
        env = {**PROD, "HOME": "/home/ada"}
        result = resolve_base_directory("other-app", env=env, platform="linux")
        assert result == "/home/ada/.local/share/other-app"

    def test_unsupported_platform_raises(self) -> None:
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            resolve_base_directory(env={**PROD, "HOME": "/h"}, platform="sunos5")
        assert exc_info.value.platform == "sunos5"


class TestResolveBaseDirectoryPrecedence:
    """Override beats development mode, which beats the OS convention."""

    def test_override_beats_development_mode(self) -> None:
        env = {"GOOD_BASE_DIR": "/srv/gb", "GOOD_BASE_ENV": "development"}
        assert resolve_base_directory(env=env, platform="linux") == "/srv/gb"

    def test_override_beats_os_convention(self) -> None:
        env = {**PROD, "GOOD_BASE_DIR": "/srv/gb", "HOME": "/home/ada"}
        assert resolve_base_directory(env=env, platform="linux") == "/srv/gb"

    def test_override_used_on_unsupported_platform(self) -> None:
        env = {"GOOD_BASE_DIR": "/srv/gb"}
        assert resolve_base_directory(env=env, platform="sunos5") == "/srv/gb"

    def test_override_is_verbatim(self) -> None:
        env = {"GOOD_BASE_DIR": "relative/dir"}
        assert resolve_base_directory(env=env, platform="linux") == "relative/dir"

    def test_development_mode_when_env_unset(self) -> None:
        assert resolve_base_directory(env={}, platform="linux") == "./tmp/good-base"

    def test_development_mode_for_non_production_value(self) -> None:
        env = {"GOOD_BASE_ENV": "staging", "HOME": "/home/ada"}
        assert resolve_base_directory(env=env, platform="darwin") == "./tmp/good-base"


class TestIsDevelopment:
    def test_unset_is_development(self) -> None:
        assert is_development({}) is True

    def test_production_is_not_development(self) -> None:
        assert is_development(PROD) is False


class TestDeriveDirectories:
    """Tests for derive_directories()."""

    def test_fixed_subdirectories(self, tmp_path: Path) -> None:
        dirs = derive_directories(tmp_path)
        assert dirs.base == tmp_path
        assert dirs.data == tmp_path / "data"
        assert dirs.config == tmp_path / "config"
        assert dirs.logs == tmp_path / "logs"
        assert dirs.cache == tmp_path / "cache"
        assert dirs.backups == tmp_path / "backups"
        assert dirs.auth_db == tmp_path / "auth.db"
        assert dirs.databases == {}

    def test_relative_base_made_absolute(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        dirs = derive_directories("./tmp/good-base")
        assert dirs.base.is_absolute()
        assert dirs.base == Path(os.path.abspath(tmp_path / "tmp" / "good-base"))

    def test_database_subtrees(self, tmp_path: Path) -> None:
        dirs = derive_directories(tmp_path, ["main", "archive"])
        main = dirs.databases["main"]
        assert main.base == tmp_path / "databases" / "main"
        assert main.data == tmp_path / "databases" / "main" / "data"
        assert main.backups == tmp_path / "databases" / "main" / "backups"
        assert set(dirs.databases) == {"main", "archive"}

    def test_all_lists_app_then_database_directories(self, tmp_path: Path) -> None:
        dirs = derive_directories(tmp_path, ["main"])
        paths = dirs.all()
        assert paths[0] == tmp_path
        assert tmp_path / "databases" / "main" / "cache" in paths
        assert len(paths) == 12

    def test_get_app_directories_uses_override(self, tmp_path: Path) -> None:
        dirs = get_app_directories(env={"GOOD_BASE_DIR": str(tmp_path)})
        assert dirs.config == tmp_path / "config"
