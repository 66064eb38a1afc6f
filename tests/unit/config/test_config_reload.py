"""Unit tests for configuration reload support."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from good_base.config.models import (
    AuthConfig,
    DatabaseSettings,
    GoodBaseConfig,
    LoggingConfig,
    ServerConfig,
)
from good_base.config.reload import (
    REQUIRES_RESTART_FIELDS,
    ConfigReloader,
    ReloadResult,
    ReloadState,
    _detect_changes,
    _format_change_log,
    _get_nested_attr,
)


class TestReloadState:
    """Tests for ReloadState dataclass."""

    def test_default_initialization(self) -> None:
        state = ReloadState()
        assert state.last_reload is None
        assert state.reload_count == 0
        assert state.last_error is None
        assert state.changes_detected == []

    def test_initialization_with_values(self) -> None:
        now = datetime.now(timezone.utc)
        state = ReloadState(last_reload=now, reload_count=5, changes_detected=["server.port"])
        assert state.last_reload == now
        assert state.reload_count == 5
        assert state.changes_detected == ["server.port"]


class TestReloadResult:
    """Tests for ReloadResult dataclass."""

    def test_success_result(self) -> None:
        result = ReloadResult(success=True, changes=["logging.level"])
        assert result.error is None
        assert result.requires_restart == []

    def test_to_dict(self) -> None:
        result = ReloadResult(
            success=True,
            changes=["server.port", "index.auto_optimize"],
            requires_restart=["server.port"],
        )
        assert result.to_dict() == {
            "success": True,
            "changes": ["server.port", "index.auto_optimize"],
            "requires_restart": ["server.port"],
            "error": None,
        }


class TestGetNestedAttr:
    """Tests for _get_nested_attr helper."""

    def test_nested_attr(self) -> None:
        config = GoodBaseConfig(server=ServerConfig(port=9000))
        assert _get_nested_attr(config, "server.port") == 9000

    def test_database_entry(self) -> None:
        config = GoodBaseConfig(databases={"main": DatabaseSettings(max_file_size=3)})
        assert _get_nested_attr(config, "databases.main.max_file_size") == 3

    def test_missing_attr(self) -> None:
        config = GoodBaseConfig()
        assert _get_nested_attr(config, "nonexistent.field") is None
        assert _get_nested_attr(config, "databases.missing.max_file_size") is None


class TestDetectChanges:
    """Tests for _detect_changes function."""

    def test_no_changes(self) -> None:
        assert _detect_changes(GoodBaseConfig(), GoodBaseConfig()) == ([], [])

    def test_hot_reloadable_change(self) -> None:
        old = GoodBaseConfig()
        new = GoodBaseConfig(logging=LoggingConfig(level="debug"))
        changed, restart = _detect_changes(old, new)
        assert changed == ["logging.level"]
        assert restart == []

    def test_restart_required_change(self) -> None:
        old = GoodBaseConfig()
        new = GoodBaseConfig(server=ServerConfig(port=9000, cors_origins=["https://a.com"]))
        changed, restart = _detect_changes(old, new)
        assert set(changed) == {"server.port", "server.cors_origins"}
        assert restart == ["server.port"]

    def test_added_database(self) -> None:
        old = GoodBaseConfig()
        new = GoodBaseConfig(
            databases={"main": DatabaseSettings(data_directory="/d", max_file_size=5)}
        )
        changed, restart = _detect_changes(old, new)
        assert "databases.main.max_file_size" in changed
        assert "databases.main.data_directory" in restart
        assert "databases.main.max_file_size" not in restart

    def test_restart_fields_are_known_paths(self) -> None:
        for path in REQUIRES_RESTART_FIELDS:
            section, name = path.split(".")
            assert hasattr(getattr(GoodBaseConfig(), section), name)


class TestFormatChangeLog:
    def test_plain_value(self) -> None:
        old = GoodBaseConfig()
        new = GoodBaseConfig(server=ServerConfig(port=9000))
        assert _format_change_log("server.port", old, new) == "server.port: 7777 -> 9000"

    def test_secret_masked(self) -> None:
        old = GoodBaseConfig()
        new = GoodBaseConfig(auth=AuthConfig(default_token="s3cret"))
        message = _format_change_log("auth.default_token", old, new)
        assert "s3cret" not in message
        assert message == "auth.default_token: '****' -> '****'"

    def test_secret_cleared(self) -> None:
        old = GoodBaseConfig()
        new = GoodBaseConfig(auth=AuthConfig(default_token=None))
        assert _format_change_log("auth.default_token", old, new).endswith("-> None")


class TestConfigReloader:
    """Tests for ConfigReloader against a real loader."""

    @pytest.fixture
    def loader_env(self, env):
        return dict(env)

    @pytest.fixture
    def reloader(self, loader_env):
        from good_base.config.loader import ConfigLoader

        return ConfigReloader(ConfigLoader(env=loader_env))

    @pytest.mark.asyncio
    async def test_unchanged(self, reloader) -> None:
        result = await reloader.reload()
        assert result.success is True
        assert result.changes == []
        assert reloader.state.reload_count == 0

    @pytest.mark.asyncio
    async def test_changes_reported(self, reloader, loader_env, write_config) -> None:
        await reloader._loader.load()
        write_config('CONFIG = {"index": {"auto_optimize": False}}\n')
        loader_env["GOOD_BASE_SERVER_PORT"] = "9000"

        result = await reloader.reload()

        assert result.success is True
        assert set(result.changes) == {"index.auto_optimize", "server.port"}
        assert result.requires_restart == ["server.port"]
        assert reloader.state.reload_count == 1
        assert reloader.state.last_reload is not None
        assert reloader._loader.current.config.server.port == 9000

    @pytest.mark.asyncio
    async def test_restart_warning_logged(self, reloader, loader_env, caplog) -> None:
        await reloader._loader.load()
        loader_env["GOOD_BASE_SERVER_HOST"] = "0.0.0.0"
        with caplog.at_level(logging.INFO, logger="good_base.config.reload"):
            await reloader.reload()
        assert "requires restart: server.host: 'localhost' -> '0.0.0.0'" in caplog.text

    @pytest.mark.asyncio
    async def test_invalid_config_keeps_previous(self, reloader, loader_env) -> None:
        previous = await reloader._loader.load()
        loader_env["GOOD_BASE_AUTH_REQUIRED"] = "true"
        loader_env["GOOD_BASE_AUTH_DEFAULT_TOKEN"] = ""

        result = await reloader.reload()

        assert result.success is False
        assert "auth.default_token" in result.error
        assert reloader._loader.current is previous
        assert reloader.state.last_error == result.error
        assert reloader.state.reload_count == 0

    @pytest.mark.asyncio
    async def test_load_failure_keeps_previous(self, reloader, write_config) -> None:
        previous = await reloader._loader.load()
        write_config("CONFIG = [1, 2]\n")

        result = await reloader.reload()

        assert result.success is False
        assert result.error.startswith("ConfigShapeError")
        assert reloader._loader.current is previous

    @pytest.mark.asyncio
    async def test_reload_in_progress(self, reloader) -> None:
        async with reloader._reload_lock:
            result = await reloader.reload()
        assert result.success is False
        assert result.error == "Reload already in progress"

    @pytest.mark.asyncio
    async def test_log_level_applied(self, reloader, loader_env) -> None:
        await reloader._loader.load()
        loader_env["GOOD_BASE_LOGGING_LEVEL"] = "error"
        result = await reloader.reload()
        assert result.changes == ["logging.level"]
        assert logging.getLogger().level == logging.ERROR

    @pytest.mark.asyncio
    async def test_loads_first_when_never_loaded(self, reloader) -> None:
        assert reloader._loader.current is None
        result = await reloader.reload()
        assert result.success is True
        assert reloader._loader.current is not None


def test_replace_produces_distinct_config() -> None:
    config = GoodBaseConfig()
    changed = replace(config, server=replace(config.server, port=1))
    assert _detect_changes(config, changed)[0] == ["server.port"]
