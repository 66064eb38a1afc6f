"""Tests for the default configuration builder."""

from __future__ import annotations

from pathlib import Path

from good_base.config.defaults import HISTORY_FILE_NAME, build_defaults
from good_base.config.directories import derive_directories
from good_base.config.validation import validate_config


class TestBuildDefaults:
    def test_paths_point_at_directories(self, tmp_path: Path) -> None:
        dirs = derive_directories(tmp_path)
        config = build_defaults(dirs)
        assert config.database.data_directory == str(dirs.data)
        assert config.database.backup_directory == str(dirs.backups)
        assert config.logging.log_directory == str(dirs.logs)
        assert config.cli.history_file == str(dirs.config / HISTORY_FILE_NAME)

    def test_documented_values(self, tmp_path: Path) -> None:
        config = build_defaults(derive_directories(tmp_path))
        assert config.server.host == "localhost"
        assert config.server.port == 7777
        assert config.server.cors_origins == ["*"]
        assert config.auth.required is False
        assert config.auth.validation_method == "static"
        assert config.auth.default_token == "dev-token-12345"
        assert config.index.default_level == "match"
        assert config.logging.level == "info"
        assert config.cli.prompt == "good-base-> "
        assert config.databases == {}

    def test_defaults_have_no_problems(self, tmp_path: Path) -> None:
        config = build_defaults(derive_directories(tmp_path))
        assert validate_config(config) == []

    def test_pure(self, tmp_path: Path) -> None:
        dirs = derive_directories(tmp_path)
        assert build_defaults(dirs) == build_defaults(dirs)
        assert not dirs.base.exists()
