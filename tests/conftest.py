"""Shared test fixtures for good-base."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from good_base.config.loader import ConfigLoader


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Base directory used as the GOOD_BASE_DIR override."""
    return tmp_path / "good-base"


@pytest.fixture
def env(base_dir: Path) -> dict[str, str]:
    """Minimal environment pointing the resolver at base_dir."""
    return {"GOOD_BASE_DIR": str(base_dir)}


@pytest.fixture
def config_dir(base_dir: Path) -> Path:
    """Config directory under base_dir, created."""
    path = base_dir / "config"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def write_config(config_dir: Path) -> Callable[..., Path]:
    """Write a config file into the config directory."""

    def _write(content: str, name: str = "good_base_config.py") -> Path:
        path = config_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_loader(env: dict[str, str]) -> Callable[..., ConfigLoader]:
    """Create a ConfigLoader over env plus extra variables."""

    def _make(extra: dict[str, str] | None = None, **kwargs) -> ConfigLoader:
        return ConfigLoader(env={**env, **(extra or {})}, **kwargs)

    return _make
