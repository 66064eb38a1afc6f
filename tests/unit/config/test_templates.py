"""Tests for the example configuration files."""

from __future__ import annotations

from pathlib import Path

import pytest

from good_base.config.files import PythonModuleReader, TomlReader, check_partial_shape
from good_base.config.templates import write_example_config


@pytest.mark.parametrize("reader_cls", [PythonModuleReader, TomlReader])
class TestWriteExampleConfig:
    def test_writes_file(self, tmp_path: Path, reader_cls) -> None:
        reader = reader_cls()
        written = write_example_config(tmp_path / "config", reader)
        assert written == tmp_path / "config" / reader.file_name
        assert written.read_text() == reader.example

    def test_does_not_overwrite_without_force(self, tmp_path: Path, reader_cls) -> None:
        reader = reader_cls()
        target = tmp_path / reader.file_name
        target.write_text("keep me")
        assert write_example_config(tmp_path, reader) is None
        assert target.read_text() == "keep me"

    def test_force_overwrites(self, tmp_path: Path, reader_cls) -> None:
        reader = reader_cls()
        (tmp_path / reader.file_name).write_text("old")
        assert write_example_config(tmp_path, reader, force=True) is not None
        assert (tmp_path / reader.file_name).read_text() == reader.example

    def test_example_is_loadable(self, tmp_path: Path, reader_cls) -> None:
        reader = reader_cls()
        written = write_example_config(tmp_path, reader)
        partial = check_partial_shape(reader.read(written), str(written))
        assert partial["server"]["port"] == 7777
        assert partial["auth"]["validation_method"] == "static"


def test_python_and_toml_examples_agree(tmp_path: Path) -> None:
    py = PythonModuleReader()
    toml = TomlReader()
    py_partial = check_partial_shape(py.read(write_example_config(tmp_path, py)), "py")
    toml_partial = check_partial_shape(
        toml.read(write_example_config(tmp_path, toml)), "toml"
    )
    assert py_partial == toml_partial
