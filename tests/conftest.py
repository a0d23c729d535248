"""Pytest configuration and shared fixtures for PropConf tests."""

import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional

import pytest
import yaml
from propconf import MapConfiguration


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def config() -> MapConfiguration:
    """Create an empty MapConfiguration instance."""
    return MapConfiguration()


@pytest.fixture
def make_lookup() -> Callable[[Dict[str, Any]], Callable[[str], Optional[Any]]]:
    """Create a lookup function over a plain dict."""

    def _make_lookup(data: Dict[str, Any]) -> Callable[[str], Optional[Any]]:
        return data.get

    return _make_lookup


@pytest.fixture
def write_yaml_file(temp_dir: Path) -> Callable[[str, Dict[str, Any]], Path]:
    """Write data to a YAML file inside the temporary directory."""

    def _write_yaml_file(name: str, data: Dict[str, Any]) -> Path:
        file_path = temp_dir / name
        with open(file_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
        return file_path

    return _write_yaml_file
