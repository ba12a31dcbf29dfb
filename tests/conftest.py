"""
Test configuration and fixtures for bins.

This module provides common fixtures and configuration for all tests.
"""

import os
import sys
from pathlib import Path

import pytest

# Add the parent directory to the path so we can import the application packages
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import BinsConfig
from tests.utils.fixtures import ExecutorFactoryRecorder, PEM_KEY, make_config


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Auto-used fixture isolating config lookup from the developer's machine.

    HOME and XDG_CONFIG_DIR point into a temporary directory and every
    BINS_* variable is cleared.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("XDG_CONFIG_DIR", raising=False)
    for key in list(os.environ):
        if key.startswith("BINS_"):
            monkeypatch.delenv(key, raising=False)
    yield home


@pytest.fixture
def config() -> BinsConfig:
    """Config matching the shipped defaults, with no request defaults."""
    return make_config()


@pytest.fixture
def executor_factory() -> ExecutorFactoryRecorder:
    return ExecutorFactoryRecorder()


@pytest.fixture
def pem_key() -> bytes:
    return PEM_KEY


@pytest.fixture
def config_file(tmp_path: Path):
    """
    Factory writing a bins config file and returning its path.

    Args:
        text: TOML content
    """
    def _write(text: str) -> Path:
        path = tmp_path / "bins.cfg"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
