"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from filelifecycle.config import get_project_config_path, reset_config
from filelifecycle.logging import reset_logging

# Configure pytest-asyncio to use auto mode
# This is redundant with pyproject.toml but ensures it's set
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture
def user_config_file(tmp_path: Path) -> Path:
    """Location standing in for the user-level config file."""
    return tmp_path / "user" / "config.yaml"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, user_config_file: Path):
    """Keep real system/user config files and env vars out of tests."""
    for name in ("FILELIFECYCLE_LOG", "FILELIFECYCLE_BACKEND", "FILELIFECYCLE_POLL_INTERVAL"):
        monkeypatch.delenv(name, raising=False)

    def config_paths(project_root=None):
        paths = [user_config_file]
        if project_root:
            paths.append(get_project_config_path(project_root))
        return paths

    monkeypatch.setattr("filelifecycle.config.loader.get_config_paths", config_paths)
    reset_config()
    yield
    reset_config()
    reset_logging()
