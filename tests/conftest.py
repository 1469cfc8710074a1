"""
Pytest configuration and shared fixtures for relinstall tests.
"""

import logging
import tempfile
from pathlib import Path

import pytest

from relinstall.cli.utils import SafeStreamHandler
from relinstall.core.config import InstallerConfig
from relinstall.core.platform import PlatformInfo, clear_platform_cache

PROJECT_ID = "gitlab.example.com/acme/relctl"


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore root logging and platform cache after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, SafeStreamHandler):
            root.removeHandler(handler)
    root.setLevel(level)
    clear_platform_cache()


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    """Writable installation directory."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def installer_config(destination: Path) -> InstallerConfig:
    """Installer configuration pointing at the test project and destination."""
    return InstallerConfig(project_id=PROJECT_ID, destination=destination)


@pytest.fixture
def linux_x86_64() -> PlatformInfo:
    """Platform of a 64-bit x86 GNU/Linux machine."""
    return PlatformInfo(os="GNU/Linux", arch="x86_64")


@pytest.fixture
def isolated_tempdir(tmp_path: Path, monkeypatch) -> Path:
    """Point tempfile at a private directory so leftover workspaces are visible."""
    path = tmp_path / "tmp"
    path.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(path))
    return path
