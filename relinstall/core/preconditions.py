"""
Environment precondition checks.

These run before any network traffic so a misconfigured machine fails
fast with an actionable message.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable

from relinstall.core.config import ENV_DESTINATION
from relinstall.core.exceptions import (
    ConfigurationError,
    MissingDependencyError,
    UnsupportedPlatformError,
)

logger = logging.getLogger(__name__)


def assert_destination_writable(path: Path) -> None:
    """
    Ensure the installation directory exists and is writable.

    Args:
        path: Destination directory

    Raises:
        ConfigurationError: If the directory is missing or not writable
    """
    path = Path(path)

    if not path.is_dir():
        raise ConfigurationError(
            f"Destination directory does not exist: {path}. "
            f"Create it or set {ENV_DESTINATION} to an existing directory."
        )

    if not os.access(path, os.W_OK):
        raise ConfigurationError(
            f"Destination directory is not writable: {path}. "
            f"Re-run with elevated privileges (e.g. sudo) or set "
            f"{ENV_DESTINATION} to a directory you can write to."
        )

    logger.debug(f"Destination writable: {path}")


def assert_os_supported(current_os: str, supported: Iterable[str]) -> None:
    """
    Ensure the detected operating system is one the installer supports.

    Raises:
        UnsupportedPlatformError: If current_os is not in supported
    """
    supported = tuple(supported)
    if current_os not in supported:
        raise UnsupportedPlatformError(current_os, supported)


def assert_tools_available(*names: str) -> None:
    """
    Ensure every named executable can be found on PATH.

    All missing tools are reported together.

    Raises:
        MissingDependencyError: If one or more tools are missing
    """
    missing = [name for name in names if shutil.which(name) is None]
    if missing:
        raise MissingDependencyError(missing)
