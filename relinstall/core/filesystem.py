"""
File system utilities for relinstall.

This module provides:
- The per-run temporary workspace (scoped acquisition with guaranteed cleanup)
- Safe archive extraction (tar.gz) with directory traversal protection
- Atomic installation of a file into the destination directory
"""

import logging
import os
import shutil
import tarfile
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from relinstall.core.exceptions import (
    ArchiveExtractionError,
    BinaryNotFoundError,
    InsecureArchiveError,
    InstallError,
    WorkspaceError,
)

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "relinstall_"
EXECUTABLE_MODE = 0o755


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/tmp/ws/extract/relctl"), Path("/tmp/ws"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Remove a directory tree, refusing paths outside require_prefix.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    shutil.rmtree(path)


# ============================================================================
# Workspace
# ============================================================================


@contextmanager
def workspace(prefix: str = WORKSPACE_PREFIX) -> Iterator[Path]:
    """
    Temporary working directory for exactly one installer run.

    The directory is removed recursively when the block exits, whether it
    completes normally, raises, or is interrupted (KeyboardInterrupt,
    SystemExit raised from a signal handler).

    Example:
        >>> with workspace() as ws:
        ...     (ws / "archive.tar.gz").write_bytes(data)
    """
    try:
        temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
    except OSError as e:
        raise WorkspaceError(f"Cannot create temporary workspace: {e}") from e
    logger.debug(f"Created workspace {temp_dir}")

    try:
        yield temp_dir
    finally:
        # A cleanup failure must not mask the error that ended the block
        try:
            safe_rmtree(temp_dir, require_prefix=tempfile.gettempdir())
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to remove workspace {temp_dir}: {e}")
        else:
            logger.debug(f"Removed workspace {temp_dir}")


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "Extraction has been blocked."
        )


def extract_archive(archive_path: Union[str, Path], destination: Union[str, Path]) -> Path:
    """
    Extract a gzip-compressed tar archive into destination.

    All member paths are validated before anything is written, and links
    pointing outside the destination are rejected.

    Args:
        archive_path: Path to the .tar.gz / .tgz archive
        destination: Directory to extract to (created if missing)

    Returns:
        The destination directory

    Raises:
        ArchiveExtractionError: If the archive is missing, unsupported or corrupt
        InsecureArchiveError: If the archive contains malicious paths
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    if not archive_path.name.lower().endswith((".tar.gz", ".tgz")):
        raise ArchiveExtractionError(
            f"Unsupported archive format: {archive_path.name}. Supported: .tar.gz, .tgz"
        )

    destination.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()

            for member in members:
                _validate_archive_path(member.name, destination)
                # Symlink targets are relative to the link, hardlinks to the root
                if member.issym():
                    _validate_archive_path(
                        str(Path(member.name).parent / member.linkname), destination
                    )
                elif member.islnk():
                    _validate_archive_path(member.linkname, destination)

            if hasattr(tarfile, "data_filter"):
                tar.extractall(destination, members=members, filter="data")
            else:
                tar.extractall(destination, members=members)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path.name}: {e}") from e

    logger.debug(f"Extracted {len(members)} member(s) to {destination}")
    return destination


# ============================================================================
# Installation
# ============================================================================


def find_file(directory: Path, name: str) -> Path:
    """
    Find a regular file called name inside directory.

    The top level is checked first; otherwise the shallowest match wins.

    Raises:
        BinaryNotFoundError: If no such file exists
    """
    direct = directory / name
    if direct.is_file():
        return direct

    matches = [p for p in directory.rglob(name) if p.is_file()]
    if not matches:
        raise BinaryNotFoundError(f"Archive does not contain a file named '{name}'")

    matches.sort(key=lambda p: (len(p.relative_to(directory).parts), str(p)))
    return matches[0]


def install_file(source: Path, destination: Path, mode: int = EXECUTABLE_MODE) -> Path:
    """
    Copy source to destination atomically and make it executable.

    The file is written to a temporary name in the destination directory
    and then renamed over any existing file, so the destination is never
    left half-written.

    Returns:
        The destination path

    Raises:
        InstallError: If the file cannot be written to destination
    """
    source = Path(source)
    destination = Path(destination)

    try:
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=destination.parent, prefix=f".{destination.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise InstallError(f"Cannot write to {destination.parent}: {e}") from e
    os.close(temp_fd)
    temp_path = Path(temp_path_str)

    try:
        shutil.copyfile(source, temp_path)
        temp_path.chmod(mode)
        temp_path.replace(destination)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise InstallError(f"Failed to install {destination}: {e}") from e

    return destination
