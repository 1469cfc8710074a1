"""
Core functionality for relinstall.

This package contains the foundational modules that the installer depends on.
"""

from .config import InstallerConfig, load_config

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    InstallerError,
    ConfigurationError,
    UnsupportedPlatformError,
    MissingDependencyError,
    ReleaseFetchError,
    DownloadError,
    AssetNotFoundError,
    ChecksumManifestNotFoundError,
    ChecksumManifestFormatError,
    ChecksumMismatchError,
    ArchiveExtractionError,
    InsecureArchiveError,
    BinaryNotFoundError,
    WorkspaceError,
    InstallError,
)

__all__ = [
    "InstallerConfig",
    "load_config",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "InstallerError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "MissingDependencyError",
    "ReleaseFetchError",
    "DownloadError",
    "AssetNotFoundError",
    "ChecksumManifestNotFoundError",
    "ChecksumManifestFormatError",
    "ChecksumMismatchError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "BinaryNotFoundError",
    "WorkspaceError",
    "InstallError",
]
