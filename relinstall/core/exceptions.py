"""
Centralized exception hierarchy for relinstall.

Every failure the installer can hit is terminal: there is no retry and
no partial success. Each exception carries enough context for the CLI
to print a diagnostic naming the failed precondition.
"""

from typing import Iterable


# ============================================================================
# Base Exceptions
# ============================================================================


class InstallerError(Exception):
    """Base exception for all relinstall errors."""

    pass


# ============================================================================
# Environment Exceptions
# ============================================================================


class ConfigurationError(InstallerError):
    """Raised when configuration is invalid or the destination is unusable."""

    pass


class UnsupportedPlatformError(InstallerError):
    """Raised when the detected operating system is not supported."""

    def __init__(self, current_os: str, supported: Iterable[str]):
        self.current_os = current_os
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported operating system: {current_os} "
            f"(supported: {', '.join(self.supported)})"
        )


class MissingDependencyError(InstallerError):
    """Raised when required external tools are not on PATH."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Required tools not found on PATH: {', '.join(self.missing)}")


# ============================================================================
# Release Exceptions
# ============================================================================


class ReleaseFetchError(InstallerError):
    """Raised when the release API is unreachable or returns an error."""

    pass


class DownloadError(ReleaseFetchError):
    """Raised when an asset download fails."""

    pass


class AssetNotFoundError(InstallerError):
    """Raised when no release asset matches the requested name."""

    pass


class ChecksumManifestNotFoundError(InstallerError):
    """Raised when a release has no checksum manifest or no entry for a file."""

    pass


class ChecksumManifestFormatError(InstallerError):
    """Raised when a checksum manifest line cannot be parsed."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        super().__init__(
            f"Malformed checksum manifest at line {line_number}: {reason}: {line!r}"
        )


class ChecksumMismatchError(InstallerError):
    """Raised when a downloaded file does not match its published digest."""

    def __init__(self, file_name: str, expected: str, actual: str):
        self.file_name = file_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {file_name}: expected {expected}, got {actual}"
        )


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class ArchiveExtractionError(InstallerError):
    """Raised when an archive cannot be extracted."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Raised when an archive member would escape the extraction directory."""

    pass


class BinaryNotFoundError(InstallerError):
    """Raised when the extracted archive does not contain the expected binary."""

    pass


class WorkspaceError(InstallerError):
    """Raised when the temporary workspace cannot be created."""

    pass


class InstallError(InstallerError):
    """Raised when the binary cannot be written to the destination directory."""

    pass
