"""
Checksum manifest parsing and SHA256 verification.

This module provides:
- Streaming file hash computation
- Parsing of checksum manifests (SHA256SUMS / goreleaser checksums.txt format)
- Constant-time digest comparison
"""

import hashlib
import logging
import secrets
from pathlib import Path
from typing import Dict

from relinstall.core.exceptions import (
    ChecksumManifestFormatError,
    ChecksumManifestNotFoundError,
    ChecksumMismatchError,
)

logger = logging.getLogger(__name__)

ALGORITHM = "sha256"
DIGEST_LENGTH = 64
_HEX = set("0123456789abcdef")


def compute_file_hash(file_path: Path, algorithm: str = ALGORITHM) -> str:
    """
    Compute cryptographic hash of file.

    Args:
        file_path: Path to file
        algorithm: Any algorithm name accepted by hashlib.new()

    Returns:
        Lowercase hex digest

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    try:
        hasher = hashlib.new(algorithm.lower())
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


def verify(expected_digest: str, file_path: Path) -> str:
    """
    Verify a file against its expected SHA256 digest.

    Args:
        expected_digest: Expected digest (hex, any case)
        file_path: File to verify

    Returns:
        The computed digest

    Raises:
        ChecksumMismatchError: If the digests differ
        FileNotFoundError: If file doesn't exist

    Example:
        >>> verify("9f86d081884c7d65...", Path("relctl_Linux_x86_64.tar.gz"))
    """
    file_path = Path(file_path)
    expected = expected_digest.strip().lower()
    actual = compute_file_hash(file_path, ALGORITHM)

    if not _constant_time_compare(actual, expected):
        raise ChecksumMismatchError(file_path.name, expected, actual)

    logger.debug(f"Checksum verified for {file_path.name}: {actual}")
    return actual


def parse_checksum_manifest(text: str) -> Dict[str, str]:
    """
    Parse a checksum manifest into a filename -> digest mapping.

    Supports formats:
    - hash  filename
    - hash *filename (binary mode marker)

    Blank lines and lines starting with '#' are ignored.

    Raises:
        ChecksumManifestFormatError: If a line has no filename or the digest
            is not a 64-character hex string

    Example:
        >>> parse_checksum_manifest("abc...  relctl_Linux_x86_64.tar.gz\\n")
        {'relctl_Linux_x86_64.tar.gz': 'abc...'}
    """
    checksums: Dict[str, str] = {}

    for line_num, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split(maxsplit=1)
        if len(parts) != 2:
            raise ChecksumManifestFormatError(line_num, raw, "missing filename")

        digest = parts[0].lower()
        filename = parts[1].strip()
        if filename.startswith("*"):
            filename = filename[1:].strip()

        if not _is_valid_digest(digest):
            raise ChecksumManifestFormatError(
                line_num, raw, f"expected {DIGEST_LENGTH} hex characters"
            )

        if filename in checksums and checksums[filename] != digest:
            logger.warning(f"Conflicting checksum entries for {filename}, using last")
        checksums[filename] = digest

    return checksums


def expected_digest(checksums: Dict[str, str], filename: str) -> str:
    """
    Look up the digest published for filename.

    Raises:
        ChecksumManifestNotFoundError: If the manifest has no entry for filename
    """
    try:
        return checksums[filename]
    except KeyError:
        raise ChecksumManifestNotFoundError(
            f"Checksum manifest has no entry for {filename}"
        ) from None


def _constant_time_compare(a: str, b: str) -> bool:
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def _is_valid_digest(value: str) -> bool:
    return len(value) == DIGEST_LENGTH and set(value) <= _HEX
