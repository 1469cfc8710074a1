"""
Test utilities for relinstall testing.

This package provides test data builders for release API payloads and
release archives.
"""

from .builders import (
    ReleaseBuilder,
    make_tarball,
    sha256,
)

__all__ = [
    "ReleaseBuilder",
    "make_tarball",
    "sha256",
]
