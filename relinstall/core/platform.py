"""
Platform detection for relinstall.

Reports the running operating system and CPU architecture using the same
strings the host's `uname -o` / `uname -m` would print, because release
artifacts are named after the raw machine string (e.g. Linux_x86_64.tar.gz).

Usage:
    from relinstall.core.platform import detect_platform

    info = detect_platform()
    print(f"OS: {info.os}, arch: {info.arch}")
"""

import functools
import platform
from dataclasses import dataclass
from typing import Dict, Tuple


# Architecture names differ between uname and common release naming schemes.
ARCH_ALIASES: Dict[str, Tuple[str, ...]] = {
    "x86_64": ("amd64",),
    "amd64": ("x86_64",),
    "aarch64": ("arm64",),
    "arm64": ("aarch64",),
    "armv7l": ("armv7", "arm"),
    "i686": ("i386", "386"),
    "i386": ("386",),
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Detected platform information.

    Attributes:
        os: Operating system as reported by `uname -o` (e.g. 'GNU/Linux')
        arch: Raw machine string as reported by `uname -m` (e.g. 'x86_64')
    """

    os: str
    arch: str

    def arch_candidates(self) -> Tuple[str, ...]:
        """
        Architecture labels to try when matching release artifacts.

        The detected string always comes first, followed by known aliases.

        Example:
            >>> PlatformInfo("GNU/Linux", "aarch64").arch_candidates()
            ('aarch64', 'arm64')
        """
        return (self.arch,) + ARCH_ALIASES.get(self.arch, ())

    def __str__(self) -> str:
        return f"{self.os} ({self.arch})"


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def clear_platform_cache() -> None:
    """Clear the cached platform detection result (used by tests)."""
    detect_platform.cache_clear()


def _detect_os() -> str:
    """
    Detect operating system in `uname -o` form.

    Returns:
        'GNU/Linux', 'Android', or platform.system() for anything else
        (e.g. 'Darwin', 'Windows')
    """
    system = platform.system()

    if system == "Linux":
        if "android" in platform.platform().lower():
            return "Android"
        return "GNU/Linux"
    return system or "unknown"


def _detect_architecture() -> str:
    """Detect CPU architecture without normalization."""
    return platform.machine() or "unknown"
