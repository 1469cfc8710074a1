"""
Release and asset selection.

Picks the most recent release and the artifact matching the running
platform.
"""

import logging
from typing import Callable, Iterable, Sequence, Tuple, Union

from packaging.version import InvalidVersion, Version

from relinstall.core.exceptions import AssetNotFoundError, ReleaseFetchError
from relinstall.releases.models import AssetLink, Release

logger = logging.getLogger(__name__)

AssetPredicate = Callable[[str], bool]


def _version_key(tag_name: str) -> Tuple[int, Union[Version, str]]:
    """Sort key for tags: PEP 440 versions order above unparseable tags."""
    try:
        return (1, Version(tag_name))
    except InvalidVersion:
        return (0, tag_name)


def latest(releases: Sequence[Release]) -> Release:
    """
    Return the most recently released entry.

    Releases are ordered by released_at ascending and the last one wins.
    Equal timestamps are ordered by tag version, so the highest version is
    chosen regardless of the order the API returned them in.

    Raises:
        ReleaseFetchError: If there are no releases
    """
    if not releases:
        raise ReleaseFetchError("No releases have been published for this project")

    ordered = sorted(releases, key=lambda r: (r.released_at, _version_key(r.tag_name)))
    return ordered[-1]


def name_contains(fragment: str) -> AssetPredicate:
    """Predicate matching asset names that contain fragment."""
    return lambda name: fragment in name


def name_equals(expected: str) -> AssetPredicate:
    """Predicate matching asset names equal to expected."""
    return lambda name: name == expected


def select_asset(release: Release, predicate: AssetPredicate) -> AssetLink:
    """
    Return the first asset of release whose name satisfies predicate.

    Raises:
        AssetNotFoundError: If no asset matches
    """
    for asset in release.assets:
        if predicate(asset.name):
            return asset
    raise AssetNotFoundError(f"No matching asset in release {release.tag_name}")


def artifact_filename(os_family: str, arch: str) -> str:
    """
    Compose the artifact file name for a platform.

    Example:
        >>> artifact_filename("Linux", "x86_64")
        'Linux_x86_64.tar.gz'
    """
    return f"{os_family}_{arch}.tar.gz"


def select_artifact(release: Release, os_family: str, arch_candidates: Iterable[str]) -> AssetLink:
    """
    Select the archive for the running platform.

    Architecture labels are tried in order; the first one with a matching
    asset wins.

    Raises:
        AssetNotFoundError: If no asset matches any candidate label
    """
    candidates = list(arch_candidates)

    for arch in candidates:
        filename = artifact_filename(os_family, arch)
        try:
            asset = select_asset(release, name_contains(filename))
        except AssetNotFoundError:
            logger.debug(f"No asset matching {filename} in {release.tag_name}")
            continue
        return asset

    detected = candidates[0] if candidates else "unknown"
    raise AssetNotFoundError(
        f"No release asset for architecture '{detected}' "
        f"(looked for {artifact_filename(os_family, detected)} in {release.tag_name})"
    )
