"""
Release discovery for relinstall.

Talks to the GitLab releases API and selects the release and asset to install.
"""

from .client import ReleaseClient, release_list_url
from .models import AssetLink, Release
from .selector import (
    artifact_filename,
    latest,
    name_contains,
    name_equals,
    select_artifact,
    select_asset,
)

__all__ = [
    "ReleaseClient",
    "release_list_url",
    "AssetLink",
    "Release",
    "artifact_filename",
    "latest",
    "name_contains",
    "name_equals",
    "select_artifact",
    "select_asset",
]
