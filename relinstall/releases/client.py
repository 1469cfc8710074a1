"""
Client for the GitLab releases REST API (v4).

    HEAD/GET https://<host>/api/v4/projects/<encoded-path>/releases

Every call is a single blocking request; failures are never retried.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

import requests
from requests.exceptions import RequestException

from relinstall.core.download import (
    DownloadProgress,
    create_session,
    download_file,
    fetch_text,
)
from relinstall.core.exceptions import (
    AssetNotFoundError,
    ChecksumManifestNotFoundError,
    ConfigurationError,
    ReleaseFetchError,
)
from relinstall.core.urlencode import encode_path_segment
from relinstall.releases.models import AssetLink, Release
from relinstall.releases.selector import name_equals, select_asset

logger = logging.getLogger(__name__)


def release_list_url(project_id: str) -> str:
    """
    Build the releases endpoint URL for a project identifier.

    The first segment of the identifier is the API host; the remainder is
    the project path, encoded as a single path segment.

    Example:
        >>> release_list_url("gitlab.com/relinstall/relctl")
        'https://gitlab.com/api/v4/projects/relinstall%2Frelctl/releases'

    Raises:
        ConfigurationError: If the identifier lacks a host or a project path
    """
    host, _, path = project_id.strip("/").partition("/")
    if not host or not path:
        raise ConfigurationError(
            f"Invalid project identifier '{project_id}': expected <host>/<namespace>/<name>"
        )
    return f"https://{host}/api/v4/projects/{encode_path_segment(path)}/releases"


def _error_message(response: requests.Response) -> str:
    """Extract the API's own error message from a response body."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in ("message", "error_description", "error"):
            if payload.get(key):
                return str(payload[key])

    return f"HTTP {response.status_code} {response.reason or ''}".strip()


class ReleaseClient:
    """
    Thin wrapper around a requests session for the releases API.

    Example:
        >>> client = ReleaseClient()
        >>> client.validate_releases_reachable("gitlab.com/relinstall/relctl")
        >>> releases = client.fetch_releases("gitlab.com/relinstall/relctl")
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 30):
        self.session = session or create_session()
        self.timeout = timeout

    def validate_releases_reachable(self, project_id: str) -> None:
        """
        Check that the releases endpoint answers with status 200.

        A HEAD response carries no body, so on failure the endpoint is
        fetched once more with GET to read the API's error payload.

        Raises:
            ReleaseFetchError: If the status is anything other than 200
        """
        url = release_list_url(project_id)
        logger.debug(f"HEAD {url}")

        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except RequestException as e:
            raise ReleaseFetchError(f"Release API unreachable at {url}: {e}") from e

        if response.status_code == 200:
            return

        try:
            detail = _error_message(
                self.session.get(url, timeout=self.timeout, allow_redirects=True)
            )
        except RequestException:
            detail = f"HTTP {response.status_code}"

        raise ReleaseFetchError(f"Cannot access releases for {project_id}: {detail}")

    def fetch_releases(self, project_id: str) -> List[Release]:
        """
        Fetch the project's releases as returned by the API.

        Raises:
            ReleaseFetchError: On transport failure, non-200 status or an
                unexpected response body
        """
        url = release_list_url(project_id)
        logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except RequestException as e:
            raise ReleaseFetchError(f"Failed to fetch releases from {url}: {e}") from e

        if response.status_code != 200:
            raise ReleaseFetchError(
                f"Failed to fetch releases for {project_id}: {_error_message(response)}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ReleaseFetchError(f"Release API returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise ReleaseFetchError(
                f"Release API returned {type(payload).__name__}, expected a list"
            )

        return [Release.from_api(entry) for entry in payload]

    def fetch_checksum_manifest(self, release: Release, manifest_name: str) -> str:
        """
        Download the checksum manifest attached to release.

        Raises:
            ChecksumManifestNotFoundError: If release has no asset named manifest_name
            ReleaseFetchError: If the download fails
        """
        try:
            asset = select_asset(release, name_equals(manifest_name))
        except AssetNotFoundError:
            raise ChecksumManifestNotFoundError(
                f"Release {release.tag_name} has no {manifest_name} asset"
            ) from None

        return fetch_text(asset.url, session=self.session, timeout=self.timeout)

    def download_asset(
        self,
        asset: AssetLink,
        destination: Path,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ) -> Path:
        """
        Stream asset into destination.

        Raises:
            DownloadError: If the download fails
        """
        return download_file(
            asset.url,
            destination,
            session=self.session,
            progress_callback=progress_callback,
            timeout=self.timeout,
        )

