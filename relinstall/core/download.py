"""
Network download helpers with progress tracking.

This module provides the blocking HTTP primitives the installer needs:
- Streaming file downloads with progress reporting (bytes, percentage, speed, ETA)
- Small text downloads (checksum manifests)

Requests are never retried; a single network failure is fatal to the run.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from relinstall import __version__
from relinstall.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

USER_AGENT = f"relinstall/{__version__}"
CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def create_session() -> requests.Session:
    """Create an HTTP session carrying the installer's User-Agent."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


def fetch_text(
    url: str, session: Optional[requests.Session] = None, timeout: int = 30
) -> str:
    """
    Download a small text document.

    Raises:
        DownloadError: On transport failure or a non-2xx status
    """
    session = session or create_session()
    logger.debug(f"Fetching {url}")

    try:
        response = session.get(url, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadError(f"Failed to fetch {url}: {e}") from e

    return response.text


def local_filename(name: str) -> str:
    """
    Reduce a remote file name to a bare name safe to join onto a directory.

    Example:
        >>> local_filename("../relctl_Linux_x86_64.tar.gz")
        'relctl_Linux_x86_64.tar.gz'

    Raises:
        DownloadError: If nothing usable remains
    """
    basename = PurePosixPath(name).name
    if basename in ("", ".", ".."):
        raise DownloadError(f"Refusing to download file with unsafe name {name!r}")
    return basename


def download_file(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = 30,
) -> Path:
    """
    Stream a file from URL to destination.

    Args:
        url: URL to download from
        destination: Local path to save file
        session: Optional requests session (a fresh one is created if None)
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If the request fails, returns a non-2xx status or
            the file cannot be written
        ValueError: If URL or destination is empty

    Example:
        >>> download_file(
        ...     "https://example.com/relctl_Linux_x86_64.tar.gz",
        ...     Path("/tmp/ws/relctl_Linux_x86_64.tar.gz"),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    session = session or create_session()

    logger.info(f"Downloading {url}")

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        response = session.get(url, stream=True, timeout=timeout, allow_redirects=True)
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                # Report progress (max once per 0.5 seconds to avoid spam)
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    progress_callback(
                        _progress(downloaded, total_size, current_time - start_time)
                    )
                    last_progress_time = current_time

    except RequestException as e:
        _discard(destination)
        raise DownloadError(f"Download failed for {url}: {e}") from e
    except OSError as e:
        _discard(destination)
        raise DownloadError(f"Cannot write {destination}: {e}") from e

    if progress_callback and total_size == 0:
        progress_callback(_progress(downloaded, 0, time.time() - start_time))

    logger.debug(f"Download complete: {destination} ({downloaded} bytes)")
    return destination


def _discard(path: Path) -> None:
    """Remove a partially written download."""
    if path.is_file():
        path.unlink()


def _progress(downloaded: int, total_size: int, elapsed: float) -> DownloadProgress:
    speed = downloaded / elapsed if elapsed > 0 else 0
    remaining = total_size - downloaded if total_size > 0 else 0
    eta = remaining / speed if speed > 0 else 0

    return DownloadProgress(
        bytes_downloaded=downloaded,
        total_bytes=total_size if total_size > 0 else downloaded,
        percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
        speed_bps=speed,
        eta_seconds=eta,
    )


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"
