"""
Installer orchestration.

Runs the installation as a fixed sequence of steps:

    validate environment -> resolve release -> resolve artifact ->
    resolve checksum -> acquire workspace -> download -> verify ->
    extract -> install -> report

Each step either completes or raises an InstallerError. The first error
ends the run; Installer.run() turns it into a failed InstallResult naming
the step. The temporary workspace is removed on every exit path.

Usage:
    from relinstall.core.config import load_config
    from relinstall.installer import Installer

    result = Installer(load_config()).run()
    if result:
        print(f"Installed {result.version} to {result.installed_path}")
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from relinstall.core.config import InstallerConfig
from relinstall.core.download import DownloadProgress, format_progress, local_filename
from relinstall.core.exceptions import InstallerError
from relinstall.core.filesystem import extract_archive, find_file, install_file, workspace
from relinstall.core.platform import PlatformInfo, detect_platform
from relinstall.core.preconditions import (
    assert_destination_writable,
    assert_os_supported,
    assert_tools_available,
)
from relinstall.core.verification import expected_digest, parse_checksum_manifest, verify
from relinstall.releases.client import ReleaseClient
from relinstall.releases.models import AssetLink, Release
from relinstall.releases.selector import latest, select_artifact

logger = logging.getLogger(__name__)


class InstallStep(Enum):
    """Steps of an installer run, in execution order."""

    VALIDATE_ENVIRONMENT = "validate environment"
    RESOLVE_RELEASE = "resolve release"
    RESOLVE_ARTIFACT = "resolve artifact"
    RESOLVE_CHECKSUM = "resolve checksum"
    ACQUIRE_WORKSPACE = "acquire workspace"
    DOWNLOAD = "download"
    VERIFY = "verify"
    EXTRACT = "extract"
    INSTALL = "install"
    REPORT = "report"


@dataclass(frozen=True)
class InstallResult:
    """
    Outcome of an installer run.

    On success, step is REPORT and installed_path/version are set.
    On failure, step is the step that failed and error holds the exception.
    """

    ok: bool
    step: InstallStep
    installed_path: Optional[Path] = None
    version: Optional[str] = None
    error: Optional[InstallerError] = None

    def __bool__(self) -> bool:
        return self.ok

    def __str__(self) -> str:
        if self.ok:
            return f"Installed {self.version} to {self.installed_path}"
        return f"Installation failed during {self.step.value}: {self.error}"


class Installer:
    """
    Installs the latest release of a project for the running platform.

    Args:
        config: Immutable installer settings
        client: Release API client (created from config.timeout if None)
        platform: Platform information (auto-detected if None)
    """

    def __init__(
        self,
        config: InstallerConfig,
        client: Optional[ReleaseClient] = None,
        platform: Optional[PlatformInfo] = None,
    ):
        self.config = config
        self.client = client or ReleaseClient(timeout=config.timeout)
        self.platform = platform or detect_platform()
        self._step = InstallStep.VALIDATE_ENVIRONMENT

    def run(self) -> InstallResult:
        """
        Execute every step in order.

        Filesystem errors not already mapped to an InstallerError are
        reported the same way, under the step that was running.

        Returns:
            InstallResult; installation failures never propagate
        """
        self._step = InstallStep.VALIDATE_ENVIRONMENT
        try:
            release, installed_path = self._run_steps()
        except InstallerError as e:
            logger.debug(f"Step '{self._step.value}' failed", exc_info=True)
            return InstallResult(ok=False, step=self._step, error=e)
        except OSError as e:
            logger.debug(f"Step '{self._step.value}' failed", exc_info=True)
            error = InstallerError(f"{self._step.value.capitalize()} failed: {e}")
            error.__cause__ = e
            return InstallResult(ok=False, step=self._step, error=error)

        return InstallResult(
            ok=True,
            step=InstallStep.REPORT,
            installed_path=installed_path,
            version=release.tag_name,
        )

    def _enter(self, step: InstallStep) -> None:
        self._step = step
        logger.debug(f"Step: {step.value}")

    def _run_steps(self):
        config = self.config

        self._enter(InstallStep.VALIDATE_ENVIRONMENT)
        self.validate_environment()

        self._enter(InstallStep.RESOLVE_RELEASE)
        release = self.resolve_release()

        self._enter(InstallStep.RESOLVE_ARTIFACT)
        asset = self.resolve_artifact(release)

        self._enter(InstallStep.RESOLVE_CHECKSUM)
        digest = self.resolve_checksum(release, asset)

        self._enter(InstallStep.ACQUIRE_WORKSPACE)
        with workspace() as ws:
            self._enter(InstallStep.DOWNLOAD)
            archive = self.client.download_asset(
                asset, ws / local_filename(asset.name), progress_callback=_log_progress
            )

            self._enter(InstallStep.VERIFY)
            verify(digest, archive)
            logger.info(f"Checksum verified for {asset.name}")

            self._enter(InstallStep.EXTRACT)
            extracted = extract_archive(archive, ws / "extract")

            self._enter(InstallStep.INSTALL)
            binary = find_file(extracted, config.short_name)
            installed_path = install_file(binary, config.target_path)

        self._enter(InstallStep.REPORT)
        logger.info(f"Installed {config.short_name} {release.tag_name} to {installed_path}")
        return release, installed_path

    def validate_environment(self) -> None:
        """Check destination, operating system and external tools."""
        assert_destination_writable(self.config.destination)
        assert_os_supported(self.platform.os, self.config.supported_os)
        assert_tools_available(*self.config.required_tools)

    def resolve_release(self) -> Release:
        """Confirm the releases API is reachable and pick the latest release."""
        project_id = self.config.project_id
        self.client.validate_releases_reachable(project_id)
        release = latest(self.client.fetch_releases(project_id))
        logger.info(f"Latest release of {project_id}: {release.tag_name}")
        return release

    def resolve_artifact(self, release: Release) -> AssetLink:
        """Pick the archive built for the running platform."""
        asset = select_artifact(
            release, self.config.os_family, self.platform.arch_candidates()
        )
        logger.info(f"Selected artifact {asset.name} for {self.platform.arch}")
        return asset

    def resolve_checksum(self, release: Release, asset: AssetLink) -> str:
        """Fetch the release's checksum manifest and return the asset's digest."""
        manifest = self.client.fetch_checksum_manifest(
            release, self.config.checksum_filename
        )
        return expected_digest(parse_checksum_manifest(manifest), asset.name)


def install(
    config: InstallerConfig,
    client: Optional[ReleaseClient] = None,
    platform: Optional[PlatformInfo] = None,
) -> InstallResult:
    """Run a complete installation with the given configuration."""
    return Installer(config, client=client, platform=platform).run()


def _log_progress(progress: DownloadProgress) -> None:
    logger.debug(format_progress(progress))
