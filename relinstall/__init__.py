"""
relinstall - install the latest release binary of a GitLab-hosted project.

Discovers the newest release, picks the archive for the running machine,
verifies it against the published checksum manifest and installs the
binary into a destination directory.
"""

__version__ = "0.1.0"
