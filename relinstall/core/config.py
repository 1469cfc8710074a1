"""
Installer configuration.

The values that drive an installer run live in a single immutable
InstallerConfig passed explicitly to the Installer. Values are layered:

1. Built-in defaults
2. Optional YAML file (--config or RELINSTALL_CONFIG)
3. Environment overrides (RELINSTALL_BIN_DIR, RELINSTALL_PROJECT)

Usage:
    from relinstall.core.config import load_config

    config = load_config()
    print(config.target_path)
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from relinstall.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_ID = "gitlab.com/relinstall/relctl"
DEFAULT_DESTINATION = Path("/usr/local/bin")

ENV_DESTINATION = "RELINSTALL_BIN_DIR"
ENV_PROJECT = "RELINSTALL_PROJECT"
ENV_CONFIG = "RELINSTALL_CONFIG"


@dataclass(frozen=True)
class InstallerConfig:
    """
    Immutable settings for one installer run.

    Attributes:
        project_id: Project identifier, "<host>/<namespace>/<name>"
        destination: Directory the binary is installed into
        supported_os: Operating system strings the installer accepts
        os_family: OS label used in artifact file names (e.g. "Linux")
        checksum_filename: Exact name of the checksum manifest asset
        required_tools: External executables that must be on PATH
        timeout: Network timeout in seconds
    """

    project_id: str = DEFAULT_PROJECT_ID
    destination: Path = DEFAULT_DESTINATION
    supported_os: Tuple[str, ...] = ("GNU/Linux",)
    os_family: str = "Linux"
    checksum_filename: str = "checksums.txt"
    required_tools: Tuple[str, ...] = field(default_factory=tuple)
    timeout: int = 30

    @property
    def short_name(self) -> str:
        """Last path segment of the project identifier (the binary name)."""
        return self.project_id.rstrip("/").rsplit("/", 1)[-1]

    @property
    def target_path(self) -> Path:
        """Final location of the installed binary."""
        return Path(self.destination) / self.short_name


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw YAML/env value into the type expected by InstallerConfig."""
    if key == "destination":
        return Path(os.path.expanduser(str(value)))
    if key in ("supported_os", "required_tools"):
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, (list, tuple)):
            raise ConfigurationError(f"'{key}' must be a list of strings")
        return tuple(str(v) for v in value)
    if key == "timeout":
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"'timeout' must be an integer, got {value!r}")
    return str(value)


def load_yaml_config(config_file: Path) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_file}")

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration in {config_file} must be a mapping")
    return config


def load_config(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> InstallerConfig:
    """
    Build an InstallerConfig from defaults, an optional YAML file and the environment.

    Args:
        config_file: Optional YAML file; falls back to $RELINSTALL_CONFIG
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved InstallerConfig

    Raises:
        ConfigurationError: If the file is invalid or has unknown keys
    """
    env = os.environ if environ is None else environ
    config = InstallerConfig()

    if config_file is None and env.get(ENV_CONFIG):
        config_file = Path(env[ENV_CONFIG])

    if config_file is not None:
        raw = load_yaml_config(Path(config_file))
        known = {f.name for f in fields(InstallerConfig)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys in {config_file}: {', '.join(unknown)}"
            )
        config = replace(config, **{k: _coerce(k, v) for k, v in raw.items()})

    if env.get(ENV_DESTINATION):
        logger.debug(f"Destination overridden by {ENV_DESTINATION}")
        config = replace(config, destination=_coerce("destination", env[ENV_DESTINATION]))
    if env.get(ENV_PROJECT):
        config = replace(config, project_id=env[ENV_PROJECT])

    return config
