"""
relinstall CLI argument parser.

This module implements the command-line interface using argparse. The
installer takes no required arguments; everything is driven by
configuration and the environment.
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from relinstall import __version__
from relinstall.cli.utils import configure_logging
from relinstall.core.config import ENV_DESTINATION, ENV_PROJECT, load_config
from relinstall.core.exceptions import InstallerError
from relinstall.installer import Installer

logger = logging.getLogger(__name__)


class CLI:
    """relinstall command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="relinstall",
            description="Install the latest release binary for this machine",
            epilog=(
                f"Environment: {ENV_DESTINATION} overrides the installation "
                f"directory, {ENV_PROJECT} the project identifier."
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"relinstall {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to YAML configuration file",
        )

        return parser

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run the installer.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, 1 for failure, 130 if interrupted)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        try:
            config = load_config(parsed_args.config)
            result = Installer(config).run()
        except InstallerError as e:
            logger.error(str(e))
            return 1
        except KeyboardInterrupt:
            logger.error("Installation cancelled by user")
            return 130  # Standard exit code for SIGINT

        if not result:
            logger.error(str(result.error))
            return 1

        return 0

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        configure_logging(level=level, fmt=format_str)


def _handle_sigterm(signum, frame):
    """Turn SIGTERM into SystemExit so cleanup handlers run."""
    raise SystemExit(128 + signum)


def main():
    """Main entry point for CLI."""
    signal.signal(signal.SIGTERM, _handle_sigterm)

    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
