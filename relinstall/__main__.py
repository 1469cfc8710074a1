"""
Entry point for running relinstall as a module.

Usage: python -m relinstall [--verbose] [--quiet] [--config PATH]
"""

from relinstall.cli.parser import main

if __name__ == "__main__":
    main()
