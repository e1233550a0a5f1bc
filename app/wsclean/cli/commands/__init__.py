"""CLI commands for wsclean.

This package contains all subcommand implementations.
"""

from wsclean.cli.commands import config, run

__all__ = ["config", "run"]
