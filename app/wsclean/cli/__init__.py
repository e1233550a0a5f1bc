"""CLI package for wsclean.

This package contains the Typer application and all subcommands.
"""

from wsclean.cli.main import app

__all__ = ["app"]
