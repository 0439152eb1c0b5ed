"""CLI package for clew.

This package contains the Typer application and all subcommands.
"""

from clew.cli.main import app

__all__ = ["app"]
