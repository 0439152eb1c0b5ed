"""CLI commands for clew.

This package contains all subcommand implementations.
"""

from clew.cli.commands import diff, sync

__all__ = ["diff", "sync"]
