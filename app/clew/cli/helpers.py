"""Helpers shared by the CLI commands.

Loading failures are reported with Rich and converted to ``typer.Exit``.
"""

import logging
from pathlib import Path

import typer
from rich.logging import RichHandler

from clew.core.clewfile import (
    ClewfileError,
    ClewfileNotFoundError,
    find_clewfile,
    load_clewfile,
)
from clew.models.clewfile import Clewfile
from clew.models.state import State
from clew.readers.base import StateReadError
from clew.readers.filesystem import FilesystemReader
from clew.utils.formatting import err_console, print_error, print_info

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG level.
        quiet: Only log errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)],
    )
    logging.getLogger("clew").setLevel(level)


def load_clewfile_or_exit(config: Path | None) -> Clewfile:
    """Find and load the Clewfile, exiting with code 1 on failure."""
    try:
        path = find_clewfile(config)
    except ClewfileNotFoundError as e:
        print_error(str(e))
        print_info("Create a Clewfile in ~/.claude/ or pass --config PATH.")
        raise typer.Exit(code=1) from e

    try:
        clewfile = load_clewfile(path)
    except ClewfileError as e:
        print_error(f"Failed to load Clewfile: {e}")
        raise typer.Exit(code=1) from e

    logger.debug("Loaded Clewfile from %s", path)
    return clewfile


def read_state_or_exit(reader: FilesystemReader | None = None) -> State:
    """Read the observed state, exiting with code 1 on failure."""
    reader = reader or FilesystemReader()
    try:
        return reader.read()
    except StateReadError as e:
        print_error(f"Error reading current state: {e}")
        raise typer.Exit(code=1) from e
