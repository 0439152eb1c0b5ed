"""Readers for observed Claude Code state."""

from clew.readers.base import StateReader, StateReadError
from clew.readers.filesystem import FilesystemReader

__all__ = ["FilesystemReader", "StateReadError", "StateReader"]
