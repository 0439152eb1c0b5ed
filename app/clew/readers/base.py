"""Abstract base class for state readers.

This module defines the StateReader interface that every source of
observed Claude Code configuration implements.
"""

from abc import ABC, abstractmethod

from clew.models.state import State


class StateReadError(Exception):
    """Raised when observed state exists but cannot be read or parsed."""


class StateReader(ABC):
    """Abstract base class for state readers.

    Readers report what Claude Code currently has configured. Absent
    configuration is an empty State, not an error.

    Example:
        >>> reader = FilesystemReader()
        >>> if reader.is_available():
        ...     state = reader.read()
    """

    @abstractmethod
    def read(self) -> State:
        """Collect the observed configuration.

        Returns:
            State keyed by entity name.

        Raises:
            StateReadError: If a state file exists but is unreadable or invalid.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this reader can observe anything on this system.

        Returns:
            True if the reader's data location exists.
        """
