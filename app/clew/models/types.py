"""Enumerated configuration values.

Centralizes the string enums shared by the Clewfile models, the state
readers and the reconciliation core.
"""

from enum import Enum


class SourceType(str, Enum):
    """How a source is accessed."""

    GITHUB = "github"
    LOCAL = "local"


class SourceKind(str, Enum):
    """What a source provides.

    Attributes:
        MARKETPLACE: A catalog of plugins registered with the host CLI.
        PLUGIN: A single plugin repository.
        LOCAL: A plugin checked out on the local filesystem.
    """

    MARKETPLACE = "marketplace"
    PLUGIN = "plugin"
    LOCAL = "local"


class Scope(str, Enum):
    """Installation scope for plugins and MCP servers."""

    USER = "user"
    PROJECT = "project"


# Scope applied by the host CLI when none is given
DEFAULT_SCOPE = Scope.USER


def is_default_scope(scope: str | None) -> bool:
    """Check whether a scope value is empty or the default scope."""
    return not scope or scope == DEFAULT_SCOPE.value


class TransportType(str, Enum):
    """MCP server transport protocol."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"

    @property
    def is_stdio(self) -> bool:
        """Check if the transport is command based."""
        return self == TransportType.STDIO

    @property
    def is_http_based(self) -> bool:
        """Check if the transport talks to a URL (HTTP or SSE)."""
        return self in (TransportType.HTTP, TransportType.SSE)


def parse_transport(value: str) -> TransportType | None:
    """Parse a transport string, returning None for unknown values.

    Args:
        value: Transport name as written in config or state files.

    Returns:
        Matching TransportType, or None if the value is not recognized.
    """
    try:
        return TransportType(value.lower())
    except ValueError:
        return None
