"""Observed state models.

This module defines the immutable data structures describing what is
actually configured in Claude Code, as collected by a state reader.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class SourceState:
    """A source registered with the host.

    Attributes:
        name: Source alias.
        kind: Source kind ("marketplace", "plugin" or "local").
        type: Access type ("github" or "local").
        url: Repository reference for github sources.
        path: Filesystem path for local sources.
        ref: Git ref, if one was recorded.
        install_location: Where the host cloned the source.
        last_updated: Timestamp of the last refresh, as recorded by the host.
    """

    name: str
    kind: str
    type: str
    url: str | None = None
    path: str | None = None
    ref: str | None = None
    install_location: str | None = None
    last_updated: str | None = None


@dataclass(frozen=True, slots=True)
class PluginState:
    """An installed plugin.

    Attributes:
        name: Full plugin identity ("plugin@source" or "plugin").
        source: Source alias parsed from the name, empty for local plugins.
        scope: Install scope recorded by the host.
        enabled: Whether the plugin is enabled in settings.
        version: Installed version string.
        install_path: Directory the plugin was installed into.
        is_local: True for plugins installed from a local checkout.
        git_commit_sha: Commit the plugin was installed from, if known.
    """

    name: str
    source: str = ""
    scope: str = "user"
    enabled: bool = True
    version: str | None = None
    install_path: str | None = None
    is_local: bool = False
    git_commit_sha: str | None = None


@dataclass(frozen=True, slots=True)
class MCPServerState:
    """A configured MCP server."""

    name: str
    transport: str
    command: str | None = None
    args: tuple[str, ...] = ()
    url: str | None = None
    scope: str = "user"


@dataclass(frozen=True, slots=True)
class State:
    """Complete observed configuration, keyed by entity name."""

    sources: dict[str, SourceState] = field(default_factory=dict)
    plugins: dict[str, PluginState] = field(default_factory=dict)
    mcp_servers: dict[str, MCPServerState] = field(default_factory=dict)
