"""Diff engine for comparing the Clewfile with observed state.

This module provides the DiffEngine class that performs a full outer join
between the declared configuration and what Claude Code currently has
configured, independently for sources, plugins and MCP servers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from clew.core.paths import expand_path
from clew.models.types import SourceType

if TYPE_CHECKING:
    from clew.models.clewfile import Clewfile, MCPServer, Plugin, Source
    from clew.models.operation import Command
    from clew.models.state import MCPServerState, PluginState, SourceState, State


class Action(str, Enum):
    """Outcome of reconciling a single entity.

    Attributes:
        NONE: Already matches the Clewfile.
        ADD: Declared but not present. Create it.
        UPDATE: Present but configured differently. Reconfigure it.
        ENABLE: Installed but disabled, declared enabled.
        DISABLE: Installed and enabled, declared disabled.
        REMOVE: Present but not declared. Informational only, never deleted.
        SKIP_GIT: Blocked by uncommitted changes in a local repository.
            Only assigned by the git-status gate, never by the engine.
    """

    NONE = "none"
    ADD = "add"
    UPDATE = "update"
    ENABLE = "enable"
    DISABLE = "disable"
    REMOVE = "remove"
    SKIP_GIT = "skip_git"

    @property
    def is_actionable(self) -> bool:
        """Check if this action results in a change to the host."""
        return self in (Action.ADD, Action.UPDATE, Action.ENABLE, Action.DISABLE)

    @property
    def is_informational(self) -> bool:
        """Check if this action is surfaced but never applied."""
        return self in (Action.REMOVE, Action.SKIP_GIT)


@dataclass(frozen=True, slots=True)
class SourceDiff:
    """Diff for a single source.

    ``desired`` is set unless the action is REMOVE; ``current`` is set
    unless the action is ADD.
    """

    name: str
    action: Action
    current: SourceState | None = None
    desired: Source | None = None


@dataclass(frozen=True, slots=True)
class PluginDiff:
    """Diff for a single plugin, keyed by its full "plugin@source" name."""

    name: str
    action: Action
    current: PluginState | None = None
    desired: Plugin | None = None


@dataclass(frozen=True, slots=True)
class MCPServerDiff:
    """Diff for a single MCP server.

    Attributes:
        requires_oauth: Computed once at diff time from the desired server.
            Carried unchanged through every downstream consumer.
    """

    name: str
    action: Action
    current: MCPServerState | None = None
    desired: MCPServer | None = None
    requires_oauth: bool = False


@dataclass(frozen=True, slots=True)
class DiffResult:
    """Result of comparing the Clewfile with observed state.

    Together the three tuples hold exactly one entry per distinct name
    seen in either the Clewfile or the observed state.
    """

    sources: tuple[SourceDiff, ...] = ()
    plugins: tuple[PluginDiff, ...] = ()
    mcp_servers: tuple[MCPServerDiff, ...] = ()

    def summary(self) -> tuple[int, int, int, int]:
        """Count the actions needed.

        Removals are never applied, so they are folded into the attention
        count and ``remove`` is always reported as 0. MCP additions that
        need manual OAuth setup also count as attention.

        Returns:
            Tuple of (add, update, remove, attention).
        """
        add = update = attention = 0

        for source in self.sources:
            if source.action == Action.ADD:
                add += 1
            elif source.action.is_actionable:
                update += 1
            elif source.action.is_informational:
                attention += 1

        for plugin in self.plugins:
            if plugin.action == Action.ADD:
                add += 1
            elif plugin.action.is_actionable:
                update += 1
            elif plugin.action.is_informational:
                attention += 1

        for server in self.mcp_servers:
            if server.action == Action.ADD:
                if server.requires_oauth:
                    attention += 1
                else:
                    add += 1
            elif server.action.is_actionable:
                update += 1
            elif server.action.is_informational:
                attention += 1

        return add, update, 0, attention

    @property
    def is_in_sync(self) -> bool:
        """Check if nothing needs to be applied or surfaced."""
        add, update, _remove, attention = self.summary()
        return add == 0 and update == 0 and attention == 0

    @property
    def total_changes(self) -> int:
        """Number of entries whose action is not NONE."""
        entries = (*self.sources, *self.plugins, *self.mcp_servers)
        return sum(1 for e in entries if e.action != Action.NONE)

    def generate_commands(self) -> list[Command]:
        """Render this diff as ordered CLI commands without executing them."""
        from clew.core.commands import generate_commands

        return generate_commands(self)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the diff result.
        """
        add, update, _remove, attention = self.summary()
        return {
            "in_sync": self.is_in_sync,
            "summary": {"add": add, "update": update, "attention": attention},
            "sources": [{"name": s.name, "action": s.action.value} for s in self.sources],
            "plugins": [{"name": p.name, "action": p.action.value} for p in self.plugins],
            "mcp_servers": [
                {
                    "name": m.name,
                    "action": m.action.value,
                    "requires_oauth": m.requires_oauth,
                }
                for m in self.mcp_servers
            ],
        }


# Case-insensitive substrings suggesting a server carries its own credentials
_ENV_CREDENTIAL_HINTS = ("token", "key", "auth", "secret")
_HEADER_CREDENTIAL_HINTS = ("authorization", "auth", "token")


def server_requires_oauth(server: MCPServer) -> bool:
    """Guess whether an MCP server needs interactive OAuth setup.

    This is a best-effort classification, not a security control: an
    HTTP or SSE server whose env and header keys carry no credential-like
    names is assumed to authenticate through OAuth. stdio servers never do.

    Args:
        server: The desired MCP server configuration.

    Returns:
        True if the server should be set up manually.
    """
    if not server.transport.is_http_based:
        return False

    for key in server.env:
        lowered = key.lower()
        if any(hint in lowered for hint in _ENV_CREDENTIAL_HINTS):
            return False

    for key in server.headers:
        lowered = key.lower()
        if any(hint in lowered for hint in _HEADER_CREDENTIAL_HINTS):
            return False

    return True


def _source_needs_update(desired: Source, current: SourceState) -> bool:
    location = desired.source
    if location.type.value != current.type:
        return True
    if location.type == SourceType.GITHUB and location.url != current.url:
        return True
    if location.type == SourceType.LOCAL and expand_path(location.path or "") != expand_path(
        current.path or ""
    ):
        return True
    # A ref is only compared when one is declared
    return bool(location.ref) and location.ref != current.ref


def _plugin_action(desired: Plugin, current: PluginState) -> Action:
    action = Action.NONE
    if desired.desired_enabled and not current.enabled:
        action = Action.ENABLE
    elif not desired.desired_enabled and current.enabled:
        action = Action.DISABLE

    # Scope mismatch means a reinstall, which supersedes enable/disable
    if desired.scope is not None and desired.scope.value != current.scope:
        action = Action.UPDATE
    return action


def _mcp_server_needs_update(desired: MCPServer, current: MCPServerState) -> bool:
    if desired.transport.value != current.transport:
        return True

    if desired.transport.is_stdio:
        if desired.command != current.command:
            return True
        if len(desired.args) != len(current.args):
            return True
        return any(want != have for want, have in zip(desired.args, current.args, strict=True))

    if desired.transport.is_http_based:
        return desired.url != current.url

    return False


class DiffEngine:
    """Engine for computing differences between the Clewfile and state.

    The engine is pure: it performs no I/O, and the same inputs always
    produce the same DiffResult.

    Example:
        >>> engine = DiffEngine(load_clewfile(path))
        >>> result = engine.compute_diff(FilesystemReader().read())
        >>> add, update, _, attention = result.summary()
    """

    def __init__(self, clewfile: Clewfile) -> None:
        """Initialize the DiffEngine with a Clewfile.

        Args:
            clewfile: The declared configuration.
        """
        self.clewfile = clewfile

    def compute_diff(self, state: State) -> DiffResult:
        """Compare the Clewfile against observed state.

        Args:
            state: Observed configuration.

        Returns:
            DiffResult with one entry per distinct name on either side,
            each list sorted by name.
        """
        return DiffResult(
            sources=self._diff_sources(state),
            plugins=self._diff_plugins(state),
            mcp_servers=self._diff_mcp_servers(state),
        )

    def _diff_sources(self, state: State) -> tuple[SourceDiff, ...]:
        entries: list[SourceDiff] = []
        seen: set[str] = set()

        for desired in self.clewfile.sources:
            seen.add(desired.name)
            current = state.sources.get(desired.name)
            if current is None:
                action = Action.ADD
            elif _source_needs_update(desired, current):
                action = Action.UPDATE
            else:
                action = Action.NONE
            entries.append(
                SourceDiff(name=desired.name, action=action, current=current, desired=desired)
            )

        for name, current in state.sources.items():
            if name not in seen:
                entries.append(SourceDiff(name=name, action=Action.REMOVE, current=current))

        entries.sort(key=lambda e: e.name)
        return tuple(entries)

    def _diff_plugins(self, state: State) -> tuple[PluginDiff, ...]:
        entries: list[PluginDiff] = []
        seen: set[str] = set()

        for desired in self.clewfile.plugins:
            # The name already carries its source alias ("plugin@source")
            seen.add(desired.name)
            current = state.plugins.get(desired.name)
            action = Action.ADD if current is None else _plugin_action(desired, current)
            entries.append(
                PluginDiff(name=desired.name, action=action, current=current, desired=desired)
            )

        for name, current in state.plugins.items():
            if name not in seen:
                entries.append(PluginDiff(name=name, action=Action.REMOVE, current=current))

        entries.sort(key=lambda e: e.name)
        return tuple(entries)

    def _diff_mcp_servers(self, state: State) -> tuple[MCPServerDiff, ...]:
        entries: list[MCPServerDiff] = []

        for name, desired in self.clewfile.mcp_servers.items():
            current = state.mcp_servers.get(name)
            if current is None:
                action = Action.ADD
            elif _mcp_server_needs_update(desired, current):
                action = Action.UPDATE
            else:
                action = Action.NONE
            entries.append(
                MCPServerDiff(
                    name=name,
                    action=action,
                    current=current,
                    desired=desired,
                    requires_oauth=server_requires_oauth(desired),
                )
            )

        for name, current in state.mcp_servers.items():
            if name not in self.clewfile.mcp_servers:
                entries.append(MCPServerDiff(name=name, action=Action.REMOVE, current=current))

        entries.sort(key=lambda e: e.name)
        return tuple(entries)


def compute_diff(clewfile: Clewfile, state: State) -> DiffResult:
    """Compute the diff between a Clewfile and observed state.

    Convenience wrapper around :meth:`DiffEngine.compute_diff`.
    """
    return DiffEngine(clewfile).compute_diff(state)
