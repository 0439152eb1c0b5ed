"""Filesystem state reader.

Reads Claude Code's own JSON files to build the observed State:

- ``<claude_dir>/plugins/known_marketplaces.json``: marketplace sources
- ``<claude_dir>/plugins/repos/*``: plugin repositories cloned locally
- ``<claude_dir>/plugins/installed_plugins.json``: installed plugins
- ``<claude_dir>/settings.json``: plugin enabled flags
- ``<home>/.claude.json``: user-scope MCP servers
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from clew.core.paths import get_claude_dir, get_installed_plugins_path
from clew.models.state import MCPServerState, PluginState, SourceState, State
from clew.models.types import Scope, SourceKind, SourceType, TransportType
from clew.readers.base import StateReader, StateReadError

logger = logging.getLogger(__name__)


class FilesystemReader(StateReader):
    """StateReader backed by Claude Code's configuration files.

    Missing files contribute nothing. Files that exist but cannot be
    parsed raise StateReadError, since diffing against partial state
    would propose changes that are already in place.

    Attributes:
        claude_dir: Claude Code directory (default ~/.claude or CLAUDE_DIR).
        home: Directory holding .claude.json (default: parent of claude_dir).
    """

    def __init__(self, claude_dir: Path | None = None, home: Path | None = None) -> None:
        self.claude_dir = claude_dir if claude_dir is not None else get_claude_dir()
        self.home = home if home is not None else self.claude_dir.parent

    @property
    def plugins_dir(self) -> Path:
        """Directory holding the plugin registries."""
        return self.claude_dir / "plugins"

    def is_available(self) -> bool:
        """Check if the Claude Code directory exists."""
        return self.claude_dir.is_dir()

    def read(self) -> State:
        """Read sources, plugins and MCP servers from disk.

        Raises:
            StateReadError: If a state file exists but is invalid.
        """
        state = State()
        self._read_marketplaces(state)
        self._read_plugin_repos(state)
        self._read_plugins(state)
        self._read_settings(state)
        self._read_mcp_servers(state)
        logger.debug(
            "Observed %d sources, %d plugins, %d MCP servers",
            len(state.sources),
            len(state.plugins),
            len(state.mcp_servers),
        )
        return state

    def _read_marketplaces(self, state: State) -> None:
        data = _load_json(self.plugins_dir / "known_marketplaces.json")
        if data is None:
            return

        for name, entry in data.items():
            if not isinstance(entry, dict):
                continue
            location = entry.get("source") or {}
            if not isinstance(location, dict):
                logger.warning("Skipping marketplace %s: malformed source entry", name)
                continue
            source_type = location.get("source", "")
            state.sources[name] = SourceState(
                name=name,
                kind=SourceKind.MARKETPLACE.value,
                type=source_type,
                url=location.get("repo") if source_type == SourceType.GITHUB.value else None,
                path=location.get("path") if source_type == SourceType.LOCAL.value else None,
                ref=location.get("ref"),
                install_location=entry.get("installLocation"),
                last_updated=entry.get("lastUpdated"),
            )

    def _read_plugin_repos(self, state: State) -> None:
        repos_dir = self.plugins_dir / "repos"
        if not repos_dir.is_dir():
            return

        for repo in sorted(repos_dir.iterdir()):
            if not repo.is_dir():
                continue
            state.sources[repo.name] = SourceState(
                name=repo.name,
                kind=SourceKind.PLUGIN.value,
                type=SourceType.LOCAL.value,
                path=str(repo),
                install_location=str(repo),
            )

    def _read_plugins(self, state: State) -> None:
        data = _load_json(get_installed_plugins_path(self.claude_dir))
        if data is None:
            return

        plugins = data.get("plugins")
        if not isinstance(plugins, dict):
            return

        repos_dir = str(self.plugins_dir / "repos")
        for full_name, installs in plugins.items():
            # The first entry is the most recent install
            if not isinstance(installs, list) or not installs:
                continue
            install = installs[0]
            if not isinstance(install, dict):
                continue

            alias = full_name.split("@", 1)[1] if "@" in full_name else ""
            install_path = install.get("installPath") or ""
            if not isinstance(install_path, str):
                logger.warning("Skipping plugin %s: malformed installPath", full_name)
                continue
            is_local = install_path.startswith(repos_dir) or (not alias and bool(install_path))
            state.plugins[full_name] = PluginState(
                name=full_name,
                source=alias,
                scope=install.get("scope") or Scope.USER.value,
                enabled=True,
                version=install.get("version"),
                install_path=install_path or None,
                is_local=is_local,
                git_commit_sha=install.get("gitCommitSha"),
            )

    def _read_settings(self, state: State) -> None:
        data = _load_json(self.claude_dir / "settings.json")
        if data is None:
            return

        enabled_plugins = data.get("enabledPlugins")
        if not isinstance(enabled_plugins, dict):
            return

        for name, enabled in enabled_plugins.items():
            plugin = state.plugins.get(name)
            if plugin is not None:
                state.plugins[name] = replace(plugin, enabled=bool(enabled))

    def _read_mcp_servers(self, state: State) -> None:
        data = _load_json(self.home / ".claude.json")
        if data is None:
            return

        # User-scope servers live at the top level; older files keep them
        # under the home directory's project entry.
        servers: dict[str, Any] = {}
        projects = data.get("projects")
        if isinstance(projects, dict):
            home_project = projects.get(str(self.home))
            if isinstance(home_project, dict) and isinstance(home_project.get("mcpServers"), dict):
                servers.update(home_project["mcpServers"])
        if isinstance(data.get("mcpServers"), dict):
            servers.update(data["mcpServers"])

        for name, server in servers.items():
            if not isinstance(server, dict):
                continue
            state.mcp_servers[name] = MCPServerState(
                name=name,
                transport=_server_transport(server),
                command=server.get("command"),
                args=tuple(str(arg) for arg in server.get("args") or ()),
                url=server.get("url"),
                scope=Scope.USER.value,
            )


def _server_transport(server: dict[str, Any]) -> str:
    transport = server.get("transport") or server.get("type")
    if transport:
        return str(transport).lower()
    return TransportType.STDIO.value if server.get("command") else TransportType.HTTP.value


def _load_json(path: Path) -> dict[str, Any] | None:
    """Load a JSON object from a state file.

    Returns:
        Parsed object, or None if the file does not exist.

    Raises:
        StateReadError: If the file cannot be read or is not a JSON object.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("State file %s not found", path)
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise StateReadError(f"Failed to read {path}: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise StateReadError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise StateReadError(f"Unexpected structure in {path}: expected a JSON object")
    return data
