"""Command rendering for diff results.

Pure business logic for turning a DiffResult into the ordered Claude Code
CLI commands that would reconcile it. The argv builders are shared with
the sync executor so that the commands shown by ``--show-commands`` are
exactly the commands ``sync`` runs.
"""

from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from clew.core.diff import Action, DiffResult
from clew.models.operation import Command
from clew.models.types import SourceKind, SourceType, is_default_scope

if TYPE_CHECKING:
    from clew.models.clewfile import MCPServer, Source

# Host CLI executable
CLAUDE_BIN = "claude"


def source_add_args(source: Source) -> list[str] | None:
    """Build the argv registering a marketplace source.

    Args:
        source: Desired source.

    Returns:
        Command arguments, or None if the source kind cannot be added
        through the CLI (only marketplaces can).
    """
    if source.kind != SourceKind.MARKETPLACE:
        return None
    location = source.source
    target = location.url if location.type == SourceType.GITHUB else location.path
    return [CLAUDE_BIN, "plugin", "marketplace", "add", target or ""]


def plugin_install_args(name: str, scope: str | None) -> list[str]:
    """Build the argv installing a plugin, with a scope flag if non-default."""
    args = [CLAUDE_BIN, "plugin", "install", name]
    if not is_default_scope(scope):
        args.extend(["--scope", str(scope)])
    return args


def plugin_toggle_args(action: Action, name: str, scope: str | None) -> list[str]:
    """Build the argv enabling or disabling an installed plugin.

    Args:
        action: ENABLE or DISABLE.
        name: Full plugin name.
        scope: Scope the plugin is currently installed in.

    Raises:
        ValueError: If the action is not ENABLE or DISABLE.
    """
    if action not in (Action.ENABLE, Action.DISABLE):
        msg = f"unexpected action for plugin state update: {action.value}"
        raise ValueError(msg)
    args = [CLAUDE_BIN, "plugin", action.value, name]
    if not is_default_scope(scope):
        args.extend(["--scope", str(scope)])
    return args


def mcp_add_args(name: str, server: MCPServer) -> list[str]:
    """Build the argv adding an MCP server.

    stdio servers put the command after a "--" separator so its own flags
    are not parsed by the host CLI.

    Raises:
        ValueError: If a stdio server has no command or an HTTP-based
            server has no URL.
    """
    args = [CLAUDE_BIN, "mcp", "add", "--transport", server.transport.value]
    if server.scope is not None and not is_default_scope(server.scope.value):
        args.extend(["--scope", server.scope.value])
    for key, value in server.env.items():
        args.extend(["--env", f"{key}={value}"])
    for key, value in server.headers.items():
        args.extend(["--header", f"{key}: {value}"])
    args.append(name)

    if server.transport.is_stdio:
        if not server.command:
            msg = f"stdio MCP server {name} requires a command"
            raise ValueError(msg)
        args.extend(["--", server.command, *server.args])
    else:
        if not server.url:
            msg = f"{server.transport.value} MCP server {name} requires a URL"
            raise ValueError(msg)
        args.append(server.url)
    return args


def render_args(args: list[str]) -> str:
    """Render argv as a copy-pasteable shell command."""
    return shlex.join(args)


def generate_commands(result: DiffResult) -> list[Command]:
    """Render a diff result as ordered CLI commands.

    Sources come first because plugins may depend on them, then plugins,
    then MCP servers. Removals, OAuth setups and MCP reconfigurations are
    rendered as "#" comments: they are shown, never executed.

    The function has no side effects; the same DiffResult always yields
    the same commands.

    Args:
        result: Diff to render.

    Returns:
        List of Command objects in execution order.
    """
    commands: list[Command] = []

    # 1. Sources
    for source in result.sources:
        if source.action not in (Action.ADD, Action.UPDATE) or source.desired is None:
            continue
        args = source_add_args(source.desired)
        if args is None:
            continue
        verb = "Add" if source.action == Action.ADD else "Update"
        commands.append(
            Command(command=render_args(args), description=f"{verb} source: {source.name}")
        )

    # 2. Plugins
    for plugin in result.plugins:
        if plugin.action == Action.ADD and plugin.desired is not None:
            scope = plugin.desired.scope.value if plugin.desired.scope else None
            commands.append(
                Command(
                    command=render_args(plugin_install_args(plugin.name, scope)),
                    description=f"Install plugin: {plugin.name}",
                )
            )
        elif plugin.action == Action.UPDATE and plugin.desired is not None:
            scope = plugin.desired.scope.value if plugin.desired.scope else None
            commands.append(
                Command(
                    command=render_args(plugin_install_args(plugin.name, scope)),
                    description=f"Reinstall plugin with scope {scope or 'user'}: {plugin.name}",
                )
            )
        elif plugin.action in (Action.ENABLE, Action.DISABLE):
            scope = plugin.current.scope if plugin.current else None
            verb = "Enable" if plugin.action == Action.ENABLE else "Disable"
            commands.append(
                Command(
                    command=render_args(plugin_toggle_args(plugin.action, plugin.name, scope)),
                    description=f"{verb} plugin: {plugin.name}",
                )
            )
        elif plugin.action == Action.REMOVE:
            commands.append(
                Command(
                    command=f"# {CLAUDE_BIN} plugin uninstall {plugin.name}",
                    description=f"Plugin not in Clewfile: {plugin.name}",
                )
            )

    # 3. MCP servers
    for server in result.mcp_servers:
        if server.action == Action.ADD:
            if server.requires_oauth:
                commands.append(
                    Command(
                        command=f"# Manual setup required: {CLAUDE_BIN} mcp add {server.name}",
                        description=(
                            f"MCP server {server.name} requires OAuth setup (use /mcp in Claude)"
                        ),
                    )
                )
            elif server.desired is not None:
                commands.append(
                    Command(
                        command=render_args(mcp_add_args(server.name, server.desired)),
                        description=f"Add MCP server: {server.name}",
                    )
                )
        elif server.action == Action.UPDATE:
            commands.append(
                Command(
                    command=f"# Manual update required: {CLAUDE_BIN} mcp remove {server.name}",
                    description=f"MCP server {server.name} differs from Clewfile, re-add it",
                )
            )
        elif server.action == Action.REMOVE:
            commands.append(
                Command(
                    command=f"# {CLAUDE_BIN} mcp remove {server.name}",
                    description=f"MCP server not in Clewfile: {server.name}",
                )
            )

    return commands


def format_commands(commands: list[Command], include_comments: bool = True) -> str:
    """Format commands as a shell script.

    Args:
        commands: Commands to format.
        include_comments: Precede each command with its description.

    Returns:
        Script text, one command per line.
    """
    lines: list[str] = []
    for command in commands:
        if include_comments:
            lines.append(f"# {command.description}")
        lines.append(command.command)
        if include_comments:
            lines.append("")
    return "\n".join(lines) + ("\n" if lines else "")
