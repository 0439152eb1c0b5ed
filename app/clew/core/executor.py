"""Sync execution.

Applies a DiffResult by invoking the host CLI through a CommandRunner.
Each entry is processed independently: a failure is recorded and the run
continues with the next entry. Sources are processed before plugins, and
plugins before MCP servers, because later kinds may depend on earlier ones.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from clew.core.commands import (
    mcp_add_args,
    plugin_install_args,
    plugin_toggle_args,
    render_args,
    source_add_args,
)
from clew.core.diff import Action, DiffResult
from clew.core.local_plugins import (
    FileEditor,
    LocalFileEditor,
    LocalPluginError,
    LocalPluginInstaller,
)
from clew.models.operation import Operation, SyncResult
from clew.utils.shell import CommandRunner, SubprocessRunner

if TYPE_CHECKING:
    from clew.core.diff import MCPServerDiff, PluginDiff, SourceDiff

logger = logging.getLogger(__name__)

# Default per-command timeout in seconds
DEFAULT_TIMEOUT = 120.0


class SyncError(Exception):
    """Raised when a sync cannot begin, and recorded for failed operations."""


@dataclass(frozen=True, slots=True)
class SyncOptions:
    """Options controlling a sync run.

    Attributes:
        strict: Treat any failure as fatal for the exit code.
        verbose: Show detailed output.
        quiet: Suppress non-essential output.
        short: One line per item output.
        timeout: Seconds each external command may run.
    """

    strict: bool = False
    verbose: bool = False
    quiet: bool = False
    short: bool = False
    timeout: float | None = DEFAULT_TIMEOUT


class Syncer:
    """Executes the actionable entries of a DiffResult.

    Removals and git-blocked entries are never executed; they are surfaced
    through ``SyncResult.attention``.

    Example:
        >>> syncer = Syncer()
        >>> result = syncer.execute(diff_result, SyncOptions(timeout=60))
        >>> if result.has_failures:
        ...     print(result.errors)
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        editor: FileEditor | None = None,
        claude_dir: Path | None = None,
    ) -> None:
        """Initialize the Syncer.

        Args:
            runner: Command runner. Defaults to a subprocess runner.
            editor: File editor for local plugin installs.
            claude_dir: Claude Code directory. Defaults to ~/.claude.
        """
        self.runner: CommandRunner = runner if runner is not None else SubprocessRunner()
        self.installer = LocalPluginInstaller(
            editor if editor is not None else LocalFileEditor(),
            self.runner,
            claude_dir,
        )

    def execute(self, result: DiffResult | None, options: SyncOptions | None = None) -> SyncResult:
        """Apply a diff result.

        Args:
            result: Diff to apply.
            options: Sync options. Defaults to SyncOptions().

        Returns:
            SyncResult with counters, attention items, errors and the
            operation log in execution order.

        Raises:
            SyncError: If there is no diff result to execute.
        """
        if result is None:
            msg = "No diff result to execute"
            raise SyncError(msg)
        options = options or SyncOptions()
        outcome = SyncResult()

        for source in result.sources:
            self._sync_source(source, options, outcome)
        for plugin in result.plugins:
            self._sync_plugin(plugin, options, outcome)
        for server in result.mcp_servers:
            self._sync_mcp_server(server, options, outcome)

        logger.debug(
            "Sync finished: %d installed, %d updated, %d skipped, %d failed",
            outcome.installed,
            outcome.updated,
            outcome.skipped,
            outcome.failed,
        )
        return outcome

    def _sync_source(self, entry: SourceDiff, options: SyncOptions, outcome: SyncResult) -> None:
        if entry.action == Action.REMOVE:
            outcome.attention.append(f"source: {entry.name}")
        elif entry.action == Action.SKIP_GIT:
            _skip_git(outcome, "source", entry.name)
        elif entry.action in (Action.ADD, Action.UPDATE):
            op = self._add_source(entry, options)
            if op.skipped:
                outcome.operations.append(op)
                outcome.skipped += 1
            else:
                _record(outcome, op, installed=entry.action == Action.ADD)

    def _sync_plugin(self, entry: PluginDiff, options: SyncOptions, outcome: SyncResult) -> None:
        if entry.action == Action.REMOVE:
            outcome.attention.append(f"plugin: {entry.name}")
        elif entry.action == Action.SKIP_GIT:
            _skip_git(outcome, "plugin", entry.name)
        elif entry.action == Action.ADD:
            if entry.desired is not None and entry.desired.is_local:
                op = self._install_local_plugin(entry, options)
            else:
                op = self._install_plugin(entry, options)
            _record(outcome, op, installed=True)
        elif entry.action == Action.UPDATE:
            _record(outcome, self._install_plugin(entry, options), installed=False)
        elif entry.action in (Action.ENABLE, Action.DISABLE):
            _record(outcome, self._toggle_plugin(entry, options), installed=False)

    def _sync_mcp_server(
        self, entry: MCPServerDiff, options: SyncOptions, outcome: SyncResult
    ) -> None:
        if entry.action == Action.REMOVE:
            outcome.attention.append(f"mcp: {entry.name}")
        elif entry.action == Action.SKIP_GIT:
            _skip_git(outcome, "mcp", entry.name)
        elif entry.action == Action.UPDATE:
            # Reconfiguring means removing the live server first, left to the operator
            outcome.attention.append(f"mcp (update): {entry.name}")
            outcome.skipped += 1
        elif entry.action == Action.ADD:
            if entry.requires_oauth:
                outcome.attention.append(f"mcp (oauth): {entry.name}")
                outcome.skipped += 1
                return
            _record(outcome, self._add_mcp_server(entry, options), installed=True)

    def _add_source(self, entry: SourceDiff, options: SyncOptions) -> Operation:
        op = Operation(type="source", name=entry.name, action=entry.action.value)
        if entry.desired is None:
            op.error = f"no desired state for source {entry.name}"
            return op

        args = source_add_args(entry.desired)
        if args is None:
            op.success = True
            op.skipped = True
            op.description = (
                f"Skip non-marketplace source (kind={entry.desired.kind.value}): {entry.name}"
            )
            logger.debug(op.description)
            return op

        location = entry.desired.source
        op.description = f"Add {location.type.value} source: {args[-1]}"
        return self._run(op, args, f"add source {entry.name}", options)

    def _install_plugin(self, entry: PluginDiff, options: SyncOptions) -> Operation:
        op = Operation(type="plugin", name=entry.name, action=entry.action.value)
        if entry.desired is None:
            op.error = f"no desired state for plugin {entry.name}"
            return op

        scope = entry.desired.scope.value if entry.desired.scope else None
        if entry.action == Action.UPDATE:
            op.description = f"Reinstall plugin with scope {scope or 'user'}: {entry.name}"
        else:
            op.description = f"Install plugin: {entry.name}"
        args = plugin_install_args(entry.name, scope)
        return self._run(op, args, f"install plugin {entry.name}", options)

    def _toggle_plugin(self, entry: PluginDiff, options: SyncOptions) -> Operation:
        verb = entry.action.value
        op = Operation(
            type="plugin",
            name=entry.name,
            action=verb,
            description=f"{verb.capitalize()} plugin: {entry.name}",
        )
        scope = entry.current.scope if entry.current else None
        args = plugin_toggle_args(entry.action, entry.name, scope)
        return self._run(op, args, f"{verb} plugin {entry.name}", options)

    def _install_local_plugin(self, entry: PluginDiff, options: SyncOptions) -> Operation:
        op = Operation(type="plugin", name=entry.name, action=entry.action.value)
        desired = entry.desired
        if desired is None or desired.source is None or not desired.source.path:
            op.error = f"local plugin {entry.name} requires source configuration"
            return op

        op.description = f"Install local plugin: {entry.name} from {desired.source.path}"
        scope = desired.scope.value if desired.scope else "user"
        try:
            install = self.installer.install(
                entry.name, desired.source.path, scope=scope, timeout=options.timeout
            )
        except LocalPluginError as e:
            op.error = f"failed to install local plugin {entry.name}: {e}"
            logger.warning(op.error)
            return op

        op.command = install.summary
        op.success = True
        return op

    def _add_mcp_server(self, entry: MCPServerDiff, options: SyncOptions) -> Operation:
        op = Operation(
            type="mcp",
            name=entry.name,
            action=entry.action.value,
            description=f"Add MCP server: {entry.name}",
        )
        if entry.desired is None:
            op.error = f"no desired state for MCP server {entry.name}"
            return op

        try:
            args = mcp_add_args(entry.name, entry.desired)
        except ValueError as e:
            op.error = str(e)
            return op

        desired = entry.desired
        if desired.transport.is_stdio:
            op.description = f"Add stdio MCP server: {entry.name} (command: {desired.command})"
        else:
            op.description = (
                f"Add {desired.transport.value} MCP server: {entry.name} (url: {desired.url})"
            )
        return self._run(op, args, f"add MCP server {entry.name}", options)

    def _run(
        self,
        op: Operation,
        args: list[str],
        what: str,
        options: SyncOptions,
    ) -> Operation:
        """Run one command and record its outcome on the operation.

        The command line is recorded before execution so that failed
        operations still show what was attempted.
        """
        op.command = render_args(args)
        logger.info("Running: %s", op.command)
        try:
            result = self.runner.run(args, timeout=options.timeout)
        except subprocess.TimeoutExpired:
            op.error = f"failed to {what}: timed out after {options.timeout}s"
        except FileNotFoundError:
            op.error = f"failed to {what}: executable not found: {args[0]}"
        except OSError as e:
            op.error = f"failed to {what}: {e}"
        else:
            if result.success:
                op.success = True
            else:
                op.error = f"failed to {what}: exit status {result.returncode}"
                if result.output:
                    op.error += f"\nOutput: {result.output}"

        if op.error:
            logger.warning(op.error)
        return op


def _record(outcome: SyncResult, op: Operation, *, installed: bool) -> None:
    outcome.operations.append(op)
    if op.success:
        if installed:
            outcome.installed += 1
        else:
            outcome.updated += 1
        return
    outcome.failed += 1
    outcome.errors.append(SyncError(op.error or f"{op.type} {op.name} failed"))


def _skip_git(outcome: SyncResult, kind: str, name: str) -> None:
    outcome.skipped += 1
    outcome.attention.append(f"{kind} (git): {name} - has uncommitted changes")
