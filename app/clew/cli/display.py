"""Shared Rich display functions for diffs, commands and sync results.

Provides the table builders and summary printers used by the ``diff``
and ``sync`` commands.
"""

from rich.markup import escape
from rich.table import Table

from clew.core.diff import Action, DiffResult
from clew.core.git import GitCheckResult
from clew.models.operation import Command, SyncResult
from clew.utils.formatting import console, create_table, err_console, print_success

# Action -> (symbol, style, note)
_ACTION_DISPLAY: dict[Action, tuple[str, str, str]] = {
    Action.ADD: ("+", "added", "Not configured"),
    Action.UPDATE: ("~", "changed", "Differs from Clewfile"),
    Action.ENABLE: ("+", "added", "Will be enabled"),
    Action.DISABLE: ("-", "warning", "Will be disabled"),
    Action.REMOVE: ("?", "removed", "Not in Clewfile (left in place)"),
    Action.SKIP_GIT: ("!", "skipped", "Uncommitted changes"),
}


def _row(kind: str, name: str, action: Action, note: str | None = None) -> tuple[str, ...]:
    symbol, style, default_note = _ACTION_DISPLAY[action]
    return (
        f"[{style}]{symbol}[/{style}]",
        kind,
        f"[{style}]{escape(name)}[/{style}]",
        f"[{style}]{action.value}[/{style}]",
        f"[muted]{escape(note or default_note)}[/muted]",
    )


def create_diff_table(result: DiffResult) -> Table:
    """Create a table listing every entry that is not in sync.

    Args:
        result: Diff to display.

    Returns:
        Rich Table with one row per non-NONE entry.
    """
    table = create_table(title="Clewfile Differences")
    table.add_column("", width=2, justify="center")
    table.add_column("Type", width=7)
    table.add_column("Name", no_wrap=True)
    table.add_column("Action", width=9)
    table.add_column("Note")

    for source in result.sources:
        if source.action != Action.NONE:
            table.add_row(*_row("source", source.name, source.action))
    for plugin in result.plugins:
        if plugin.action != Action.NONE:
            table.add_row(*_row("plugin", plugin.name, plugin.action))
    for server in result.mcp_servers:
        if server.action == Action.NONE:
            continue
        note = None
        if server.action == Action.ADD and server.requires_oauth:
            note = "Requires OAuth (manual setup via /mcp)"
        table.add_row(*_row("mcp", server.name, server.action, note))

    return table


def print_diff_summary(result: DiffResult) -> None:
    """Print the add/update/attention counts of a diff."""
    add, update, _remove, attention = result.summary()
    parts: list[str] = []
    if add:
        parts.append(f"[added]{add} to add[/added]")
    if update:
        parts.append(f"[changed]{update} to update[/changed]")
    if attention:
        parts.append(f"[warning]{attention} need attention[/warning]")

    if parts:
        console.print(f"\nSummary: {', '.join(parts)}")
    else:
        console.print("\n[muted]No differences found.[/muted]")


def print_commands(commands: list[Command]) -> None:
    """Print rendered commands, dimming the informational ones."""
    if not commands:
        console.print("[muted]# No commands needed - already in sync[/muted]")
        return
    for command in commands:
        console.print(f"[muted]# {escape(command.description)}[/muted]")
        style = "muted" if command.is_comment else "text"
        console.print(f"[{style}]{escape(command.command)}[/{style}]", soft_wrap=True)


def print_git_check(check: GitCheckResult, verbose: bool = False) -> None:
    """Print git gate warnings, and info messages when verbose."""
    if check.warnings:
        err_console.print("\n[warning]Git status warnings:[/warning]")
        for warning in check.warnings:
            err_console.print(f"  - {escape(warning)}")
    if verbose and check.info:
        err_console.print("\n[info]Git status info:[/info]")
        for info in check.info:
            err_console.print(f"  - {escape(info)}")


def create_results_table(result: SyncResult) -> Table:
    """Create a table with one row per attempted operation.

    Args:
        result: Sync result to display.

    Returns:
        Rich Table with status, type, name, action and command/error columns.
    """
    table = create_table(title="Results")
    table.add_column("Status", width=6, justify="center")
    table.add_column("Type", width=7)
    table.add_column("Name", no_wrap=True)
    table.add_column("Action", width=8)
    table.add_column("Details")

    for op in result.operations:
        if op.skipped:
            status = "[skipped]SKIP[/skipped]"
            details = op.description
        elif op.success:
            status = "[success]OK[/success]"
            details = op.command
        else:
            status = "[error]FAIL[/error]"
            details = op.error or "Unknown error"
        table.add_row(
            status, op.type, escape(op.name), op.action, f"[muted]{escape(details)}[/muted]"
        )

    return table


def print_attention(result: SyncResult) -> None:
    """Print the items surfaced for manual attention."""
    if not result.attention:
        return
    console.print("\n[warning]Items needing attention:[/warning]")
    for item in result.attention:
        console.print(f"  - {escape(item)}")


def print_sync_result(result: SyncResult) -> None:
    """Print the full sync report: results table, summary, attention, errors."""
    if result.operations:
        console.print(create_results_table(result))

    console.print("\nSummary:")
    console.print(f"  Installed: {result.installed}")
    console.print(f"  Updated: {result.updated}")
    console.print(f"  Failed: {result.failed}")
    if result.skipped:
        console.print(f"  Skipped: {result.skipped}")

    print_attention(result)

    if result.errors:
        err_console.print("\n[error]Errors:[/error]")
        for error in result.errors:
            err_console.print(f"  - {escape(str(error))}")
    elif not result.operations and not result.attention:
        print_success("Nothing to do.")


def print_sync_result_short(result: SyncResult) -> None:
    """Print one line per operation followed by a one-line summary."""
    for op in result.operations:
        label = f"{escape(op.name)} ({op.type} {op.action})"
        if op.success:
            console.print(f"[success]✓[/success] {label}")
        else:
            console.print(f"[error]✗[/error] {label}")
            if op.error:
                console.print(f"  Error: {escape(op.error)}")

    parts = [f"{result.installed} installed", f"{result.updated} updated"]
    if result.failed:
        parts.append(f"{result.failed} failed")
    console.print(f"Summary: {', '.join(parts)}")

    print_attention(result)
