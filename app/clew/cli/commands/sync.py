"""Sync command implementation.

Brings the Claude Code configuration in line with the Clewfile.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from clew.cli.display import (
    create_diff_table,
    print_commands,
    print_git_check,
    print_sync_result,
    print_sync_result_short,
)
from clew.cli.helpers import load_clewfile_or_exit, read_state_or_exit
from clew.cli.prompt import Prompter
from clew.core.commands import format_commands
from clew.core.diff import DiffEngine
from clew.core.executor import DEFAULT_TIMEOUT, SyncError, Syncer, SyncOptions
from clew.core.git import GitChecker, apply_git_gate
from clew.core.selection import filter_by_selection
from clew.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Apply the Clewfile to the Claude Code configuration.",
    invoke_without_command=True,
)

# Exit code when operations failed and --strict is set
STRICT_FAILURE_EXIT_CODE = 2


@app.callback(invoke_without_command=True)
def sync(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the Clewfile (default: search standard locations).",
        ),
    ] = None,
    show_commands: Annotated[
        bool,
        typer.Option(
            "--show-commands",
            help="Print the commands that would run, without running them.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
    interactive: Annotated[
        bool,
        typer.Option(
            "--interactive",
            "-i",
            help="Approve each change before it is applied.",
        ),
    ] = False,
    skip_git_check: Annotated[
        bool,
        typer.Option(
            "--skip-git-check",
            help="Sync local repositories even with uncommitted changes.",
        ),
    ] = False,
    short: Annotated[
        bool,
        typer.Option(
            "--short",
            help="One line per item output.",
        ),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help=f"Exit with code {STRICT_FAILURE_EXIT_CODE} if any operation fails.",
        ),
    ] = False,
    timeout: Annotated[
        float,
        typer.Option(
            "--timeout",
            min=1.0,
            help="Seconds each external command may run.",
        ),
    ] = DEFAULT_TIMEOUT,
) -> None:
    """Apply the Clewfile.

    Sources are added first, then plugins, then MCP servers. Entries that
    are configured but not declared are reported, never removed. MCP
    servers that need OAuth and local repositories with uncommitted
    changes are skipped and listed for manual attention.

    Exit codes: 0 on success, 1 if any operation failed (2 with --strict).

    Examples:
        clew sync                       # Apply all changes
        clew sync --show-commands       # Print commands only
        clew sync --interactive         # Approve each change
        clew sync --short --strict      # Compact output, CI-friendly
    """
    if ctx.invoked_subcommand is not None:
        return

    obj = ctx.obj or {}
    verbose = bool(obj.get("verbose", False))
    quiet = bool(obj.get("quiet", False))

    clewfile = load_clewfile_or_exit(config)
    state = read_state_or_exit()
    result = DiffEngine(clewfile).compute_diff(state)

    if result.is_in_sync:
        if json_output:
            console.print_json(json.dumps({"in_sync": True}))
        elif not quiet:
            print_success("Already in sync. Nothing to do.")
        return

    if show_commands:
        commands = result.generate_commands()
        if json_output:
            console.print_json(json.dumps([c.to_dict() for c in commands]))
        elif commands:
            console.print(
                format_commands(commands),
                markup=False,
                highlight=False,
                soft_wrap=True,
                end="",
            )
        else:
            print_commands(commands)
        return

    if interactive and json_output:
        print_error("--interactive cannot be combined with --json.")
        raise typer.Exit(code=1)

    if not skip_git_check:
        check = GitChecker().check_clewfile(clewfile)
        if not json_output:
            print_git_check(check, verbose=verbose)
        result = apply_git_gate(result, check)

    if interactive:
        console.print(create_diff_table(result))
        selection = Prompter().select(result)
        if selection is None:
            print_info("No changes were made.")
            return
        result = filter_by_selection(result, selection)

    options = SyncOptions(
        strict=strict,
        verbose=verbose,
        quiet=quiet,
        short=short,
        timeout=timeout,
    )
    try:
        outcome = Syncer().execute(result, options)
    except SyncError as e:
        print_error(f"Error during sync: {e}")
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(outcome.to_dict()))
    elif short:
        print_sync_result_short(outcome)
    else:
        print_sync_result(outcome)

    if outcome.has_failures:
        raise typer.Exit(code=STRICT_FAILURE_EXIT_CODE if strict else 1)
