"""Diff command implementation.

Compares the Clewfile with the current Claude Code configuration.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from clew.cli.display import create_diff_table, print_diff_summary
from clew.cli.helpers import load_clewfile_or_exit, read_state_or_exit
from clew.core.diff import DiffEngine
from clew.utils.formatting import console, print_success

app = typer.Typer(
    help="Compare the Clewfile with the current Claude Code configuration.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def diff(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the Clewfile (default: search standard locations).",
        ),
    ] = None,
    brief: Annotated[
        bool,
        typer.Option(
            "--brief",
            "-b",
            help="Show summary counts only.",
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
) -> None:
    """Show what sync would change, without changing anything.

    Actions:
      [+] add / enable: declared but missing or disabled
      [~] update: configured differently than declared
      [-] disable: enabled but declared disabled
      [?] remove: configured but not declared (never removed by sync)

    Examples:
        clew diff                       # Show all differences
        clew diff --brief               # Summary counts only
        clew diff --config ./Clewfile   # Use a specific Clewfile
        clew diff --json                # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    clewfile = load_clewfile_or_exit(config)
    state = read_state_or_exit()
    result = DiffEngine(clewfile).compute_diff(state)

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
        return

    if result.is_in_sync:
        print_success("Already in sync. Nothing would change.")
        return

    if brief:
        add, update, _remove, attention = result.summary()
        console.print(f"[added]Add:[/added] {add}")
        console.print(f"[changed]Update:[/changed] {update}")
        console.print(f"[warning]Attention:[/warning] {attention}")
        console.print(f"[muted]Total changes: {result.total_changes}[/muted]")
        return

    console.print(create_diff_table(result))
    print_diff_summary(result)
