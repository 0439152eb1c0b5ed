"""clew command line.

The root app owns the global flags (version, verbosity) and hands the
rest to the ``diff`` and ``sync`` sub-apps.
"""

from typing import Annotated

import typer

from clew import __version__
from clew.cli.commands import diff, sync
from clew.cli.helpers import configure_logging

app = typer.Typer(
    name="clew",
    help="Keep Claude Code plugins, marketplaces and MCP servers in line with a Clewfile.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
app.add_typer(diff.app, name="diff")
app.add_typer(sync.app, name="sync")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"clew {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=_show_version,
            is_eager=True,
            help="Print the clew version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every decision and external command."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only print results and errors."),
    ] = False,
) -> None:
    """Reconcile Claude Code with the sources, plugins and MCP servers in a Clewfile.

    Use [bold]clew diff[/bold] to see what differs and [bold]clew sync[/bold]
    to apply it. Nothing that is missing from the Clewfile is ever removed.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Sub-commands read the global flags from ctx.obj
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


if __name__ == "__main__":
    app()
