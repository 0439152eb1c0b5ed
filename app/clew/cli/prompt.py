"""Interactive approval of diff entries.

The Prompter asks about every actionable entry and builds a Selection
from the answers:

- ``y``: approve this entry
- ``n``: skip this entry (also the answer to anything unrecognized)
- ``a``: approve this and every remaining entry
- ``q``: abort without changes
"""

from collections.abc import Callable
from enum import Enum

import typer
from rich.markup import escape

from clew.core.diff import DiffResult
from clew.core.selection import Selection
from clew.utils.formatting import console


class Response(str, Enum):
    """Answer to a single approval question."""

    YES = "y"
    NO = "n"
    ALL = "a"
    QUIT = "q"


_RESPONSES: dict[str, Response] = {
    "y": Response.YES,
    "yes": Response.YES,
    "n": Response.NO,
    "no": Response.NO,
    "a": Response.ALL,
    "all": Response.ALL,
    "q": Response.QUIT,
    "quit": Response.QUIT,
}


def parse_response(answer: str) -> Response | None:
    """Map a typed answer to a Response, or None if it is not recognized."""
    return _RESPONSES.get(answer.strip().lower())


def _ask(question: str) -> str:
    try:
        return typer.prompt(f"{question} [y/n/a/q]", default="n", show_default=False)
    except typer.Abort:
        return Response.QUIT.value


def _confirm(question: str) -> bool:
    try:
        return typer.confirm(question, default=False)
    except typer.Abort:
        return False


class Prompter:
    """Builds a Selection by asking about each actionable entry.

    Attributes:
        ask: Reads the answer to one question.
        confirm: Asks the final yes/no confirmation.
    """

    def __init__(
        self,
        ask: Callable[[str], str] | None = None,
        confirm: Callable[[str], bool] | None = None,
    ) -> None:
        self.ask = ask or _ask
        self.confirm = confirm or _confirm
        self._approve_all = False

    def select(self, result: DiffResult) -> Selection | None:
        """Ask about every actionable entry, then confirm.

        Args:
            result: Diff whose entries are offered.

        Returns:
            The Selection to apply, or None if the operator quit, selected
            nothing, or declined the final confirmation.
        """
        self._approve_all = False
        selection = Selection()
        skipped = 0

        groups = (
            ("Sources", "source", result.sources, selection.sources),
            ("Plugins", "plugin", result.plugins, selection.plugins),
            ("MCP Servers", "MCP server", result.mcp_servers, selection.mcp_servers),
        )
        for title, kind, entries, approvals in groups:
            pending = [e for e in entries if e.action.is_actionable]
            if pending:
                console.print(f"\n[bold_header]{title}:[/bold_header]")
            for entry in pending:
                note = ""
                if getattr(entry, "requires_oauth", False):
                    note = " (requires OAuth - manual setup needed)"
                console.print(f"  {escape(entry.name)} (will {entry.action.value}){note}")

                response = self._prompt(
                    f"    -> {entry.action.value.capitalize()} {kind} {entry.name}?"
                )
                if response == Response.QUIT:
                    console.print("\nAborted.")
                    return None
                approved = response == Response.YES
                approvals[entry.name] = approved
                if not approved:
                    skipped += 1
                    console.print("    [muted]- Skipped[/muted]")

        selected = selection.approved_count
        console.print("\nSummary:")
        console.print(f"  Will apply: {selected} changes")
        if skipped:
            console.print(f"  Skipped: {skipped}")

        if selected == 0:
            console.print("No changes selected.")
            return None
        if not self.confirm("Proceed with sync?"):
            console.print("Aborted.")
            return None
        return selection

    def _prompt(self, question: str) -> Response:
        if self._approve_all:
            return Response.YES
        response = parse_response(self.ask(question))
        if response is None:
            console.print("    Invalid response, skipping.")
            return Response.NO
        if response == Response.ALL:
            self._approve_all = True
            return Response.YES
        return response
