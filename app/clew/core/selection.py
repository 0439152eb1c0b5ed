"""Selection filtering for interactive syncs.

A Selection records which actionable diff entries the operator approved.
Filtering keeps informational entries and drops everything not approved.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from clew.core.diff import Action, DiffResult

# Actions that are kept regardless of the selection
_ALWAYS_KEPT = (Action.NONE, Action.REMOVE, Action.SKIP_GIT)


@dataclass(slots=True)
class Selection:
    """Per-kind approval maps keyed by entity name.

    Names missing from a map count as not approved.
    """

    sources: dict[str, bool] = field(default_factory=dict)
    plugins: dict[str, bool] = field(default_factory=dict)
    mcp_servers: dict[str, bool] = field(default_factory=dict)

    @property
    def approved_count(self) -> int:
        """Number of approved entries across all kinds."""
        maps = (self.sources, self.plugins, self.mcp_servers)
        return sum(1 for approvals in maps for approved in approvals.values() if approved)


def filter_by_selection(result: DiffResult, selection: Selection) -> DiffResult:
    """Keep only approved actionable entries.

    Entries whose action is NONE, REMOVE or SKIP_GIT always pass through. Every
    other entry passes only if its name is approved in the matching map.
    The input result is not modified.

    Args:
        result: Diff to filter.
        selection: Operator approvals.

    Returns:
        New DiffResult with entries in their original order.
    """
    return DiffResult(
        sources=tuple(
            e for e in result.sources
            if e.action in _ALWAYS_KEPT or selection.sources.get(e.name, False)
        ),
        plugins=tuple(
            e for e in result.plugins
            if e.action in _ALWAYS_KEPT or selection.plugins.get(e.name, False)
        ),
        mcp_servers=tuple(
            e for e in result.mcp_servers
            if e.action in _ALWAYS_KEPT or selection.mcp_servers.get(e.name, False)
        ),
    )
