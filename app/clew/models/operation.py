"""Models for rendered commands and sync execution results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True, slots=True)
class Command:
    """A human-auditable CLI command that reconciles one diff entry.

    Commands starting with "#" are informational and never executed.
    """

    command: str
    description: str

    @property
    def is_comment(self) -> bool:
        """Check if this command is informational only."""
        return self.command.startswith("#")

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"command": self.command, "description": self.description}


@dataclass(slots=True)
class Operation:
    """Audit-log entry for one attempted sync operation.

    Attributes:
        type: Entity kind ("source", "plugin" or "mcp").
        name: Entity name.
        action: Diff action that triggered the operation.
        command: Command line that was executed (empty if none ran).
        description: Human-readable description.
        success: Whether the operation succeeded.
        error: Error message including captured output, if it failed.
        skipped: True when nothing was executed on purpose.
    """

    type: str
    name: str
    action: str
    command: str = ""
    description: str = ""
    success: bool = False
    error: str | None = None
    skipped: bool = False

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        result = asdict(self)
        if self.error is None:
            del result["error"]
        return result


@dataclass(slots=True)
class SyncResult:
    """Aggregated outcome of one sync run.

    Attributes:
        installed: Entities added successfully.
        updated: Entities updated, enabled or disabled successfully.
        skipped: Entries deliberately not executed (OAuth, git, unsupported).
        failed: Operations that failed.
        attention: Items surfaced to the operator but never auto-applied.
        errors: Per-operation errors, in execution order.
        operations: Every attempted operation, in execution order.
    """

    installed: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    attention: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    operations: list[Operation] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """Check if any operation failed."""
        return self.failed > 0

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Errors are rendered as strings; operations are always included.
        """
        return {
            "summary": {
                "installed": self.installed,
                "updated": self.updated,
                "skipped": self.skipped,
                "failed": self.failed,
            },
            "attention": list(self.attention),
            "errors": [str(e) for e in self.errors],
            "operations": [op.to_dict() for op in self.operations],
        }
