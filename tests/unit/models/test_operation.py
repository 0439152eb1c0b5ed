"""Unit tests for command and sync result models."""

from clew.models.operation import Command, Operation, SyncResult


class TestCommand:
    """Tests for Command."""

    def test_comment(self) -> None:
        """Commands starting with "#" are informational."""
        assert Command(command="# claude mcp remove x", description="d").is_comment
        assert not Command(command="claude plugin install p", description="d").is_comment

    def test_to_dict(self) -> None:
        """to_dict exposes command and description."""
        command = Command(command="claude plugin install p", description="Install plugin: p")
        assert command.to_dict() == {
            "command": "claude plugin install p",
            "description": "Install plugin: p",
        }


class TestOperation:
    """Tests for Operation."""

    def test_to_dict_without_error(self) -> None:
        """Successful operations omit the error key."""
        op = Operation(type="plugin", name="p", action="add", success=True)

        data = op.to_dict()

        assert "error" not in data
        assert data["success"] is True
        assert data["skipped"] is False

    def test_to_dict_with_error(self) -> None:
        """Failed operations carry their error."""
        op = Operation(type="mcp", name="m", action="add", error="failed to add MCP server m")
        assert op.to_dict()["error"] == "failed to add MCP server m"


class TestSyncResult:
    """Tests for SyncResult."""

    def test_has_failures(self) -> None:
        """has_failures follows the failed counter."""
        assert not SyncResult().has_failures
        assert SyncResult(failed=1).has_failures

    def test_to_dict(self) -> None:
        """to_dict renders errors as strings and includes operations."""
        result = SyncResult(
            installed=1,
            failed=1,
            attention=["plugin: old@s"],
            errors=[RuntimeError("failed to install plugin b@s")],
            operations=[Operation(type="plugin", name="a@s", action="add", success=True)],
        )

        data = result.to_dict()

        assert data["summary"] == {"installed": 1, "updated": 0, "skipped": 0, "failed": 1}
        assert data["attention"] == ["plugin: old@s"]
        assert data["errors"] == ["failed to install plugin b@s"]
        assert len(data["operations"]) == 1
