"""Unit tests for diff command.

Tests for the CLI diff command implementation.
"""

import json
from pathlib import Path

from clew.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestDiffCommandHelp:
    """Tests for diff command help."""

    def test_diff_help(self) -> None:
        """Diff command shows help."""
        result = runner.invoke(app, ["diff", "--help"])
        assert result.exit_code == 0
        assert "--brief" in result.output
        assert "--json" in result.output
        assert "--config" in result.output


class TestDiffNoClewfile:
    """Tests for diff command when no Clewfile exists."""

    def test_missing_clewfile(self, claude_home: Path) -> None:
        """A missing Clewfile exits with code 1."""
        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 1
        assert "No Clewfile found" in result.output

    def test_invalid_clewfile(self, claude_home: Path) -> None:
        """An invalid Clewfile exits with code 1."""
        path = claude_home / ".claude" / "Clewfile.yaml"
        path.write_text("plugins:\n  - p@nowhere\n")

        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 1
        assert "Failed to load Clewfile" in result.output


class TestDiffOutput:
    """Tests for diff command output."""

    def test_table_output(self, clewfile_path: Path) -> None:
        """Differences are listed with a summary."""
        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 0
        assert "context7@official" in result.output
        assert "filesystem" in result.output
        assert "4 to add" in result.output

    def test_brief_output(self, clewfile_path: Path) -> None:
        """--brief prints counts only."""
        result = runner.invoke(app, ["diff", "--brief"])

        assert result.exit_code == 0
        assert "Add: 4" in result.output
        assert "Update: 0" in result.output
        assert "context7@official" not in result.output

    def test_json_output(self, clewfile_path: Path) -> None:
        """--json prints the diff as JSON."""
        result = runner.invoke(app, ["diff", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["in_sync"] is False
        assert data["summary"]["add"] == 4
        assert [p["name"] for p in data["plugins"]] == ["context7@official", "linter@official"]

    def test_in_sync(self, synced_home: Path) -> None:
        """A matching configuration reports no differences."""
        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 0
        assert "Already in sync" in result.output

    def test_undeclared_entries_need_attention(self, synced_home: Path) -> None:
        """Configured entries missing from the Clewfile are reported."""
        claude_json = synced_home / ".claude.json"
        data = json.loads(claude_json.read_text())
        data["mcpServers"]["stale"] = {"type": "stdio", "command": "old"}
        claude_json.write_text(json.dumps(data))

        result = runner.invoke(app, ["diff", "--json"])

        data = json.loads(result.stdout)
        assert data["summary"] == {"add": 0, "update": 0, "attention": 1}
        assert {"name": "stale", "action": "remove", "requires_oauth": False} in data[
            "mcp_servers"
        ]

    def test_explicit_config(self, claude_home: Path, tmp_path: Path) -> None:
        """--config selects a Clewfile outside the search path."""
        path = tmp_path / "team.toml"
        path.write_text(
            '[mcp_servers.docs]\ntransport = "http"\nurl = "https://docs.example/mcp"\n'
        )

        result = runner.invoke(app, ["diff", "--config", str(path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["mcp_servers"] == [{"name": "docs", "action": "add", "requires_oauth": True}]

    def test_corrupt_state(self, clewfile_path: Path, claude_home: Path) -> None:
        """Unreadable state exits with code 1."""
        (claude_home / ".claude" / "settings.json").write_text("{oops")

        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 1
        assert "Error reading current state" in result.output
