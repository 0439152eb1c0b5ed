"""Fixtures for CLI command tests."""

import json
from pathlib import Path

import pytest

SAMPLE_CLEWFILE = """\
version: 1
sources:
  - name: official
    source:
      type: github
      url: anthropics/claude-plugins
plugins:
  - context7@official
  - name: linter@official
    enabled: false
mcp_servers:
  filesystem:
    transport: stdio
    command: npx
    args: ["-y", "@modelcontextprotocol/server-filesystem"]
"""


@pytest.fixture
def clewfile_path(claude_home: Path) -> Path:
    """Sample Clewfile in ~/.claude."""
    path = claude_home / ".claude" / "Clewfile.yaml"
    path.write_text(SAMPLE_CLEWFILE)
    return path


@pytest.fixture
def synced_home(claude_home: Path, clewfile_path: Path) -> Path:
    """Home whose Claude configuration matches the sample Clewfile."""
    plugins_dir = claude_home / ".claude" / "plugins"
    plugins_dir.mkdir()
    (plugins_dir / "known_marketplaces.json").write_text(
        json.dumps(
            {
                "official": {
                    "source": {"source": "github", "repo": "anthropics/claude-plugins"},
                }
            }
        )
    )
    (plugins_dir / "installed_plugins.json").write_text(
        json.dumps(
            {
                "version": 2,
                "plugins": {
                    "context7@official": [{"scope": "user", "installPath": "/x/context7"}],
                    "linter@official": [{"scope": "user", "installPath": "/x/linter"}],
                },
            }
        )
    )
    (claude_home / ".claude" / "settings.json").write_text(
        json.dumps({"enabledPlugins": {"context7@official": True, "linter@official": False}})
    )
    (claude_home / ".claude.json").write_text(
        json.dumps(
            {
                "mcpServers": {
                    "filesystem": {
                        "type": "stdio",
                        "command": "npx",
                        "args": ["-y", "@modelcontextprotocol/server-filesystem"],
                    }
                }
            }
        )
    )
    return claude_home
