"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from clew.models.clewfile import Clewfile
from clew.models.state import MCPServerState, PluginState, SourceState, State
from clew.utils.shell import CommandResult


@dataclass(frozen=True, slots=True)
class RecordedCall:
    """One command invocation seen by RecordingRunner."""

    args: list[str]
    timeout: float | None = None
    cwd: str | None = None

    @property
    def line(self) -> str:
        return " ".join(self.args)


@dataclass
class RecordingRunner:
    """CommandRunner test double that records every invocation.

    Results and exceptions are matched by command-line prefix; unmatched
    commands succeed with empty output.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    results: dict[str, CommandResult] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)

    def fail(self, prefix: str, returncode: int = 1, stderr: str = "boom") -> None:
        """Make commands starting with prefix exit non-zero."""
        self.results[prefix] = CommandResult(stdout="", stderr=stderr, returncode=returncode)

    def respond(self, prefix: str, stdout: str) -> None:
        """Make commands starting with prefix succeed with stdout."""
        self.results[prefix] = CommandResult(stdout=stdout, stderr="", returncode=0)

    def raise_on(self, prefix: str, error: Exception) -> None:
        """Make commands starting with prefix raise error."""
        self.errors[prefix] = error

    @property
    def lines(self) -> list[str]:
        return [call.line for call in self.calls]

    def run(
        self,
        args: list[str],
        *,
        timeout: float | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        self.calls.append(RecordedCall(args=list(args), timeout=timeout, cwd=cwd))
        line = " ".join(args)
        for prefix, error in self.errors.items():
            if line.startswith(prefix):
                raise error
        for prefix, result in self.results.items():
            if line.startswith(prefix):
                return result
        return CommandResult(stdout="", stderr="", returncode=0)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    """Command runner that records calls and succeeds by default."""
    return RecordingRunner()


@pytest.fixture
def timeout_error() -> subprocess.TimeoutExpired:
    """A timeout as raised by subprocess.run."""
    return subprocess.TimeoutExpired(cmd="claude", timeout=5)


@pytest.fixture
def make_clewfile() -> Callable[..., Clewfile]:
    """Build a validated Clewfile from keyword data."""

    def _make(**data: Any) -> Clewfile:
        return Clewfile.model_validate(data)

    return _make


@pytest.fixture
def sample_clewfile(make_clewfile: Callable[..., Clewfile]) -> Clewfile:
    """A Clewfile with one of each kind of entry."""
    return make_clewfile(
        sources=[
            {"name": "official", "source": {"type": "github", "url": "anthropics/claude-plugins"}},
        ],
        plugins=[
            "context7@official",
            {"name": "linter@official", "enabled": False},
        ],
        mcp_servers={
            "filesystem": {
                "transport": "stdio",
                "command": "npx",
                "args": ["-y", "@modelcontextprotocol/server-filesystem"],
            },
        },
    )


@pytest.fixture
def empty_state() -> State:
    """Observed state with nothing configured."""
    return State()


@pytest.fixture
def synced_state() -> State:
    """Observed state matching sample_clewfile exactly."""
    return State(
        sources={
            "official": SourceState(
                name="official", kind="marketplace", type="github", url="anthropics/claude-plugins"
            ),
        },
        plugins={
            "context7@official": PluginState(name="context7@official", source="official"),
            "linter@official": PluginState(
                name="linter@official", source="official", enabled=False
            ),
        },
        mcp_servers={
            "filesystem": MCPServerState(
                name="filesystem",
                transport="stdio",
                command="npx",
                args=("-y", "@modelcontextprotocol/server-filesystem"),
            ),
        },
    )


@pytest.fixture
def claude_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated home directory with an empty ~/.claude."""
    home = tmp_path / "home"
    (home / ".claude").mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("CLAUDE_DIR", str(home / ".claude"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.delenv("CLEWFILE", raising=False)
    return home
