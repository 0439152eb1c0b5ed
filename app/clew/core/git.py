"""Git status gate for local sources and plugins.

Local checkouts with uncommitted changes are not synced: their diff
entries are re-classified as SKIP_GIT. Every other repository state is
informational only, and a check that cannot complete never blocks.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from clew.core.diff import Action, DiffResult
from clew.core.paths import expand_path
from clew.utils.shell import CommandRunner, CommandResult, SubprocessRunner

if TYPE_CHECKING:
    from clew.models.clewfile import Clewfile

logger = logging.getLogger(__name__)

# Per-command timeout for git invocations, in seconds
GIT_TIMEOUT = 30.0


class GitStatusKind(str, Enum):
    """Classification of a local repository.

    Only UNCOMMITTED blocks a sync.
    """

    CLEAN = "clean"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"
    UNCOMMITTED = "uncommitted"
    NOT_A_REPO = "not_a_repo"
    CHECK_FAILED = "check_failed"

    @property
    def blocks_sync(self) -> bool:
        """Check if this status prevents syncing the item."""
        return self == GitStatusKind.UNCOMMITTED


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Status of one local repository.

    Attributes:
        path: Expanded repository path.
        kind: Classification.
        message: Human-readable description.
        branch: Current branch, if known.
        remote: Upstream tracking branch (e.g., "origin/main"), if any.
        ahead: Commits ahead of the upstream.
        behind: Commits behind the upstream.
    """

    path: str
    kind: GitStatusKind
    message: str
    branch: str | None = None
    remote: str | None = None
    ahead: int = 0
    behind: int = 0


@dataclass(slots=True)
class GitCheckResult:
    """Git status of every local item in a Clewfile.

    Attributes:
        sources: Status per local source name.
        plugins: Status per local plugin name.
        warnings: Messages for items that will be skipped.
        info: Informational messages (ahead/behind, not a repo, failures).
        skip_sources: Names of sources to skip.
        skip_plugins: Names of plugins to skip.
    """

    sources: dict[str, GitStatus] = field(default_factory=dict)
    plugins: dict[str, GitStatus] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    info: list[str] = field(default_factory=list)
    skip_sources: set[str] = field(default_factory=set)
    skip_plugins: set[str] = field(default_factory=set)

    def should_skip_source(self, name: str) -> bool:
        """Check if a source is blocked by uncommitted changes."""
        return name in self.skip_sources

    def should_skip_plugin(self, name: str) -> bool:
        """Check if a plugin is blocked by uncommitted changes."""
        return name in self.skip_plugins

    @property
    def has_warnings(self) -> bool:
        """Check if any item will be skipped."""
        return bool(self.warnings)


class GitChecker:
    """Classifies local repositories using the git CLI.

    Attributes:
        runner: Command runner used to invoke git.
        check_path_exists: Verify the path exists before running git.
        timeout: Timeout for each git command.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        check_path_exists: bool = True,
        timeout: float | None = GIT_TIMEOUT,
    ) -> None:
        self.runner: CommandRunner = runner if runner is not None else SubprocessRunner()
        self.check_path_exists = check_path_exists
        self.timeout = timeout

    def git_available(self) -> bool:
        """Check if the git executable can be run."""
        result = self._git(["--version"])
        return result is not None and result.success

    def check_repository(self, path: str) -> GitStatus:
        """Classify the repository at a path.

        Never raises: failures are reported as CHECK_FAILED.

        Args:
            path: Repository path, may start with "~".

        Returns:
            GitStatus for the path.
        """
        expanded = expand_path(path)

        if self.check_path_exists and not Path(expanded).exists():
            return GitStatus(
                path=expanded,
                kind=GitStatusKind.CHECK_FAILED,
                message=f"path does not exist: {path}",
            )

        result = self._git(["rev-parse", "--git-dir"], cwd=expanded)
        if result is None or not result.success or not result.stdout.strip():
            return GitStatus(
                path=expanded, kind=GitStatusKind.NOT_A_REPO, message="not a git repository"
            )

        result = self._git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=expanded)
        if result is None or not result.success:
            return _failed(expanded, "failed to get current branch", result)
        branch = result.stdout.strip()

        result = self._git(["status", "--porcelain"], cwd=expanded)
        if result is None or not result.success:
            return _failed(expanded, "failed to check working tree", result)
        if result.stdout.strip():
            return GitStatus(
                path=expanded,
                kind=GitStatusKind.UNCOMMITTED,
                message="uncommitted changes detected",
                branch=branch,
            )

        result = self._git(
            ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"], cwd=expanded
        )
        if result is None or not result.success:
            return GitStatus(
                path=expanded,
                kind=GitStatusKind.CLEAN,
                message="clean (no remote tracking branch)",
                branch=branch,
            )
        remote = result.stdout.strip()

        # Best effort: stale counts are still useful
        self._git(["fetch", "--quiet"], cwd=expanded)

        result = self._git(
            ["rev-list", "--left-right", "--count", f"HEAD...{remote}"], cwd=expanded
        )
        counts = _parse_counts(result)
        if counts is None:
            return GitStatus(
                path=expanded,
                kind=GitStatusKind.CLEAN,
                message="clean",
                branch=branch,
                remote=remote,
            )
        ahead, behind = counts

        if ahead and behind:
            kind = GitStatusKind.DIVERGED
            message = (
                f"{ahead} commits ahead, {behind} commits behind remote "
                "(consider: git pull --rebase && git push)"
            )
        elif behind:
            kind = GitStatusKind.BEHIND
            message = f"{behind} commits behind remote (consider: git pull)"
        elif ahead:
            kind = GitStatusKind.AHEAD
            message = f"{ahead} commits ahead of remote (consider: git push)"
        else:
            kind = GitStatusKind.CLEAN
            message = "clean and in sync"

        return GitStatus(
            path=expanded,
            kind=kind,
            message=message,
            branch=branch,
            remote=remote,
            ahead=ahead,
            behind=behind,
        )

    def check_clewfile(self, clewfile: Clewfile) -> GitCheckResult:
        """Check every local source and local plugin in a Clewfile.

        Args:
            clewfile: Declared configuration.

        Returns:
            GitCheckResult with skip sets and messages.
        """
        check = GitCheckResult()

        if not self.git_available():
            logger.warning("git not available, skipping git status checks")
            check.info.append("git not available - skipping git status checks")
            return check

        for source in clewfile.sources:
            if not source.is_local or not source.source.path:
                continue
            status = self.check_repository(source.source.path)
            check.sources[source.name] = status
            _classify(check, "source", source.name, source.source.path, status)

        for plugin in clewfile.plugins:
            if not plugin.is_local or plugin.source is None or not plugin.source.path:
                continue
            status = self.check_repository(plugin.source.path)
            check.plugins[plugin.name] = status
            _classify(check, "plugin", plugin.name, plugin.source.path, status)

        return check

    def _git(self, args: list[str], cwd: str | None = None) -> CommandResult | None:
        try:
            return self.runner.run(["git", *args], timeout=self.timeout, cwd=cwd)
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("git %s failed: %s", " ".join(args), e)
            return None


def _failed(path: str, what: str, result: CommandResult | None) -> GitStatus:
    detail = result.output if result is not None and result.output else "git did not run"
    return GitStatus(path=path, kind=GitStatusKind.CHECK_FAILED, message=f"{what}: {detail}")


def _parse_counts(result: CommandResult | None) -> tuple[int, int] | None:
    if result is None or not result.success:
        return None
    parts = result.stdout.split()
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def _classify(
    check: GitCheckResult,
    kind: str,
    name: str,
    path: str,
    status: GitStatus,
) -> None:
    if status.kind.blocks_sync:
        check.warnings.append(f'{kind} "{name}" at {path}: {status.message} (skipping)')
        skip = check.skip_sources if kind == "source" else check.skip_plugins
        skip.add(name)
    elif status.kind != GitStatusKind.CLEAN:
        check.info.append(f'{kind} "{name}" at {path}: {status.message}')


def apply_git_gate(result: DiffResult, check: GitCheckResult) -> DiffResult:
    """Re-classify blocked entries as SKIP_GIT.

    Only actionable entries are re-classified; their current and desired
    payloads are kept. The input result is not modified, and applying the
    gate twice gives the same result as applying it once.

    Args:
        result: Diff to gate.
        check: Git status of the Clewfile's local items.

    Returns:
        New DiffResult.
    """
    sources = tuple(
        replace(entry, action=Action.SKIP_GIT)
        if entry.action.is_actionable and check.should_skip_source(entry.name)
        else entry
        for entry in result.sources
    )
    plugins = tuple(
        replace(entry, action=Action.SKIP_GIT)
        if entry.action.is_actionable and check.should_skip_plugin(entry.name)
        else entry
        for entry in result.plugins
    )
    return DiffResult(sources=sources, plugins=plugins, mcp_servers=result.mcp_servers)
