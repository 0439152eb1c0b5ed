"""Installation of plugins from local checkouts.

Local plugins are not distributed through a marketplace, so the host CLI
cannot install them. They are registered by editing Claude Code's
``installed_plugins.json`` registry directly.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from clew.core.paths import expand_path, get_installed_plugins_path

if TYPE_CHECKING:
    from clew.utils.shell import CommandRunner

logger = logging.getLogger(__name__)

# Registry schema version written for new files
INSTALLED_PLUGINS_VERSION = 2

# Version recorded when plugin.json does not declare one
DEFAULT_PLUGIN_VERSION = "0.0.0"

# Manifest locations relative to the plugin root, in lookup order
PLUGIN_MANIFEST_PATHS: tuple[str, ...] = ("plugin.json", ".claude-plugin/plugin.json")


class LocalPluginError(Exception):
    """Raised when a local plugin cannot be registered."""


class FileEditor(Protocol):
    """Interface for the file reads and writes done during local installs."""

    def read_file(self, path: Path) -> str:
        """Read a text file.

        Raises:
            FileNotFoundError: If the file does not exist.
            OSError: If the file cannot be read.
        """
        ...

    def write_file(self, path: Path, content: str) -> None:
        """Write a text file, creating parent directories as needed."""
        ...


class LocalFileEditor:
    """FileEditor backed by the local filesystem."""

    def read_file(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_file(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@dataclass(frozen=True, slots=True)
class LocalInstall:
    """Outcome of registering a local plugin.

    Attributes:
        name: Full plugin name.
        install_path: Expanded plugin directory.
        version: Version read from the plugin manifest.
        git_commit_sha: HEAD commit of the checkout, empty if unknown.
        scope: Scope the plugin was registered in.
    """

    name: str
    install_path: str
    version: str
    git_commit_sha: str
    scope: str

    @property
    def summary(self) -> str:
        """Audit-log line describing the registry edit."""
        return (
            f"Edit installed_plugins.json: add {self.name} "
            f"(version: {self.version}, sha: {self.git_commit_sha})"
        )


class LocalPluginInstaller:
    """Registers local plugin checkouts in installed_plugins.json.

    Attributes:
        editor: File access seam.
        runner: Command runner used to read the checkout's git HEAD.
        registry_path: Location of installed_plugins.json.
    """

    def __init__(
        self,
        editor: FileEditor,
        runner: CommandRunner,
        claude_dir: Path | None = None,
    ) -> None:
        self.editor = editor
        self.runner = runner
        self.registry_path = get_installed_plugins_path(claude_dir)

    def install(
        self,
        name: str,
        path: str,
        scope: str = "user",
        timeout: float | None = None,
    ) -> LocalInstall:
        """Register a local plugin.

        Args:
            name: Full plugin name used as the registry key.
            path: Plugin directory as declared (may start with "~").
            scope: Install scope.
            timeout: Timeout for the git HEAD lookup.

        Returns:
            LocalInstall describing what was recorded.

        Raises:
            LocalPluginError: If the manifest is missing or invalid, or the
                registry cannot be read, parsed or written.
        """
        install_path = expand_path(path)
        version = self.read_plugin_version(Path(install_path))
        sha = self.read_git_sha(install_path, timeout=timeout)
        self.update_registry(name, install_path, version, sha, scope)
        logger.info("Registered local plugin %s from %s (version %s)", name, install_path, version)
        return LocalInstall(
            name=name,
            install_path=install_path,
            version=version,
            git_commit_sha=sha,
            scope=scope,
        )

    def read_plugin_version(self, plugin_dir: Path) -> str:
        """Read the version declared in the plugin manifest.

        Raises:
            LocalPluginError: If no manifest exists or it is not valid JSON.
        """
        content: str | None = None
        for relative in PLUGIN_MANIFEST_PATHS:
            try:
                content = self.editor.read_file(plugin_dir / relative)
                break
            except FileNotFoundError:
                continue
            except (OSError, UnicodeDecodeError) as e:
                msg = f"Failed to read {plugin_dir / relative}: {e}"
                raise LocalPluginError(msg) from e

        if content is None:
            msg = f"plugin.json not found in {plugin_dir}"
            raise LocalPluginError(msg)

        try:
            manifest = json.loads(content)
        except json.JSONDecodeError as e:
            msg = f"Failed to parse plugin.json: {e}"
            raise LocalPluginError(msg) from e

        version = manifest.get("version") if isinstance(manifest, dict) else None
        return str(version) if version else DEFAULT_PLUGIN_VERSION

    def read_git_sha(self, path: str, timeout: float | None = None) -> str:
        """Get the HEAD commit of a checkout, or "" if it cannot be determined."""
        try:
            result = self.runner.run(
                ["git", "log", "-1", "--format=%H"], timeout=timeout, cwd=path
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("Could not read git HEAD of %s: %s", path, e)
            return ""
        return result.stdout.strip() if result.success else ""

    def update_registry(
        self,
        name: str,
        install_path: str,
        version: str,
        sha: str,
        scope: str,
    ) -> None:
        """Add or replace the registry entry for a plugin in one scope.

        An existing entry for the same scope keeps its original
        ``installedAt``; an entry for a new scope is prepended.

        Raises:
            LocalPluginError: If the registry cannot be read, parsed or written.
        """
        registry = self._load_registry()
        plugins = registry.setdefault("plugins", {})

        now = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        entry: dict[str, str] = {
            "scope": scope,
            "installPath": install_path,
            "version": version,
            "installedAt": now,
            "lastUpdated": now,
        }
        if sha:
            entry["gitCommitSha"] = sha

        existing = plugins.get(name) or []
        if not isinstance(existing, list) or not all(isinstance(e, dict) for e in existing):
            msg = f"Unexpected structure in {self.registry_path}: malformed entry for {name}"
            raise LocalPluginError(msg)
        for index, current in enumerate(existing):
            if current.get("scope") == scope:
                entry["installedAt"] = current.get("installedAt", now)
                existing[index] = entry
                break
        else:
            existing = [entry, *existing]
        plugins[name] = existing

        try:
            self.editor.write_file(self.registry_path, json.dumps(registry, indent=2) + "\n")
        except OSError as e:
            msg = f"Failed to write {self.registry_path}: {e}"
            raise LocalPluginError(msg) from e

    def _load_registry(self) -> dict:
        try:
            content = self.editor.read_file(self.registry_path)
        except FileNotFoundError:
            logger.debug("No plugin registry at %s, creating one", self.registry_path)
            return {"version": INSTALLED_PLUGINS_VERSION, "plugins": {}}
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Failed to read {self.registry_path}: {e}"
            raise LocalPluginError(msg) from e

        try:
            registry = json.loads(content)
        except json.JSONDecodeError as e:
            msg = f"Failed to parse {self.registry_path}: {e}"
            raise LocalPluginError(msg) from e

        if not isinstance(registry, dict):
            msg = f"Unexpected structure in {self.registry_path}"
            raise LocalPluginError(msg)
        if not isinstance(registry.get("plugins"), dict):
            registry["plugins"] = {}
        return registry
