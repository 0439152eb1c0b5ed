"""Path management for clew.

This module provides standardized paths for clew's own configuration
(following the XDG Base Directory Specification) and for the Claude Code
files that clew reads and edits.

Defaults:
- clew config: ~/.config/clew/
- Claude directory: ~/.claude/ (override with CLAUDE_DIR)
- Clewfile search: $XDG_CONFIG_HOME/claude/, ~/.claude/, ~/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "clew"

# Clewfile names, in lookup order within each search directory
CLEWFILE_NAMES: tuple[str, ...] = (
    "Clewfile",
    "Clewfile.yaml",
    "Clewfile.yml",
    "Clewfile.toml",
    "Clewfile.json",
    ".Clewfile",
    ".Clewfile.yaml",
    ".Clewfile.yml",
    ".Clewfile.toml",
    ".Clewfile.json",
)


def expand_path(path: str) -> str:
    """Expand a leading "~" and normalize the path.

    Args:
        path: Path as written in a Clewfile or state file.

    Returns:
        Expanded path string. Empty input is returned unchanged.
    """
    if not path:
        return path
    return str(Path(path).expanduser())


def _get_xdg_base(env_var: str, default_subdir: str) -> Path:
    """Get an XDG base directory respecting the environment override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the XDG base directory (not application specific).
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def get_config_dir() -> Path:
    """Get clew's configuration directory path.

    Returns:
        Path to ~/.config/clew/ (or XDG_CONFIG_HOME/clew/).
    """
    return _get_xdg_base("XDG_CONFIG_HOME", ".config") / APP_NAME


def get_user_theme_path() -> Path:
    """Get the user theme configuration path.

    Returns:
        Path to ~/.config/clew/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_claude_dir() -> Path:
    """Get the Claude Code configuration directory.

    Returns:
        Path from CLAUDE_DIR if set, otherwise ~/.claude/.
    """
    override = os.environ.get("CLAUDE_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".claude"


def get_installed_plugins_path(claude_dir: Path | None = None) -> Path:
    """Get the path of Claude Code's installed plugins registry.

    Returns:
        Path to <claude_dir>/plugins/installed_plugins.json.
    """
    return (claude_dir or get_claude_dir()) / "plugins" / "installed_plugins.json"


def get_clewfile_search_dirs() -> list[Path]:
    """Get the directories searched for a Clewfile, in precedence order.

    Returns:
        List of $XDG_CONFIG_HOME/claude, ~/.claude and the home directory.
    """
    home = Path.home()
    return [
        _get_xdg_base("XDG_CONFIG_HOME", ".config") / "claude",
        home / ".claude",
        home,
    ]
