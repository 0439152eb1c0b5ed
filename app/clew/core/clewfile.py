"""Clewfile discovery and loading.

This module locates the Clewfile, parses it as TOML, JSON or YAML, expands
environment variable references and validates the result with the
Pydantic models.
"""

import json
import logging
import os
import re
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from clew.core.paths import CLEWFILE_NAMES, get_clewfile_search_dirs
from clew.models.clewfile import Clewfile

logger = logging.getLogger(__name__)

# Environment variable naming an explicit Clewfile
CLEWFILE_ENV_VAR = "CLEWFILE"

# ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ClewfileError(Exception):
    """Base exception for Clewfile-related errors."""


class ClewfileNotFoundError(ClewfileError):
    """Raised when no Clewfile can be found."""


class ClewfileParseError(ClewfileError):
    """Raised when a Clewfile cannot be parsed."""


class ClewfileValidationError(ClewfileError):
    """Raised when Clewfile content is invalid."""


class ClewfileFormat(str, Enum):
    """Supported Clewfile syntaxes."""

    TOML = "toml"
    JSON = "json"
    YAML = "yaml"


def find_clewfile(explicit: Path | None = None) -> Path:
    """Locate the Clewfile to use.

    Lookup order: the explicit path, the CLEWFILE environment variable,
    then each search directory with every supported file name.

    Args:
        explicit: Path given on the command line.

    Returns:
        Path to an existing Clewfile.

    Raises:
        ClewfileNotFoundError: If the explicit path does not exist or no
            Clewfile is found in the search directories.
    """
    if explicit is not None:
        path = explicit.expanduser()
        if not path.is_file():
            raise ClewfileNotFoundError(f"Clewfile not found: {path}")
        return path

    env_path = os.environ.get(CLEWFILE_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.is_file():
            raise ClewfileNotFoundError(f"Clewfile not found: {path} (from ${CLEWFILE_ENV_VAR})")
        return path

    searched: list[Path] = []
    for directory in get_clewfile_search_dirs():
        for name in CLEWFILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                logger.debug("Using Clewfile %s", candidate)
                return candidate
        searched.append(directory)

    locations = ", ".join(str(d) for d in searched)
    raise ClewfileNotFoundError(f"No Clewfile found (searched: {locations})")


def detect_format(path: Path, content: str) -> ClewfileFormat:
    """Determine the syntax of a Clewfile.

    The file extension decides when present; extensionless files are
    sniffed. YAML is the fallback.

    Args:
        path: Clewfile path.
        content: File content.

    Returns:
        Detected format.
    """
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return ClewfileFormat.YAML
    if suffix == ".toml":
        return ClewfileFormat.TOML
    if suffix == ".json":
        return ClewfileFormat.JSON

    stripped = content.strip()
    if stripped.startswith("{"):
        return ClewfileFormat.JSON

    for raw_line in stripped.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") or " = " in line:
            return ClewfileFormat.TOML
        break
    return ClewfileFormat.YAML


def expand_env_vars(content: str) -> str:
    """Replace ${VAR} and ${VAR:-default} references.

    Unset variables without a default expand to an empty string.
    """

    def _replace(match: re.Match[str]) -> str:
        value = os.environ.get(match.group(1), "")
        if not value and match.group(2) is not None:
            return match.group(2)
        return value

    return _ENV_VAR_PATTERN.sub(_replace, content)


def parse_clewfile(content: str, fmt: ClewfileFormat) -> dict[str, Any]:
    """Parse Clewfile text into a dictionary.

    Raises:
        ClewfileParseError: If the content is not valid in the given format
            or is not a mapping.
    """
    try:
        if fmt == ClewfileFormat.TOML:
            data = tomllib.loads(content)
        elif fmt == ClewfileFormat.JSON:
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ClewfileParseError(f"Invalid {fmt.value.upper()} syntax: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ClewfileParseError(f"Clewfile must be a mapping, got {type(data).__name__}")
    return data


def load_clewfile(path: Path) -> Clewfile:
    """Load and validate a Clewfile.

    Args:
        path: Path to the Clewfile.

    Returns:
        Validated Clewfile.

    Raises:
        ClewfileNotFoundError: If the file doesn't exist.
        ClewfileParseError: If the syntax is invalid.
        ClewfileValidationError: If the content doesn't match the schema.
    """
    if not path.exists():
        raise ClewfileNotFoundError(f"Clewfile not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ClewfileError(f"Failed to read Clewfile: {e}") from e

    fmt = detect_format(path, content)
    logger.debug("Parsing %s as %s", path, fmt.value)
    data = parse_clewfile(expand_env_vars(content), fmt)

    try:
        return Clewfile.model_validate(data)
    except ValidationError as e:
        raise ClewfileValidationError(f"Invalid Clewfile content: {e}") from e
