"""Unit tests for Clewfile discovery and loading."""

from pathlib import Path

import pytest
from clew.core.clewfile import (
    ClewfileFormat,
    ClewfileNotFoundError,
    ClewfileParseError,
    ClewfileValidationError,
    detect_format,
    expand_env_vars,
    find_clewfile,
    load_clewfile,
    parse_clewfile,
)
from clew.models.types import TransportType

TOML_CLEWFILE = """\
version = 1

[[sources]]
name = "official"
source = { type = "github", url = "anthropics/claude-plugins" }

[[plugins]]
name = "context7@official"

[mcp_servers.filesystem]
transport = "stdio"
command = "npx"
args = ["-y", "@modelcontextprotocol/server-filesystem"]
"""

YAML_CLEWFILE = """\
# My Claude setup
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
  github:
    transport: http
    url: https://api.githubcopilot.com/mcp/
    headers:
      Authorization: Bearer ${GITHUB_TOKEN}
"""


class TestDetectFormat:
    """Tests for detect_format."""

    @pytest.mark.parametrize(
        ("name", "fmt"),
        [
            ("Clewfile.toml", ClewfileFormat.TOML),
            ("Clewfile.yaml", ClewfileFormat.YAML),
            ("Clewfile.yml", ClewfileFormat.YAML),
            ("Clewfile.json", ClewfileFormat.JSON),
        ],
    )
    def test_extension_decides(self, name: str, fmt: ClewfileFormat) -> None:
        """A known extension wins over content."""
        assert detect_format(Path(name), "{}") == fmt

    def test_sniff_json(self) -> None:
        """Content starting with a brace is JSON."""
        assert detect_format(Path("Clewfile"), '  {"version": 1}') == ClewfileFormat.JSON

    def test_sniff_toml(self) -> None:
        """Assignments and tables are TOML."""
        assert detect_format(Path("Clewfile"), TOML_CLEWFILE) == ClewfileFormat.TOML
        assert detect_format(Path("Clewfile"), "# c\n[[plugins]]\n") == ClewfileFormat.TOML

    def test_sniff_yaml(self) -> None:
        """Everything else is YAML."""
        assert detect_format(Path("Clewfile"), YAML_CLEWFILE) == ClewfileFormat.YAML


class TestExpandEnvVars:
    """Tests for expand_env_vars."""

    def test_set_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR} is replaced by its value."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        assert expand_env_vars("Bearer ${GITHUB_TOKEN}") == "Bearer ghp_x"

    def test_default_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR:-default} falls back when unset."""
        monkeypatch.delenv("REGION", raising=False)
        assert expand_env_vars("${REGION:-eu}") == "eu"

    def test_unset_without_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An unset variable without default expands to nothing."""
        monkeypatch.delenv("MISSING", raising=False)
        assert expand_env_vars("a${MISSING}b") == "ab"

    def test_plain_dollar_untouched(self) -> None:
        """Text without braces is left alone."""
        assert expand_env_vars("cost: $5") == "cost: $5"


class TestParseClewfile:
    """Tests for parse_clewfile."""

    def test_empty_yaml(self) -> None:
        """An empty document is an empty mapping."""
        assert parse_clewfile("", ClewfileFormat.YAML) == {}

    def test_invalid_toml(self) -> None:
        """Broken TOML raises ClewfileParseError."""
        with pytest.raises(ClewfileParseError, match="Invalid TOML syntax"):
            parse_clewfile("version = ", ClewfileFormat.TOML)

    def test_invalid_json(self) -> None:
        """Broken JSON raises ClewfileParseError."""
        with pytest.raises(ClewfileParseError, match="Invalid JSON syntax"):
            parse_clewfile("{", ClewfileFormat.JSON)

    def test_non_mapping(self) -> None:
        """A top-level list is rejected."""
        with pytest.raises(ClewfileParseError, match="must be a mapping"):
            parse_clewfile("- a\n- b\n", ClewfileFormat.YAML)


class TestLoadClewfile:
    """Tests for load_clewfile."""

    def test_load_toml(self, tmp_path: Path) -> None:
        """A TOML Clewfile is loaded and validated."""
        path = tmp_path / "Clewfile.toml"
        path.write_text(TOML_CLEWFILE)

        clewfile = load_clewfile(path)

        assert [s.name for s in clewfile.sources] == ["official"]
        assert [p.name for p in clewfile.plugins] == ["context7@official"]
        assert clewfile.mcp_servers["filesystem"].args == [
            "-y",
            "@modelcontextprotocol/server-filesystem",
        ]

    def test_load_extensionless_yaml_with_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An extensionless YAML Clewfile is sniffed and expanded."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        path = tmp_path / "Clewfile"
        path.write_text(YAML_CLEWFILE)

        clewfile = load_clewfile(path)

        server = clewfile.mcp_servers["github"]
        assert server.transport == TransportType.HTTP
        assert server.headers == {"Authorization": "Bearer ghp_x"}
        assert clewfile.plugins[1].enabled is False

    def test_load_json(self, tmp_path: Path) -> None:
        """A JSON Clewfile is loaded."""
        path = tmp_path / "Clewfile.json"
        path.write_text('{"version": 1, "plugins": []}')

        assert load_clewfile(path).plugins == []

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ClewfileNotFoundError."""
        with pytest.raises(ClewfileNotFoundError):
            load_clewfile(tmp_path / "Clewfile")

    def test_unknown_source_reference(self, tmp_path: Path) -> None:
        """A plugin referencing an undeclared source is invalid."""
        path = tmp_path / "Clewfile.yaml"
        path.write_text("plugins:\n  - context7@nowhere\n")

        with pytest.raises(ClewfileValidationError, match="unknown source 'nowhere'"):
            load_clewfile(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        """Unknown top-level keys are rejected."""
        path = tmp_path / "Clewfile.yaml"
        path.write_text("version: 1\nextras: true\n")

        with pytest.raises(ClewfileValidationError):
            load_clewfile(path)


class TestFindClewfile:
    """Tests for find_clewfile."""

    def test_explicit_path(self, claude_home: Path) -> None:
        """An explicit path is used as is."""
        path = claude_home / "custom.yaml"
        path.write_text("version: 1\n")

        assert find_clewfile(path) == path

    def test_explicit_path_missing(self, claude_home: Path) -> None:
        """A missing explicit path is an error, not a fallback."""
        (claude_home / ".claude" / "Clewfile").write_text("version: 1\n")

        with pytest.raises(ClewfileNotFoundError):
            find_clewfile(claude_home / "missing.yaml")

    def test_env_var(self, claude_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """CLEWFILE names the file when no path is given."""
        path = claude_home / "from-env.toml"
        path.write_text("version = 1\n")
        monkeypatch.setenv("CLEWFILE", str(path))

        assert find_clewfile() == path

    def test_search_order(self, claude_home: Path) -> None:
        """The XDG config directory is searched before ~/.claude and ~."""
        xdg = claude_home / ".config" / "claude"
        xdg.mkdir(parents=True)
        (xdg / "Clewfile.yaml").write_text("version: 1\n")
        (claude_home / ".claude" / "Clewfile").write_text("version: 1\n")
        (claude_home / "Clewfile").write_text("version: 1\n")

        assert find_clewfile() == xdg / "Clewfile.yaml"

    def test_hidden_name_in_home(self, claude_home: Path) -> None:
        """Dot-prefixed names are found too."""
        (claude_home / ".Clewfile.toml").write_text("version = 1\n")

        assert find_clewfile() == claude_home / ".Clewfile.toml"

    def test_not_found(self, claude_home: Path) -> None:
        """No Clewfile anywhere is an error listing the searched directories."""
        with pytest.raises(ClewfileNotFoundError, match="No Clewfile found"):
            find_clewfile()
