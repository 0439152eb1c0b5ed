"""Unit tests for theme management."""

from pathlib import Path

import pytest
from clew.core.theme import ThemeColors, get_rich_theme, load_theme
from pydantic import ValidationError


class TestThemeColors:
    """Tests for ThemeColors validation."""

    def test_defaults_are_valid(self) -> None:
        """The default palette validates."""
        colors = ThemeColors()
        assert colors.skipped.startswith("#")

    def test_short_hex(self) -> None:
        """#RGB is accepted."""
        assert ThemeColors(text="#fff").text == "#fff"

    @pytest.mark.parametrize("value", ["red", "#12345", "#gggggg"])
    def test_invalid_colors(self, value: str) -> None:
        """Names, wrong lengths and non-hex digits are rejected."""
        with pytest.raises(ValidationError):
            ThemeColors(text=value)

    def test_unknown_color(self) -> None:
        """Unknown color names are rejected."""
        with pytest.raises(ValidationError):
            ThemeColors(sparkle="#ffffff")  # type: ignore[call-arg]


class TestLoadTheme:
    """Tests for load_theme."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """No theme file means default colors."""
        assert load_theme(tmp_path / "theme.toml") == ThemeColors()

    def test_overrides(self, tmp_path: Path) -> None:
        """Colors in the file override the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nadded = "#00ff00"\n')

        colors = load_theme(path)

        assert colors.added == "#00ff00"
        assert colors.removed == ThemeColors().removed

    def test_invalid_override_falls_back(self, tmp_path: Path) -> None:
        """An invalid color falls back to the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nadded = "green"\n')

        assert load_theme(path) == ThemeColors()

    def test_broken_toml_falls_back(self, tmp_path: Path) -> None:
        """An unparsable file falls back to the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text("[colors\n")

        assert load_theme(path) == ThemeColors()


class TestGetRichTheme:
    """Tests for get_rich_theme."""

    def test_styles_present(self) -> None:
        """Every style used by the CLI is defined."""
        theme = get_rich_theme(ThemeColors())

        for name in ("added", "changed", "removed", "skipped", "muted", "bold_header", "error"):
            assert name in theme.styles
