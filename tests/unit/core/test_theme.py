"""Unit tests for theme management."""

from pathlib import Path

import pytest
from pydantic import ValidationError
from rich.theme import Theme
from trustctl.core.paths import get_theme_path
from trustctl.core.theme import ThemeColors, get_rich_theme, load_theme


class TestThemeColors:
    """Tests for ThemeColors model."""

    def test_defaults_are_valid(self) -> None:
        """Default colors pass validation."""
        colors = ThemeColors()

        assert colors.success.startswith("#")

    @pytest.mark.parametrize("value", ["red", "#12", "#ggg", "#1234567"])
    def test_invalid_colors_rejected(self, value: str) -> None:
        """Non-hex colors are rejected."""
        with pytest.raises(ValidationError):
            ThemeColors(error=value)

    def test_short_hex_accepted(self) -> None:
        """#RGB colors are accepted."""
        assert ThemeColors(error="#f00").error == "#f00"


class TestLoadTheme:
    """Tests for load_theme."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Without an override file the defaults are used."""
        assert load_theme(tmp_path / "missing.toml") == ThemeColors()

    def test_user_overrides(self, tmp_path: Path) -> None:
        """Colors from the override file replace the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nremoved = "#ff0000"\n')

        colors = load_theme(path)

        assert colors.removed == "#ff0000"
        assert colors.added == ThemeColors().added

    def test_invalid_override_falls_back(self, tmp_path: Path) -> None:
        """Invalid override files fall back to the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nremoved = "red"\n')

        assert load_theme(path) == ThemeColors()

    def test_broken_toml_falls_back(self, tmp_path: Path) -> None:
        """Broken TOML falls back to the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text("[colors\n")

        assert load_theme(path) == ThemeColors()

    def test_default_location(self) -> None:
        """The default override lives in the XDG config directory."""
        path = get_theme_path()
        path.parent.mkdir(parents=True)
        path.write_text('[colors]\ninfo = "#123456"\n')

        assert load_theme().info == "#123456"


class TestGetRichTheme:
    """Tests for get_rich_theme."""

    def test_trust_styles_present(self) -> None:
        """The Rich theme includes the trust record styles."""
        theme = get_rich_theme(ThemeColors())

        assert isinstance(theme, Theme)
        for name in ("success", "error", "trust.path", "trust.hash", "bold_header", "border"):
            assert name in theme.styles
