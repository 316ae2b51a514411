"""Unit tests for the main CLI application."""

import logging
from unittest.mock import patch

import pytest
from trustctl import __version__
from trustctl.cli.main import app, configure_logging
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for the top-level application."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"trustctl version {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        """--help lists the command groups."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("file", "history", "config"):
            assert command in result.output

    def test_file_help_lists_subcommands(self) -> None:
        """file --help lists the trust database commands."""
        result = runner.invoke(app, ["file", "--help"])

        assert result.exit_code == 0
        for command in ("add", "delete", "update", "list", "check"):
            assert command in result.output

    def test_verbose_enables_debug(self) -> None:
        """--verbose configures DEBUG logging."""
        with patch("trustctl.cli.main.logging.basicConfig") as mock_config:
            runner.invoke(app, ["-v", "history"])

        assert mock_config.call_args.kwargs["level"] == logging.DEBUG


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "level"),
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.DEBUG),
        ],
    )
    def test_levels(self, verbose: bool, quiet: bool, level: int) -> None:
        """Verbosity flags select the root log level."""
        with patch("trustctl.cli.main.logging.basicConfig") as mock_config:
            configure_logging(verbose, quiet)

        assert mock_config.call_args.kwargs["level"] == level
