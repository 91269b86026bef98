"""Unit tests for tokenplan_cli.main module."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from click.testing import CliRunner

from tokenplan_cli.main import COMMANDS, TokenplanGroup, cli


class TestCLIHelp:
    """Tests for CLI help output."""

    def test_help_shows_options(self) -> None:
        """--help lists the global options."""
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "--version" in result.output
        assert "--no-color" in result.output
        assert "--verbose" in result.output

    def test_help_shows_all_commands(self) -> None:
        """--help lists every lazily loaded command."""
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "validate" in result.output
        assert "compile" in result.output
        assert "schema" in result.output

    def test_help_shows_description(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Tokenplan" in result.output


class TestCLIVersion:
    """Tests for CLI version output."""

    def test_version_output(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
        assert "tokenplan" in result.output


class TestCLIOptions:
    """Tests for --no-color and --verbose."""

    def test_no_color_option_accepted(self) -> None:
        result = CliRunner().invoke(cli, ["--no-color", "--help"])
        assert result.exit_code == 0

    def test_verbose_logs_at_debug(self, isolated_runner: CliRunner) -> None:
        """--verbose lowers the root log level to DEBUG."""
        result = isolated_runner.invoke(cli, ["-v", "schema", "export", "-o", "schema.json"])

        assert result.exit_code == 0
        assert logging.getLogger().level == logging.DEBUG

    def test_default_logs_warnings_only(self, isolated_runner: CliRunner) -> None:
        result = isolated_runner.invoke(cli, ["schema", "export", "-o", "schema.json"])

        assert result.exit_code == 0
        assert Path("schema.json").exists()
        assert logging.getLogger().level == logging.WARNING


class TestTokenplanGroup:
    """Tests for subcommand lookup."""

    def test_list_commands_sorted(self) -> None:
        group = TokenplanGroup(name="tokenplan")
        with click.Context(group) as ctx:
            assert group.list_commands(ctx) == ["compile", "schema", "validate"]

    def test_get_command_loads_module(self) -> None:
        group = TokenplanGroup(name="tokenplan")
        with click.Context(group) as ctx:
            command = group.get_command(ctx, "compile")

        assert command is not None
        assert command.name == "compile"

    def test_get_unknown_command(self) -> None:
        group = TokenplanGroup(name="tokenplan")
        with click.Context(group) as ctx:
            assert group.get_command(ctx, "deploy") is None

    def test_unknown_command_fails(self) -> None:
        result = CliRunner().invoke(cli, ["deploy"])
        assert result.exit_code == 2

    def test_command_table_matches_modules(self) -> None:
        """Every table entry names the command registered under that name."""
        group = TokenplanGroup(name="tokenplan")
        with click.Context(group) as ctx:
            for name in COMMANDS:
                command = group.get_command(ctx, name)
                assert command is not None
                assert command.name == name
