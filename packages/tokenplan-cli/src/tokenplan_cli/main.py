"""CLI entry point for tokenplan.

Subcommands are imported on first use so that --help and --version
never import tokenplan-core.
"""

from __future__ import annotations

import importlib

import click
import rich_click as rclick

from tokenplan_cli import __version__
from tokenplan_cli.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


COMMANDS: dict[str, tuple[str, str]] = {
    "compile": ("tokenplan_cli.commands.compile", "compile_cmd"),
    "schema": ("tokenplan_cli.commands.schema", "schema"),
    "validate": ("tokenplan_cli.commands.validate", "validate"),
}


class TokenplanGroup(rclick.RichGroup):
    """Resolve subcommands from COMMANDS, importing the module on lookup."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(COMMANDS)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in COMMANDS:
            return None
        module_name, attr = COMMANDS[cmd_name]
        command: click.Command = getattr(importlib.import_module(module_name), attr)
        return command


@click.command(cls=TokenplanGroup)
@click.version_option(version=__version__, prog_name="tokenplan")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Log compiler stages at DEBUG level.",
)
def cli(verbose: bool) -> None:
    """Tokenplan - Allocation and Deployment Graph Compiler.

    Turn a token distribution table into an ordered, verified plan of
    contract creations and calls.

    **Getting Started:**

    - `tokenplan validate` - Check allocations against total supply
    - `tokenplan compile` - Generate the deployment plan
    - `tokenplan schema export` - Export JSON Schema for editor support
    """
    from tokenplan_core.observability import configure_logging

    configure_logging(
        log_level="DEBUG" if verbose else "WARNING",
        json_format=False,
    )
