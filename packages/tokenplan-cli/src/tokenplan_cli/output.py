"""Rich console output utilities for tokenplan-cli.

This module provides formatted console output with Rich,
supporting colored success/error/warning messages and
respecting the NO_COLOR environment variable.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from tokenplan_core import AllocationSet, SupplyCheck

# Rich respects NO_COLOR on its own; --no-color is handled by set_no_color
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


# Default console instance
console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Distribution valid")
        ✓ Distribution valid
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("Allocations exceed total supply")
        ✗ Allocations exceed total supply
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle.

    Example:
        >>> warning("Overwriting .tokenplan/deployment_plan.json")
        ⚠ Overwriting .tokenplan/deployment_plan.json
    """
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: Any, **kwargs: Any) -> None:
    """Print an informational message or renderable."""
    console.print(message, **kwargs)


def print_json(data: dict[str, Any], **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Example:
        >>> print_json({"total_supply": 1000, "remainder": 965})
        {
          "total_supply": 1000,
          "remainder": 965
        }
    """
    console.print_json(json.dumps(data), **kwargs)


def share_of_supply(amount: int, total_supply: int) -> str:
    """Format ``amount`` as a percentage of ``total_supply``, 4 decimals.

    Example:
        >>> share_of_supply(35, 1000)
        '3.5000'
    """
    return f"{Decimal(amount) * 100 / Decimal(total_supply):.4f}"


def allocation_table(
    title: str,
    allocations: AllocationSet,
    check: SupplyCheck,
    reserve_id: str,
) -> Table:
    """Build a table of allocations plus the residual reserve row.

    Args:
        title: Table title.
        allocations: Allocations before the residual.
        check: Supply check for the same allocations.
        reserve_id: Id the residual will be bound to.
    """
    table = Table(title=title)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Variant")
    table.add_column("Tokens", justify="right")
    table.add_column("Obligation", justify="right")
    table.add_column("Share %", justify="right")

    for allocation in allocations.allocations:
        table.add_row(
            allocation.id,
            allocation.variant,
            str(allocation.tokens),
            str(allocation.obligation),
            share_of_supply(allocation.obligation, check.total_supply),
        )
    table.add_row(
        reserve_id,
        "liquidity_reserve",
        str(check.remainder),
        str(check.remainder),
        share_of_supply(check.remainder, check.total_supply),
        style="dim",
    )
    return table


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Note:
        This updates the module-level console instance.
    """
    global console
    console = create_console(no_color=no_color)
