"""tokenplan validate command - Check a distribution against total supply.

Builds the allocations and runs the supply check without emitting any
deployment actions.
"""

from __future__ import annotations

import click

from tokenplan_cli.loader import file_option, load_distribution, preset_option
from tokenplan_cli.output import allocation_table, info, print_json, success


@click.command()
@file_option
@preset_option
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the allocation summary as JSON.",
)
def validate(file_path: str | None, preset: str | None, as_json: bool) -> None:
    """Validate a distribution.

    Loads the distribution, derives every allocation in base units and
    checks that obligations leave a positive remainder for the liquidity
    reserve.

    Examples:

        tokenplan validate

        tokenplan validate --file path/to/distribution.yaml

        tokenplan validate --preset squiggle --json
    """
    spec = load_distribution(file_path, preset)

    # Import here to avoid heavy imports at CLI startup
    from tokenplan_core import TokenplanError, build_allocations, check_supply

    from tokenplan_cli.errors import compilation_error

    try:
        allocations = build_allocations(spec)
        check = check_supply(allocations, spec.token.total_supply)
    except TokenplanError as e:
        raise compilation_error(e, "Validation") from e

    if as_json:
        print_json(
            {
                "name": spec.name,
                "total_supply": str(check.total_supply),
                "allocated": str(check.allocated),
                "remainder": str(check.remainder),
                "reserve_id": spec.liquidity_reserve_id,
                "allocations": [
                    {
                        "id": a.id,
                        "variant": a.variant,
                        "tokens": str(a.tokens),
                        "obligation": str(a.obligation),
                    }
                    for a in allocations.allocations
                ],
            }
        )
        return

    info(
        allocation_table(
            f"Distribution '{spec.name}'",
            allocations,
            check,
            spec.liquidity_reserve_id,
        )
    )
    success(f"Distribution valid: remainder {check.remainder} to '{spec.liquidity_reserve_id}'")
