"""Supply invariant validator for tokenplan-core.

Sums every allocation's obligation (sale tiers count tokens plus affiliate
reserve) and compares it with total supply before any action is emitted.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tokenplan_core.errors import SchemaMismatchError, SupplyExceededError
from tokenplan_core.schemas.allocation import AllocationSet

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SupplyCheck:
    """Outcome of a successful supply check.

    Attributes:
        total_supply: Configured total supply in base units.
        allocated: Sum of obligations in base units.
        remainder: ``total_supply - allocated``; always positive.
    """

    total_supply: int
    allocated: int
    remainder: int


def check_supply(allocations: AllocationSet, total_supply: int) -> SupplyCheck:
    """Check that obligations leave a positive remainder.

    Args:
        allocations: Allocations before the residual is assigned.
        total_supply: Total supply in base units.

    Returns:
        SupplyCheck carrying the remainder.

    Raises:
        SupplyExceededError: If obligations meet or exceed total supply.
    """
    allocated = allocations.total_obligations
    if allocated >= total_supply:
        raise SupplyExceededError(
            total_supply=total_supply,
            allocated=allocated,
            internal_details=", ".join(
                f"{a.id}={a.obligation}" for a in allocations.allocations
            ),
        )

    check = SupplyCheck(
        total_supply=total_supply,
        allocated=allocated,
        remainder=total_supply - allocated,
    )
    logger.debug(
        "supply_checked",
        total_supply=total_supply,
        allocated=allocated,
        remainder=check.remainder,
    )
    return check


def verify_conservation(allocations: AllocationSet, total_supply: int) -> None:
    """Check that an exhaustive allocation set accounts for every base unit.

    Raises:
        SchemaMismatchError: If obligations do not sum to total supply.
    """
    allocated = allocations.total_obligations
    if allocated != total_supply:
        raise SchemaMismatchError(
            "allocations",
            expected=f"obligations summing to total supply {total_supply}",
            actual=f"sum {allocated}",
        )
