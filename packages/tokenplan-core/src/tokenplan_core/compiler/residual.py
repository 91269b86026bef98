"""Residual allocator for tokenplan-core.

Binds the supply left after every explicit allocation to the liquidity
reserve, making the allocation set exhaustive.
"""

from __future__ import annotations

import structlog

from tokenplan_core.compiler.validator import SupplyCheck
from tokenplan_core.errors import SchemaMismatchError
from tokenplan_core.schemas.allocation import AllocationSet, LiquidityReserve

logger = structlog.get_logger(__name__)

DEFAULT_RESERVE_ID = "liquidity_dex"


def allocate_residual(
    allocations: AllocationSet,
    check: SupplyCheck,
    reserve_id: str = DEFAULT_RESERVE_ID,
) -> AllocationSet:
    """Append a LiquidityReserve holding ``check.remainder``.

    Args:
        allocations: Allocations the check was run on.
        check: Result of ``check_supply`` for the same allocations.
        reserve_id: Id of the reserve allocation.

    Returns:
        New AllocationSet whose obligations sum to total supply.

    Raises:
        SchemaMismatchError: If the set already has a liquidity reserve or
            an allocation named ``reserve_id``, or if ``check`` was computed
            for different allocations.
    """
    existing = allocations.of_variant("liquidity_reserve")
    if existing:
        raise SchemaMismatchError(
            existing[0].id,
            expected="no liquidity reserve before the residual is assigned",
            actual="liquidity reserve already present",
        )
    if reserve_id in {a.id for a in allocations.allocations}:
        raise SchemaMismatchError(
            reserve_id,
            expected="reserve id unused by other allocations",
            actual="id already taken",
        )
    if allocations.total_obligations != check.allocated:
        raise SchemaMismatchError(
            reserve_id,
            expected=f"supply check over {check.allocated} allocated",
            actual=f"allocations summing to {allocations.total_obligations}",
        )

    reserve = LiquidityReserve(id=reserve_id, tokens=check.remainder)
    logger.debug("residual_allocated", reserve_id=reserve_id, tokens=check.remainder)
    return allocations.appended(reserve)
