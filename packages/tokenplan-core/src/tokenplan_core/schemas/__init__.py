"""Schema definitions for tokenplan-core.

This module exports the core Pydantic models:

Input:
- DistributionSpec: Root schema for distribution.yaml
- SaleTierEntry, VestingPoolEntry, DirectAccountEntry, VestingEntry: table rows

Allocation model:
- SaleTier, VestingPool, LiquidityReserve, DirectAccount: Allocation variants
- AllocationSet: Ordered allocations with unique ids
- VestingSchedule: Vesting terms in base units
- ActionRef, Address: Allocation targets

Deployment plan:
- CreateContract, CallContract: Plan actions
- DeploymentPlan: Ordered action list
- OwnershipSlot: Token contract owner/amount slot
- PlanHandle: Resolved targets for consumers
"""

from __future__ import annotations

from tokenplan_core.schemas.allocation import (
    ADDRESS_PATTERN,
    IDENTIFIER_PATTERN,
    ActionRef,
    Address,
    Allocation,
    AllocationSet,
    DirectAccount,
    LiquidityReserve,
    SaleTier,
    Target,
    VestingPool,
    VestingSchedule,
    parse_allocation,
    parse_allocations,
)
from tokenplan_core.schemas.distribution_spec import (
    DirectAccountEntry,
    DistributionSpec,
    PaymentAssetConfig,
    SaleConfig,
    SaleTierEntry,
    TokenConfig,
    VestingEntry,
    VestingPoolEntry,
)
from tokenplan_core.schemas.plan import (
    Action,
    CallContract,
    CreateContract,
    DeploymentPlan,
    OwnershipSlot,
    PlanHandle,
    iter_refs,
)

__all__: list[str] = [
    # Input
    "DistributionSpec",
    "TokenConfig",
    "PaymentAssetConfig",
    "SaleConfig",
    "SaleTierEntry",
    "VestingPoolEntry",
    "DirectAccountEntry",
    "VestingEntry",
    # Allocations
    "Allocation",
    "AllocationSet",
    "SaleTier",
    "VestingPool",
    "LiquidityReserve",
    "DirectAccount",
    "VestingSchedule",
    "ActionRef",
    "Address",
    "Target",
    "parse_allocation",
    "parse_allocations",
    "ADDRESS_PATTERN",
    "IDENTIFIER_PATTERN",
    # Plan
    "Action",
    "CreateContract",
    "CallContract",
    "DeploymentPlan",
    "OwnershipSlot",
    "PlanHandle",
    "iter_refs",
]
