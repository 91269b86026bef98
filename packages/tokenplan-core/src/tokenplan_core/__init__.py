"""tokenplan-core: Allocation and deployment graph compiler.

This package provides:
- DistributionSpec: Pydantic schema for distribution.yaml
- Allocation models: SaleTier, VestingPool, LiquidityReserve, DirectAccount
- Compiler: Transform DistributionSpec -> DeploymentArtifacts
- DeploymentPlan: Ordered actions consumed by the execution engine
- JSON Schema export utilities
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compiler and output models
from tokenplan_core.compiler import (
    ArtifactMetadata,
    BuildMode,
    Compiler,
    DeploymentArtifacts,
    DeploymentEnvironment,
    GraphCompiler,
    SupplyCheck,
    align_parallel,
    allocate_residual,
    build_allocations,
    build_handle,
    check_supply,
    verify_conservation,
    verify_plan,
)

# Error types
from tokenplan_core.errors import (
    CompilationError,
    DeploymentEnvironmentError,
    InvalidDateError,
    SchemaMismatchError,
    SupplyExceededError,
    TokenplanError,
    UnresolvedReferenceError,
)

# JSON Schema export functions
from tokenplan_core.export import (
    export_deployment_artifacts_schema,
    export_distribution_spec_schema,
)
from tokenplan_core.presets import get_preset, squiggle_spec

# Schema models
from tokenplan_core.schemas import (
    ActionRef,
    Address,
    AllocationSet,
    CallContract,
    CreateContract,
    DeploymentPlan,
    DirectAccount,
    DistributionSpec,
    LiquidityReserve,
    OwnershipSlot,
    PlanHandle,
    SaleTier,
    VestingPool,
    VestingSchedule,
    parse_allocations,
)

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "DeploymentArtifacts",
    "ArtifactMetadata",
    "DeploymentEnvironment",
    "BuildMode",
    "GraphCompiler",
    "SupplyCheck",
    "build_allocations",
    "check_supply",
    "allocate_residual",
    "verify_conservation",
    "align_parallel",
    "build_handle",
    "verify_plan",
    # Errors
    "TokenplanError",
    "CompilationError",
    "SupplyExceededError",
    "UnresolvedReferenceError",
    "SchemaMismatchError",
    "InvalidDateError",
    "DeploymentEnvironmentError",
    # JSON Schema exports
    "export_distribution_spec_schema",
    "export_deployment_artifacts_schema",
    # Presets
    "squiggle_spec",
    "get_preset",
    # Schema models
    "DistributionSpec",
    "AllocationSet",
    "SaleTier",
    "VestingPool",
    "LiquidityReserve",
    "DirectAccount",
    "VestingSchedule",
    "ActionRef",
    "Address",
    "CreateContract",
    "CallContract",
    "DeploymentPlan",
    "OwnershipSlot",
    "PlanHandle",
    "parse_allocations",
]
