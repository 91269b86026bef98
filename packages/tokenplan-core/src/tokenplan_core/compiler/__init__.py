"""Compiler module for tokenplan-core.

This module exports the Compiler class, the pipeline stages, and output models:
- Compiler: Main compiler class
- DeploymentEnvironment: Build mode and external addresses
- AllocationBuilder / build_allocations: Derive base-unit allocations
- check_supply / verify_conservation: Supply invariant
- allocate_residual: Bind the remainder to the liquidity reserve
- GraphCompiler: Emit the ordered deployment plan
- DeploymentArtifacts: Output contract model
- ArtifactMetadata: Compilation metadata model
"""

from __future__ import annotations

from tokenplan_core.compiler.builder import (
    AllocationBuilder,
    affiliate_split,
    build_allocations,
)
from tokenplan_core.compiler.compiler import TOKENPLAN_CORE_VERSION, Compiler
from tokenplan_core.compiler.environment import (
    BUILD_MODE_ENV_VAR,
    DEFAULT_BUILD_MODE,
    LIQUIDITY_ROUTER_ENV_VAR,
    PAYMENT_ASSET_ENV_VAR,
    BuildMode,
    DeploymentEnvironment,
)
from tokenplan_core.compiler.graph import (
    PAYMENT_ASSET_ID,
    SALE_CONTRACT_ID,
    TOKEN_ID,
    CompiledGraph,
    ContractNames,
    GraphCompiler,
    align_parallel,
    build_handle,
    tier_parameters,
    verify_plan,
)
from tokenplan_core.compiler.models import (
    ARTIFACTS_VERSION,
    ArtifactMetadata,
    DeploymentArtifacts,
)
from tokenplan_core.compiler.residual import DEFAULT_RESERVE_ID, allocate_residual
from tokenplan_core.compiler.validator import (
    SupplyCheck,
    check_supply,
    verify_conservation,
)

__all__: list[str] = [
    # Compiler class
    "Compiler",
    "TOKENPLAN_CORE_VERSION",
    # Environment
    "DeploymentEnvironment",
    "BuildMode",
    "DEFAULT_BUILD_MODE",
    "BUILD_MODE_ENV_VAR",
    "PAYMENT_ASSET_ENV_VAR",
    "LIQUIDITY_ROUTER_ENV_VAR",
    # Allocation building
    "AllocationBuilder",
    "build_allocations",
    "affiliate_split",
    # Supply invariant
    "SupplyCheck",
    "check_supply",
    "verify_conservation",
    "allocate_residual",
    "DEFAULT_RESERVE_ID",
    # Deployment graph
    "GraphCompiler",
    "CompiledGraph",
    "ContractNames",
    "align_parallel",
    "build_handle",
    "tier_parameters",
    "verify_plan",
    "PAYMENT_ASSET_ID",
    "SALE_CONTRACT_ID",
    "TOKEN_ID",
    # Output models
    "DeploymentArtifacts",
    "ArtifactMetadata",
    "ARTIFACTS_VERSION",
]
