"""Compiler output models for tokenplan-core.

This module defines the output contract produced by the Compiler and
handed to the execution engine.

Version History:
- v1.0.0: Initial release with plan, ownership table and plan handle
"""

from __future__ import annotations

import hashlib
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tokenplan_core.schemas import (
    AllocationSet,
    DeploymentPlan,
    OwnershipSlot,
    PlanHandle,
)

ARTIFACTS_VERSION = "1.0.0"


class ArtifactMetadata(BaseModel):
    """Compilation metadata for tracking artifact provenance.

    Attributes:
        compiled_at: Timestamp when compilation occurred (UTC).
        tokenplan_core_version: Version of tokenplan-core that produced artifacts.
        source_hash: SHA-256 hash of the canonical distribution JSON.
        build_mode: Build mode the plan was compiled for.

    Example:
        >>> metadata = ArtifactMetadata(
        ...     compiled_at=datetime.now(timezone.utc),
        ...     tokenplan_core_version="0.1.0",
        ...     source_hash="e3b0c44...",
        ...     build_mode="development",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    compiled_at: datetime = Field(
        ...,
        description="Timestamp when compilation occurred (UTC)",
    )
    tokenplan_core_version: str = Field(
        ...,
        min_length=1,
        description="Version of tokenplan-core that produced artifacts",
    )
    source_hash: str = Field(
        ...,
        min_length=1,
        description="SHA-256 hash of the canonical distribution JSON",
    )
    build_mode: str = Field(
        ...,
        description="Build mode the plan was compiled for",
    )


class DeploymentArtifacts(BaseModel):
    """Immutable output contract from compilation.

    This is the sole integration point between tokenplan-core and the
    execution engine that runs the plan.

    Contract Rules:
    - Model is immutable (frozen=True)
    - Unknown fields are rejected (extra="forbid")
    - ``total_supply == allocated + remainder``
    - Ownership slot amounts sum to ``total_supply``
    - JSON Schema exported for cross-language validation

    Attributes:
        version: Contract version (semver). Default "1.0.0".
        metadata: Compilation metadata.
        total_supply: Total supply in base units.
        allocated: Explicit obligations before the residual.
        remainder: Residual bound to the liquidity reserve.
        allocations: Exhaustive allocations with bound targets.
        ownership: Token contract owner/amount slots, in argument order.
        plan: Ordered deployment actions.
        handle: Resolved targets for consumers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(
        default=ARTIFACTS_VERSION,
        description="Contract version (semver)",
    )
    metadata: ArtifactMetadata = Field(
        ...,
        description="Compilation metadata",
    )
    total_supply: int = Field(..., gt=0, description="Total supply in base units")
    allocated: int = Field(..., ge=0, description="Explicit obligations before the residual")
    remainder: int = Field(..., gt=0, description="Residual bound to the liquidity reserve")
    allocations: AllocationSet = Field(
        ...,
        description="Exhaustive allocations with bound targets",
    )
    ownership: list[OwnershipSlot] = Field(
        ...,
        min_length=1,
        description="Token contract owner/amount slots",
    )
    plan: DeploymentPlan = Field(
        ...,
        description="Ordered deployment actions",
    )
    handle: PlanHandle = Field(
        ...,
        description="Resolved targets for consumers",
    )

    def plan_digest(self) -> str:
        """SHA-256 of the plan JSON.

        Independent of ``metadata``, so two compilations of the same inputs
        share a digest.
        """
        return hashlib.sha256(self.plan.model_dump_json().encode("utf-8")).hexdigest()
