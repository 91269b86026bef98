"""Compiler class for tokenplan-core.

This module implements the main Compiler class that transforms a
DistributionSpec (distribution.yaml or an in-code preset) plus the
deployment environment into DeploymentArtifacts.

Pipeline:
    build allocations -> check supply -> allocate residual
    -> verify conservation -> compile deployment graph

Each stage returns a new immutable value; any error aborts the whole
compilation and no partial plan is returned.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path

import structlog

from tokenplan_core.compiler.builder import build_allocations
from tokenplan_core.compiler.environment import BuildMode, DeploymentEnvironment
from tokenplan_core.compiler.graph import ContractNames, GraphCompiler
from tokenplan_core.compiler.models import ArtifactMetadata, DeploymentArtifacts
from tokenplan_core.compiler.residual import allocate_residual
from tokenplan_core.compiler.validator import (
    SupplyCheck,
    check_supply,
    verify_conservation,
)
from tokenplan_core.errors import SchemaMismatchError
from tokenplan_core.observability import stage
from tokenplan_core.schemas import DistributionSpec
from tokenplan_core.units import fixed_percent

logger = structlog.get_logger(__name__)

# Package version - kept in step with pyproject.toml
TOKENPLAN_CORE_VERSION = "0.1.0"


class Compiler:
    """Compile a DistributionSpec to DeploymentArtifacts.

    The Compiler turns the allocation table into an ordered deployment
    plan the execution engine runs action by action.

    Compilation includes:
    - Loading and validating distribution.yaml (or taking a spec object)
    - Deriving base-unit allocations
    - Enforcing the supply invariant and binding the residual
    - Emitting and verifying the deployment plan
    - Computing a source hash for provenance

    Example:
        >>> compiler = Compiler()
        >>> artifacts = compiler.compile(Path("distribution.yaml"))
        >>>
        >>> # With an explicit environment
        >>> env = DeploymentEnvironment.from_env().with_mode("production")
        >>> artifacts = Compiler(env).compile(squiggle_spec())
    """

    def __init__(
        self,
        environment: DeploymentEnvironment | None = None,
        build_mode: BuildMode | str | None = None,
    ) -> None:
        """Initialize the Compiler.

        Args:
            environment: Deployment environment. If not specified, it is
                read from the process environment at compile time.
            build_mode: Overrides the environment's build mode.
        """
        self.environment = environment
        self.build_mode = build_mode

    def compile(self, spec: DistributionSpec | Path | str) -> DeploymentArtifacts:
        """Compile a distribution to DeploymentArtifacts.

        Args:
            spec: DistributionSpec, or path to distribution.yaml.

        Returns:
            Immutable DeploymentArtifacts ready for the execution engine.

        Raises:
            FileNotFoundError: If the distribution file is not found.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If spec validation fails.
            SupplyExceededError: If obligations meet or exceed total supply.
            SchemaMismatchError: If a row or action has the wrong shape.
            UnresolvedReferenceError: If a target never resolves.
            DeploymentEnvironmentError: If a required address is missing.
        """
        spec = self._load(spec)
        environment = self._environment()
        with stage("compile", distribution=spec.name, build_mode=environment.build_mode.value):
            return self._compile(spec, environment)

    def _compile(
        self,
        spec: DistributionSpec,
        environment: DeploymentEnvironment,
    ) -> DeploymentArtifacts:
        total_supply = spec.token.total_supply

        allocations = build_allocations(spec, environment)
        check = check_supply(allocations, total_supply)
        exhaustive = allocate_residual(allocations, check, spec.liquidity_reserve_id)
        verify_conservation(exhaustive, total_supply)

        graph = GraphCompiler(
            ContractNames.from_spec(spec),
            total_supply=total_supply,
            liquidity_router=environment.require_router(),
            liquidity_percent=self._liquidity_percent(spec),
            payment_asset=environment.payment_asset(),
        ).compile(exhaustive)

        metadata = ArtifactMetadata(
            compiled_at=datetime.now(timezone.utc),
            tokenplan_core_version=TOKENPLAN_CORE_VERSION,
            source_hash=self._compute_hash(spec),
            build_mode=environment.build_mode.value,
        )

        logger.info(
            "plan_compiled",
            distribution=spec.name,
            build_mode=environment.build_mode.value,
            actions=len(graph.plan.actions),
            remainder=check.remainder,
        )
        return DeploymentArtifacts(
            metadata=metadata,
            total_supply=total_supply,
            allocated=check.allocated,
            remainder=check.remainder,
            allocations=graph.allocations,
            ownership=graph.ownership,
            plan=graph.plan,
            handle=graph.handle,
        )

    def summarize(self, spec: DistributionSpec | Path | str) -> SupplyCheck:
        """Build allocations and check supply without emitting actions.

        Raises:
            SupplyExceededError: If obligations meet or exceed total supply.
            SchemaMismatchError: If a row cannot produce a valid allocation.
        """
        spec = self._load(spec)
        allocations = build_allocations(spec, self._environment())
        return check_supply(allocations, spec.token.total_supply)

    def _environment(self) -> DeploymentEnvironment:
        environment = self.environment or DeploymentEnvironment.from_env()
        if self.build_mode is not None:
            environment = environment.with_mode(self.build_mode)
        return environment

    def _load(self, spec: DistributionSpec | Path | str) -> DistributionSpec:
        if isinstance(spec, DistributionSpec):
            return spec
        return DistributionSpec.from_yaml(spec)

    def _liquidity_percent(self, spec: DistributionSpec) -> int:
        try:
            return fixed_percent(spec.sale.liquidity_percent)
        except ValueError as e:
            raise SchemaMismatchError(
                "sale",
                expected="liquidity_percent in 1/1000000 units",
                actual=str(spec.sale.liquidity_percent),
                internal_details=str(e),
            ) from None

    def _compute_hash(self, spec: DistributionSpec) -> str:
        """Compute SHA-256 hash of the canonical spec JSON.

        Args:
            spec: Validated distribution.

        Returns:
            Hex-encoded SHA-256 hash.
        """
        return hashlib.sha256(spec.model_dump_json().encode("utf-8")).hexdigest()
