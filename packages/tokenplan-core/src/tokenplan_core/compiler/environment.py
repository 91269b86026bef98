"""Deployment environment for tokenplan-core.

This module reads the externally provided values a distribution compiles
against:
- Build mode (TOKENPLAN_BUILD_MODE): deploy a test payment asset or bind
  an existing one
- Payment asset address (TOKENPLAN_PAYMENT_ASSET_ADDRESS), production only
- Liquidity router address (TOKENPLAN_LIQUIDITY_ROUTER)
- Account addresses referenced by ``address_env`` in the distribution table
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from tokenplan_core.errors import DeploymentEnvironmentError
from tokenplan_core.schemas.allocation import ADDRESS_PATTERN, Address

logger = logging.getLogger(__name__)

# Environment variable names
BUILD_MODE_ENV_VAR = "TOKENPLAN_BUILD_MODE"
PAYMENT_ASSET_ENV_VAR = "TOKENPLAN_PAYMENT_ASSET_ADDRESS"
LIQUIDITY_ROUTER_ENV_VAR = "TOKENPLAN_LIQUIDITY_ROUTER"

_ADDRESS_RE = re.compile(ADDRESS_PATTERN)


class BuildMode(str, Enum):
    """Selects how the payment asset is provided."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


DEFAULT_BUILD_MODE = BuildMode.DEVELOPMENT


def _checked_address(variable: str, value: str) -> str:
    if not _ADDRESS_RE.match(value):
        raise DeploymentEnvironmentError(
            variable,
            "is not a 0x-prefixed 20-byte hex address",
            internal_details=f"{variable}={value!r}",
        )
    return value


@dataclass(frozen=True)
class DeploymentEnvironment:
    """External addresses and build mode for one compilation.

    Attributes:
        build_mode: DEVELOPMENT deploys a test payment asset, PRODUCTION
            binds ``payment_asset_address``.
        liquidity_router: Router address passed to the sale contract.
        payment_asset_address: Existing payment asset (production only).
        variables: Values available to ``address_env`` references.

    Example:
        >>> env = DeploymentEnvironment.from_env()
        >>> env.build_mode
        <BuildMode.DEVELOPMENT: 'development'>

        >>> env = DeploymentEnvironment(
        ...     build_mode=BuildMode.PRODUCTION,
        ...     liquidity_router="0x10ED43C718714eb63d5aA57B78B54704E256024E",
        ...     payment_asset_address="0x55d398326f99059fF775485246999027B3197955",
        ... )
    """

    build_mode: BuildMode = DEFAULT_BUILD_MODE
    liquidity_router: str | None = None
    payment_asset_address: str | None = None
    variables: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DeploymentEnvironment:
        """Read the environment.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Addresses are checked on use by require_router, payment_asset
        and lookup.

        Raises:
            DeploymentEnvironmentError: If the build mode is unknown.
        """
        source = dict(os.environ if environ is None else environ)

        raw_mode = source.get(BUILD_MODE_ENV_VAR, DEFAULT_BUILD_MODE.value).strip().lower()
        try:
            build_mode = BuildMode(raw_mode)
        except ValueError:
            raise DeploymentEnvironmentError(
                BUILD_MODE_ENV_VAR,
                f"must be one of {', '.join(m.value for m in BuildMode)}, got '{raw_mode}'",
            ) from None

        router = source.get(LIQUIDITY_ROUTER_ENV_VAR) or None
        payment = source.get(PAYMENT_ASSET_ENV_VAR) or None

        logger.debug("Deployment environment loaded: build_mode=%s", build_mode.value)
        return cls(
            build_mode=build_mode,
            liquidity_router=router,
            payment_asset_address=payment,
            variables=source,
        )

    def with_mode(self, build_mode: BuildMode | str) -> DeploymentEnvironment:
        """Return a copy with a different build mode."""
        return DeploymentEnvironment(
            build_mode=BuildMode(build_mode),
            liquidity_router=self.liquidity_router,
            payment_asset_address=self.payment_asset_address,
            variables=self.variables,
        )

    def lookup(self, variable: str) -> str:
        """Resolve an ``address_env`` reference.

        Raises:
            DeploymentEnvironmentError: If unset or not an address.
        """
        value = self.variables.get(variable)
        if not value:
            raise DeploymentEnvironmentError(variable)
        return _checked_address(variable, value)

    def require_router(self) -> str:
        """Return the liquidity router address.

        Raises:
            DeploymentEnvironmentError: If it is not configured or malformed.
        """
        if self.liquidity_router is None:
            raise DeploymentEnvironmentError(LIQUIDITY_ROUTER_ENV_VAR)
        return _checked_address(LIQUIDITY_ROUTER_ENV_VAR, self.liquidity_router)

    def payment_asset(self) -> Address | None:
        """Return the existing payment asset in production, None in development.

        Raises:
            DeploymentEnvironmentError: If production has no address configured.
        """
        if self.build_mode is BuildMode.DEVELOPMENT:
            return None
        if self.payment_asset_address is None:
            raise DeploymentEnvironmentError(
                PAYMENT_ASSET_ENV_VAR,
                "is required when building for production",
            )
        return Address(
            value=_checked_address(PAYMENT_ASSET_ENV_VAR, self.payment_asset_address)
        )
