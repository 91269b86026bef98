"""Shared pytest fixtures for tokenplan-core tests.

This module provides common fixtures used across unit, integration,
and contract tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml

from tokenplan_core.compiler.environment import BuildMode, DeploymentEnvironment
from tokenplan_core.schemas import DistributionSpec

ROUTER_ADDRESS = "0x10ED43C718714eb63d5aA57B78B54704E256024E"
PAYMENT_ASSET_ADDRESS = "0x55d398326f99059fF775485246999027B3197955"
TREASURY_ADDRESS = "0x03d1ECec6513Da227C94Ca6E9a04BcB04A777D32"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Without this, structlog may use different processors depending on
    test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def environment() -> DeploymentEnvironment:
    """Development environment with a liquidity router configured."""
    return DeploymentEnvironment(liquidity_router=ROUTER_ADDRESS)


@pytest.fixture
def production_environment() -> DeploymentEnvironment:
    """Production environment binding an existing payment asset."""
    return DeploymentEnvironment(
        build_mode=BuildMode.PRODUCTION,
        liquidity_router=ROUTER_ADDRESS,
        payment_asset_address=PAYMENT_ASSET_ADDRESS,
    )


@pytest.fixture
def sample_distribution() -> dict[str, Any]:
    """Return a minimal distribution: supply 1000, two tiers, one account.

    Tiers take 1% and 2% with no affiliate rate, the account 0.5%, so
    35 base units are allocated and 965 remain for the liquidity reserve.
    """
    return {
        "name": "minimal",
        "token": {"contract": "Token", "total_supply": 1000},
        "tiers": [
            {
                "id": "tier_1",
                "name": "Tier 1",
                "supply_percent": "1",
                "price": "0.000034",
                "start": "2024-05-31T15:43:34Z",
            },
            {
                "id": "tier_2",
                "name": "Tier 2",
                "supply_percent": "2",
                "price": "0.000038",
            },
        ],
        "accounts": [
            {
                "id": "treasury",
                "supply_percent": "0.5",
                "address": TREASURY_ADDRESS,
            },
        ],
    }


@pytest.fixture
def sample_distribution_with_pool(sample_distribution: dict[str, Any]) -> dict[str, Any]:
    """Minimal distribution plus a 10% team vesting pool (remainder 865)."""
    return {
        **sample_distribution,
        "pools": [
            {
                "id": "team",
                "name": "Team Pool",
                "supply_percent": "10",
                "vesting": {
                    "cliff_months": 4,
                    "cliff_percent": "10",
                    "linear_months": 36,
                },
            },
        ],
    }


@pytest.fixture
def sample_spec(sample_distribution: dict[str, Any]) -> DistributionSpec:
    return DistributionSpec.model_validate(sample_distribution)


@pytest.fixture
def pool_spec(sample_distribution_with_pool: dict[str, Any]) -> DistributionSpec:
    return DistributionSpec.model_validate(sample_distribution_with_pool)


@pytest.fixture
def distribution_yaml(tmp_path: Path, sample_distribution_with_pool: dict[str, Any]) -> Path:
    """Write the pool distribution to distribution.yaml and return its path."""
    path = tmp_path / "distribution.yaml"
    path.write_text(yaml.safe_dump(sample_distribution_with_pool, sort_keys=False))
    return path
