"""Allocation model builder for tokenplan-core.

Materializes the AllocationSet from a DistributionSpec: every table row
becomes a frozen allocation whose base-unit fields are derived with the
fixed-point conversions in ``tokenplan_core.units``.

Sale tiers solve two constraints at once. A tier's supply share P covers
the tokens sold plus an affiliate pool paying rate a on every sale, so

    tokens            = percent_of_supply(P / (1 + a))
    affiliate_reserve = percent_of_supply(P) - tokens

Totals are not checked here; see ``tokenplan_core.compiler.validator``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from fractions import Fraction

import structlog

from tokenplan_core.compiler.environment import DeploymentEnvironment
from tokenplan_core.errors import SchemaMismatchError
from tokenplan_core.schemas.allocation import (
    AllocationSet,
    DirectAccount,
    SaleTier,
    VestingPool,
    VestingSchedule,
)
from tokenplan_core.schemas.distribution_spec import (
    DirectAccountEntry,
    DistributionSpec,
    SaleTierEntry,
    VestingEntry,
    VestingPoolEntry,
)
from tokenplan_core.units import (
    PERCENT_DENOMINATOR,
    calendar_timestamp,
    fiat_amount,
    fixed_percent,
    months_to_seconds,
    percent_of_supply,
    to_fraction,
    token_amount,
)

logger = structlog.get_logger(__name__)


@contextmanager
def _row(subject: str) -> Iterator[None]:
    """Turn value errors raised while deriving a row into schema errors."""
    try:
        yield
    except ValueError as e:
        raise SchemaMismatchError(
            subject,
            expected="derivable allocation values",
            actual=str(e).splitlines()[0],
            internal_details=str(e),
        ) from None


def affiliate_split(
    supply_percent: Fraction,
    affiliate_percent: int,
    total_supply: int,
) -> tuple[int, int]:
    """Split a tier's supply share into (tokens for sale, affiliate reserve).

    Args:
        supply_percent: Tier share of supply in percentage points.
        affiliate_percent: Rebate rate in 1/1_000_000 units.
        total_supply: Total supply in base units.

    Example:
        >>> affiliate_split(Fraction(1, 2), 100_000, 10**30)
        (4545454500000000000000000000, 454545500000000000000000000)
    """
    rate = Fraction(affiliate_percent, PERCENT_DENOMINATOR)
    tier_total = percent_of_supply(supply_percent, total_supply)
    tokens = percent_of_supply(supply_percent / (1 + rate), total_supply)
    return tokens, tier_total - tokens


class AllocationBuilder:
    """Build the allocation set for a DistributionSpec.

    Allocations come out in declaration order: sale tiers, vesting pools,
    direct accounts. The liquidity reserve is added later by the residual
    allocator.

    Example:
        >>> builder = AllocationBuilder(spec, environment)
        >>> allocations = builder.build()
        >>> allocations.get("seed_sale_1").tokens
    """

    def __init__(
        self,
        spec: DistributionSpec,
        environment: DeploymentEnvironment | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            spec: Distribution table.
            environment: Source for ``address_env`` lookups. Defaults to the
                process environment.
        """
        self.spec = spec
        self.environment = environment or DeploymentEnvironment.from_env()

    @property
    def total_supply(self) -> int:
        return self.spec.token.total_supply

    def build(self) -> AllocationSet:
        """Derive every allocation.

        Raises:
            SchemaMismatchError: If a row cannot produce a valid allocation
                or two rows share an id.
            InvalidDateError: If the first tier's start is not an instant.
            DeploymentEnvironmentError: If an account address reference is unset.
        """
        self._check_unique_ids()

        allocations = [
            *(self.sale_tier(entry, index) for index, entry in enumerate(self.spec.tiers)),
            *(self.vesting_pool(entry) for entry in self.spec.pools),
            *(self.direct_account(entry) for entry in self.spec.accounts),
        ]
        result = AllocationSet.of(allocations)

        logger.debug(
            "allocations_built",
            distribution=self.spec.name,
            tiers=len(self.spec.tiers),
            pools=len(self.spec.pools),
            accounts=len(self.spec.accounts),
        )
        return result

    def sale_tier(self, entry: SaleTierEntry, index: int) -> SaleTier:
        """Derive a SaleTier from its row.

        The first tier carries an absolute start time; later tiers open
        when the previous one closes (start time 0).
        """
        if index == 0 and entry.start is None:
            raise SchemaMismatchError(
                entry.id,
                expected="'start' on the first sale tier",
                actual="no start",
            )
        if index > 0 and entry.start is not None:
            raise SchemaMismatchError(
                entry.id,
                expected="no 'start' (later tiers open when the previous tier closes)",
                actual=f"start '{entry.start}'",
            )
        start = calendar_timestamp(entry.start) if entry.start is not None else 0

        with _row(entry.id):
            supply_percent = to_fraction(entry.supply_percent)
            affiliate_percent = fixed_percent(entry.affiliate_percent)
            tokens, affiliate_reserve = affiliate_split(
                supply_percent, affiliate_percent, self.total_supply
            )
            max_percent = (
                entry.max_per_wallet_percent
                if entry.max_per_wallet_percent is not None
                else entry.supply_percent
            )
            return SaleTier(
                id=entry.id,
                name=entry.name,
                tokens=tokens,
                cooldown_duration=months_to_seconds(entry.cooldown_months),
                sale_start_time=start,
                sale_price=fiat_amount(entry.price, self.spec.payment_asset.decimals),
                sale_min_per_wallet=token_amount(entry.min_per_wallet, self.spec.token.decimals),
                sale_max_per_wallet=percent_of_supply(max_percent, self.total_supply),
                affiliate_reserve=affiliate_reserve,
                affiliate_percent=affiliate_percent,
                vesting=self.vesting_schedule(entry.vesting),
            )

    def vesting_pool(self, entry: VestingPoolEntry) -> VestingPool:
        with _row(entry.id):
            return VestingPool(
                id=entry.id,
                name=entry.name,
                tokens=percent_of_supply(entry.supply_percent, self.total_supply),
                vesting=self.vesting_schedule(entry.vesting),
            )

    def direct_account(self, entry: DirectAccountEntry) -> DirectAccount:
        if entry.address is not None:
            address = entry.address
        else:
            assert entry.address_env is not None  # Type narrowing for mypy
            address = self.environment.lookup(entry.address_env)

        with _row(entry.id):
            return DirectAccount(
                id=entry.id,
                tokens=(
                    percent_of_supply(entry.supply_percent, self.total_supply)
                    - percent_of_supply(entry.less_percent, self.total_supply)
                ),
                address=address,
            )

    @staticmethod
    def vesting_schedule(entry: VestingEntry) -> VestingSchedule:
        return VestingSchedule(
            tge_percent=fixed_percent(entry.tge_percent),
            cliff_duration=months_to_seconds(entry.cliff_months),
            cliff_percent=fixed_percent(entry.cliff_percent),
            linear_duration=months_to_seconds(entry.linear_months),
        )

    def _check_unique_ids(self) -> None:
        seen: set[str] = set()
        for allocation_id in self.spec.allocation_ids():
            if allocation_id in seen:
                raise SchemaMismatchError(
                    allocation_id,
                    expected="unique allocation ids",
                    actual="id declared more than once",
                )
            seen.add(allocation_id)


def build_allocations(
    spec: DistributionSpec,
    environment: DeploymentEnvironment | None = None,
) -> AllocationSet:
    """Build the allocation set for ``spec``. See AllocationBuilder."""
    return AllocationBuilder(spec, environment).build()
