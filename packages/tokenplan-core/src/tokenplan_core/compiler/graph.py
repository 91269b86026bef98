"""Deployment graph compiler for tokenplan-core.

Turns an exhaustive AllocationSet into a DeploymentPlan: a totally ordered
list of CreateContract/CallContract actions in which every input is a
literal or an ActionRef to an earlier creation.

Emission order:
0. Test payment asset (development builds only)
1. Sale contract, with every tier's parameters as literals
2. One vesting contract per vesting pool, referencing the sale contract
3. Token contract, minting to the parallel owner/amount sequences
4. setToken on every vesting contract and on the sale contract, then the
   payment asset setter on the sale contract

Action ids are fixed names or allocation ids, never derived from content,
so recompiling the same table yields the same ids.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from tokenplan_core.errors import SchemaMismatchError, UnresolvedReferenceError
from tokenplan_core.schemas.allocation import (
    ActionRef,
    Address,
    AllocationSet,
    SaleTier,
    VestingPool,
)
from tokenplan_core.schemas.distribution_spec import DistributionSpec
from tokenplan_core.schemas.plan import (
    CallContract,
    CreateContract,
    DeploymentPlan,
    OwnershipSlot,
    PlanHandle,
)

logger = structlog.get_logger(__name__)

# Fixed action ids
PAYMENT_ASSET_ID = "payment_asset"
SALE_CONTRACT_ID = "sale_contract"
TOKEN_ID = "token"

RESERVED_ACTION_IDS = frozenset({PAYMENT_ASSET_ID, SALE_CONTRACT_ID, TOKEN_ID})

SALE_OWNED_VARIANTS = ("sale_tier", "liquidity_reserve")
MINTED_VARIANTS = ("vesting_pool", "direct_account")


@dataclass(frozen=True)
class ContractNames:
    """Contract and method names the plan targets.

    Attributes:
        token: Token contract.
        sale: Sale contract.
        vesting: Contract deployed per vesting pool.
        payment_asset: Test payment asset deployed in development builds.
        set_token: Method wiring the token into sale and vesting contracts.
        set_payment_asset: Method wiring the payment asset into the sale contract.
    """

    token: str
    sale: str = "SaleContract"
    vesting: str = "VestingContract"
    payment_asset: str = "USDT"
    set_token: str = "setToken"
    set_payment_asset: str = "setUSDT"

    @classmethod
    def from_spec(cls, spec: DistributionSpec) -> ContractNames:
        return cls(
            token=spec.token.contract,
            sale=spec.sale.contract,
            vesting=spec.vesting_contract,
            payment_asset=spec.payment_asset.contract,
            set_token=spec.sale.set_token_method,
            set_payment_asset=spec.sale.set_payment_asset_method,
        )


@dataclass(frozen=True)
class CompiledGraph:
    """Output of GraphCompiler.compile().

    Attributes:
        plan: Ordered, verified actions.
        allocations: Allocations with every target bound.
        ownership: Token contract owner/amount slots, in argument order.
        handle: Resolved targets for consumers.
    """

    plan: DeploymentPlan
    allocations: AllocationSet
    ownership: list[OwnershipSlot]
    handle: PlanHandle


def tier_parameters(tier: SaleTier) -> dict[str, Any]:
    """Sale contract tier struct for ``tier``.

    Keys follow the contract's struct field names. The sale and affiliate
    balances start equal to their totals.
    """
    return {
        "name": tier.name,
        "cooldownDuration": tier.cooldown_duration,
        "saleStartTime": tier.sale_start_time,
        "salePrice": tier.sale_price,
        "saleTotalAmount": tier.tokens,
        "saleBalance": tier.tokens,
        "saleMinPerWallet": tier.sale_min_per_wallet,
        "saleMaxPerWallet": tier.sale_max_per_wallet,
        "affiliateTotalAmount": tier.affiliate_reserve,
        "affiliateBalance": tier.affiliate_reserve,
        "affiliatePercent": tier.affiliate_percent,
        "tgePercent": tier.vesting.tge_percent,
        "cliffDuration": tier.vesting.cliff_duration,
        "cliffPercent": tier.vesting.cliff_percent,
        "linearDuration": tier.vesting.linear_duration,
    }


def verify_plan(plan: DeploymentPlan) -> None:
    """Check action ids are unique and every dependency comes earlier.

    Raises:
        SchemaMismatchError: If two actions share an id.
        UnresolvedReferenceError: If a dependency is unknown or later.
    """
    plan.verify()


def align_parallel(
    action_id: str,
    owners: Sequence[tuple[str, Any]],
    amounts: Sequence[tuple[str, int]],
) -> tuple[list[Any], list[int]]:
    """Zip keyed owner and amount sequences into two aligned argument lists.

    Args:
        action_id: Action the sequences are built for (error context).
        owners: (slot key, owner) pairs.
        amounts: (slot key, amount) pairs.

    Returns:
        (owners, amounts) with keys stripped.

    Raises:
        SchemaMismatchError: If the lengths differ or the keys at any
            position differ.
    """
    if len(owners) != len(amounts):
        raise SchemaMismatchError(
            action_id,
            expected=f"{len(owners)} amounts for {len(owners)} owners",
            actual=f"{len(amounts)} amounts",
            reason="parallel sequences differ in length",
        )
    for index, ((owner_key, _), (amount_key, _)) in enumerate(zip(owners, amounts)):
        if owner_key != amount_key:
            raise SchemaMismatchError(
                action_id,
                expected=f"amount for '{owner_key}' at position {index}",
                actual=f"amount for '{amount_key}'",
                reason="parallel sequences are misaligned",
            )
    return [owner for _, owner in owners], [amount for _, amount in amounts]


def build_handle(
    plan: DeploymentPlan,
    allocations: AllocationSet,
    payment_asset: ActionRef | Address,
) -> PlanHandle:
    """Resolve every allocation target against the plan's creations.

    Raises:
        UnresolvedReferenceError: If a target is unbound, or an ActionRef
            has no matching creation action.
    """
    created = {action.id for action in plan.creations()}

    targets: dict[str, ActionRef | Address] = {}
    vesting: dict[str, ActionRef] = {}
    for allocation in allocations.allocations:
        target = allocation.target
        if target is None:
            raise UnresolvedReferenceError(None, allocation_id=allocation.id)
        if isinstance(target, ActionRef) and target.action_id not in created:
            raise UnresolvedReferenceError(target.action_id, allocation_id=allocation.id)
        if isinstance(allocation, VestingPool):
            if not isinstance(target, ActionRef):
                raise UnresolvedReferenceError(
                    str(target),
                    allocation_id=allocation.id,
                    internal_details="vesting pools must be owned by a vesting contract",
                )
            vesting[allocation.id] = target
        targets[allocation.id] = target

    for fixed_id in (TOKEN_ID, SALE_CONTRACT_ID):
        if fixed_id not in created:
            raise UnresolvedReferenceError(fixed_id)
    if isinstance(payment_asset, ActionRef) and payment_asset.action_id not in created:
        raise UnresolvedReferenceError(payment_asset.action_id)

    return PlanHandle(
        targets=targets,
        token=ActionRef(action_id=TOKEN_ID),
        sale_contract=ActionRef(action_id=SALE_CONTRACT_ID),
        payment_asset=payment_asset,
        vesting=vesting,
    )


class GraphCompiler:
    """Compile an exhaustive AllocationSet into a DeploymentPlan.

    Example:
        >>> compiler = GraphCompiler(
        ...     ContractNames(token="Squiggle"),
        ...     total_supply=1_000,
        ...     liquidity_router="0x10ED43C718714eb63d5aA57B78B54704E256024E",
        ... )
        >>> graph = compiler.compile(allocations)
        >>> [a.id for a in graph.plan.actions][:2]
        ['payment_asset', 'sale_contract']
    """

    def __init__(
        self,
        names: ContractNames,
        *,
        total_supply: int,
        liquidity_router: str,
        liquidity_percent: int = 0,
        payment_asset: Address | None = None,
    ) -> None:
        """Initialize the GraphCompiler.

        Args:
            names: Contract and method names.
            total_supply: Total supply the token contract must mint.
            liquidity_router: Router address passed to the sale contract.
            liquidity_percent: Share of raised funds paired into liquidity,
                in 1/1_000_000 units.
            payment_asset: Existing payment asset. None deploys a test one.
        """
        self.names = names
        self.total_supply = total_supply
        self.liquidity_router = liquidity_router
        self.liquidity_percent = liquidity_percent
        self.payment_asset = payment_asset

    def compile(self, allocations: AllocationSet) -> CompiledGraph:
        """Compile ``allocations`` into an ordered, verified plan.

        Args:
            allocations: Exhaustive allocations (residual already assigned).

        Raises:
            SchemaMismatchError: On a missing or duplicated liquidity reserve,
                a vesting pool id clashing with a fixed action id, misaligned
                owner/amount sequences, or amounts not summing to supply.
            UnresolvedReferenceError: If any target or reference does not
                resolve to an earlier creation.
        """
        self._check_allocations(allocations)

        actions: list[CreateContract | CallContract] = []
        payment_target: ActionRef | Address
        if self.payment_asset is None:
            actions.append(CreateContract(id=PAYMENT_ASSET_ID, contract=self.names.payment_asset))
            payment_target = ActionRef(action_id=PAYMENT_ASSET_ID)
        else:
            payment_target = self.payment_asset

        sale_ref = ActionRef(action_id=SALE_CONTRACT_ID)
        reserve = allocations.of_variant("liquidity_reserve")[0]
        actions.append(
            CreateContract(
                id=SALE_CONTRACT_ID,
                contract=self.names.sale,
                args=[
                    self.liquidity_router,
                    self.liquidity_percent,
                    reserve.tokens,
                    [tier_parameters(t) for t in allocations.of_variant("sale_tier")],
                ],
            )
        )

        bound = []
        for allocation in allocations.allocations:
            if isinstance(allocation, VestingPool):
                actions.append(self._vesting_contract(allocation, sale_ref))
                allocation = allocation.bind_target(ActionRef(action_id=allocation.id))
            elif allocation.variant in SALE_OWNED_VARIANTS:
                allocation = allocation.bind_target(sale_ref)
            bound.append(allocation)
        allocations = allocations.replaced(bound)

        ownership = self.ownership(allocations)
        owners, amounts = align_parallel(
            TOKEN_ID,
            [(slot.key, slot.target) for slot in ownership],
            [(slot.key, slot.amount) for slot in ownership],
        )
        actions.append(
            CreateContract(id=TOKEN_ID, contract=self.names.token, args=[owners, amounts])
        )

        token_ref = ActionRef(action_id=TOKEN_ID)
        for pool in allocations.of_variant("vesting_pool"):
            actions.append(
                CallContract(
                    id=f"{pool.id}.set_token",
                    target=pool.target,
                    method=self.names.set_token,
                    args=[token_ref],
                )
            )
        actions.append(
            CallContract(
                id=f"{SALE_CONTRACT_ID}.set_token",
                target=sale_ref,
                method=self.names.set_token,
                args=[token_ref],
            )
        )
        actions.append(
            CallContract(
                id=f"{SALE_CONTRACT_ID}.set_payment_asset",
                target=sale_ref,
                method=self.names.set_payment_asset,
                args=[payment_target],
                after=[TOKEN_ID],
            )
        )

        plan = DeploymentPlan(actions=actions)
        verify_plan(plan)
        handle = build_handle(plan, allocations, payment_target)

        logger.debug(
            "graph_compiled",
            actions=len(plan.actions),
            vesting_contracts=len(handle.vesting),
            owners=len(ownership),
        )
        return CompiledGraph(
            plan=plan,
            allocations=allocations,
            ownership=ownership,
            handle=handle,
        )

    def ownership(self, allocations: AllocationSet) -> list[OwnershipSlot]:
        """Token contract slots: minted allocations, then the sale contract.

        Vesting pools and direct accounts get one slot each, in declaration
        order. The sale contract's slot carries every sale tier's tokens and
        affiliate reserve plus the liquidity reserve.

        Raises:
            UnresolvedReferenceError: If a minted allocation has no target.
            SchemaMismatchError: If the slots do not sum to total supply.
        """
        slots = []
        for allocation in allocations.of_variant(*MINTED_VARIANTS):
            if allocation.target is None:
                raise UnresolvedReferenceError(None, allocation_id=allocation.id)
            slots.append(
                OwnershipSlot(
                    key=allocation.id,
                    allocation_ids=[allocation.id],
                    target=allocation.target,
                    amount=allocation.tokens,
                )
            )

        sale_owned = allocations.of_variant(*SALE_OWNED_VARIANTS)
        slots.append(
            OwnershipSlot(
                key=SALE_CONTRACT_ID,
                allocation_ids=[a.id for a in sale_owned],
                target=ActionRef(action_id=SALE_CONTRACT_ID),
                amount=sum(a.obligation for a in sale_owned),
            )
        )

        minted = sum(slot.amount for slot in slots)
        if minted != self.total_supply:
            raise SchemaMismatchError(
                TOKEN_ID,
                expected=f"amounts summing to total supply {self.total_supply}",
                actual=f"sum {minted}",
            )
        return slots

    def _vesting_contract(self, pool: VestingPool, sale_ref: ActionRef) -> CreateContract:
        return CreateContract(
            id=pool.id,
            contract=self.names.vesting,
            args=[
                pool.name,
                sale_ref,
                pool.vesting.tge_percent,
                pool.vesting.cliff_duration,
                pool.vesting.cliff_percent,
                pool.vesting.linear_duration,
            ],
        )

    def _check_allocations(self, allocations: AllocationSet) -> None:
        reserves = allocations.of_variant("liquidity_reserve")
        if len(reserves) != 1:
            raise SchemaMismatchError(
                "allocations",
                expected="exactly one liquidity reserve",
                actual=f"{len(reserves)} liquidity reserves",
            )
        for pool in allocations.of_variant("vesting_pool"):
            if pool.id in RESERVED_ACTION_IDS:
                raise SchemaMismatchError(
                    pool.id,
                    expected=f"vesting pool id outside {sorted(RESERVED_ACTION_IDS)}",
                    actual="id reserved for a fixed action",
                )
