"""Allocation models for tokenplan-core.

Covers: SaleTier, VestingPool, LiquidityReserve, DirectAccount (discriminated
on ``variant``), the VestingSchedule they share, and the two target types
an allocation can be owned by: ActionRef (forward reference to a creation
action) and Address (literal account).

All models are frozen. The only field that changes over an allocation's
life is ``target``, and it changes by copy via ``bind_target``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    TypeAdapter,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from tokenplan_core.errors import SchemaMismatchError
from tokenplan_core.units import PERCENT_DENOMINATOR

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"
"""Regex pattern for a 20-byte hex account or contract address."""

IDENTIFIER_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_]*$"
"""Regex pattern for allocation and action identifiers."""

Percent = Annotated[int, Field(ge=0, le=PERCENT_DENOMINATOR)]
"""Percent in 1/1_000_000 units."""

BaseUnits = Annotated[int, Field(ge=0)]
"""Non-negative integer amount of base units or seconds."""


class ActionRef(BaseModel):
    """Forward reference to the result of a deployment action.

    Resolved by the execution engine once the action with ``action_id``
    has run.

    Example:
        >>> ref = ActionRef(action_id="sale_contract")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["ref"] = "ref"
    action_id: str = Field(
        ...,
        pattern=IDENTIFIER_PATTERN,
        description="Id of the action whose result this refers to",
    )

    def __str__(self) -> str:
        return f"@{self.action_id}"


class Address(BaseModel):
    """Literal on-chain address."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["address"] = "address"
    value: str = Field(..., pattern=ADDRESS_PATTERN)

    def __str__(self) -> str:
        return self.value


Target = Annotated[ActionRef | Address, Discriminator("kind")]
"""Owner of an allocation's tokens: a future contract or a literal address."""


class VestingSchedule(BaseModel):
    """Release schedule for vested tokens.

    Attributes:
        tge_percent: Share unlocked at token generation.
        cliff_duration: Seconds until the cliff.
        cliff_percent: Share unlocked at the cliff.
        linear_duration: Seconds over which the rest is released linearly.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tge_percent: Percent
    cliff_duration: BaseUnits
    cliff_percent: Percent
    linear_duration: BaseUnits

    @model_validator(mode="after")
    def _unlocks_within_whole(self) -> VestingSchedule:
        if self.tge_percent + self.cliff_percent > PERCENT_DENOMINATOR:
            msg = "tge_percent + cliff_percent cannot exceed 100%"
            raise ValueError(msg)
        return self


class _AllocationBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., pattern=IDENTIFIER_PATTERN, description="Stable allocation key")
    tokens: BaseUnits = Field(..., description="Base units owed to this allocation")
    target: Target | None = Field(
        default=None,
        description="Owning contract or account; unset until bound",
    )

    @property
    def obligation(self) -> int:
        """Base units this allocation takes out of total supply."""
        return self.tokens

    def bind_target(self, target: ActionRef | Address) -> _AllocationBase:
        """Return a copy owned by ``target``.

        A target is bound once. Binding the same target again is a no-op;
        binding a different one is a schema error.

        Raises:
            SchemaMismatchError: If a different target is already bound.
        """
        if self.target is not None:
            if self.target == target:
                return self
            raise SchemaMismatchError(
                self.id,
                expected=f"unbound target before binding {target}",
                actual=f"target already bound to {self.target}",
            )
        return self.model_copy(update={"target": target})


class SaleTier(_AllocationBase):
    """Staged sale tier sold through the sale contract.

    ``tokens`` is the amount for sale; ``affiliate_reserve`` is the
    additional pool paid out as referral rebates.
    """

    variant: Literal["sale_tier"] = "sale_tier"
    name: str = Field(..., min_length=1)
    cooldown_duration: BaseUnits
    sale_start_time: BaseUnits = Field(
        ...,
        description="Absolute start (seconds) for the first tier, 0 for later tiers",
    )
    sale_price: BaseUnits = Field(..., description="Price per token in payment-asset base units")
    sale_min_per_wallet: BaseUnits
    sale_max_per_wallet: BaseUnits
    affiliate_reserve: BaseUnits
    affiliate_percent: Percent
    vesting: VestingSchedule

    @property
    def obligation(self) -> int:
        return self.tokens + self.affiliate_reserve


class VestingPool(_AllocationBase):
    """Pool released by its own vesting contract."""

    variant: Literal["vesting_pool"] = "vesting_pool"
    name: str = Field(..., min_length=1)
    vesting: VestingSchedule


class LiquidityReserve(_AllocationBase):
    """Unallocated remainder, held by the sale contract for liquidity."""

    variant: Literal["liquidity_reserve"] = "liquidity_reserve"


class DirectAccount(_AllocationBase):
    """Tokens minted straight to a known address."""

    variant: Literal["direct_account"] = "direct_account"
    address: str = Field(..., pattern=ADDRESS_PATTERN)

    @model_validator(mode="before")
    @classmethod
    def _target_is_address(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("target") is None and "address" in data:
            data = {**data, "target": Address(value=data["address"])}
        return data

    @model_validator(mode="after")
    def _target_matches_address(self) -> DirectAccount:
        if self.target != Address(value=self.address):
            msg = "direct account target must be its own address"
            raise ValueError(msg)
        return self


Allocation = Annotated[
    SaleTier | VestingPool | LiquidityReserve | DirectAccount,
    Discriminator("variant"),
]
"""Allocation with discriminated union over the four variants."""

VARIANTS: Mapping[str, type[_AllocationBase]] = {
    "sale_tier": SaleTier,
    "vesting_pool": VestingPool,
    "liquidity_reserve": LiquidityReserve,
    "direct_account": DirectAccount,
}

_allocation_adapter: TypeAdapter[Any] = TypeAdapter(Allocation)


def required_fields(variant: str) -> set[str]:
    """Return the fields a record of ``variant`` must supply."""
    model = VARIANTS[variant]
    return {name for name, info in model.model_fields.items() if info.is_required()}


class AllocationSet(BaseModel):
    """Ordered allocations with unique ids.

    Declaration order is the iteration order used everywhere downstream.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allocations: list[Allocation] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.allocations)

    @model_validator(mode="after")
    def _ids_are_unique(self) -> AllocationSet:
        seen: set[str] = set()
        for allocation in self.allocations:
            if allocation.id in seen:
                msg = f"duplicate allocation id '{allocation.id}'"
                raise ValueError(msg)
            seen.add(allocation.id)
        return self

    @classmethod
    def of(cls, allocations: Iterable[Any]) -> AllocationSet:
        """Build a set, raising SchemaMismatchError on duplicate ids."""
        items = list(allocations)
        ids = [a.id for a in items]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise SchemaMismatchError(
                duplicates[0],
                expected="unique allocation ids",
                actual=f"{ids.count(duplicates[0])} allocations with this id",
            )
        return cls(allocations=items)

    def get(self, allocation_id: str) -> Any:
        """Return the allocation with ``allocation_id``.

        Raises:
            KeyError: If no allocation has that id.
        """
        for allocation in self.allocations:
            if allocation.id == allocation_id:
                return allocation
        raise KeyError(allocation_id)

    def of_variant(self, *variants: str) -> list[Any]:
        """Return allocations of the given variants, in declaration order."""
        return [a for a in self.allocations if a.variant in variants]

    def appended(self, allocation: Any) -> AllocationSet:
        """Return a new set with ``allocation`` added at the end."""
        return AllocationSet.of([*self.allocations, allocation])

    def replaced(self, allocations: Iterable[Any]) -> AllocationSet:
        """Return a new set with the same ids in the same order."""
        items = list(allocations)
        if [a.id for a in items] != [a.id for a in self.allocations]:
            raise SchemaMismatchError(
                "allocations",
                expected=str([a.id for a in self.allocations]),
                actual=str([a.id for a in items]),
                reason="replacement must keep ids and order",
            )
        return AllocationSet(allocations=items)

    @property
    def total_obligations(self) -> int:
        """Sum of every allocation's obligation."""
        return sum(a.obligation for a in self.allocations)


def parse_allocation(record: Mapping[str, Any]) -> Any:
    """Validate one raw allocation record.

    Raises:
        SchemaMismatchError: If the variant is unknown or the record lacks a
            field its variant requires, naming the allocation id.
    """
    subject = str(record.get("id", "<unnamed>"))
    variant = record.get("variant")
    if variant not in VARIANTS:
        raise SchemaMismatchError(
            subject,
            expected="variant in {" + ", ".join(VARIANTS) + "}",
            actual=f"variant {variant!r}",
        )

    missing = required_fields(variant) - set(record)
    if missing:
        raise SchemaMismatchError.for_fields(
            subject,
            expected=required_fields(variant),
            actual=set(record),
            reason=f"{variant} is missing {', '.join(sorted(missing))}",
        )

    try:
        return _allocation_adapter.validate_python(dict(record))
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:]) or variant}: {err['msg']}"
            for err in e.errors()
        )
        raise SchemaMismatchError(
            subject,
            expected=f"valid {variant} record",
            actual=problems,
            internal_details=str(e),
        ) from None


def parse_allocations(records: Iterable[Mapping[str, Any]]) -> AllocationSet:
    """Validate raw allocation records into an AllocationSet."""
    return AllocationSet.of(parse_allocation(r) for r in records)
