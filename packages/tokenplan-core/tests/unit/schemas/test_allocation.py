"""Unit tests for allocation models."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from tokenplan_core.errors import SchemaMismatchError
from tokenplan_core.schemas.allocation import (
    ActionRef,
    Address,
    AllocationSet,
    DirectAccount,
    LiquidityReserve,
    SaleTier,
    VestingPool,
    VestingSchedule,
    parse_allocation,
    parse_allocations,
    required_fields,
)

ADDRESS = "0x03d1ECec6513Da227C94Ca6E9a04BcB04A777D32"
NO_VESTING = VestingSchedule(tge_percent=0, cliff_duration=0, cliff_percent=0, linear_duration=0)


def make_tier(tier_id: str = "tier_1", tokens: int = 90, affiliate_reserve: int = 10) -> SaleTier:
    return SaleTier(
        id=tier_id,
        name="Tier 1",
        tokens=tokens,
        cooldown_duration=0,
        sale_start_time=1717170214,
        sale_price=34_000_000_000_000,
        sale_min_per_wallet=0,
        sale_max_per_wallet=100,
        affiliate_reserve=affiliate_reserve,
        affiliate_percent=100_000,
        vesting=NO_VESTING,
    )


def pool_record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "variant": "vesting_pool",
        "id": "team",
        "name": "Team Pool",
        "tokens": 180,
        "vesting": {
            "tge_percent": 0,
            "cliff_duration": 10_713_600,
            "cliff_percent": 100_000,
            "linear_duration": 96_422_400,
        },
    }
    record.update(overrides)
    return record


class TestTargets:
    """Tests for ActionRef and Address."""

    def test_action_ref_str(self) -> None:
        assert str(ActionRef(action_id="sale_contract")) == "@sale_contract"

    def test_address_validates_hex(self) -> None:
        with pytest.raises(ValidationError):
            Address(value="0x1234")

    def test_targets_are_frozen(self) -> None:
        ref = ActionRef(action_id="token")
        with pytest.raises(ValidationError):
            ref.action_id = "other"  # type: ignore[misc]

    def test_equality_by_value(self) -> None:
        assert ActionRef(action_id="token") == ActionRef(action_id="token")
        assert Address(value=ADDRESS) != ActionRef(action_id="token")


class TestVestingSchedule:
    """Tests for VestingSchedule."""

    def test_unlocks_cannot_exceed_whole(self) -> None:
        with pytest.raises(ValidationError, match="cannot exceed 100%"):
            VestingSchedule(
                tge_percent=600_000,
                cliff_duration=0,
                cliff_percent=500_000,
                linear_duration=0,
            )

    def test_percent_bounds(self) -> None:
        with pytest.raises(ValidationError):
            VestingSchedule(
                tge_percent=1_000_001,
                cliff_duration=0,
                cliff_percent=0,
                linear_duration=0,
            )


class TestObligation:
    """Sale tiers owe tokens plus affiliate reserve; others owe tokens."""

    def test_sale_tier_obligation(self) -> None:
        assert make_tier(tokens=90, affiliate_reserve=10).obligation == 100

    def test_other_variants(self) -> None:
        assert LiquidityReserve(id="liquidity_dex", tokens=965).obligation == 965
        assert DirectAccount(id="cex", tokens=5, address=ADDRESS).obligation == 5

    def test_negative_tokens_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LiquidityReserve(id="liquidity_dex", tokens=-1)


class TestBindTarget:
    """Tests for bind_target."""

    def test_binds_unbound_allocation(self) -> None:
        tier = make_tier()
        bound = tier.bind_target(ActionRef(action_id="sale_contract"))

        assert tier.target is None
        assert bound.target == ActionRef(action_id="sale_contract")
        assert bound.tokens == tier.tokens

    def test_same_target_is_noop(self) -> None:
        bound = make_tier().bind_target(ActionRef(action_id="sale_contract"))
        assert bound.bind_target(ActionRef(action_id="sale_contract")) is bound

    def test_different_target_rejected(self) -> None:
        bound = make_tier().bind_target(ActionRef(action_id="sale_contract"))
        with pytest.raises(SchemaMismatchError, match="already bound"):
            bound.bind_target(ActionRef(action_id="token"))


class TestDirectAccount:
    """Direct accounts are bound to their own address on construction."""

    def test_target_defaults_to_address(self) -> None:
        account = DirectAccount(id="cex", tokens=5, address=ADDRESS)
        assert account.target == Address(value=ADDRESS)

    def test_mismatched_target_rejected(self) -> None:
        with pytest.raises(ValidationError, match="own address"):
            DirectAccount(
                id="cex",
                tokens=5,
                address=ADDRESS,
                target=ActionRef(action_id="sale_contract"),
            )


class TestAllocationSet:
    """Tests for AllocationSet."""

    def test_preserves_order(self) -> None:
        allocations = AllocationSet.of(
            [make_tier("tier_2"), make_tier("tier_1"), LiquidityReserve(id="rest", tokens=1)]
        )
        assert [a.id for a in allocations.allocations] == ["tier_2", "tier_1", "rest"]
        assert len(allocations) == 3

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(SchemaMismatchError, match="unique allocation ids"):
            AllocationSet.of([make_tier("tier_1"), make_tier("tier_1")])

    def test_duplicate_ids_rejected_by_model_validation(self) -> None:
        with pytest.raises(ValidationError, match="duplicate allocation id"):
            AllocationSet(allocations=[make_tier("tier_1"), make_tier("tier_1")])

    def test_get(self) -> None:
        allocations = AllocationSet.of([make_tier("tier_1")])
        assert allocations.get("tier_1").id == "tier_1"
        with pytest.raises(KeyError):
            allocations.get("missing")

    def test_of_variant(self) -> None:
        allocations = AllocationSet.of(
            [
                make_tier("tier_1"),
                DirectAccount(id="cex", tokens=5, address=ADDRESS),
                make_tier("tier_2"),
            ]
        )
        assert [a.id for a in allocations.of_variant("sale_tier")] == ["tier_1", "tier_2"]
        assert [a.id for a in allocations.of_variant("direct_account", "sale_tier")] == [
            "tier_1",
            "cex",
            "tier_2",
        ]

    def test_total_obligations(self) -> None:
        allocations = AllocationSet.of(
            [make_tier(tokens=90, affiliate_reserve=10), LiquidityReserve(id="rest", tokens=5)]
        )
        assert allocations.total_obligations == 105

    def test_appended_returns_new_set(self) -> None:
        allocations = AllocationSet.of([make_tier()])
        extended = allocations.appended(LiquidityReserve(id="rest", tokens=5))
        assert len(allocations) == 1
        assert len(extended) == 2

    def test_replaced_must_keep_ids_and_order(self) -> None:
        allocations = AllocationSet.of([make_tier("tier_1"), make_tier("tier_2")])
        with pytest.raises(SchemaMismatchError, match="keep ids and order"):
            allocations.replaced(reversed(allocations.allocations))

    def test_round_trips_through_json(self) -> None:
        allocations = AllocationSet.of(
            [
                make_tier().bind_target(ActionRef(action_id="sale_contract")),
                DirectAccount(id="cex", tokens=5, address=ADDRESS),
            ]
        )
        restored = AllocationSet.model_validate_json(allocations.model_dump_json())
        assert restored == allocations
        assert isinstance(restored.allocations[0], SaleTier)
        assert isinstance(restored.allocations[1].target, Address)


class TestParseAllocation:
    """Tests for parse_allocation / parse_allocations."""

    def test_parses_variant(self) -> None:
        allocation = parse_allocation(pool_record())
        assert isinstance(allocation, VestingPool)
        assert allocation.vesting.linear_duration == 96_422_400

    def test_missing_required_field_names_allocation(self) -> None:
        record = pool_record()
        del record["vesting"]

        with pytest.raises(SchemaMismatchError) as exc_info:
            parse_allocation(record)

        error = exc_info.value
        assert error.subject == "team"
        assert "vesting" in error.expected
        assert "vesting" not in error.actual
        assert "missing vesting" in error.user_message

    def test_unknown_variant(self) -> None:
        with pytest.raises(SchemaMismatchError, match="variant 'bonus'"):
            parse_allocation(pool_record(variant="bonus"))

    def test_invalid_value_wrapped(self) -> None:
        with pytest.raises(SchemaMismatchError) as exc_info:
            parse_allocation(pool_record(tokens=-5))
        assert exc_info.value.subject == "team"
        assert "tokens" in exc_info.value.actual

    def test_parse_allocations_rejects_duplicates(self) -> None:
        with pytest.raises(SchemaMismatchError):
            parse_allocations([pool_record(), pool_record()])

    def test_required_fields(self) -> None:
        assert required_fields("liquidity_reserve") == {"id", "tokens"}
        assert "affiliate_reserve" in required_fields("sale_tier")
