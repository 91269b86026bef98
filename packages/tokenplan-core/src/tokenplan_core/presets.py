"""Built-in distribution presets for tokenplan-core.

Presets are DistributionSpec objects assembled in code, for distributions
that ship with the package instead of a distribution.yaml.

Available presets:
- squiggle: Squiggle token launch (4 seed tiers, 14 public tiers, team,
  airdrop and marketing pools, CEX liquidity account)
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from tokenplan_core.schemas import (
    DirectAccountEntry,
    DistributionSpec,
    PaymentAssetConfig,
    SaleConfig,
    SaleTierEntry,
    TokenConfig,
    VestingEntry,
    VestingPoolEntry,
)

SQUIGGLE_TOTAL_SUPPLY = 343434343434343434343434343434
SQUIGGLE_START = "2024-05-31T15:43:34Z"
SQUIGGLE_CEX_ADDRESS = "0x03d1ECec6513Da227C94Ca6E9a04BcB04A777D32"
SQUIGGLE_DEX_PERCENT = Decimal("1.5")

# (supply %, price, affiliate %, tge %, min per wallet)
_SEED_TIERS = [
    ("0.5", "0.000034", "10", "3", 1_000_000),
    ("0.75", "0.000038", "9.75", "3.25", 5_000_000),
    ("1.25", "0.000044", "9.5", "3.5", 5_000_000),
    ("1.5", "0.000050", "9.25", "3.75", 5_000_000),
]

# (supply %, price, affiliate %, min per wallet)
_PUBLIC_TIERS = [
    ("1.75", "0.000057", "9", 5_000_000),
    ("2", "0.000064", "8.75", 5_000_000),
    ("2.25", "0.000073", "8.5", 1_000_000),
    ("2.5", "0.000083", "8", 1_000_000),
    ("3", "0.000094", "7.5", 1_000_000),
    ("3.5", "0.000107", "7", 1_000_000),
    ("4", "0.000121", "6.75", 1_000_000),
    ("4.5", "0.000137", "6.5", 1_000_000),
    ("5", "0.000156", "6.25", 1_000_000),
    ("5.5", "0.000177", "6", 1_000_000),
    ("5.5", "0.000201", "5.75", 1_000_000),
    ("5.5", "0.000227", "5.5", 500_000),
    ("5.5", "0.000258", "5.25", 500_000),
    ("5.5", "0.000293", "5", 500_000),
]

_SEED_VESTING = {"cliff_months": 2, "cliff_percent": Decimal(10), "linear_months": 12}
_PUBLIC_VESTING = VestingEntry(
    tge_percent=Decimal(5),
    cliff_months=4,
    cliff_percent=Decimal(5),
    linear_months=12,
)


def _sale_tiers() -> list[SaleTierEntry]:
    tiers = []
    for number, (percent, price, affiliate, tge, min_wallet) in enumerate(_SEED_TIERS, start=1):
        tiers.append(
            SaleTierEntry(
                id=f"seed_sale_{number}",
                name=f"Seed Sale Tier {number}",
                supply_percent=Decimal(percent),
                price=Decimal(price),
                min_per_wallet=Decimal(min_wallet),
                affiliate_percent=Decimal(affiliate),
                start=SQUIGGLE_START if number == 1 else None,
                vesting=VestingEntry(tge_percent=Decimal(tge), **_SEED_VESTING),
            )
        )
    for number, (percent, price, affiliate, min_wallet) in enumerate(_PUBLIC_TIERS, start=1):
        tiers.append(
            SaleTierEntry(
                id=f"public_sale_{number}",
                name=f"Public Sale Tier {number}",
                supply_percent=Decimal(percent),
                price=Decimal(price),
                min_per_wallet=Decimal(min_wallet),
                affiliate_percent=Decimal(affiliate),
                vesting=_PUBLIC_VESTING,
            )
        )
    return tiers


def squiggle_spec() -> DistributionSpec:
    """Squiggle token distribution.

    The CEX account holds the 15% liquidity share minus the 1.5% paired on
    the DEX, which ends up in the residual liquidity reserve.
    """
    return DistributionSpec(
        name="squiggle",
        token=TokenConfig(contract="Squiggle", total_supply=SQUIGGLE_TOTAL_SUPPLY),
        payment_asset=PaymentAssetConfig(contract="USDT", interface="IERC20"),
        sale=SaleConfig(contract="SaleContract", liquidity_percent=Decimal("5.7031")),
        tiers=_sale_tiers(),
        pools=[
            VestingPoolEntry(
                id="team",
                name="Squiggle Monster Team Pool",
                supply_percent=Decimal(18),
                vesting=VestingEntry(cliff_months=4, cliff_percent=Decimal(10), linear_months=36),
            ),
            VestingPoolEntry(
                id="airdrop",
                name="Squiggle Monster Airdrops",
                supply_percent=Decimal(1),
                vesting=VestingEntry(
                    tge_percent=Decimal(3),
                    cliff_months=4,
                    cliff_percent=Decimal(10),
                    linear_months=24,
                ),
            ),
            VestingPoolEntry(
                id="marketing",
                name="Squiggle Monster Marketing Pool",
                supply_percent=Decimal(6),
                vesting=VestingEntry(
                    tge_percent=Decimal(5),
                    cliff_months=4,
                    cliff_percent=Decimal(10),
                    linear_months=24,
                ),
            ),
        ],
        accounts=[
            DirectAccountEntry(
                id="liquidity_cex",
                supply_percent=Decimal(15),
                less_percent=SQUIGGLE_DEX_PERCENT,
                address=SQUIGGLE_CEX_ADDRESS,
            ),
        ],
    )


PRESETS: dict[str, Callable[[], DistributionSpec]] = {
    "squiggle": squiggle_spec,
}


def get_preset(name: str) -> DistributionSpec:
    """Return the preset called ``name``.

    Raises:
        KeyError: If no preset has that name.
    """
    return PRESETS[name]()
