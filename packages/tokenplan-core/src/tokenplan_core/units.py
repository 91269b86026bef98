"""Fixed-point unit conversion for tokenplan-core.

Pure functions that turn author-friendly literals (percent of supply,
fiat prices, calendar dates, month counts) into exact integer base units.

Inputs are transcribed decimal literals. Every function reads them as
exact rationals (floats through their shortest repr) so no binary
floating-point error reaches an integer result. Quantization rounds half
away from zero; applying a quantized ratio to an integer floors.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from fractions import Fraction
from typing import Union

from tokenplan_core.errors import InvalidDateError

Rational = Union[int, str, Decimal, Fraction, float]
"""Accepted input type for rational literals."""

PERCENT_DENOMINATOR = 1_000_000
"""Fixed-point percent unit: 100% == 1_000_000."""

PERCENT_POINT = PERCENT_DENOMINATOR // 100
"""Fixed-point units per percentage point."""

RATIO_DIGITS = 8
"""Decimal digits kept when quantizing a percent-of-supply ratio."""

FIAT_DIGITS = 6
"""Decimal digits kept when quantizing a fiat amount."""

DEFAULT_DECIMALS = 18
"""Default base-unit decimals for tokens and the payment asset."""

DAYS_PER_MONTH = 31
SECONDS_PER_DAY = 24 * 3600
SECONDS_PER_MONTH = DAYS_PER_MONTH * SECONDS_PER_DAY
"""A vesting month is exactly 31 days, not a calendar month."""

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_fraction(value: Rational) -> Fraction:
    """Read a literal as an exact rational.

    Args:
        value: int, decimal string ("0.5", "1/3", "1e-6"), Decimal,
            Fraction or float.

    Returns:
        Exact Fraction. Floats are read through repr(), so 0.1 is 1/10.

    Raises:
        TypeError: If value is not a supported numeric type.
        ValueError: If value is not a finite number.
    """
    if isinstance(value, bool):
        raise TypeError("Booleans are not numeric literals")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Not a finite number: {value!r}")
        return Fraction(repr(value))
    if isinstance(value, (int, Decimal)):
        return Fraction(value)
    if isinstance(value, str):
        return Fraction(value.strip())
    raise TypeError(f"Unsupported numeric literal: {value!r}")


def quantize(value: Rational, digits: int) -> int:
    """Scale value by 10**digits and round half away from zero.

    Example:
        >>> quantize("0.000034", 6)
        34
        >>> quantize(Fraction(1, 3), 8)
        33333333
    """
    scaled = to_fraction(value) * 10**digits
    magnitude = math.floor(abs(scaled) + Fraction(1, 2))
    return magnitude if scaled >= 0 else -magnitude


def percent_of_supply(percent: Rational, total_supply: int) -> int:
    """Return the base units that make up ``percent`` percent of total supply.

    The ratio is quantized to 8 decimal digits first, then applied with
    integer floor division:
    ``total_supply * round(percent * 1e8) // (100 * 1e8)``.

    Args:
        percent: Percentage points, e.g. "0.5" for half a percent.
        total_supply: Total supply in base units.

    Returns:
        Base units, never fractional.

    Raises:
        ValueError: If percent or total_supply is negative.

    Example:
        >>> percent_of_supply("0.5", 1_000_000)
        5000
    """
    if total_supply < 0:
        raise ValueError(f"Total supply must be non-negative, got {total_supply}")
    quantized = quantize(percent, RATIO_DIGITS)
    if quantized < 0:
        raise ValueError(f"Percent of supply must be non-negative, got {percent}")
    return total_supply * quantized // (100 * 10**RATIO_DIGITS)


def fiat_amount(dollars: Rational, decimals: int = DEFAULT_DECIMALS) -> int:
    """Convert a fiat price to payment-asset base units.

    The amount is quantized to 6 decimal digits, then scaled to
    ``decimals``.

    Example:
        >>> fiat_amount("0.000034")
        34000000000000
    """
    quantized = quantize(dollars, FIAT_DIGITS)
    if quantized < 0:
        raise ValueError(f"Fiat amount must be non-negative, got {dollars}")
    return quantized * 10**decimals // 10**FIAT_DIGITS


def calendar_timestamp(iso_date: str | datetime | date) -> int:
    """Convert a calendar instant to whole seconds since the Unix epoch.

    Accepts an ISO-8601 datetime with an explicit offset (``Z`` included) or
    a plain date, read as midnight UTC. Sub-second parts are floored.

    Raises:
        InvalidDateError: If the value is not an absolute instant.

    Example:
        >>> calendar_timestamp("2024-05-31T15:43:34Z")
        1717170214
    """
    if isinstance(iso_date, datetime):
        moment = iso_date
    elif isinstance(iso_date, date):
        moment = datetime.combine(iso_date, time(), tzinfo=timezone.utc)
    elif isinstance(iso_date, str):
        text = iso_date.strip()
        try:
            if _DATE_ONLY.match(text):
                moment = datetime.combine(date.fromisoformat(text), time(), tzinfo=timezone.utc)
            else:
                if text.endswith(("Z", "z")):
                    text = text[:-1] + "+00:00"
                moment = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidDateError(str(iso_date), internal_details=str(e)) from None
    else:
        raise InvalidDateError(repr(iso_date))

    if moment.tzinfo is None or moment.utcoffset() is None:
        raise InvalidDateError(str(iso_date), internal_details="datetime has no UTC offset")

    return (moment - _EPOCH) // timedelta(seconds=1)


def months_to_seconds(months: int) -> int:
    """Convert a vesting duration in months to seconds (31-day months).

    Example:
        >>> months_to_seconds(2)
        5356800
    """
    if isinstance(months, bool) or not isinstance(months, int):
        raise TypeError(f"Months must be an integer, got {months!r}")
    if months < 0:
        raise ValueError(f"Months must be non-negative, got {months}")
    return months * SECONDS_PER_MONTH


def fixed_percent(percent: Rational) -> int:
    """Convert percentage points to the 1e6 fixed-point percent unit.

    Raises:
        ValueError: If the value is outside 0-100% or carries more precision
            than the fixed-point unit holds.

    Example:
        >>> fixed_percent("3.25")
        32500
    """
    scaled = to_fraction(percent) * PERCENT_POINT
    if scaled.denominator != 1:
        raise ValueError(f"Percent {percent} is not representable in 1/{PERCENT_DENOMINATOR} units")
    value = int(scaled)
    if not 0 <= value <= PERCENT_DENOMINATOR:
        raise ValueError(f"Percent {percent} is outside 0-100")
    return value


def token_amount(whole_tokens: Rational, decimals: int = DEFAULT_DECIMALS) -> int:
    """Convert a whole-token amount to base units.

    Raises:
        ValueError: If the amount is negative or finer than one base unit.
    """
    scaled = to_fraction(whole_tokens) * 10**decimals
    if scaled.denominator != 1 or scaled < 0:
        raise ValueError(f"Token amount {whole_tokens} is not a whole number of base units")
    return int(scaled)
