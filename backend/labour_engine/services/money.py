"""
Exact money arithmetic.
Amounts are accumulated as Fractions of a cent and only rounded (half up)
to whole cents when a total is reported.
"""
import math
from decimal import Decimal
from fractions import Fraction

SECONDS_PER_HOUR = 3600
CENT = Decimal("0.01")


def to_fraction(value) -> Fraction:
    """Decimal/int/str/float -> exact Fraction. Floats go through str so 0.1 stays 0.1."""
    if isinstance(value, Fraction):
        return value
    if isinstance(value, float):
        return Fraction(Decimal(str(value)))
    return Fraction(value)


def dollars_to_cents(value) -> Fraction:
    return to_fraction(value) * 100


def round_half_up(value: Fraction) -> int:
    """Round to the nearest integer; .5 rounds up (so 4978.5 cents -> 4979)."""
    return math.floor(value + Fraction(1, 2))


def cents_to_amount(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def fraction_to_amount(cents: Fraction) -> Decimal:
    return cents_to_amount(round_half_up(cents))


def hours(seconds) -> Decimal:
    """Seconds -> hours, 2 dp for display."""
    return (Decimal(seconds) / SECONDS_PER_HOUR).quantize(CENT)


def pay_for(seconds, hourly_cents: Fraction, multiplier: Fraction = Fraction(1)) -> Fraction:
    """Exact cents earned for `seconds` of work at `hourly_cents` × `multiplier`."""
    return Fraction(seconds, SECONDS_PER_HOUR) * hourly_cents * multiplier


def fraction_to_decimal(value: Fraction) -> Decimal:
    return Decimal(value.numerator) / Decimal(value.denominator)
