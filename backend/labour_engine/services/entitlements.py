"""Superannuation and leave accrual derived from ordinary earnings and hours."""
from decimal import Decimal
from typing import Iterable, Optional, Union

from labour_engine.models.labour import EmploymentType, LeaveConfig, PayConfig, ShiftPayBreakdown
from labour_engine.services import award_rules
from labour_engine.services.money import dollars_to_cents, fraction_to_amount, to_fraction

Number = Union[Decimal, int, float, str]


def calculate_super(ordinary_earnings: Number, rate_pct: Number = award_rules.SUPER_RATE_PCT) -> Decimal:
    """Super guarantee on ordinary time earnings, rounded half up to the cent."""
    earnings = dollars_to_cents(ordinary_earnings)
    rate = to_fraction(rate_pct)
    if earnings < 0:
        raise ValueError("ordinary earnings cannot be negative")
    if rate < 0:
        raise ValueError("super rate cannot be negative")
    return fraction_to_amount(earnings * rate / 100)


def ordinary_time_earnings(
    breakdowns: Iterable[ShiftPayBreakdown],
    config: Optional[PayConfig] = None,
) -> Decimal:
    """
    Super base: ordinary and penalty pay plus allowances not excluded by config.
    Overtime is never ordinary time earnings.
    """
    config = config or PayConfig()
    excluded = set(config.super_excluded_allowance_types)
    total = Decimal("0")
    for b in breakdowns:
        total += b.ordinary_amount + b.penalty_amount
        total += sum((a.amount for a in b.allowances if a.type not in excluded), Decimal("0"))
    return total


def calculate_leave_accrual(
    hours_worked: Number,
    accrual_rate_per_hour: Number,
    employment_type: Union[EmploymentType, str],
) -> Decimal:
    """Leave hours accrued. Casual employees are paid a loading instead and accrue nothing."""
    employment_type = EmploymentType(employment_type)
    if to_fraction(hours_worked) < 0 or to_fraction(accrual_rate_per_hour) < 0:
        raise ValueError("hours and accrual rate cannot be negative")
    if employment_type == EmploymentType.CASUAL:
        return Decimal("0")
    return Decimal(str(hours_worked)) * Decimal(str(accrual_rate_per_hour))


def calculate_leave_entitlements(
    ordinary_hours: Number,
    employment_type: Union[EmploymentType, str],
    config: Optional[LeaveConfig] = None,
) -> dict[str, Decimal]:
    """Annual and personal leave hours accrued for ordinary hours worked (NES pro rata)."""
    config = config or LeaveConfig()
    annual_rate = config.annual_hours_per_year / config.standard_hours_per_year
    personal_rate = config.personal_hours_per_year / config.standard_hours_per_year
    return {
        "annual": calculate_leave_accrual(ordinary_hours, annual_rate, employment_type).quantize(Decimal("0.0001")),
        "personal": calculate_leave_accrual(ordinary_hours, personal_rate, employment_type).quantize(Decimal("0.0001")),
    }
