"""Weekly ordinary-hours threshold across a pay period."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from labour_engine.models.labour import OvertimeComposition, PayConfig
from labour_engine.services.calculator import compute_shift_pay
from labour_engine.services.db_rates import default_rate_table
from labour_engine.services.weekly_overtime import WeeklyOvertimeAggregator
from helpers import employee, meal, shift

MONDAY = date(2025, 7, 7)
CONFIG = PayConfig(missed_break_multiplier=0)
TABLE = default_rate_table()


def _aggregator(config=CONFIG):
    return WeeklyOvertimeAggregator(TABLE, config)


def _week(emp, days: int, first=MONDAY, config=CONFIG):
    return [
        compute_shift_pay(
            shift(id=f"w{i}", on=first + timedelta(days=i), start="09:00", end="17:30", breaks=meal("13:00", "13:30")),
            emp, TABLE, config=config,
        )
        for i in range(days)
    ]


def test_under_threshold_no_overtime():
    emp = employee()
    result = _aggregator().aggregate(_week(emp, 4), emp)
    assert len(result) == 1
    assert result[0].ordinary_hours == Decimal("32.00")
    assert result[0].overtime_hours == Decimal("0.00")
    assert result[0].overtime_top_up == Decimal("0.00")


def test_forty_hours_two_over():
    """5 × 8h = 40h: 2h over 38 topped up at 0.5 × 26.85"""
    emp = employee()
    result = _aggregator().aggregate(_week(emp, 5), emp)
    assert result[0].week_start == MONDAY
    assert result[0].overtime_hours == Decimal("2.00")
    assert result[0].overtime_top_up == Decimal("26.85")


def test_second_tier_applies_after_first_two_hours():
    """6 × 8h = 48h: 2h Friday at +0.5, 8h Saturday at +1.0"""
    emp = employee()
    result = _aggregator().aggregate(_week(emp, 6), emp)
    assert result[0].overtime_hours == Decimal("10.00")
    assert result[0].overtime_top_up == Decimal("241.65")


@pytest.mark.parametrize("policy,expected", [
    # Friday 2h at 1.5×, then Sunday 2h at 2× composed with the 1.5× Sunday rate
    (OvertimeComposition.ADDITIVE, Decimal("80.55")),
    (OvertimeComposition.MULTIPLICATIVE, Decimal("107.40")),
    (OvertimeComposition.HIGHEST, Decimal("53.70")),
])
def test_top_up_follows_overtime_composition(policy, expected):
    config = PayConfig(missed_break_multiplier=0, overtime_composition=policy)
    emp = employee()
    sunday = compute_shift_pay(
        shift(id="sun", on=MONDAY + timedelta(days=6), start="10:00", end="12:00"), emp, TABLE, config=config
    )
    result = _aggregator(config).aggregate(_week(emp, 5, config=config) + [sunday], emp)
    assert result[0].overtime_hours == Decimal("4.00")
    assert result[0].overtime_top_up == expected


def test_top_up_uses_exact_casual_rate():
    """3h over at 33.5625/hr: 2 × 0.5 + 1 × 1.0 = 67.125 -> $67.13 (not 2 × 33.56)"""
    config = PayConfig(missed_break_multiplier=0, minimum_engagement_hours={})
    emp = employee(employment_type="CASUAL")
    evening = compute_shift_pay(
        shift(id="w9", on=MONDAY + timedelta(days=4), start="19:00", end="20:00"), emp, TABLE, config=config
    )
    result = _aggregator(config).aggregate(_week(emp, 5, config=config) + [evening], emp)
    assert result[0].overtime_hours == Decimal("3.00")
    assert result[0].overtime_top_up == Decimal("67.13")


def test_part_time_threshold_is_agreed_hours():
    emp = employee(employment_type="PART_TIME", agreed_hours_per_week=Decimal("20"))
    result = _aggregator().aggregate(_week(emp, 3), emp)
    assert result[0].threshold_hours == Decimal("20")
    assert result[0].overtime_hours == Decimal("4.00")
    assert result[0].overtime_top_up == Decimal("80.55")


def test_weeks_are_bucketed_separately():
    emp = employee()
    breakdowns = _week(emp, 3) + _week(emp, 3, first=MONDAY + timedelta(days=7))
    result = _aggregator().aggregate(breakdowns, emp)
    assert [r.week_start for r in result] == [MONDAY, MONDAY + timedelta(days=7)]
    assert all(r.overtime_hours == Decimal("0.00") for r in result)


def test_mixed_employees_rejected():
    a = _week(employee(id="e1"), 1)
    b = compute_shift_pay(shift(id="x", employee_id="e2"), employee(id="e2"), TABLE)
    with pytest.raises(ValueError):
        _aggregator().aggregate(a + [b], employee(id="e1"))


def test_empty_period():
    assert _aggregator().aggregate([], employee()) == []
