"""
Pytest tests for the shift pay calculator.
Scenarios use the built-in MA000009 rates (FB_2 = $26.85/hr, casual $33.5625/hr);
assert exact dollar amounts to 2 decimal places.
"""
import random
from datetime import date, timedelta
from decimal import Decimal
from fractions import Fraction

import pytest

from labour_engine.models.labour import (
    AllowanceRate,
    AwardRate,
    BreakEvent,
    BreakEventType,
    BreakType,
    DayType,
    OvertimeComposition,
    PayConfig,
    ShiftType,
)
from labour_engine.services.calculator import compose_overtime, compute_shift_pay
from labour_engine.services.day_type import PublicHolidayCalendar
from labour_engine.services.db_rates import default_rate_table
from labour_engine.services.errors import RateNotFoundError, UnknownClassificationError
from labour_engine.services.rate_table import RateTable
from helpers import employee, meal, shift, t

WEDNESDAY = date(2025, 7, 9)
FRIDAY = date(2025, 7, 11)
SATURDAY = date(2025, 7, 12)
SUNDAY = date(2025, 7, 13)
MELBOURNE_CUP = date(2025, 11, 4)  # a Tuesday

CASUAL = employee(employment_type="CASUAL")
FULL_TIME = employee()


@pytest.fixture(scope="module")
def table():
    return default_rate_table()


def _pay(table, s, emp=FULL_TIME, calendar=None, config=None):
    return compute_shift_pay(s, emp, table, calendar, config)


# ---- Day types ----
def test_weekday_casual_5hrs(table):
    """Wednesday 9am-2pm casual: 5 × 33.5625 = $167.81"""
    result = _pay(table, shift(on=WEDNESDAY), CASUAL)
    assert result.ordinary_amount == Decimal("167.81")
    assert result.penalty_amount == Decimal("0.00")
    assert result.total == Decimal("167.81")
    assert result.paid_hours == Decimal("5.00")
    assert result.base_hourly_rate == Decimal("33.56")


def test_saturday_casual_5hrs(table):
    """Saturday 9am-2pm casual at 1.5 × base: penalty 5 × 26.85 × 0.25 = $33.56"""
    result = _pay(table, shift(on=SATURDAY), CASUAL)
    assert result.ordinary_amount == Decimal("167.81")
    assert result.penalty_amount == Decimal("33.56")
    assert result.total == Decimal("201.37")
    assert {s.day_type for s in result.segments} == {DayType.SATURDAY}
    assert result.segments[0].applied_rules == ("casual_saturday",)
    assert result.segments[0].penalty_multiplier == Decimal("1.2")


def test_saturday_permanent_5hrs(table):
    """Saturday 9am-2pm full time at 1.25 × base: penalty $33.56"""
    result = _pay(table, shift(on=SATURDAY))
    assert result.segments[0].applied_rules == ("saturday",)
    assert result.penalty_amount == Decimal("33.56")
    assert result.total == Decimal("167.81")


def test_casual_weekend_rate_is_on_award_base(table):
    """Casual Saturday hour is 1.5 × 26.85, not 1.25 × 1.25 × 26.85"""
    config = PayConfig(minimum_engagement_hours={})
    result = _pay(table, shift(on=SATURDAY, start="10:00", end="11:00"), CASUAL, config=config)
    # 33.5625 + 6.7125, each category rounded
    assert result.total == Decimal("40.27")


def test_sunday_casual_5hrs(table):
    """Sunday 9am-2pm casual at 1.75 × base: penalty 5 × 26.85 × 0.5 = $67.13"""
    result = _pay(table, shift(on=SUNDAY), CASUAL)
    assert result.penalty_amount == Decimal("67.13")
    assert result.total == Decimal("234.94")


def test_public_holiday_tuesday(table):
    """Public holiday on a Tuesday, casual at 2.5 × base"""
    calendar = PublicHolidayCalendar({MELBOURNE_CUP: "Melbourne Cup"})
    result = _pay(table, shift(on=MELBOURNE_CUP), CASUAL, calendar)
    assert result.segments[0].day_type == DayType.PUBLIC_HOLIDAY
    assert result.segments[0].applied_rules == ("casual_public_holiday",)
    assert result.penalty_amount == Decimal("167.81")
    assert result.total == Decimal("335.62")


def test_friday_night_into_saturday_splits_at_midnight(table):
    """Fri 11pm - Sat 1am: one weekday hour, one Saturday hour, evening and late night allowances"""
    result = _pay(table, shift(on=FRIDAY, start="23:00", end="01:00"))
    assert len(result.segments) == 2
    assert [s.day_type for s in result.segments] == [DayType.WEEKDAY, DayType.SATURDAY]
    assert [s.seconds for s in result.segments] == [3600, 3600]
    assert result.ordinary_amount == Decimal("53.70")
    assert result.penalty_amount == Decimal("6.71")
    assert {a.type: a.amount for a in result.allowances} == {
        "EVENING": Decimal("2.81"),
        "LATE_NIGHT": Decimal("4.22"),
    }
    assert result.total == Decimal("67.44")


# ---- Overtime ----
def test_weekday_overtime_tiers(table):
    """8am-7pm with a 30 min meal: 8h ordinary, 2h at 1.5×, 0.5h at 2×"""
    result = _pay(table, shift(start="08:00", end="19:00", breaks=meal("12:00", "12:30")))
    assert result.ordinary_hours == Decimal("8.00")
    assert result.overtime_hours == Decimal("2.50")
    assert result.ordinary_amount == Decimal("214.80")
    assert result.overtime_amount == Decimal("107.40")
    assert result.total == Decimal("322.20")


@pytest.mark.parametrize("policy,expected", [
    (OvertimeComposition.ADDITIVE, Decimal("93.98")),
    (OvertimeComposition.MULTIPLICATIVE, Decimal("100.69")),
    (OvertimeComposition.HIGHEST, Decimal("80.55")),
])
def test_saturday_overtime_composition(table, policy, expected):
    """Saturday 10 paid hours: 2h overtime on top of the 1.25× Saturday rate"""
    s = shift(on=SATURDAY, start="08:00", end="18:30", breaks=meal("12:00", "12:30"))
    result = _pay(table, s, config=PayConfig(overtime_composition=policy))
    assert result.penalty_amount == Decimal("53.70")
    assert result.overtime_amount == expected


def test_compose_overtime():
    p, o = Fraction(5, 4), Fraction(3, 2)
    assert compose_overtime(p, o, OvertimeComposition.ADDITIVE) == Fraction(7, 4)
    assert compose_overtime(p, o, OvertimeComposition.MULTIPLICATIVE) == Fraction(15, 8)
    assert compose_overtime(p, o, OvertimeComposition.HIGHEST) == Fraction(3, 2)


# ---- Breaks ----
def test_meal_break_half_cent_rounds_up(table):
    """9am-5pm with a 30 min meal at 2pm: 7.5 × 26.85 = 201.375 -> $201.38"""
    result = _pay(table, shift(end="17:00", breaks=meal("14:00", "14:30")))
    assert result.paid_hours == Decimal("7.50")
    assert result.ordinary_amount == Decimal("201.38")
    assert result.penalty_amount == Decimal("0.00")


def test_missed_meal_break_no_break(table):
    """9am-5pm, no break: 2h past the 6h deadline at 0.5 × 26.85"""
    result = _pay(table, shift(end="17:00"))
    assert result.ordinary_amount == Decimal("214.80")
    assert result.penalty_amount == Decimal("26.85")
    assert any("Meal break" in w for w in result.warnings)


def test_late_meal_break(table):
    """Meal at 4pm on a 9am start: 1h late at 0.5 × 26.85 = 13.425 -> $13.43"""
    result = _pay(table, shift(end="17:00", breaks=meal("16:00", "16:30")))
    assert result.penalty_amount == Decimal("13.43")
    assert result.total == Decimal("214.81")


def test_missed_break_can_be_disabled(table):
    result = _pay(table, shift(end="17:00"), config=PayConfig(missed_break_multiplier=0))
    assert result.penalty_amount == Decimal("0.00")


def test_paid_rest_break_is_not_deducted(table):
    rest = (
        BreakEvent(event_type=BreakEventType.BREAK_START, event_time=t("11:00"), break_type=BreakType.REST_PAID),
        BreakEvent(event_type=BreakEventType.BREAK_END, event_time=t("11:10"), break_type=BreakType.REST_PAID),
    )
    result = _pay(table, shift(breaks=rest))
    assert result.paid_hours == Decimal("5.00")


# ---- Minimum engagement, higher duties, allowances ----
def test_casual_minimum_engagement(table):
    """Casual 2h shift is paid as 3h at the loaded rate: $100.69"""
    result = _pay(table, shift(start="10:00", end="12:00"), CASUAL)
    assert result.paid_hours == Decimal("3.00")
    assert result.ordinary_amount == Decimal("100.69")
    assert any("Minimum engagement" in w for w in result.warnings)


def test_full_time_has_no_minimum_engagement(table):
    result = _pay(table, shift(start="10:00", end="12:00"))
    assert result.paid_hours == Decimal("2.00")
    assert result.ordinary_amount == Decimal("53.70")


def test_higher_duties_uses_higher_classification(table):
    """FB_2 working FB_4 duties 9am-1pm: 4 × 29.44 = $117.76"""
    result = _pay(table, shift(end="13:00", higher_duties_classification="FB_4"))
    assert result.classification == "FB_4"
    assert result.higher_duties_applied is True
    assert result.total == Decimal("117.76")


def test_flat_allowances(table):
    emp = employee(is_first_aid_officer=True, supplies_own_tools=True)
    result = _pay(table, shift(end="13:00", shift_type=ShiftType.SPLIT), emp)
    assert {a.type: a.amount for a in result.allowances} == {
        "SPLIT_SHIFT": Decimal("5.02"),
        "FIRST_AID": Decimal("3.97"),
        "TOOL": Decimal("2.19"),
    }
    assert result.allowance_total == Decimal("11.18")
    assert result.total == Decimal("107.40") + Decimal("11.18")


def test_evening_allowance_is_per_hour(table):
    """5pm-9pm: 2 evening hours at $2.81"""
    result = _pay(table, shift(start="17:00", end="21:00"))
    evening = next(a for a in result.allowances if a.type == "EVENING")
    assert evening.hours == Decimal("2.00")
    assert evening.amount == Decimal("5.62")


def test_identical_allowance_rows_are_paid_separately():
    rate = AwardRate(classification="FB_2", base_hourly_rate=Decimal("26.85"), effective_from=date(2025, 7, 1))
    meal_money = AllowanceRate(type="MEAL", trigger="ALWAYS", amount=Decimal("10.00"))
    table = RateTable([rate], allowance_rates=[meal_money, meal_money])
    result = compute_shift_pay(shift(end="13:00"), FULL_TIME, table)
    assert [a.amount for a in result.allowances] == [Decimal("10.00"), Decimal("10.00")]
    assert result.total == Decimal("107.40") + Decimal("20.00")


# ---- Errors ----
def test_no_rate_before_effective_date(table):
    with pytest.raises(RateNotFoundError):
        _pay(table, shift(on=date(2025, 6, 30)))


def test_unknown_classification(table):
    with pytest.raises(UnknownClassificationError):
        _pay(table, shift(), employee(classification="NOPE"))


def test_employee_mismatch(table):
    with pytest.raises(ValueError):
        _pay(table, shift(employee_id="someone-else"))


def test_zero_length_shift(table):
    result = _pay(table, shift(start="09:00", end="09:00"))
    assert result.total == Decimal("0.00")
    assert result.segments == ()
    assert any("zero-length" in w for w in result.warnings)


# ---- Properties ----
def _random_shifts(seed: int, count: int = 200):
    rng = random.Random(seed)
    for i in range(count):
        on = date(2025, 7, 1) + timedelta(days=rng.randrange(180))
        start_minutes = rng.randrange(0, 24 * 60, 15)
        length = rng.randrange(30, 14 * 60, 15)
        start = f"{start_minutes // 60:02d}:{start_minutes % 60:02d}"
        end_minutes = (start_minutes + length) % (24 * 60)
        end = f"{end_minutes // 60:02d}:{end_minutes % 60:02d}"
        breaks = ()
        if length > 5 * 60 and rng.random() < 0.6:
            b = (start_minutes + rng.randrange(60, length - 30, 15)) % (24 * 60)
            b_end = (b + 30) % (24 * 60)
            breaks = meal(f"{b // 60:02d}:{b % 60:02d}", f"{b_end // 60:02d}:{b_end % 60:02d}")
        yield shift(id=f"r{i}", on=on, start=start, end=end, breaks=breaks)


@pytest.mark.parametrize("employment_type", ["FULL_TIME", "CASUAL"])
def test_breakdown_always_reconciles(table, employment_type):
    emp = employee(employment_type=employment_type, is_first_aid_officer=True)
    calendar = PublicHolidayCalendar([date(2025, 12, 25), date(2025, 12, 26)])
    for s in _random_shifts(seed=38):
        result = _pay(table, s, emp, calendar)
        parts = result.ordinary_amount + result.overtime_amount + result.penalty_amount + result.allowance_total
        assert result.total == parts
        assert result.paid_seconds == result.ordinary_seconds + result.overtime_seconds


def test_same_input_same_output(table):
    s = shift(on=FRIDAY, start="18:00", end="03:00", breaks=meal("22:00", "22:30"))
    first = _pay(table, s, CASUAL)
    second = _pay(table, s, CASUAL)
    assert first.model_dump_json() == second.model_dump_json()


def test_longer_shift_never_pays_less(table):
    calendar = PublicHolidayCalendar([date(2025, 7, 12)])
    for emp in (FULL_TIME, CASUAL):
        previous = Decimal("0")
        for minutes in range(15, 16 * 60, 15):
            end = (6 * 60 + minutes) % (24 * 60)
            s = shift(on=FRIDAY, start="06:00", end=f"{end // 60:02d}:{end % 60:02d}")
            total = _pay(table, s, emp, calendar).total
            assert total >= previous
            previous = total
