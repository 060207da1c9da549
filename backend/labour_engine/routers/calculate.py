from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from labour_engine.config import settings
from labour_engine.database import get_db_optional
from labour_engine.models.labour import ShiftPayBreakdown
from labour_engine.models.schemas import (
    RosterPayRequest,
    RosterPayResponse,
    ShiftPayRequest,
    ShiftPayResult,
)
from labour_engine.services.calculator import compute_shift_pay
from labour_engine.services.day_type import PublicHolidayCalendar
from labour_engine.services.db_rates import get_public_holidays, get_rate_table
from labour_engine.services.engine import compute_roster_pay
from labour_engine.services.errors import RateNotFoundError
from labour_engine.services.weekly_overtime import WeeklyOvertimeAggregator

router = APIRouter()


def _calendar(db: Optional[Session], extra_dates) -> PublicHolidayCalendar:
    """Stored holidays plus any dates the caller declares for this request."""
    stored = get_public_holidays(db, settings.public_holiday_state or None)
    holidays = {d: stored.name_of(d) for d in stored.dates}
    for d in extra_dates:
        holidays.setdefault(d, "Public holiday")
    return PublicHolidayCalendar(holidays)


@router.post("/api/v1/calculate/shift", response_model=ShiftPayBreakdown)
async def calculate_single_shift(
    request: ShiftPayRequest,
    db: Optional[Session] = Depends(get_db_optional),
):
    rate_table = get_rate_table(db, settings.award_code)
    try:
        return compute_shift_pay(
            request.shift,
            request.employee,
            rate_table,
            _calendar(db, request.public_holidays),
            settings.pay_config(),
        )
    except RateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/api/v1/calculate/roster", response_model=RosterPayResponse)
async def calculate_roster(
    request: RosterPayRequest,
    db: Optional[Session] = Depends(get_db_optional),
):
    rate_table = get_rate_table(db, settings.award_code)
    config = settings.pay_config()
    outcomes = compute_roster_pay(
        request.shifts,
        request.employees,
        rate_table,
        _calendar(db, request.public_holidays),
        config,
    )

    warnings: list[str] = []
    total_cost = Decimal("0")
    total_seconds = 0
    per_employee: dict[str, list[ShiftPayBreakdown]] = {}
    results = []
    for outcome in outcomes:
        results.append(ShiftPayResult(
            shift_id=outcome.shift_id,
            employee_id=outcome.employee_id,
            breakdown=outcome.breakdown,
            error=outcome.error,
        ))
        if outcome.error:
            warnings.append(f"Shift {outcome.shift_id}: {outcome.error}")
            continue
        b = outcome.breakdown
        warnings.extend(b.warnings)
        total_cost += b.total
        total_seconds += b.paid_seconds
        per_employee.setdefault(b.employee_id, []).append(b)

    employees = {e.id: e for e in request.employees}
    aggregator = WeeklyOvertimeAggregator(rate_table, config)
    weekly = []
    for employee_id, breakdowns in per_employee.items():
        weekly.extend(aggregator.aggregate(breakdowns, employees[employee_id]))

    return RosterPayResponse(
        roster_name=request.roster_name,
        rates_version=rate_table.rates_version,
        total_cost=total_cost,
        total_hours=(Decimal(total_seconds) / 3600).quantize(Decimal("0.01")),
        results=results,
        weekly_overtime=weekly,
        warnings=warnings,
    )
