"""
Function-level entry points for hosting services.

Everything here is pure: rate configuration comes in as a RateTable, roster
and HR data as EmployeeProfile / RosterShift values, and nothing is stored.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from labour_engine.models.labour import (
    EmployeeProfile,
    PayConfig,
    RosterShift,
    ShiftPayBreakdown,
)
from labour_engine.services.audit import run_labour_audit
from labour_engine.services.calculator import compute_shift_pay
from labour_engine.services.day_type import PublicHolidayCalendar
from labour_engine.services.entitlements import calculate_leave_accrual, calculate_super
from labour_engine.services.errors import RateNotFoundError
from labour_engine.services.fatigue import assess_fatigue_risk
from labour_engine.services.rate_table import RateTable

logger = logging.getLogger(__name__)

__all__ = [
    "compute_shift_pay",
    "compute_roster_pay",
    "assess_fatigue_risk",
    "calculate_super",
    "calculate_leave_accrual",
    "run_labour_audit",
    "ShiftPayOutcome",
]


@dataclass(frozen=True)
class ShiftPayOutcome:
    shift_id: str
    employee_id: str
    breakdown: Optional[ShiftPayBreakdown] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.breakdown is not None


def compute_roster_pay(
    shifts: Iterable[RosterShift],
    employees: Iterable[EmployeeProfile],
    rate_table: RateTable,
    calendar: Optional[PublicHolidayCalendar] = None,
    config: Optional[PayConfig] = None,
) -> list[ShiftPayOutcome]:
    """
    Pay every shift, keeping going past shifts that cannot be paid.
    A shift whose rate is missing (or whose employee is unknown) gets an error
    entry instead of a breakdown; it never silently pays zero.
    """
    by_id = {e.id: e for e in employees}
    outcomes = []
    for shift in shifts:
        employee = by_id.get(shift.employee_id)
        if employee is None:
            logger.error("Shift %s: employee %s not found", shift.id, shift.employee_id)
            outcomes.append(ShiftPayOutcome(shift.id, shift.employee_id, error=f"Unknown employee {shift.employee_id}"))
            continue
        try:
            breakdown = compute_shift_pay(shift, employee, rate_table, calendar, config)
        except RateNotFoundError as e:
            logger.error("Shift %s: %s", shift.id, e)
            outcomes.append(ShiftPayOutcome(shift.id, shift.employee_id, error=str(e)))
            continue
        outcomes.append(ShiftPayOutcome(shift.id, shift.employee_id, breakdown=breakdown))
    return outcomes
