"""Builders shared by the test modules."""
from datetime import date, time

from labour_engine.models.labour import BreakEvent, BreakEventType, EmployeeProfile, RosterShift


def t(value: str) -> time:
    h, m = value.split(":")
    return time(int(h), int(m))


def employee(id="e1", classification="FB_2", employment_type="FULL_TIME", **kw) -> EmployeeProfile:
    return EmployeeProfile(id=id, classification=classification, employment_type=employment_type, **kw)


def meal(start: str, end: str) -> tuple[BreakEvent, BreakEvent]:
    return (
        BreakEvent(event_type=BreakEventType.BREAK_START, event_time=t(start)),
        BreakEvent(event_type=BreakEventType.BREAK_END, event_time=t(end)),
    )


def shift(id="s1", on=date(2025, 7, 9), start="09:00", end="14:00", employee_id="e1", breaks=(), **kw) -> RosterShift:
    return RosterShift(
        id=id,
        employee_id=employee_id,
        shift_date=on,
        start_time=t(start),
        end_time=t(end),
        breaks=tuple(breaks),
        **kw,
    )
