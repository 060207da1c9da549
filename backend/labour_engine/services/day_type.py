"""Calendar date -> day type. Public holidays win over weekends, weekends over weekdays."""
from datetime import date
from typing import Iterable, Mapping, Optional, Union

from labour_engine.models.labour import DayType


class PublicHolidayCalendar:
    """Public holidays keyed by date. Read-only once built."""

    def __init__(self, holidays: Union[Mapping[date, str], Iterable[date], None] = None):
        if holidays is None:
            holidays = {}
        if isinstance(holidays, Mapping):
            self._holidays = dict(holidays)
        else:
            self._holidays = {d: "Public holiday" for d in holidays}

    def __contains__(self, d: date) -> bool:
        return d in self._holidays

    def __len__(self) -> int:
        return len(self._holidays)

    def name_of(self, d: date) -> Optional[str]:
        return self._holidays.get(d)

    @property
    def dates(self) -> tuple[date, ...]:
        return tuple(sorted(self._holidays))


class DayTypeResolver:
    def __init__(self, calendar: Optional[PublicHolidayCalendar] = None):
        self.calendar = calendar or PublicHolidayCalendar()

    def resolve(self, d: date) -> DayType:
        if d in self.calendar:
            return DayType.PUBLIC_HOLIDAY
        w = d.weekday()  # 0=Mon .. 6=Sun
        if w == 6:
            return DayType.SUNDAY
        if w == 5:
            return DayType.SATURDAY
        return DayType.WEEKDAY
