"""Shift segmentation at midnights, rate boundaries and breaks."""
from datetime import date, datetime, time

from labour_engine.models.labour import BreakEvent, BreakEventType, DayType
from labour_engine.services.day_type import DayTypeResolver, PublicHolidayCalendar
from labour_engine.services.segmenter import segment
from helpers import meal, shift, t

FRIDAY = date(2025, 7, 11)


def _start(at: str) -> BreakEvent:
    return BreakEvent(event_type=BreakEventType.BREAK_START, event_time=t(at))


def _end(at: str) -> BreakEvent:
    return BreakEvent(event_type=BreakEventType.BREAK_END, event_time=t(at))


def test_day_type_resolution():
    resolver = DayTypeResolver(PublicHolidayCalendar([date(2025, 12, 27)]))
    assert resolver.resolve(date(2025, 7, 9)) == DayType.WEEKDAY
    assert resolver.resolve(date(2025, 7, 12)) == DayType.SATURDAY
    assert resolver.resolve(date(2025, 7, 13)) == DayType.SUNDAY
    # Public holiday wins over Saturday
    assert resolver.resolve(date(2025, 12, 27)) == DayType.PUBLIC_HOLIDAY


def test_overnight_shift_cut_at_midnight():
    result = segment(shift(on=FRIDAY, start="22:00", end="02:00"))
    assert [(s.start, s.end) for s in result.segments] == [
        (datetime(2025, 7, 11, 22), datetime(2025, 7, 12, 0)),
        (datetime(2025, 7, 12, 0), datetime(2025, 7, 12, 2)),
    ]
    assert [s.day_type for s in result.segments] == [DayType.WEEKDAY, DayType.SATURDAY]


def test_cut_at_rate_boundaries():
    result = segment(shift(start="17:00", end="21:00"), boundaries=(time(7, 0), time(19, 0)))
    assert [s.seconds for s in result.segments] == [7200, 7200]


def test_segments_cover_paid_time_exactly():
    result = segment(shift(start="06:00", end="23:30", breaks=meal("12:00", "12:45")),
                     boundaries=(time(7, 0), time(19, 0)))
    assert sum(s.seconds for s in result.segments) == int(17.5 * 3600) - 45 * 60
    for a, b in zip(result.segments, result.segments[1:]):
        assert a.end <= b.start
    assert result.meal_breaks == ((datetime(2025, 7, 9, 12), datetime(2025, 7, 9, 12, 45)),)


def test_break_end_without_start_is_ignored():
    result = segment(shift(end="17:00", breaks=(_end("12:00"),)))
    assert sum(s.seconds for s in result.segments) == 8 * 3600
    assert any("without a BREAK_START" in w for w in result.warnings)


def test_unclosed_break_runs_to_shift_end():
    result = segment(shift(end="17:00", breaks=(_start("16:00"),)))
    assert sum(s.seconds for s in result.segments) == 7 * 3600
    assert any("no BREAK_END" in w for w in result.warnings)


def test_nested_break_start_is_ignored():
    breaks = (_start("12:00"), _start("12:10"), _end("12:30"))
    result = segment(shift(end="17:00", breaks=breaks))
    assert sum(s.seconds for s in result.segments) == 7.5 * 3600
    assert any("already open" in w for w in result.warnings)


def test_break_outside_shift_is_ignored():
    result = segment(shift(end="14:00", breaks=meal("18:00", "18:30")))
    assert sum(s.seconds for s in result.segments) == 5 * 3600
    assert any("outside the shift" in w for w in result.warnings)


def test_break_after_midnight_on_overnight_shift():
    result = segment(shift(on=FRIDAY, start="20:00", end="04:00", breaks=meal("00:30", "01:00")))
    assert sum(s.seconds for s in result.segments) == 7.5 * 3600
    assert result.meal_breaks[0][0] == datetime(2025, 7, 12, 0, 30)
