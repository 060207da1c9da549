"""
Splits a shift into time-homogeneous segments.

The paid interval is the shift span minus unpaid meal breaks. Each paid
interval is cut at every midnight (day type may change) and at every time
of day where a penalty rule or allowance window begins or ends, so a
segment never straddles a rate change.
"""
import logging
from datetime import datetime, time, timedelta
from typing import Optional

from labour_engine.models.labour import (
    BreakEventType,
    BreakType,
    RosterShift,
    SegmentationResult,
    TimeSegment,
)
from labour_engine.services.day_type import DayTypeResolver, PublicHolidayCalendar

logger = logging.getLogger(__name__)

Interval = tuple[datetime, datetime]


def _pair_breaks(shift: RosterShift, warnings: list[str]) -> list[tuple[datetime, datetime, BreakType]]:
    """Pair BREAK_START/BREAK_END events into intervals, clipped to the shift span."""
    start_at, end_at = shift.start_at, shift.end_at
    events = sorted(
        ((e.at(start_at), i, e) for i, e in enumerate(shift.breaks)),
        key=lambda item: (item[0], item[1]),
    )
    paired: list[tuple[datetime, datetime, BreakType]] = []
    open_at: Optional[datetime] = None
    open_type: Optional[BreakType] = None

    for when, _, event in events:
        if event.event_type == BreakEventType.BREAK_START:
            if open_at is not None:
                warnings.append(
                    f"Shift {shift.id}: BREAK_START at {when:%H:%M} while a break is already open; ignored"
                )
                continue
            open_at, open_type = when, event.break_type
        else:
            if open_at is None:
                warnings.append(f"Shift {shift.id}: BREAK_END at {when:%H:%M} without a BREAK_START; ignored")
                continue
            paired.append((open_at, when, open_type))
            open_at, open_type = None, None

    if open_at is not None:
        warnings.append(
            f"Shift {shift.id}: BREAK_START at {open_at:%H:%M} has no BREAK_END; break runs to shift end"
        )
        paired.append((open_at, max(open_at, end_at), open_type))

    clipped = []
    for b_start, b_end, b_type in paired:
        lo, hi = max(b_start, start_at), min(b_end, end_at)
        if lo >= hi:
            warnings.append(
                f"Shift {shift.id}: break {b_start:%H:%M}-{b_end:%H:%M} lies outside the shift; ignored"
            )
            continue
        clipped.append((lo, hi, b_type))
    return clipped


def _subtract(interval: Interval, holes: list[Interval]) -> list[Interval]:
    pieces = [interval]
    for h_start, h_end in sorted(holes):
        remaining = []
        for p_start, p_end in pieces:
            if h_end <= p_start or h_start >= p_end:
                remaining.append((p_start, p_end))
                continue
            if p_start < h_start:
                remaining.append((p_start, h_start))
            if h_end < p_end:
                remaining.append((h_end, p_end))
        pieces = remaining
    return pieces


def _cut_points(start: datetime, end: datetime, boundaries: tuple[time, ...]) -> list[datetime]:
    points = set()
    day = start.date()
    while datetime.combine(day, time(0, 0)) < end:
        midnight = datetime.combine(day, time(0, 0))
        if start < midnight < end:
            points.add(midnight)
        for b in boundaries:
            at = datetime.combine(day, b)
            if start < at < end:
                points.add(at)
        day += timedelta(days=1)
    return sorted(points)


class ShiftSegmenter:
    def __init__(self, boundaries: tuple[time, ...] = ()):
        self.boundaries = boundaries

    def paid_intervals(self, shift: RosterShift, warnings: list[str]) -> tuple[list[Interval], list[Interval]]:
        """(paid intervals, unpaid meal break intervals)."""
        start_at, end_at = shift.start_at, shift.end_at
        if end_at <= start_at:
            warnings.append(f"Shift {shift.id}: zero-length shift ({shift.start_time:%H:%M}-{shift.end_time:%H:%M})")
            return [], []
        breaks = _pair_breaks(shift, warnings)
        meals = [(s, e) for s, e, t in breaks if t == BreakType.MEAL_UNPAID]
        return _subtract((start_at, end_at), meals), sorted(meals)

    def segment(self, shift: RosterShift, calendar: Optional[PublicHolidayCalendar] = None) -> SegmentationResult:
        resolver = DayTypeResolver(calendar)
        warnings: list[str] = []
        intervals, meals = self.paid_intervals(shift, warnings)

        segments = []
        for i_start, i_end in intervals:
            edges = [i_start, *_cut_points(i_start, i_end, self.boundaries), i_end]
            for s, e in zip(edges, edges[1:]):
                segments.append(TimeSegment(start=s, end=e, day_type=resolver.resolve(s.date())))

        for w in warnings:
            logger.warning(w)
        return SegmentationResult(segments=tuple(segments), meal_breaks=tuple(meals), warnings=tuple(warnings))


def segment(shift: RosterShift, calendar: Optional[PublicHolidayCalendar] = None,
            boundaries: tuple[time, ...] = ()) -> SegmentationResult:
    return ShiftSegmenter(boundaries).segment(shift, calendar)
