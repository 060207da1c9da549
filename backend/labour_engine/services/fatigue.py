"""
Fatigue risk from an employee's roster history.

Two independent signals:
  * rest gap between consecutive shifts below minimum_rest_hours
    (severe below severe_rest_hours)
  * a run of consecutive worked days longer than max_consecutive_days
    (severe from severe_consecutive_days)
Only violations whose evidence ends within the last window_days before the
latest shift end count. HIGH: any severe or two or more violations.
MEDIUM: exactly one. LOW otherwise, unless long shifts pile up.
"""
import logging
from datetime import date, datetime, timedelta
from fractions import Fraction
from typing import Iterable, NamedTuple, Optional

from labour_engine.models.labour import (
    FatigueAssessment,
    FatigueConfig,
    FatigueRisk,
    RosterShift,
    ShiftGapResult,
)
from labour_engine.services.money import CENT, SECONDS_PER_HOUR, fraction_to_decimal, hours, to_fraction
from labour_engine.services.segmenter import ShiftSegmenter

logger = logging.getLogger(__name__)


class _Violation(NamedTuple):
    kind: str
    severe: bool
    evidence_end: datetime
    shift_ids: tuple[str, ...]
    message: str


def _exact_hours(start: datetime, end: datetime) -> Fraction:
    return Fraction(int((end - start).total_seconds()), SECONDS_PER_HOUR)


def calculate_shift_gap(
    previous_end: datetime,
    next_start: datetime,
    config: Optional[FatigueConfig] = None,
    roster_changeover: bool = False,
    from_shift_id: str = "",
    to_shift_id: str = "",
) -> ShiftGapResult:
    """Rest between two shifts. A roster changeover only needs the shorter changeover minimum."""
    config = config or FatigueConfig()
    gap_seconds = int((next_start - previous_end).total_seconds())
    gap = _exact_hours(previous_end, next_start)
    minimum = to_fraction(config.minimum_rest_hours)
    required = to_fraction(config.roster_changeover_rest_hours) if roster_changeover else minimum
    meets = gap >= required

    overtime_due = Fraction(0) if meets or gap >= minimum else minimum - gap
    warning = None
    if not meets:
        warning = (
            f"Only {float(gap):.1f}hr gap before shift {to_shift_id or next_start.isoformat()} "
            f"(minimum {config.minimum_rest_hours}hr); {float(overtime_due):.1f}hr at overtime rate"
        )
    return ShiftGapResult(
        from_shift_id=from_shift_id,
        to_shift_id=to_shift_id,
        gap_hours=hours(gap_seconds),
        meets_minimum_rest=meets,
        overtime_hours_due=fraction_to_decimal(overtime_due).quantize(CENT),
        warning=warning,
    )


def _consecutive_runs(ordered: list[RosterShift]) -> list[list[RosterShift]]:
    """Group shifts into runs of consecutive worked calendar days."""
    runs: list[list[RosterShift]] = []
    last_day: Optional[date] = None
    for shift in ordered:
        day = shift.shift_date
        if last_day is not None and day - last_day <= timedelta(days=1):
            runs[-1].append(shift)
        else:
            runs.append([shift])
        last_day = max(day, last_day) if last_day else day
    return runs


def _run_days(run: list[RosterShift]) -> int:
    return len({s.shift_date for s in run})


class FatigueRiskAssessor:
    def __init__(self, config: Optional[FatigueConfig] = None):
        self.config = config or FatigueConfig()

    def _paid_hours(self, shift: RosterShift) -> Fraction:
        intervals, _ = ShiftSegmenter().paid_intervals(shift, [])
        seconds = sum(int((e - s).total_seconds()) for s, e in intervals)
        return Fraction(seconds, SECONDS_PER_HOUR)

    def assess(self, shifts: Iterable[RosterShift], employee_id: Optional[str] = None) -> FatigueAssessment:
        ordered = sorted(shifts, key=lambda s: (s.start_at, s.id))
        ids = {s.employee_id for s in ordered}
        if employee_id is not None:
            ids.add(employee_id)
        if len(ids) > 1:
            raise ValueError(f"Fatigue is assessed per employee; got shifts for {sorted(ids)}")
        employee_id = employee_id or (ordered[0].employee_id if ordered else "")
        if not ordered:
            return FatigueAssessment(employee_id=employee_id, risk_level=FatigueRisk.LOW)

        cfg = self.config
        violations: list[_Violation] = []

        gaps = []
        for prev, nxt in zip(ordered, ordered[1:]):
            gap = calculate_shift_gap(prev.end_at, nxt.start_at, cfg, from_shift_id=prev.id, to_shift_id=nxt.id)
            gaps.append(gap)
            if not gap.meets_minimum_rest:
                violations.append(_Violation(
                    kind="short_rest",
                    severe=_exact_hours(prev.end_at, nxt.start_at) < to_fraction(cfg.severe_rest_hours),
                    evidence_end=nxt.start_at,
                    shift_ids=(prev.id, nxt.id),
                    message=gap.warning,
                ))

        runs = _consecutive_runs(ordered)
        max_consecutive = max(_run_days(r) for r in runs)
        for run in runs:
            days = _run_days(run)
            if days > cfg.max_consecutive_days:
                violations.append(_Violation(
                    kind="consecutive_days",
                    severe=days >= cfg.severe_consecutive_days,
                    evidence_end=max(s.end_at for s in run),
                    shift_ids=tuple(s.id for s in run),
                    message=(
                        f"{days} consecutive days ({run[0].shift_date} to {run[-1].shift_date}); "
                        f"limit {cfg.max_consecutive_days}"
                    ),
                ))

        window_end = max(s.end_at for s in ordered)
        window_start = window_end - timedelta(days=cfg.window_days)
        counted = [v for v in violations if v.evidence_end > window_start]

        long_threshold = to_fraction(cfg.long_shift_hours)
        long_shifts = [s for s in ordered if self._paid_hours(s) >= long_threshold]
        recent_long = [s for s in long_shifts if s.end_at > window_start]

        if any(v.severe for v in counted) or len(counted) >= 2:
            risk = FatigueRisk.HIGH
        elif counted:
            risk = FatigueRisk.MEDIUM
        elif len(recent_long) > cfg.long_shift_medium_count:
            risk = FatigueRisk.MEDIUM
        else:
            risk = FatigueRisk.LOW

        evidence = {sid for v in counted for sid in v.shift_ids}
        if risk != FatigueRisk.LOW and not counted:
            evidence.update(s.id for s in recent_long)
        contributing = tuple(s.id for s in ordered if s.id in evidence)

        warnings = []
        for v in violations:
            suffix = "" if v in counted else " (outside the assessment window)"
            warnings.append(v.message + suffix)
        if long_shifts:
            warnings.append(f"{len(long_shifts)} shift(s) of {cfg.long_shift_hours}hr or more")

        if risk != FatigueRisk.LOW:
            logger.info("Employee %s fatigue risk %s: %s", employee_id, risk.value, "; ".join(warnings))

        return FatigueAssessment(
            employee_id=employee_id,
            risk_level=risk,
            contributing_shift_ids=contributing,
            gaps=tuple(gaps),
            max_consecutive_days=max_consecutive,
            long_shift_ids=tuple(s.id for s in long_shifts),
            warnings=tuple(warnings),
        )


def assess_fatigue_risk(
    shifts: Iterable[RosterShift],
    config: Optional[FatigueConfig] = None,
    employee_id: Optional[str] = None,
) -> FatigueAssessment:
    return FatigueRiskAssessor(config).assess(shifts, employee_id)
