"""
Shift pay calculation.

Resolved segments are walked in time order. The first daily_ordinary_hours of
paid time are ordinary; the rest is overtime, first tier then after-tier.
Ordinary time pays base into ordinary_amount and base × (penalty - 1) into
penalty_amount. Overtime time pays its whole composed rate into
overtime_amount, where composition with the day-type penalty follows
PayConfig.overtime_composition:
  ADDITIVE       base × (penalty + overtime - 1)
  MULTIPLICATIVE base × penalty × overtime
  HIGHEST        base × max(penalty, overtime)
Everything is summed exactly in fractions of a cent and each category is
rounded once, so the reported total always equals the sum of its parts.
"""
import logging
from datetime import datetime, timedelta
from fractions import Fraction
from typing import Optional

from labour_engine.models.labour import (
    AllowanceDetail,
    AllowanceRate,
    AllowanceUnit,
    EmployeeProfile,
    OvertimeComposition,
    PayConfig,
    PaySegment,
    RosterShift,
    SegmentationResult,
    ShiftPayBreakdown,
)
from labour_engine.services.day_type import PublicHolidayCalendar
from labour_engine.services.money import (
    SECONDS_PER_HOUR,
    cents_to_amount,
    dollars_to_cents,
    fraction_to_amount,
    fraction_to_decimal,
    hours,
    pay_for,
    round_half_up,
    to_fraction,
)
from labour_engine.services.rate_resolver import (
    RateResolver,
    ResolvedSegment,
    ShiftContext,
    effective_classification,
)
from labour_engine.services.rate_table import RateTable
from labour_engine.services.segmenter import ShiftSegmenter

logger = logging.getLogger(__name__)


def _seconds(hours_value) -> int:
    return round_half_up(to_fraction(hours_value) * SECONDS_PER_HOUR)


def compose_overtime(penalty: Fraction, overtime: Fraction, policy: OvertimeComposition) -> Fraction:
    if policy == OvertimeComposition.MULTIPLICATIVE:
        return penalty * overtime
    if policy == OvertimeComposition.HIGHEST:
        return max(penalty, overtime)
    return penalty + overtime - 1


class PayBreakdownCalculator:
    def __init__(self, resolver: RateResolver, config: Optional[PayConfig] = None):
        self.resolver = resolver
        self.config = config or resolver.config

    def _tiers(self) -> list[tuple[int, Optional[Fraction]]]:
        """Cumulative paid-seconds limits (-1 = unbounded) and the overtime multiplier below each; None is ordinary time."""
        ordinary = _seconds(self.config.daily_ordinary_hours)
        first = ordinary + _seconds(self.config.overtime_first_tier_hours)
        return [
            (ordinary, None),
            (first, to_fraction(self.config.overtime_first_multiplier)),
            (-1, to_fraction(self.config.overtime_after_multiplier)),
        ]

    def _split(self, seg: ResolvedSegment, elapsed: int):
        """Yield (start, end, seconds, overtime multiplier) pieces of a segment."""
        start = seg.segment.start
        remaining = seg.segment.seconds
        for limit, multiplier in self._tiers():
            if remaining <= 0:
                break
            room = remaining if limit < 0 else max(0, limit - elapsed)
            take = min(room, remaining)
            if take <= 0:
                continue
            end = start + timedelta(seconds=take)
            yield start, end, take, multiplier
            start, elapsed, remaining = end, elapsed + take, remaining - take

    def compute(
        self,
        ctx: ShiftContext,
        resolved: list[ResolvedSegment],
        segmentation: Optional[SegmentationResult] = None,
    ) -> ShiftPayBreakdown:
        shift, employee = ctx.shift, ctx.employee
        base_rate, hourly_cents = self.resolver.base_rate(
            ctx.classification, employee.employment_type, shift.shift_date
        )
        warnings = list(segmentation.warnings) if segmentation else []

        ordinary = Fraction(0)
        penalty = Fraction(0)
        overtime = Fraction(0)
        ordinary_seconds = 0
        overtime_seconds = 0
        elapsed = 0
        pay_segments: list[PaySegment] = []
        # Keyed by position in the rate table so identical rows stay separate payments
        allowance_seconds: dict[int, tuple[AllowanceRate, int]] = {}

        for seg in resolved:
            rate = seg.rate
            for index, allowance in rate.allowances:
                _, secs_so_far = allowance_seconds.get(index, (allowance, 0))
                allowance_seconds[index] = (allowance, secs_so_far + seg.segment.seconds)
            for start, end, secs, ot_mult in self._split(seg, elapsed):
                if ot_mult is None:
                    piece_ordinary = pay_for(secs, rate.hourly_cents)
                    piece_penalty = pay_for(secs, rate.hourly_cents, rate.penalty_multiplier - 1)
                    ordinary += piece_ordinary
                    penalty += piece_penalty
                    ordinary_seconds += secs
                    piece_total = piece_ordinary + piece_penalty
                else:
                    effective = compose_overtime(rate.penalty_multiplier, ot_mult, self.config.overtime_composition)
                    piece_total = pay_for(secs, rate.hourly_cents, effective)
                    overtime += piece_total
                    overtime_seconds += secs
                elapsed += secs
                pay_segments.append(PaySegment(
                    start=start,
                    end=end,
                    day_type=seg.segment.day_type,
                    seconds=secs,
                    penalty_multiplier=fraction_to_decimal(rate.penalty_multiplier),
                    overtime_multiplier=fraction_to_decimal(ot_mult or Fraction(1)),
                    is_overtime=ot_mult is not None,
                    applied_rules=rate.applied_rules,
                    amount=fraction_to_amount(piece_total),
                ))

        worked_seconds = elapsed

        # Minimum engagement: top up at the plain base rate
        minimum = self.config.minimum_engagement_hours.get(employee.employment_type)
        padding = 0
        if minimum is not None and 0 < worked_seconds < _seconds(minimum):
            padding = _seconds(minimum) - worked_seconds
            ordinary += pay_for(padding, hourly_cents)
            ordinary_seconds += padding
            warnings.append(
                f"Minimum engagement of {minimum} hours applied (actual hours: {hours(worked_seconds)})"
            )

        missed = self._missed_break_seconds(shift, worked_seconds, segmentation)
        if missed > 0:
            penalty += pay_for(missed, dollars_to_cents(base_rate), to_fraction(self.config.missed_break_multiplier))
            warnings.append(
                f"Meal break not started within {self.config.meal_break_deadline_hours} hours: "
                f"{hours(missed)} hours at missed-break penalty"
            )

        allowance_details = []
        for _, (allowance, secs) in sorted(allowance_seconds.items()):
            if allowance.unit == AllowanceUnit.PER_HOUR:
                cents = round_half_up(pay_for(secs, dollars_to_cents(allowance.amount)))
                detail_hours = hours(secs)
            else:
                cents = round_half_up(dollars_to_cents(allowance.amount))
                detail_hours = None
            allowance_details.append(AllowanceDetail(
                type=allowance.type,
                trigger=allowance.trigger,
                description=allowance.description or allowance.type.replace("_", " ").capitalize(),
                amount=cents_to_amount(cents),
                hours=detail_hours,
            ))

        ordinary_c = round_half_up(ordinary)
        penalty_c = round_half_up(penalty)
        overtime_c = round_half_up(overtime)
        total_c = ordinary_c + penalty_c + overtime_c + sum(
            round_half_up(dollars_to_cents(a.amount)) for a in allowance_details
        )

        for w in warnings[len(segmentation.warnings) if segmentation else 0:]:
            logger.info(w)

        return ShiftPayBreakdown(
            shift_id=shift.id,
            employee_id=shift.employee_id,
            shift_date=shift.shift_date,
            classification=ctx.classification,
            higher_duties_applied=ctx.higher_duties_applied,
            base_hourly_rate=fraction_to_amount(hourly_cents),
            paid_seconds=worked_seconds + padding,
            ordinary_seconds=ordinary_seconds,
            overtime_seconds=overtime_seconds,
            ordinary_amount=cents_to_amount(ordinary_c),
            overtime_amount=cents_to_amount(overtime_c),
            penalty_amount=cents_to_amount(penalty_c),
            allowances=tuple(allowance_details),
            total=cents_to_amount(total_c),
            segments=tuple(pay_segments),
            warnings=tuple(warnings),
        )

    def _missed_break_seconds(self, shift: RosterShift, worked_seconds: int,
                              segmentation: Optional[SegmentationResult]) -> int:
        if worked_seconds <= _seconds(self.config.meal_break_required_after_hours):
            return 0
        deadline = shift.start_at + timedelta(seconds=_seconds(self.config.meal_break_deadline_hours))
        meals = segmentation.meal_breaks if segmentation else ()
        first_meal: Optional[datetime] = meals[0][0] if meals else None
        until = first_meal if first_meal is not None else shift.end_at
        if until <= deadline:
            return 0
        return int((min(until, shift.end_at) - deadline).total_seconds())


def compute_shift_pay(
    shift: RosterShift,
    employee: EmployeeProfile,
    rate_table: RateTable,
    calendar: Optional[PublicHolidayCalendar] = None,
    config: Optional[PayConfig] = None,
) -> ShiftPayBreakdown:
    """
    Pay breakdown for one shift. Raises RateNotFoundError when no award rate
    is effective for the (effective) classification on the shift date.
    """
    if shift.employee_id != employee.id:
        raise ValueError(f"Shift {shift.id} belongs to {shift.employee_id}, not {employee.id}")
    config = config or PayConfig()
    resolver = RateResolver(rate_table, config)
    ctx = ShiftContext(shift=shift, employee=employee, classification=effective_classification(shift, employee))
    segmentation = ShiftSegmenter(rate_table.time_boundaries).segment(shift, calendar)
    resolved = resolver.resolve_all(segmentation.segments, ctx)
    return PayBreakdownCalculator(resolver, config).compute(ctx, resolved, segmentation)
