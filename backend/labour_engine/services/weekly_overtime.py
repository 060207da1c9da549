"""
Weekly overtime across a pay period.

Works on breakdowns already produced by the single-shift calculator, so the
calculator itself stays stateless. Ordinary hours beyond the weekly threshold
are taken from the latest shifts of the week, then walked in time order: the
first overtime_first_tier_hours of the excess use the first-tier multiplier,
the rest the after-tier one. Each converted ordinary hour already paid
base × P is topped up to the overtime rate the calculator would have used,
base × (compose(P, O) - P), with the exact effective rate from the RateTable.
"""
from collections import defaultdict
from datetime import date, timedelta
from fractions import Fraction
from typing import Iterable, NamedTuple, Optional

from labour_engine.models.labour import (
    EmployeeProfile,
    EmploymentType,
    PayConfig,
    ShiftPayBreakdown,
    WeeklyOvertimeResult,
)
from labour_engine.services.calculator import compose_overtime
from labour_engine.services.money import (
    SECONDS_PER_HOUR,
    cents_to_amount,
    hours,
    pay_for,
    round_half_up,
    to_fraction,
)
from labour_engine.services.rate_resolver import RateResolver
from labour_engine.services.rate_table import RateTable


class _OrdinaryPiece(NamedTuple):
    seconds: int
    penalty: Fraction
    hourly_cents: Fraction


class WeeklyOvertimeAggregator:
    def __init__(self, rate_table: RateTable, config: Optional[PayConfig] = None):
        self.config = config or PayConfig()
        self.resolver = RateResolver(rate_table, self.config)

    def threshold_hours(self, employee: EmployeeProfile):
        if employee.employment_type == EmploymentType.PART_TIME and employee.agreed_hours_per_week is not None:
            return employee.agreed_hours_per_week
        return self.config.weekly_ordinary_hours

    def _ordinary_pieces(self, b: ShiftPayBreakdown, employee: EmployeeProfile) -> list[_OrdinaryPiece]:
        """Ordinary time of one shift in time order; minimum engagement padding comes last at the plain rate."""
        _, cents = self.resolver.base_rate(b.classification, employee.employment_type, b.shift_date)
        pieces = [
            _OrdinaryPiece(s.seconds, to_fraction(s.penalty_multiplier), cents)
            for s in b.segments if not s.is_overtime
        ]
        padding = b.ordinary_seconds - sum(p.seconds for p in pieces)
        if padding > 0:
            pieces.append(_OrdinaryPiece(padding, Fraction(1), cents))
        return pieces

    def _top_up(self, taken: list[_OrdinaryPiece], first_tier_seconds: int) -> Fraction:
        policy = self.config.overtime_composition
        tiers = (
            (first_tier_seconds, to_fraction(self.config.overtime_first_multiplier)),
            (-1, to_fraction(self.config.overtime_after_multiplier)),
        )
        total = Fraction(0)
        used = 0
        for piece in taken:
            remaining = piece.seconds
            for limit, multiplier in tiers:
                room = remaining if limit < 0 else max(0, limit - used)
                take = min(room, remaining)
                if take <= 0:
                    continue
                extra = compose_overtime(piece.penalty, multiplier, policy) - piece.penalty
                total += pay_for(take, piece.hourly_cents, extra)
                used += take
                remaining -= take
        return total

    def aggregate(
        self,
        breakdowns: Iterable[ShiftPayBreakdown],
        employee: EmployeeProfile,
        period_start: Optional[date] = None,
    ) -> list[WeeklyOvertimeResult]:
        items = list(breakdowns)
        if not items:
            return []
        employee_ids = {b.employee_id for b in items}
        if len(employee_ids) > 1:
            raise ValueError(f"Weekly overtime is per employee; got {sorted(employee_ids)}")
        employee_id = employee_ids.pop()
        if employee.id != employee_id:
            raise ValueError(f"Breakdowns belong to {employee_id}, not {employee.id}")

        if period_start is None:
            first = min(b.shift_date for b in items)
            period_start = first - timedelta(days=first.weekday())

        weeks: dict[int, list[ShiftPayBreakdown]] = defaultdict(list)
        for b in items:
            weeks[(b.shift_date - period_start).days // 7].append(b)

        threshold = self.threshold_hours(employee)
        threshold_seconds = round_half_up(to_fraction(threshold) * SECONDS_PER_HOUR)
        first_tier_seconds = round_half_up(to_fraction(self.config.overtime_first_tier_hours) * SECONDS_PER_HOUR)

        results = []
        for index in sorted(weeks):
            week = sorted(weeks[index], key=lambda b: (b.shift_date, b.shift_id))
            ordinary_seconds = sum(b.ordinary_seconds for b in week)
            excess = max(0, ordinary_seconds - threshold_seconds)

            # Take the excess from the end of the week, then re-walk it in time order for tiering
            taken: list[_OrdinaryPiece] = []
            remaining = excess
            for b in reversed(week):
                if remaining <= 0:
                    break
                for piece in reversed(self._ordinary_pieces(b, employee)):
                    if remaining <= 0:
                        break
                    take = min(piece.seconds, remaining)
                    taken.append(piece._replace(seconds=take))
                    remaining -= take
            taken.reverse()

            results.append(WeeklyOvertimeResult(
                employee_id=employee_id,
                week_start=period_start + timedelta(days=7 * index),
                ordinary_hours=hours(ordinary_seconds),
                threshold_hours=threshold,
                overtime_hours=hours(excess),
                overtime_top_up=cents_to_amount(round_half_up(self._top_up(taken, first_tier_seconds))),
                shift_ids=tuple(b.shift_id for b in week),
            ))
        return results
