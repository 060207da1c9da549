"""
Picks the base rate, penalty multiplier and allowances for a segment.

Penalty rules that match a segment's day type and time of day are combined
according to PayConfig.penalty_combination:
  HIGHEST - the single highest multiplier; ties go to the lowest precedence
            number, then to the rule name.
  STACK   - 1 + sum(multiplier - 1) over every matching rule.
Multipliers are relative to the effective (casual-loaded) rate. A rule marked
includes_casual_loading is stated on the award base, so for a casual it is
divided by the loading factor, and never drops below the loaded rate.
Allowances are evaluated independently of penalties and of each other.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from fractions import Fraction
from typing import Callable

from labour_engine.models.labour import (
    AllowanceRate,
    EmployeeProfile,
    EmploymentType,
    PayConfig,
    PenaltyCombination,
    PenaltyRule,
    RosterShift,
    ShiftType,
    TimeSegment,
)
from labour_engine.services.money import dollars_to_cents, to_fraction
from labour_engine.services.rate_table import RateTable


@dataclass(frozen=True)
class ShiftContext:
    shift: RosterShift
    employee: EmployeeProfile
    classification: str

    @property
    def higher_duties_applied(self) -> bool:
        return self.classification != self.employee.classification


TriggerCheck = Callable[[ShiftContext, TimeSegment], bool]

# Window and day-type filters on the AllowanceRate itself are applied on top of these.
TRIGGERS: dict[str, TriggerCheck] = {
    "ALWAYS": lambda ctx, seg: True,
    "SPLIT_SHIFT": lambda ctx, seg: ctx.shift.shift_type == ShiftType.SPLIT,
    "LATE_NIGHT": lambda ctx, seg: True,
    "EVENING": lambda ctx, seg: True,
    "FIRST_AID": lambda ctx, seg: ctx.employee.is_first_aid_officer,
    "TOOL": lambda ctx, seg: ctx.employee.supplies_own_tools,
    "HIGHER_DUTIES": lambda ctx, seg: ctx.higher_duties_applied,
}


@dataclass(frozen=True)
class ResolvedRate:
    base_rate: Decimal
    # Effective hourly rate in cents (casual loading applied)
    hourly_cents: Fraction
    penalty_multiplier: Fraction
    applied_rules: tuple[str, ...] = ()
    # (position in the rate table, allowance)
    allowances: tuple[tuple[int, AllowanceRate], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ResolvedSegment:
    segment: TimeSegment
    rate: ResolvedRate


def effective_classification(shift: RosterShift, employee: EmployeeProfile) -> str:
    return shift.higher_duties_classification or employee.classification


def relative_multiplier(rule: PenaltyRule, loading: Fraction = Fraction(1)) -> Fraction:
    multiplier = to_fraction(rule.multiplier)
    if rule.includes_casual_loading:
        return max(Fraction(1), multiplier / loading)
    return multiplier


def combine_penalties(
    rules: list[PenaltyRule],
    policy: PenaltyCombination,
    loading: Fraction = Fraction(1),
) -> tuple[Fraction, tuple[str, ...]]:
    """`loading` is effective rate / award base (1.25 for a 25% casual loading)."""
    if not rules:
        return Fraction(1), ()
    if policy == PenaltyCombination.STACK:
        ordered = sorted(rules, key=lambda r: (r.precedence, r.name))
        return (
            1 + sum((relative_multiplier(r, loading) - 1 for r in ordered), Fraction(0)),
            tuple(r.name for r in ordered),
        )
    best = min(rules, key=lambda r: (-relative_multiplier(r, loading), r.precedence, r.name))
    return relative_multiplier(best, loading), (best.name,)


class RateResolver:
    def __init__(self, rate_table: RateTable, config: PayConfig | None = None):
        self.rate_table = rate_table
        self.config = config or PayConfig()

    def base_rate(self, classification: str, employment_type: EmploymentType, on_date: date) -> tuple[Decimal, Fraction]:
        """(award base rate, effective hourly cents). Raises RateNotFoundError."""
        rate = self.rate_table.rate_for(classification, on_date)
        cents = dollars_to_cents(rate.base_hourly_rate)
        if employment_type == EmploymentType.CASUAL:
            cents *= 1 + to_fraction(rate.casual_loading_pct) / 100
        return rate.base_hourly_rate, cents

    def matching_rules(self, segment: TimeSegment, employment_type: EmploymentType) -> list[PenaltyRule]:
        at = segment.start.time()
        return [r for r in self.rate_table.penalty_rules if r.matches(segment.day_type, at, employment_type)]

    def matching_allowances(self, segment: TimeSegment, ctx: ShiftContext) -> tuple[tuple[int, AllowanceRate], ...]:
        at = segment.start.time()
        matched = []
        for index, allowance in enumerate(self.rate_table.allowance_rates):
            if allowance.day_types and segment.day_type not in allowance.day_types:
                continue
            if allowance.time_window is not None and not allowance.time_window.contains(at):
                continue
            if TRIGGERS[allowance.trigger](ctx, segment):
                matched.append((index, allowance))
        return tuple(matched)

    def resolve(self, segment: TimeSegment, classification: str, ctx: ShiftContext) -> ResolvedRate:
        base, cents = self.base_rate(classification, ctx.employee.employment_type, ctx.shift.shift_date)
        multiplier, names = combine_penalties(
            self.matching_rules(segment, ctx.employee.employment_type),
            self.config.penalty_combination,
            cents / dollars_to_cents(base),
        )
        return ResolvedRate(
            base_rate=base,
            hourly_cents=cents,
            penalty_multiplier=multiplier,
            applied_rules=names,
            allowances=self.matching_allowances(segment, ctx),
        )

    def resolve_all(self, segments, ctx: ShiftContext) -> list[ResolvedSegment]:
        # Rate lookup first so a missing rate fails even for a zero-segment shift
        self.base_rate(ctx.classification, ctx.employee.employment_type, ctx.shift.shift_date)
        return [ResolvedSegment(s, self.resolve(s, ctx.classification, ctx)) for s in segments]
