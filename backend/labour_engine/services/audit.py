"""
Organisation-level labour compliance audit.

Runs a list of named checks over employees and shifts. The score is the
plain pass ratio, round(100 × passed / total), with no weighting: every
check counts the same.
"""
import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import timedelta
from fractions import Fraction
from typing import Callable, Iterable, Optional, Sequence

from labour_engine.models.labour import (
    AuditCategory,
    AuditCheckResult,
    EmployeeProfile,
    EmploymentType,
    FatigueAssessment,
    FatigueConfig,
    FatigueRisk,
    LabourAuditResult,
    PayConfig,
    RosterShift,
    Severity,
)
from labour_engine.services import award_rules
from labour_engine.services.fatigue import FatigueRiskAssessor
from labour_engine.services.money import SECONDS_PER_HOUR, round_half_up
from labour_engine.services.rate_table import RateTable
from labour_engine.services.segmenter import ShiftSegmenter

logger = logging.getLogger(__name__)


@dataclass
class AuditContext:
    employees: Sequence[EmployeeProfile]
    shifts: Sequence[RosterShift]
    rate_table: Optional[RateTable] = None
    fatigue: dict[str, FatigueAssessment] = field(default_factory=dict)
    pay_config: PayConfig = field(default_factory=PayConfig)

    def shifts_by_employee(self) -> dict[str, list[RosterShift]]:
        grouped: dict[str, list[RosterShift]] = defaultdict(list)
        for s in self.shifts:
            grouped[s.employee_id].append(s)
        return grouped


AuditCheck = Callable[[AuditContext], AuditCheckResult]


def _paid_hours(shift: RosterShift) -> Fraction:
    intervals, _ = ShiftSegmenter().paid_intervals(shift, [])
    return Fraction(sum(int((e - s).total_seconds()) for s, e in intervals), SECONDS_PER_HOUR)


def check_classification_completeness(ctx: AuditContext) -> AuditCheckResult:
    known = ctx.rate_table.classifications if ctx.rate_table is not None else None
    missing = tuple(
        e.id for e in ctx.employees
        if not e.classification or (known is not None and e.classification not in known)
    )
    return AuditCheckResult(
        name="classification_completeness",
        passed=not missing,
        severity=Severity.CRITICAL if missing else Severity.INFO,
        message=(
            f"{len(missing)} employee(s) without a valid award classification"
            if missing else "All employees have a valid award classification"
        ),
        affected_ids=missing,
    )


def check_fatigue_exposure(ctx: AuditContext) -> AuditCheckResult:
    high = tuple(e.id for e in ctx.employees if ctx.fatigue.get(e.id) and ctx.fatigue[e.id].risk_level == FatigueRisk.HIGH)
    medium = sum(1 for a in ctx.fatigue.values() if a.risk_level == FatigueRisk.MEDIUM)
    return AuditCheckResult(
        name="fatigue_exposure",
        passed=not high,
        severity=Severity.CRITICAL if high else (Severity.WARNING if medium else Severity.INFO),
        message=(
            f"{len(high)} employee(s) at HIGH fatigue risk, {medium} at MEDIUM"
            if high or medium else "No employees at elevated fatigue risk"
        ),
        affected_ids=high,
    )


def check_super_fund_details(ctx: AuditContext) -> AuditCheckResult:
    missing = tuple(
        e.id for e in ctx.employees
        if e.employment_type != EmploymentType.CASUAL and not (e.super_fund_name or "").strip()
    )
    return AuditCheckResult(
        name="super_fund_details",
        passed=not missing,
        severity=Severity.WARNING if missing else Severity.INFO,
        message=(
            f"{len(missing)} permanent employee(s) missing super fund details"
            if missing else "Super fund details recorded for all permanent staff"
        ),
        affected_ids=missing,
    )


def check_minimum_engagement(ctx: AuditContext) -> AuditCheckResult:
    by_type = {e.id: e.employment_type for e in ctx.employees}
    short = []
    for s in ctx.shifts:
        minimum = ctx.pay_config.minimum_engagement_hours.get(by_type.get(s.employee_id))
        if minimum is not None and _paid_hours(s) < Fraction(minimum):
            short.append(s.id)
    return AuditCheckResult(
        name="minimum_engagement",
        passed=not short,
        severity=Severity.WARNING if short else Severity.INFO,
        message=f"{len(short)} shift(s) under minimum engagement" if short else "All shifts meet minimum engagement",
        affected_ids=tuple(short),
    )


def check_weekly_hours_cap(ctx: AuditContext, cap: int = award_rules.WEEKLY_HOURS_CAP) -> AuditCheckResult:
    over = []
    for employee_id, shifts in ctx.shifts_by_employee().items():
        weekly: dict = defaultdict(Fraction)
        for s in shifts:
            monday = s.shift_date - timedelta(days=s.shift_date.weekday())
            weekly[monday] += _paid_hours(s)
        if any(total > cap for total in weekly.values()):
            over.append(employee_id)
    return AuditCheckResult(
        name="weekly_hours_cap",
        passed=not over,
        severity=Severity.WARNING if over else Severity.INFO,
        message=f"{len(over)} employee(s) over {cap} hours in a week" if over else f"No one over {cap} hours in a week",
        affected_ids=tuple(sorted(over)),
    )


def check_split_shift_spread(ctx: AuditContext,
                             max_spread: int = award_rules.MAX_SPLIT_SHIFT_SPREAD_HOURS) -> AuditCheckResult:
    flagged = []
    for employee_id, shifts in ctx.shifts_by_employee().items():
        by_day = defaultdict(list)
        for s in shifts:
            by_day[s.shift_date].append(s)
        for day_shifts in by_day.values():
            if len(day_shifts) < 2:
                continue
            spread = max(s.end_at for s in day_shifts) - min(s.start_at for s in day_shifts)
            if spread > timedelta(hours=max_spread):
                flagged.append(employee_id)
                break
    return AuditCheckResult(
        name="split_shift_spread",
        passed=not flagged,
        severity=Severity.WARNING if flagged else Severity.INFO,
        message=(
            f"{len(flagged)} employee(s) with a daily spread over {max_spread} hours"
            if flagged else f"No daily spread over {max_spread} hours"
        ),
        affected_ids=tuple(sorted(flagged)),
    )


DEFAULT_CHECKS: tuple[AuditCheck, ...] = (
    check_classification_completeness,
    check_fatigue_exposure,
    check_super_fund_details,
)

EXTENDED_CHECKS: tuple[AuditCheck, ...] = DEFAULT_CHECKS + (
    check_minimum_engagement,
    check_weekly_hours_cap,
    check_split_shift_spread,
)


def score_checks(results: Sequence[AuditCheckResult]) -> int:
    if not results:
        return 100
    passed = sum(1 for r in results if r.passed)
    return round_half_up(Fraction(100 * passed, len(results)))


def category_for(score: int) -> AuditCategory:
    if score >= 75:
        return AuditCategory.GOOD
    if score >= 60:
        return AuditCategory.FAIR
    return AuditCategory.POOR


class ComplianceAuditor:
    def __init__(
        self,
        checks: Sequence[AuditCheck] = DEFAULT_CHECKS,
        fatigue_config: Optional[FatigueConfig] = None,
        pay_config: Optional[PayConfig] = None,
        max_workers: Optional[int] = None,
    ):
        self.checks = tuple(checks)
        self.assessor = FatigueRiskAssessor(fatigue_config)
        self.pay_config = pay_config or PayConfig()
        self.max_workers = max_workers

    def assess_fatigue(self, employees: Sequence[EmployeeProfile],
                       shifts_by_employee: dict[str, list[RosterShift]]) -> dict[str, FatigueAssessment]:
        def run(employee: EmployeeProfile) -> FatigueAssessment:
            return self.assessor.assess(shifts_by_employee.get(employee.id, []), employee.id)

        if self.max_workers and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                assessments = list(pool.map(run, employees))
        else:
            assessments = [run(e) for e in employees]
        return {a.employee_id: a for a in assessments}

    def audit(
        self,
        employees: Iterable[EmployeeProfile],
        shifts: Iterable[RosterShift],
        rate_table: Optional[RateTable] = None,
    ) -> LabourAuditResult:
        employees = list(employees)
        shifts = list(shifts)
        ctx = AuditContext(employees=employees, shifts=shifts, rate_table=rate_table, pay_config=self.pay_config)
        ctx.fatigue = self.assess_fatigue(employees, ctx.shifts_by_employee())

        results = tuple(check(ctx) for check in self.checks)
        score = score_checks(results)
        logger.info(
            "Labour audit: %d/%d checks passed, score %d",
            sum(1 for r in results if r.passed), len(results), score,
        )
        return LabourAuditResult(score=score, category=category_for(score), checks=results)


def run_labour_audit(
    employees: Iterable[EmployeeProfile],
    shifts: Iterable[RosterShift],
    rate_table: Optional[RateTable] = None,
    checks: Sequence[AuditCheck] = DEFAULT_CHECKS,
    fatigue_config: Optional[FatigueConfig] = None,
) -> LabourAuditResult:
    return ComplianceAuditor(checks, fatigue_config).audit(employees, shifts, rate_table)
