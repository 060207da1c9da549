"""
Domain types for the award engine.
All values are immutable; results are computed fresh on every call.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from labour_engine.services import award_rules
from labour_engine.services.money import hours


class DayType(str, Enum):
    WEEKDAY = "WEEKDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"
    PUBLIC_HOLIDAY = "PUBLIC_HOLIDAY"


class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CASUAL = "CASUAL"


class ShiftType(str, Enum):
    REGULAR = "REGULAR"
    SPLIT = "SPLIT"
    ON_CALL = "ON_CALL"
    TRAINING = "TRAINING"


class BreakEventType(str, Enum):
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"


class BreakType(str, Enum):
    MEAL_UNPAID = "MEAL_UNPAID"
    REST_PAID = "REST_PAID"


class AllowanceUnit(str, Enum):
    FLAT = "FLAT"
    PER_HOUR = "PER_HOUR"


class FatigueRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class AuditCategory(str, Enum):
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


class PenaltyCombination(str, Enum):
    """How several matching penalty rules combine on one segment."""
    HIGHEST = "HIGHEST"
    STACK = "STACK"


class OvertimeComposition(str, Enum):
    """How the overtime multiplier combines with a segment's penalty multiplier."""
    ADDITIVE = "ADDITIVE"
    MULTIPLICATIVE = "MULTIPLICATIVE"
    HIGHEST = "HIGHEST"


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Configuration ---

class TimeWindow(Frozen):
    """[start, end) in local time. An end at or before start wraps past midnight."""
    start: time
    end: time

    @model_validator(mode="after")
    def _not_empty(self):
        if self.start == self.end:
            raise ValueError("time window start and end must differ")
        return self

    @property
    def wraps_midnight(self) -> bool:
        return self.end <= self.start

    def contains(self, t: time) -> bool:
        if self.wraps_midnight:
            return t >= self.start or t < self.end
        return self.start <= t < self.end

    def boundaries(self) -> tuple[time, time]:
        return self.start, self.end


DEFAULT_TRIGGER_WINDOWS = {
    "LATE_NIGHT": award_rules.LATE_NIGHT_WINDOW,
    "EVENING": award_rules.EVENING_WINDOW,
}


class AwardRate(Frozen):
    classification: str
    base_hourly_rate: Decimal = Field(gt=0)
    effective_from: date
    effective_to: Optional[date] = None
    casual_loading_pct: Decimal = Field(default=Decimal(award_rules.DEFAULT_CASUAL_LOADING), ge=0, le=100)

    @model_validator(mode="after")
    def _window_order(self):
        if self.effective_to is not None and self.effective_to < self.effective_from:
            raise ValueError("effective_to is before effective_from")
        return self

    def covers(self, on_date: date) -> bool:
        return self.effective_from <= on_date and (self.effective_to is None or on_date <= self.effective_to)

    def overlaps(self, other: "AwardRate") -> bool:
        self_end = self.effective_to or date.max
        other_end = other.effective_to or date.max
        return self.effective_from <= other_end and other.effective_from <= self_end


class PenaltyRule(Frozen):
    name: str
    day_type: DayType
    time_window: Optional[TimeWindow] = None
    multiplier: Decimal = Field(ge=1)
    precedence: int = 0
    employment_types: tuple[EmploymentType, ...] = ()
    # Multiplier is on the award base and already contains the casual loading
    includes_casual_loading: bool = False

    def matches(self, day_type: DayType, at: time, employment_type: EmploymentType) -> bool:
        if day_type != self.day_type:
            return False
        if self.employment_types and employment_type not in self.employment_types:
            return False
        return self.time_window is None or self.time_window.contains(at)


class AllowanceRate(Frozen):
    type: str
    amount: Decimal = Field(ge=0)
    trigger: str
    unit: AllowanceUnit = AllowanceUnit.FLAT
    description: Optional[str] = None
    time_window: Optional[TimeWindow] = None
    day_types: tuple[DayType, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _default_window(cls, data):
        if isinstance(data, dict) and data.get("time_window") is None:
            window = DEFAULT_TRIGGER_WINDOWS.get(data.get("trigger"))
            if window:
                data = {**data, "time_window": {"start": window[0], "end": window[1]}}
        return data


class PayConfig(Frozen):
    penalty_combination: PenaltyCombination = PenaltyCombination.HIGHEST
    overtime_composition: OvertimeComposition = OvertimeComposition.ADDITIVE
    daily_ordinary_hours: Decimal = Field(default=Decimal(award_rules.DAILY_ORDINARY_HOURS), gt=0)
    overtime_first_tier_hours: Decimal = Field(default=Decimal(award_rules.OVERTIME_FIRST_TIER_HOURS), ge=0)
    overtime_first_multiplier: Decimal = Field(
        default=Decimal(str(award_rules.OVERTIME_MULTIPLIERS["first_2_hours"])), ge=1
    )
    overtime_after_multiplier: Decimal = Field(
        default=Decimal(str(award_rules.OVERTIME_MULTIPLIERS["after_2_hours"])), ge=1
    )
    weekly_ordinary_hours: Decimal = Field(default=Decimal(award_rules.WEEKLY_ORDINARY_HOURS), gt=0)
    minimum_engagement_hours: dict[EmploymentType, Decimal] = Field(
        default_factory=lambda: {
            EmploymentType(k): Decimal(v) for k, v in award_rules.MINIMUM_ENGAGEMENT_HOURS.items()
        }
    )
    meal_break_required_after_hours: Decimal = Decimal(award_rules.MEAL_BREAK_REQUIRED_AFTER_HOURS)
    meal_break_deadline_hours: Decimal = Decimal(award_rules.MEAL_BREAK_DEADLINE_HOURS)
    missed_break_multiplier: Decimal = Field(default=Decimal(str(award_rules.MISSED_BREAK_MULTIPLIER)), ge=0)
    # Allowance types left out of ordinary time earnings for super
    super_excluded_allowance_types: tuple[str, ...] = ("TOOL",)


class FatigueConfig(Frozen):
    minimum_rest_hours: Decimal = Field(default=Decimal(award_rules.MINIMUM_REST_HOURS), gt=0)
    severe_rest_hours: Decimal = Field(default=Decimal(award_rules.SEVERE_REST_HOURS), ge=0)
    roster_changeover_rest_hours: Decimal = Decimal(award_rules.ROSTER_CHANGEOVER_REST_HOURS)
    max_consecutive_days: int = Field(default=award_rules.MAX_CONSECUTIVE_DAYS, gt=0)
    severe_consecutive_days: int = Field(default=award_rules.SEVERE_CONSECUTIVE_DAYS, gt=0)
    window_days: int = Field(default=award_rules.FATIGUE_WINDOW_DAYS, gt=0)
    long_shift_hours: Decimal = Decimal(award_rules.LONG_SHIFT_HOURS)
    long_shift_medium_count: int = award_rules.LONG_SHIFT_MEDIUM_COUNT

    @model_validator(mode="after")
    def _severity_order(self):
        if self.severe_rest_hours > self.minimum_rest_hours:
            raise ValueError("severe_rest_hours cannot exceed minimum_rest_hours")
        if self.severe_consecutive_days <= self.max_consecutive_days:
            raise ValueError("severe_consecutive_days must exceed max_consecutive_days")
        return self


class LeaveConfig(Frozen):
    annual_hours_per_year: Decimal = Decimal(award_rules.ANNUAL_LEAVE_HOURS_PER_YEAR)
    personal_hours_per_year: Decimal = Decimal(award_rules.PERSONAL_LEAVE_HOURS_PER_YEAR)
    standard_hours_per_year: Decimal = Decimal(award_rules.STANDARD_HOURS_PER_YEAR)


# --- Inputs from the roster/HR system ---

class EmployeeProfile(Frozen):
    id: str
    classification: str
    employment_type: EmploymentType
    super_fund_name: Optional[str] = None
    agreed_hours_per_week: Optional[Decimal] = Field(default=None, gt=0)
    is_first_aid_officer: bool = False
    supplies_own_tools: bool = False


class BreakEvent(Frozen):
    event_type: BreakEventType
    event_time: datetime | time
    break_type: BreakType = BreakType.MEAL_UNPAID

    def at(self, shift_start: datetime) -> datetime:
        """Absolute instant; a bare time is its first occurrence at or after shift start."""
        if isinstance(self.event_time, datetime):
            return self.event_time
        candidate = datetime.combine(shift_start.date(), self.event_time)
        if candidate < shift_start:
            candidate += timedelta(days=1)
        return candidate


class RosterShift(Frozen):
    id: str
    employee_id: str
    shift_date: date = Field(validation_alias=AliasChoices("shift_date", "date"))
    start_time: time
    end_time: time
    breaks: tuple[BreakEvent, ...] = ()
    shift_type: ShiftType = ShiftType.REGULAR
    higher_duties_classification: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _naive(cls, v: time) -> time:
        if v.tzinfo is not None:
            raise ValueError("shift times are local wall-clock times")
        return v

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.shift_date, self.start_time)

    @property
    def end_at(self) -> datetime:
        """End instant; an end time before the start time falls on the next day."""
        end = datetime.combine(self.shift_date, self.end_time)
        if self.end_time < self.start_time:
            end += timedelta(days=1)
        return end

    @property
    def span_seconds(self) -> int:
        return int((self.end_at - self.start_at).total_seconds())


class TimeSegment(Frozen):
    start: datetime
    end: datetime
    day_type: DayType

    @property
    def seconds(self) -> int:
        return int((self.end - self.start).total_seconds())


class SegmentationResult(Frozen):
    segments: tuple[TimeSegment, ...]
    meal_breaks: tuple[tuple[datetime, datetime], ...] = ()
    warnings: tuple[str, ...] = ()


# --- Results ---

class AllowanceDetail(Frozen):
    type: str
    trigger: str
    description: str
    amount: Decimal
    hours: Optional[Decimal] = None


class PaySegment(Frozen):
    start: datetime
    end: datetime
    day_type: DayType
    seconds: int
    penalty_multiplier: Decimal
    overtime_multiplier: Decimal
    is_overtime: bool = False
    applied_rules: tuple[str, ...]
    amount: Decimal


class ShiftPayBreakdown(Frozen):
    shift_id: str
    employee_id: str
    shift_date: date
    classification: str
    higher_duties_applied: bool = False
    base_hourly_rate: Decimal
    paid_seconds: int
    ordinary_seconds: int
    overtime_seconds: int
    ordinary_amount: Decimal
    overtime_amount: Decimal
    penalty_amount: Decimal
    allowances: tuple[AllowanceDetail, ...] = ()
    total: Decimal
    segments: tuple[PaySegment, ...] = ()
    warnings: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _reconciles(self):
        expected = (
            self.ordinary_amount
            + self.overtime_amount
            + self.penalty_amount
            + sum((a.amount for a in self.allowances), Decimal("0"))
        )
        if expected != self.total:
            raise ValueError(f"breakdown does not reconcile: {expected} != {self.total}")
        return self

    @computed_field
    @property
    def paid_hours(self) -> Decimal:
        return hours(self.paid_seconds)

    @computed_field
    @property
    def ordinary_hours(self) -> Decimal:
        return hours(self.ordinary_seconds)

    @computed_field
    @property
    def overtime_hours(self) -> Decimal:
        return hours(self.overtime_seconds)

    @property
    def allowance_total(self) -> Decimal:
        return sum((a.amount for a in self.allowances), Decimal("0"))


class WeeklyOvertimeResult(Frozen):
    employee_id: str
    week_start: date
    ordinary_hours: Decimal
    threshold_hours: Decimal
    overtime_hours: Decimal
    overtime_top_up: Decimal
    shift_ids: tuple[str, ...]


class ShiftGapResult(Frozen):
    from_shift_id: str
    to_shift_id: str
    gap_hours: Decimal
    meets_minimum_rest: bool
    overtime_hours_due: Decimal = Decimal("0")
    warning: Optional[str] = None


class FatigueAssessment(Frozen):
    employee_id: str
    risk_level: FatigueRisk
    contributing_shift_ids: tuple[str, ...] = ()
    gaps: tuple[ShiftGapResult, ...] = ()
    max_consecutive_days: int = 0
    long_shift_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


class AuditCheckResult(Frozen):
    name: str
    passed: bool
    severity: Severity
    message: str
    affected_ids: tuple[str, ...] = ()


class LabourAuditResult(Frozen):
    score: int = Field(ge=0, le=100)
    category: AuditCategory
    checks: tuple[AuditCheckResult, ...]
