from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from labour_engine.models.labour import (
    AllowanceRate,
    EmployeeProfile,
    EmploymentType,
    FatigueAssessment,
    LabourAuditResult,
    PenaltyRule,
    RosterShift,
    ShiftPayBreakdown,
    WeeklyOvertimeResult,
)


class ShiftPayRequest(BaseModel):
    shift: RosterShift
    employee: EmployeeProfile
    public_holidays: list[date] = []


class ShiftPayResult(BaseModel):
    shift_id: str
    employee_id: str
    breakdown: Optional[ShiftPayBreakdown] = None
    error: Optional[str] = None


class RosterPayRequest(BaseModel):
    roster_name: str = ""
    employees: list[EmployeeProfile]
    shifts: list[RosterShift]
    public_holidays: list[date] = []


class RosterPayResponse(BaseModel):
    roster_name: str
    rates_version: str
    total_cost: Decimal
    total_hours: Decimal
    results: list[ShiftPayResult]
    weekly_overtime: list[WeeklyOvertimeResult]
    warnings: list[str]


class FatigueRequest(BaseModel):
    employee_id: Optional[str] = None
    shifts: list[RosterShift]


class FatigueResponse(BaseModel):
    assessment: FatigueAssessment


class SuperRequest(BaseModel):
    ordinary_earnings: Decimal = Field(ge=0)
    rate_pct: Optional[Decimal] = Field(default=None, ge=0)


class SuperResponse(BaseModel):
    ordinary_earnings: Decimal
    rate_pct: Decimal
    super_amount: Decimal


class LeaveRequest(BaseModel):
    hours_worked: Decimal = Field(ge=0)
    employment_type: EmploymentType
    accrual_rate_per_hour: Optional[Decimal] = Field(default=None, ge=0)


class LeaveResponse(BaseModel):
    employment_type: EmploymentType
    hours_worked: Decimal
    accrued_hours: Optional[Decimal] = None
    annual_leave_hours: Decimal
    personal_leave_hours: Decimal


class AuditRequest(BaseModel):
    employees: list[EmployeeProfile]
    shifts: list[RosterShift] = []
    include_extended_checks: bool = False


class AuditResponse(BaseModel):
    award_code: str
    result: LabourAuditResult


class RatesResponse(BaseModel):
    award_code: str
    rates_version: str
    classification: str
    employment_type: EmploymentType
    on_date: date
    base_hourly_rate: Decimal
    casual_loading_pct: Decimal
    effective_hourly_rate: Decimal
    effective_from: date
    effective_to: Optional[date] = None
    penalty_rules: list[PenaltyRule]
    allowances: list[AllowanceRate]


class HealthResponse(BaseModel):
    status: str
    environment: str
    award_code: str
    rates_version: str
