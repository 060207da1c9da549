from fastapi import APIRouter

from labour_engine.config import settings
from labour_engine.models.schemas import LeaveRequest, LeaveResponse, SuperRequest, SuperResponse
from labour_engine.services.entitlements import (
    calculate_leave_accrual,
    calculate_leave_entitlements,
    calculate_super,
)

router = APIRouter()


@router.post("/api/v1/entitlements/super", response_model=SuperResponse)
async def superannuation(request: SuperRequest):
    rate = request.rate_pct if request.rate_pct is not None else settings.super_rate_pct
    return SuperResponse(
        ordinary_earnings=request.ordinary_earnings,
        rate_pct=rate,
        super_amount=calculate_super(request.ordinary_earnings, rate),
    )


@router.post("/api/v1/entitlements/leave", response_model=LeaveResponse)
async def leave(request: LeaveRequest):
    accrued = None
    if request.accrual_rate_per_hour is not None:
        accrued = calculate_leave_accrual(
            request.hours_worked, request.accrual_rate_per_hour, request.employment_type
        )
    entitlements = calculate_leave_entitlements(request.hours_worked, request.employment_type)
    return LeaveResponse(
        employment_type=request.employment_type,
        hours_worked=request.hours_worked,
        accrued_hours=accrued,
        annual_leave_hours=entitlements["annual"],
        personal_leave_hours=entitlements["personal"],
    )
