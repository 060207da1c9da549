from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from labour_engine.config import settings
from labour_engine.database import get_db_optional
from labour_engine.models.schemas import AuditRequest, AuditResponse
from labour_engine.services.audit import DEFAULT_CHECKS, EXTENDED_CHECKS, ComplianceAuditor
from labour_engine.services.db_rates import get_rate_table

router = APIRouter()


@router.post("/api/v1/audit", response_model=AuditResponse)
async def run_audit(
    request: AuditRequest,
    db: Optional[Session] = Depends(get_db_optional),
):
    rate_table = get_rate_table(db, settings.award_code)
    auditor = ComplianceAuditor(
        checks=EXTENDED_CHECKS if request.include_extended_checks else DEFAULT_CHECKS,
        fatigue_config=settings.fatigue_config(),
        pay_config=settings.pay_config(),
    )
    result = auditor.audit(request.employees, request.shifts, rate_table)
    return AuditResponse(award_code=rate_table.award_code, result=result)
