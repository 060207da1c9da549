from fastapi import APIRouter, HTTPException, status

from labour_engine.config import settings
from labour_engine.models.schemas import FatigueRequest, FatigueResponse
from labour_engine.services.fatigue import assess_fatigue_risk

router = APIRouter()


@router.post("/api/v1/fatigue/assess", response_model=FatigueResponse)
async def assess(request: FatigueRequest):
    try:
        assessment = assess_fatigue_risk(request.shifts, settings.fatigue_config(), request.employee_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return FatigueResponse(assessment=assessment)
