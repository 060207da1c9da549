from fastapi import APIRouter

from labour_engine.config import settings
from labour_engine.models.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health():
    return {
        "status": "healthy",
        "environment": settings.environment,
        "award_code": settings.award_code,
        "rates_version": settings.rates_version,
    }
