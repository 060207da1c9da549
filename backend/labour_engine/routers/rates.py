from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from labour_engine.config import settings
from labour_engine.database import get_db_optional
from labour_engine.models.labour import EmploymentType
from labour_engine.models.schemas import RatesResponse
from labour_engine.services.db_rates import get_rate_table
from labour_engine.services.errors import RateNotFoundError
from labour_engine.services.money import fraction_to_amount
from labour_engine.services.rate_resolver import RateResolver

router = APIRouter()


@router.get("/api/v1/rates/{classification}", response_model=RatesResponse)
async def get_rates(
    classification: str,
    employment_type: EmploymentType = EmploymentType.CASUAL,
    on_date: Optional[date] = None,
    db: Optional[Session] = Depends(get_db_optional),
):
    on_date = on_date or date.today()
    rate_table = get_rate_table(db, settings.award_code)
    resolver = RateResolver(rate_table, settings.pay_config())
    try:
        rate = rate_table.rate_for(classification, on_date)
        _, cents = resolver.base_rate(classification, employment_type, on_date)
    except RateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return RatesResponse(
        award_code=rate_table.award_code,
        rates_version=rate_table.rates_version,
        classification=classification,
        employment_type=employment_type,
        on_date=on_date,
        base_hourly_rate=rate.base_hourly_rate,
        casual_loading_pct=rate.casual_loading_pct,
        effective_hourly_rate=fraction_to_amount(cents),
        effective_from=rate.effective_from,
        effective_to=rate.effective_to,
        penalty_rules=[
            r for r in rate_table.penalty_rules
            if not r.employment_types or employment_type in r.employment_types
        ],
        allowances=list(rate_table.allowance_rates),
    )
