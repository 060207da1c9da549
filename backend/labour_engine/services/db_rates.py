"""
Database-driven rate configuration.
Loads award rates, penalty rules, allowances and public holidays into the
engine's read-only RateTable / PublicHolidayCalendar. When no database is
configured the built-in MA000009 table from award_rules is used instead.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from labour_engine.models.db_models import AllowanceRateRow, AwardRateRow, PenaltyRuleRow, PublicHolidayRow
from labour_engine.models.labour import AllowanceRate, AwardRate, PenaltyRule, TimeWindow
from labour_engine.services import award_rules
from labour_engine.services.day_type import PublicHolidayCalendar
from labour_engine.services.rate_table import RateTable

logger = logging.getLogger(__name__)


def _split(csv: Optional[str]) -> tuple[str, ...]:
    if not csv:
        return ()
    return tuple(p.strip() for p in csv.split(",") if p.strip())


def _window(start, end) -> Optional[TimeWindow]:
    if start is None or end is None:
        return None
    return TimeWindow(start=start, end=end)


def load_rate_table(db: Session, award_code: str = award_rules.AWARD_CODE,
                    rates_version: str = award_rules.RATES_VERSION) -> RateTable:
    """Build a RateTable for an award. Raises RateConfigError on overlapping rates."""
    award_rates = [
        AwardRate(
            classification=r.classification,
            base_hourly_rate=r.base_hourly_rate,
            casual_loading_pct=r.casual_loading_pct,
            effective_from=r.effective_from,
            effective_to=r.effective_to,
        )
        for r in db.query(AwardRateRow)
        .filter(AwardRateRow.award_code == award_code)
        .order_by(AwardRateRow.classification, AwardRateRow.effective_from)
        .all()
    ]
    penalty_rules = [
        PenaltyRule(
            name=r.name,
            day_type=r.day_type,
            time_window=_window(r.window_start, r.window_end),
            multiplier=r.multiplier,
            precedence=r.precedence,
            employment_types=_split(r.employment_types),
            includes_casual_loading=bool(r.includes_casual_loading),
        )
        for r in db.query(PenaltyRuleRow)
        .filter(PenaltyRuleRow.award_code == award_code, PenaltyRuleRow.is_current.is_(True))
        .order_by(PenaltyRuleRow.precedence, PenaltyRuleRow.name)
        .all()
    ]
    allowance_rates = [
        AllowanceRate(
            type=r.allowance_type,
            trigger=r.trigger,
            unit=r.unit,
            amount=r.amount,
            description=r.description,
            time_window=_window(r.window_start, r.window_end),
            day_types=_split(r.day_types),
        )
        for r in db.query(AllowanceRateRow)
        .filter(AllowanceRateRow.award_code == award_code, AllowanceRateRow.is_current.is_(True))
        .order_by(AllowanceRateRow.id)
        .all()
    ]
    logger.info(
        "Loaded %s from database: %d rates, %d penalty rules, %d allowances",
        award_code, len(award_rates), len(penalty_rules), len(allowance_rates),
    )
    return RateTable(award_rates, penalty_rules, allowance_rates, award_code=award_code, rates_version=rates_version)


def load_public_holidays(db: Session, state: Optional[str] = None) -> PublicHolidayCalendar:
    """National holidays plus, when given, the state's own."""
    query = db.query(PublicHolidayRow)
    if state:
        query = query.filter(or_(PublicHolidayRow.is_national.is_(True), PublicHolidayRow.state == state))
    return PublicHolidayCalendar({r.date: r.name for r in query.order_by(PublicHolidayRow.date).all()})


def default_rate_table() -> RateTable:
    """Built-in MA000009 rates, used when DATABASE_URL is not set."""
    award_rates = [
        AwardRate(
            classification=classification,
            base_hourly_rate=Decimal(rate),
            casual_loading_pct=Decimal(award_rules.DEFAULT_CASUAL_LOADING),
            effective_from=award_rules.FALLBACK_EFFECTIVE_FROM,
        )
        for classification, rate in award_rules.BASE_HOURLY_RATES.items()
    ]
    penalty_rules = [
        PenaltyRule(
            name=name,
            day_type=day_type,
            time_window=_window(*window) if window else None,
            multiplier=Decimal(str(multiplier)),
            precedence=precedence,
            employment_types=employment_types,
            includes_casual_loading=includes_loading,
        )
        for name, (day_type, window, multiplier, precedence, employment_types, includes_loading)
        in award_rules.PENALTY_RULES.items()
    ]
    allowance_rates = [
        AllowanceRate(type=type_, trigger=trigger, unit=unit, amount=Decimal(amount), description=description)
        for type_, (trigger, unit, amount, description) in award_rules.ALLOWANCES.items()
    ]
    return RateTable(
        award_rates,
        penalty_rules,
        allowance_rates,
        award_code=award_rules.AWARD_CODE,
        rates_version=award_rules.RATES_VERSION,
    )


def get_rate_table(db: Optional[Session], award_code: str = award_rules.AWARD_CODE) -> RateTable:
    if db is None:
        return default_rate_table()
    return load_rate_table(db, award_code)


def get_public_holidays(db: Optional[Session], state: Optional[str] = None) -> PublicHolidayCalendar:
    if db is None:
        return PublicHolidayCalendar()
    return load_public_holidays(db, state)


def seed_default_rates(db: Session) -> int:
    """Write the built-in MA000009 table into an empty database. Returns rows added."""
    if db.query(AwardRateRow).count() > 0:
        logger.info("award_rates already populated; skipping seed")
        return 0
    table = default_rate_table()
    rows = []
    for classification in sorted(table.classifications):
        for rate in table.rates_for(classification):
            rows.append(AwardRateRow(
                award_code=table.award_code,
                classification=rate.classification,
                base_hourly_rate=rate.base_hourly_rate,
                casual_loading_pct=rate.casual_loading_pct,
                effective_from=rate.effective_from,
                effective_to=rate.effective_to,
            ))
    for rule in table.penalty_rules:
        rows.append(PenaltyRuleRow(
            award_code=table.award_code,
            name=rule.name,
            day_type=rule.day_type.value,
            window_start=rule.time_window.start if rule.time_window else None,
            window_end=rule.time_window.end if rule.time_window else None,
            multiplier=rule.multiplier,
            precedence=rule.precedence,
            employment_types=",".join(t.value for t in rule.employment_types) or None,
            includes_casual_loading=rule.includes_casual_loading,
        ))
    for allowance in table.allowance_rates:
        rows.append(AllowanceRateRow(
            award_code=table.award_code,
            allowance_type=allowance.type,
            trigger=allowance.trigger,
            unit=allowance.unit.value,
            amount=allowance.amount,
            description=allowance.description,
            window_start=allowance.time_window.start if allowance.time_window else None,
            window_end=allowance.time_window.end if allowance.time_window else None,
            day_types=",".join(d.value for d in allowance.day_types) or None,
        ))
    db.add_all(rows)
    db.commit()
    logger.info("Seeded %d rate rows for %s", len(rows), table.award_code)
    return len(rows)
