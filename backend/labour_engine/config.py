"""Application configuration from environment variables."""

import logging
from decimal import Decimal
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from labour_engine.models.labour import (
    FatigueConfig,
    OvertimeComposition,
    PayConfig,
    PenaltyCombination,
)
from labour_engine.services import award_rules

_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"
    environment: str = "development"
    award_code: str = award_rules.AWARD_CODE
    rates_version: str = award_rules.RATES_VERSION
    public_holiday_state: str = ""

    # Pay interpretation policies
    penalty_combination: PenaltyCombination = PenaltyCombination.HIGHEST
    overtime_composition: OvertimeComposition = OvertimeComposition.ADDITIVE
    daily_ordinary_hours: Decimal = Decimal(award_rules.DAILY_ORDINARY_HOURS)
    weekly_ordinary_hours: Decimal = Decimal(award_rules.WEEKLY_ORDINARY_HOURS)

    minimum_rest_hours: Decimal = Decimal(award_rules.MINIMUM_REST_HOURS)
    max_consecutive_days: int = award_rules.MAX_CONSECUTIVE_DAYS
    fatigue_window_days: int = award_rules.FATIGUE_WINDOW_DAYS

    super_rate_pct: Decimal = Decimal(award_rules.SUPER_RATE_PCT)

    def pay_config(self) -> PayConfig:
        return PayConfig(
            penalty_combination=self.penalty_combination,
            overtime_composition=self.overtime_composition,
            daily_ordinary_hours=self.daily_ordinary_hours,
            weekly_ordinary_hours=self.weekly_ordinary_hours,
        )

    def fatigue_config(self) -> FatigueConfig:
        return FatigueConfig(
            minimum_rest_hours=self.minimum_rest_hours,
            max_consecutive_days=self.max_consecutive_days,
            window_days=self.fatigue_window_days,
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


settings = Settings()
