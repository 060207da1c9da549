from sqlalchemy import Boolean, Column, Date, Integer, Numeric, String, Time

from labour_engine.database import Base


class AwardRateRow(Base):
    __tablename__ = "award_rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    award_code = Column(String, index=True, nullable=False)
    classification = Column(String, index=True, nullable=False)
    base_hourly_rate = Column(Numeric(10, 4), nullable=False)
    casual_loading_pct = Column(Numeric(5, 2), nullable=False, default=25)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)


class PenaltyRuleRow(Base):
    __tablename__ = "penalty_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    award_code = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    day_type = Column(String, nullable=False)
    window_start = Column(Time, nullable=True)
    window_end = Column(Time, nullable=True)
    multiplier = Column(Numeric(6, 4), nullable=False)
    precedence = Column(Integer, nullable=False, default=0)
    # Comma separated employment types; empty applies to everyone
    employment_types = Column(String, nullable=True)
    includes_casual_loading = Column(Boolean, nullable=False, default=False)
    is_current = Column(Boolean, nullable=False, default=True)


class AllowanceRateRow(Base):
    __tablename__ = "allowance_rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    award_code = Column(String, index=True, nullable=False)
    allowance_type = Column(String, nullable=False)
    trigger = Column(String, nullable=False)
    unit = Column(String, nullable=False, default="FLAT")
    amount = Column(Numeric(10, 4), nullable=False)
    description = Column(String, nullable=True)
    window_start = Column(Time, nullable=True)
    window_end = Column(Time, nullable=True)
    # Comma separated day types; empty applies to every day
    day_types = Column(String, nullable=True)
    is_current = Column(Boolean, nullable=False, default=True)


class PublicHolidayRow(Base):
    __tablename__ = "public_holidays"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, index=True, nullable=False)
    name = Column(String, nullable=False)
    state = Column(String, nullable=True)
    is_national = Column(Boolean, nullable=False, default=False)
