"""
Default award parameters (Hospitality Industry (General) Award 2020, MA000009).
Used as config defaults and as the fallback rate table when no database is configured.
"""
from datetime import date, time

AWARD_CODE = "MA000009"
RATES_VERSION = "2025-07-01"

STANDARD_WEEKLY_HOURS = 38
DEFAULT_CASUAL_LOADING = 25

# Ordinary hours threshold before overtime kicks in
DAILY_ORDINARY_HOURS = 8
WEEKLY_ORDINARY_HOURS = 38

# Overtime multipliers
OVERTIME_FIRST_TIER_HOURS = 2
OVERTIME_MULTIPLIERS = {
    "first_2_hours": 1.50,
    "after_2_hours": 2.00,
}

# Minimum engagement (hours) by employment type
MINIMUM_ENGAGEMENT_HOURS = {
    "CASUAL": 3,
    "PART_TIME": 3,
}

# Meal break: required after 5 hours, must start within 6 hours
MEAL_BREAK_REQUIRED_AFTER_HOURS = 5
MEAL_BREAK_DEADLINE_HOURS = 6
MISSED_BREAK_MULTIPLIER = 0.5

# Fatigue
MINIMUM_REST_HOURS = 10
SEVERE_REST_HOURS = 8
ROSTER_CHANGEOVER_REST_HOURS = 8
MAX_CONSECUTIVE_DAYS = 6
SEVERE_CONSECUTIVE_DAYS = 10
FATIGUE_WINDOW_DAYS = 7
LONG_SHIFT_HOURS = 10
LONG_SHIFT_MEDIUM_COUNT = 4

# Superannuation guarantee (from 1 July 2025)
SUPER_RATE_PCT = 12

# Leave (NES): 4 weeks annual, 10 days personal on a 38h week
ANNUAL_LEAVE_HOURS_PER_YEAR = 152
PERSONAL_LEAVE_HOURS_PER_YEAR = 76
STANDARD_HOURS_PER_YEAR = STANDARD_WEEKLY_HOURS * 52

# Audit
WEEKLY_HOURS_CAP = 50
MAX_SPLIT_SHIFT_SPREAD_HOURS = 12

# Fallback hourly rates, effective 1 July 2025
FALLBACK_EFFECTIVE_FROM = date(2025, 7, 1)
BASE_HOURLY_RATES = {
    "FB_INTRO": "24.95",
    "FB_1": "25.85",
    "FB_2": "26.85",
    "FB_3": "27.96",
    "FB_4": "29.44",
    "FB_5": "31.42",
    "K_INTRO": "24.95",
    "K_1": "25.85",
    "K_2": "27.96",
    "K_3": "29.44",
    "COOK_1": "26.85",
    "COOK_2": "27.96",
    "COOK_3": "29.44",
    "COOK_4": "31.42",
    "COOK_5": "32.57",
}

# name -> (day_type, window or None, multiplier, precedence, employment types, includes casual loading)
# Casual rates are on the award base and replace the 25% loading for those hours.
PERMANENT = ("FULL_TIME", "PART_TIME")
PENALTY_RULES = {
    "saturday": ("SATURDAY", None, 1.25, 10, PERMANENT, False),
    "sunday": ("SUNDAY", None, 1.50, 10, PERMANENT, False),
    "public_holiday": ("PUBLIC_HOLIDAY", None, 2.25, 0, PERMANENT, False),
    "casual_saturday": ("SATURDAY", None, 1.50, 10, ("CASUAL",), True),
    "casual_sunday": ("SUNDAY", None, 1.75, 10, ("CASUAL",), True),
    "casual_public_holiday": ("PUBLIC_HOLIDAY", None, 2.50, 0, ("CASUAL",), True),
}

# type -> (trigger, unit, amount, description)
ALLOWANCES = {
    "EVENING": ("EVENING", "PER_HOUR", "2.81", "Evening work (7pm to midnight)"),
    "LATE_NIGHT": ("LATE_NIGHT", "PER_HOUR", "4.22", "Late night work (midnight to 7am)"),
    "SPLIT_SHIFT": ("SPLIT_SHIFT", "FLAT", "5.02", "Split shift allowance"),
    "FIRST_AID": ("FIRST_AID", "FLAT", "3.97", "First aid officer allowance"),
    "TOOL": ("TOOL", "FLAT", "2.19", "Tool and equipment allowance"),
}

LATE_NIGHT_WINDOW = (time(0, 0), time(7, 0))
EVENING_WINDOW = (time(19, 0), time(0, 0))
