from __future__ import annotations

from typing import Dict, Optional, Union

from .exceptions import UnknownWageTypeError
from .models import DerivedRates, PayFrequency, PayProfile, StatutoryOverride, WageType
from .rounding import round4, round_half_up

# MSC is always daily rate x 26, whatever the profile's work days per month.
MSC_DAYS = 26

PH_MULTIPLIERS: Dict[str, float] = {
    "OT_REGULAR": 1.25,
    "REST_DAY": 1.3,
    "REST_DAY_OT": 1.69,
    "REGULAR_HOLIDAY": 2.0,
    "REGULAR_HOLIDAY_OT": 2.6,
    "REGULAR_HOLIDAY_REST_DAY": 2.6,
    "REGULAR_HOLIDAY_REST_DAY_OT": 3.38,
    "SPECIAL_HOLIDAY": 1.3,
    "SPECIAL_HOLIDAY_OT": 1.69,
    "SPECIAL_HOLIDAY_REST_DAY": 1.5,
    "SPECIAL_HOLIDAY_REST_DAY_OT": 1.95,
    "NIGHT_DIFF": 0.1,
    "NIGHT_DIFF_OT": 0.1375,
}

PERIODS_PER_MONTH: Dict[PayFrequency, float] = {
    PayFrequency.MONTHLY: 1,
    PayFrequency.SEMI_MONTHLY: 2,
    PayFrequency.BI_WEEKLY: 2.17,
    PayFrequency.WEEKLY: 4.33,
}


def coerce_wage_type(value: Union[WageType, str]) -> WageType:
    try:
        return WageType(value)
    except ValueError as exc:
        raise UnknownWageTypeError(value) from exc


def periods_per_month(frequency: Union[PayFrequency, str]) -> float:
    try:
        return PERIODS_PER_MONTH[PayFrequency(frequency)]
    except ValueError:
        return 2


def calculate_derived_rates(profile: PayProfile) -> DerivedRates:
    wage_type = coerce_wage_type(profile.wage_type)
    days = profile.standard_work_days_per_month
    hours = profile.standard_hours_per_day

    if wage_type == WageType.MONTHLY:
        monthly = profile.base_rate
        daily = monthly / days
        hourly = daily / hours
    elif wage_type == WageType.DAILY:
        daily = profile.base_rate
        hourly = daily / hours
        monthly = daily * days
    else:
        hourly = profile.base_rate
        daily = hourly * hours
        monthly = daily * days

    return DerivedRates(
        monthly_rate=round4(monthly),
        daily_rate=round4(daily),
        hourly_rate=round4(hourly),
        minute_rate=round_half_up(hourly / 60, 6),
        msc=round4(daily * MSC_DAYS),
    )


def get_day_rates(
    standard_rates: DerivedRates,
    hours_per_day: float,
    override: Optional[float] = None,
) -> DerivedRates:
    """Rates for a single day.

    A positive ``override`` replaces the daily rate and everything derived
    from it for that day. ``msc`` and ``monthly_rate`` are carried over
    untouched so statutory and tax bases never see the override.
    """
    if override is None or override <= 0:
        return standard_rates
    hourly = override / hours_per_day
    return DerivedRates(
        monthly_rate=standard_rates.monthly_rate,
        daily_rate=override,
        hourly_rate=hourly,
        minute_rate=hourly / 60,
        msc=standard_rates.msc,
    )


def statutory_daily_rate(
    override: StatutoryOverride,
    work_days_per_month: float = 26,
    hours_per_day: float = 8,
) -> float:
    wage_type = coerce_wage_type(override.wage_type)
    if wage_type == WageType.DAILY:
        return override.base_rate
    if wage_type == WageType.HOURLY:
        return override.base_rate * (hours_per_day or 8)
    return override.base_rate / (work_days_per_month or 26)
