"""Payslip line generators.

Every generator folds over the period's attendance days. Each day resolves
its own rates through :func:`get_day_rates`, so a daily rate override on one
day changes that day's contribution to every line without touching the rest.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .models import (
    AdjustmentType,
    AttendanceDay,
    DayType,
    DerivedRates,
    LineCategory,
    ManualAdjustment,
    PayFrequency,
    PayProfile,
    PayslipLine,
    PenaltyDeduction,
    WageType,
)
from .rounding import round2, round4, round_half_up
from .wages import PH_MULTIPLIERS, get_day_rates

REGULAR_HOLIDAY_PAY_ORDER = 110
UNWORKED_REGULAR_HOLIDAY_PAY_ORDER = 111
SPECIAL_HOLIDAY_PAY_ORDER = 120

ALLOWANCE_FIELDS = (
    ("rice_subsidy", "Rice Subsidy"),
    ("clothing_allowance", "Clothing Allowance"),
    ("laundry_allowance", "Laundry Allowance"),
    ("medical_allowance", "Medical Allowance"),
    ("transportation_allowance", "Transportation Allowance"),
    ("meal_allowance", "Meal Allowance"),
    ("communication_allowance", "Communication Allowance"),
)


@dataclass(frozen=True)
class MinuteAmount:
    """Running (minutes, amount) total for one line."""

    minutes: float = 0
    amount: float = 0.0

    def add(self, minutes: float, amount: float) -> "MinuteAmount":
        return MinuteAmount(self.minutes + minutes, self.amount + amount)


@dataclass(frozen=True)
class OvertimeRule:
    category: LineCategory
    multiplier_code: str
    rule_code: str
    label: str
    rule_label: str


OVERTIME_RULES: Dict[DayType, OvertimeRule] = {
    DayType.REGULAR_WORKING_DAY: OvertimeRule(
        LineCategory.OVERTIME_REGULAR, "OT_REGULAR", "OT_REGULAR", "Regular Overtime", "Regular Day Overtime"
    ),
    DayType.REST_DAY: OvertimeRule(
        LineCategory.OVERTIME_REST_DAY, "REST_DAY_OT", "OT_REST_DAY", "Rest Day Overtime", "Rest Day Overtime"
    ),
    DayType.REGULAR_HOLIDAY: OvertimeRule(
        LineCategory.OVERTIME_HOLIDAY,
        "REGULAR_HOLIDAY_OT",
        "OT_REGULAR_HOLIDAY",
        "Regular Holiday OT",
        "Regular Holiday Overtime",
    ),
    DayType.SPECIAL_HOLIDAY: OvertimeRule(
        LineCategory.OVERTIME_HOLIDAY,
        "SPECIAL_HOLIDAY_OT",
        "OT_SPECIAL_HOLIDAY",
        "Special Holiday OT",
        "Special Holiday Overtime",
    ),
    DayType.REGULAR_HOLIDAY_REST_DAY: OvertimeRule(
        LineCategory.OVERTIME_HOLIDAY,
        "REGULAR_HOLIDAY_REST_DAY_OT",
        "OT_REGULAR_HOLIDAY_REST_DAY",
        "Regular Holiday Rest Day OT",
        "Regular Holiday Rest Day Overtime",
    ),
    DayType.SPECIAL_HOLIDAY_REST_DAY: OvertimeRule(
        LineCategory.OVERTIME_HOLIDAY,
        "SPECIAL_HOLIDAY_REST_DAY_OT",
        "OT_SPECIAL_HOLIDAY_REST_DAY",
        "Special Holiday Rest Day OT",
        "Special Holiday Rest Day Overtime",
    ),
}
# Special working days are paid like ordinary working days.
OVERTIME_RULES[DayType.SPECIAL_WORKING_DAY] = OVERTIME_RULES[DayType.REGULAR_WORKING_DAY]


@dataclass(frozen=True)
class HolidayRule:
    multiplier_code: str
    sort_order: int
    rule_code: str
    label: str


HOLIDAY_RULES: Dict[DayType, HolidayRule] = {
    DayType.REGULAR_HOLIDAY: HolidayRule(
        "REGULAR_HOLIDAY", REGULAR_HOLIDAY_PAY_ORDER, "REGULAR_HOLIDAY_WORKED", "Regular Holiday Pay"
    ),
    DayType.REGULAR_HOLIDAY_REST_DAY: HolidayRule(
        "REGULAR_HOLIDAY_REST_DAY",
        REGULAR_HOLIDAY_PAY_ORDER,
        "REGULAR_HOLIDAY_REST_DAY_WORKED",
        "Regular Holiday Rest Day Pay",
    ),
    DayType.SPECIAL_HOLIDAY: HolidayRule(
        "SPECIAL_HOLIDAY", SPECIAL_HOLIDAY_PAY_ORDER, "SPECIAL_HOLIDAY_WORKED", "Special Holiday Pay"
    ),
    DayType.SPECIAL_HOLIDAY_REST_DAY: HolidayRule(
        "SPECIAL_HOLIDAY_REST_DAY",
        SPECIAL_HOLIDAY_PAY_ORDER,
        "SPECIAL_HOLIDAY_REST_DAY_WORKED",
        "Special Holiday Rest Day Pay",
    ),
}


def percent(multiplier: float) -> str:
    return f"{int(round_half_up(multiplier * 100, 0))}%"


def plural(count: float, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def fold_days(
    attendance: Iterable[AttendanceDay],
    step: Callable[[MinuteAmount, AttendanceDay], MinuteAmount],
) -> MinuteAmount:
    return reduce(step, attendance, MinuteAmount())


def is_work_day(day: AttendanceDay) -> bool:
    """Leave days, or days with work that are not holidays (paid via premiums)."""
    if day.is_on_leave:
        return True
    return day.worked_minutes > 0 and not day.day_type.is_holiday


def work_days(attendance: Iterable[AttendanceDay]) -> List[AttendanceDay]:
    return [day for day in attendance if is_work_day(day)]


def total_late_undertime_minutes(attendance: Iterable[AttendanceDay]) -> int:
    return sum(max(0, day.late_minutes) + max(0, day.undertime_minutes) for day in attendance)


def basic_pay_lines(
    profile: PayProfile,
    pay_frequency: PayFrequency,
    attendance: Sequence[AttendanceDay],
    rates: DerivedRates,
) -> List[PayslipLine]:
    hours = profile.standard_hours_per_day
    days = work_days(attendance)
    day_rates = [get_day_rates(rates, hours, day.daily_rate_override).daily_rate for day in days]

    if profile.wage_type == WageType.MONTHLY:
        description = (
            "Basic Pay (Semi-Monthly)" if pay_frequency == PayFrequency.SEMI_MONTHLY else "Basic Pay (Monthly)"
        )
        return [
            PayslipLine(
                category=LineCategory.BASIC_PAY,
                description=description,
                amount=round4(sum(day_rates)),
                sort_order=LineCategory.BASIC_PAY.sort_order,
                rule_code="BASIC_PAY",
            )
        ]

    # Daily and hourly employees get one line per distinct effective rate.
    groups: Dict[float, int] = {}
    for rate in day_rates:
        groups[rate] = groups.get(rate, 0) + 1
    return [
        PayslipLine(
            category=LineCategory.BASIC_PAY,
            description=f"Basic Pay ({plural(count, 'day')})",
            quantity=count,
            rate=rate,
            amount=round4(rate * count),
            sort_order=LineCategory.BASIC_PAY.sort_order,
            rule_code="BASIC_PAY",
        )
        for rate, count in groups.items()
    ]


def late_undertime_line(
    attendance: Sequence[AttendanceDay], rates: DerivedRates, hours_per_day: float
) -> Optional[PayslipLine]:
    def step(acc: MinuteAmount, day: AttendanceDay) -> MinuteAmount:
        minutes = max(0, day.late_minutes) + max(0, day.undertime_minutes)
        if minutes <= 0:
            return acc
        minute_rate = get_day_rates(rates, hours_per_day, day.daily_rate_override).minute_rate
        return acc.add(minutes, minute_rate * minutes)

    total = fold_days(attendance, step)
    if total.minutes <= 0:
        return None
    return PayslipLine(
        category=LineCategory.LATE_UT_DEDUCTION,
        description=f"Late/Undertime Deduction ({total.minutes} mins)",
        quantity=total.minutes,
        rate=rates.minute_rate,
        amount=round2(total.amount),
        sort_order=LineCategory.LATE_UT_DEDUCTION.sort_order,
        rule_code="LATE_UT_DEDUCT",
    )


def absent_line(
    profile: PayProfile, attendance: Sequence[AttendanceDay], rates: DerivedRates
) -> Optional[PayslipLine]:
    """Monthly employees only; daily and hourly pay already skips absent days."""
    if profile.wage_type != WageType.MONTHLY:
        return None
    standard_minutes = profile.standard_minutes_per_day

    def step(acc: MinuteAmount, day: AttendanceDay) -> MinuteAmount:
        if day.absent_minutes <= 0:
            return acc
        daily_rate = get_day_rates(rates, profile.standard_hours_per_day, day.daily_rate_override).daily_rate
        return acc.add(day.absent_minutes, daily_rate * (day.absent_minutes / standard_minutes))

    total = fold_days(attendance, step)
    if total.minutes <= 0:
        return None
    absent_days = round2(total.minutes / standard_minutes)
    return PayslipLine(
        category=LineCategory.ABSENT_DEDUCTION,
        description=f"Absent Deduction ({absent_days:g} days)",
        quantity=absent_days,
        rate=rates.daily_rate,
        amount=round4(total.amount),
        sort_order=LineCategory.ABSENT_DEDUCTION.sort_order,
        rule_code="ABSENT_DEDUCT",
    )


def overtime_minutes(day: AttendanceDay) -> int:
    """OT minutes payable for a day; nothing counts on a day with no work."""
    if day.worked_minutes <= 0:
        return 0
    if day.day_type == DayType.REST_DAY:
        return day.overtime_rest_day_minutes
    return day.approved_ot_minutes


def overtime_lines(
    attendance: Sequence[AttendanceDay],
    rates: DerivedRates,
    hours_per_day: float,
    multipliers: Optional[Dict[str, float]] = None,
) -> List[PayslipLine]:
    multipliers = multipliers or PH_MULTIPLIERS
    lines: List[PayslipLine] = []
    for rule in dict.fromkeys(OVERTIME_RULES.values()):
        multiplier = multipliers[rule.multiplier_code]
        day_types = {day_type for day_type, candidate in OVERTIME_RULES.items() if candidate == rule}

        def step(acc: MinuteAmount, day: AttendanceDay) -> MinuteAmount:
            if day.day_type not in day_types:
                return acc
            minutes = overtime_minutes(day)
            if minutes <= 0:
                return acc
            hourly = get_day_rates(rates, hours_per_day, day.daily_rate_override).hourly_rate
            return acc.add(minutes, hourly * (minutes / 60) * multiplier)

        total = fold_days(attendance, step)
        if total.minutes <= 0:
            continue
        lines.append(
            PayslipLine(
                category=rule.category,
                description=f"{rule.label} ({total.minutes} mins @ {percent(multiplier)})",
                quantity=total.minutes,
                rate=rates.minute_rate,
                multiplier=multiplier,
                amount=round4(total.amount),
                sort_order=rule.category.sort_order,
                rule_code=rule.rule_code,
                rule_description=f"{rule.rule_label} ({percent(multiplier)})",
            )
        )
    return lines


def night_diff_line(
    attendance: Sequence[AttendanceDay],
    rates: DerivedRates,
    hours_per_day: float,
    multiplier: float = PH_MULTIPLIERS["NIGHT_DIFF"],
) -> Optional[PayslipLine]:
    def step(acc: MinuteAmount, day: AttendanceDay) -> MinuteAmount:
        if day.night_diff_minutes <= 0:
            return acc
        hourly = get_day_rates(rates, hours_per_day, day.daily_rate_override).hourly_rate
        return acc.add(day.night_diff_minutes, hourly * (day.night_diff_minutes / 60) * multiplier)

    total = fold_days(attendance, step)
    if total.minutes <= 0:
        return None
    return PayslipLine(
        category=LineCategory.NIGHT_DIFFERENTIAL,
        description=f"Night Differential ({total.minutes} mins @ {percent(multiplier)})",
        quantity=total.minutes,
        rate=rates.minute_rate,
        multiplier=multiplier,
        amount=round4(total.amount),
        sort_order=LineCategory.NIGHT_DIFFERENTIAL.sort_order,
        rule_code="NIGHT_DIFF",
        rule_description=f"Night Differential ({percent(multiplier)})",
    )


def holiday_premium_lines(
    attendance: Sequence[AttendanceDay],
    rates: DerivedRates,
    standard_minutes: float,
    hours_per_day: float,
    multipliers: Optional[Dict[str, float]] = None,
) -> List[PayslipLine]:
    """Worked-holiday pay (capped at the standard day) and unworked regular holiday pay.

    Minutes past the standard day are left to the holiday OT line.
    """
    multipliers = multipliers or PH_MULTIPLIERS
    lines: List[PayslipLine] = []

    for day_type, rule in HOLIDAY_RULES.items():
        multiplier = multipliers[rule.multiplier_code]

        def step(acc: MinuteAmount, day: AttendanceDay) -> MinuteAmount:
            if day.day_type != day_type or day.worked_minutes <= 0:
                return acc
            capped = min(day.worked_minutes, standard_minutes)
            hourly = get_day_rates(rates, hours_per_day, day.daily_rate_override).hourly_rate
            return acc.add(capped, hourly * (capped / 60) * multiplier)

        total = fold_days(attendance, step)
        amount = round2(total.amount)
        if amount <= 0:
            continue
        lines.append(
            PayslipLine(
                category=LineCategory.HOLIDAY_PAY,
                description=f"{rule.label} ({total.minutes:g} mins @ {percent(multiplier)})",
                quantity=total.minutes,
                rate=rates.minute_rate,
                multiplier=multiplier,
                amount=amount,
                sort_order=rule.sort_order,
                rule_code=rule.rule_code,
                rule_description=f"{rule.label} ({percent(multiplier)} of regular rate)",
            )
        )

    unworked = [day for day in attendance if day.day_type.is_regular_holiday and day.worked_minutes == 0]
    if unworked:
        amount = sum(get_day_rates(rates, hours_per_day, day.daily_rate_override).daily_rate for day in unworked)
        lines.append(
            PayslipLine(
                category=LineCategory.HOLIDAY_PAY,
                description=f"Regular Holiday Pay - Unworked ({plural(len(unworked), 'day')})",
                quantity=len(unworked),
                rate=rates.daily_rate,
                amount=round4(amount),
                sort_order=UNWORKED_REGULAR_HOLIDAY_PAY_ORDER,
                rule_code="REGULAR_HOLIDAY_UNWORKED",
                rule_description="Regular Holiday Pay (paid even if not worked)",
            )
        )
    return lines


def rest_day_premium_line(
    attendance: Sequence[AttendanceDay],
    rates: DerivedRates,
    hours_per_day: float,
    rest_day_multiplier: float = PH_MULTIPLIERS["REST_DAY"],
) -> Optional[PayslipLine]:
    premium = rest_day_multiplier - 1

    def step(acc: MinuteAmount, day: AttendanceDay) -> MinuteAmount:
        if day.day_type != DayType.REST_DAY or day.worked_minutes <= 0:
            return acc
        hourly = get_day_rates(rates, hours_per_day, day.daily_rate_override).hourly_rate
        return acc.add(day.worked_minutes, hourly * (day.worked_minutes / 60) * premium)

    total = fold_days(attendance, step)
    amount = round4(total.amount)
    if amount <= 0:
        return None
    return PayslipLine(
        category=LineCategory.REST_DAY_PAY,
        description=f"Rest Day Premium ({total.minutes} mins @ {percent(rest_day_multiplier)})",
        quantity=total.minutes,
        rate=rates.minute_rate,
        multiplier=round4(premium),
        amount=amount,
        sort_order=LineCategory.REST_DAY_PAY.sort_order,
        rule_code="REST_DAY_PREMIUM",
        rule_description=f"Rest Day Premium ({percent(premium)} additional)",
    )


def allowance_lines(profile: PayProfile, periods_per_month: float) -> List[PayslipLine]:
    lines: List[PayslipLine] = []
    for attr, name in ALLOWANCE_FIELDS:
        monthly = getattr(profile, attr)
        if monthly <= 0:
            continue
        lines.append(
            PayslipLine(
                category=LineCategory.ALLOWANCE,
                description=name,
                amount=round2(monthly / periods_per_month),
                sort_order=LineCategory.ALLOWANCE.sort_order + len(lines),
                rule_code=f"ALLOWANCE_{name.upper().replace(' ', '_')}",
            )
        )
    return lines


def manual_adjustment_lines(adjustments: Iterable[ManualAdjustment]) -> List[PayslipLine]:
    lines = []
    for index, adjustment in enumerate(adjustments):
        category = (
            LineCategory.ADJUSTMENT_ADD
            if AdjustmentType(adjustment.type) == AdjustmentType.EARNING
            else LineCategory.ADJUSTMENT_DEDUCT
        )
        lines.append(
            PayslipLine(
                category=category,
                description=adjustment.description,
                amount=adjustment.amount,
                sort_order=category.sort_order + index,
                rule_code="MANUAL_ADJUSTMENT",
                manual_adjustment_id=adjustment.id,
            )
        )
    return lines


def penalty_lines(penalties: Iterable[PenaltyDeduction]) -> List[PayslipLine]:
    return [
        PayslipLine(
            category=LineCategory.PENALTY_DEDUCTION,
            description=penalty.description,
            amount=penalty.amount,
            sort_order=LineCategory.PENALTY_DEDUCTION.sort_order,
            rule_code="PENALTY_DEDUCTION",
            rule_description="Penalty installment deduction",
            penalty_installment_id=penalty.installment_id,
        )
        for penalty in penalties
    ]
