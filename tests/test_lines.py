from datetime import date, timedelta

import pytest

from phpayroll.lines import (
    absent_line,
    allowance_lines,
    basic_pay_lines,
    holiday_premium_lines,
    late_undertime_line,
    manual_adjustment_lines,
    night_diff_line,
    overtime_lines,
    penalty_lines,
    rest_day_premium_line,
    work_days,
)
from phpayroll.models import (
    AdjustmentType,
    AttendanceDay,
    DayType,
    LineCategory,
    ManualAdjustment,
    PayFrequency,
    PayProfile,
    PenaltyDeduction,
    WageType,
)
from phpayroll.wages import calculate_derived_rates

START = date(2025, 1, 6)


def daily_profile(**overrides) -> PayProfile:
    return PayProfile(employee_id="emp1", wage_type=WageType.DAILY, base_rate=1000, **overrides)


def monthly_profile(**overrides) -> PayProfile:
    return PayProfile(employee_id="emp2", wage_type=WageType.MONTHLY, base_rate=26000, **overrides)


def worked_days(count: int, **fields) -> list[AttendanceDay]:
    return [
        AttendanceDay(attendance_date=START + timedelta(days=offset), worked_minutes=480, **fields)
        for offset in range(count)
    ]


def test_daily_basic_pay_groups_days_by_effective_rate():
    profile = daily_profile()
    attendance = worked_days(10) + worked_days(2, daily_rate_override=500)

    lines = basic_pay_lines(profile, PayFrequency.SEMI_MONTHLY, attendance, calculate_derived_rates(profile))

    assert len(lines) == 2
    assert sum(line.amount for line in lines) == 11000
    assert [(line.quantity, line.rate) for line in lines] == [(10, 1000), (2, 500)]
    assert lines[0].description == "Basic Pay (10 days)"


def test_monthly_basic_pay_is_one_line():
    profile = monthly_profile()

    lines = basic_pay_lines(profile, PayFrequency.SEMI_MONTHLY, worked_days(13), calculate_derived_rates(profile))

    assert len(lines) == 1
    assert lines[0].description == "Basic Pay (Semi-Monthly)"
    assert lines[0].amount == 13000


def test_work_days_count_leave_but_not_holidays():
    attendance = [
        AttendanceDay(START, worked_minutes=480),
        AttendanceDay(START + timedelta(days=1), is_on_leave=True),
        AttendanceDay(START + timedelta(days=2), day_type=DayType.REGULAR_HOLIDAY, worked_minutes=480),
        AttendanceDay(START + timedelta(days=3), absent_minutes=480),
    ]

    assert len(work_days(attendance)) == 2


def test_late_undertime_deduction_uses_minute_rate():
    profile = monthly_profile()
    attendance = [AttendanceDay(START, worked_minutes=450, late_minutes=30)]

    line = late_undertime_line(attendance, calculate_derived_rates(profile), 8)

    assert line.category == LineCategory.LATE_UT_DEDUCTION
    assert line.quantity == 30
    assert line.amount == 62.5
    assert line.sort_order == 1015


def test_no_late_undertime_line_without_minutes():
    profile = monthly_profile()

    assert late_undertime_line(worked_days(3), calculate_derived_rates(profile), 8) is None


def test_absent_deduction_for_monthly_only():
    attendance = [AttendanceDay(START, absent_minutes=480)]

    monthly = absent_line(monthly_profile(), attendance, calculate_derived_rates(monthly_profile()))
    daily = absent_line(daily_profile(), attendance, calculate_derived_rates(daily_profile()))

    assert monthly.amount == 1000
    assert monthly.quantity == 1
    assert daily is None


def test_no_overtime_on_a_day_without_work():
    profile = daily_profile()
    attendance = [AttendanceDay(START, worked_minutes=0, ot_late_out_minutes=60, late_out_approved=True)]

    assert overtime_lines(attendance, calculate_derived_rates(profile), 8) == []


def test_regular_holiday_overtime():
    profile = daily_profile()
    attendance = [
        AttendanceDay(
            START,
            day_type=DayType.REGULAR_HOLIDAY,
            worked_minutes=540,
            ot_late_out_minutes=60,
            late_out_approved=True,
        )
    ]

    lines = overtime_lines(attendance, calculate_derived_rates(profile), 8)

    assert len(lines) == 1
    assert lines[0].category == LineCategory.OVERTIME_HOLIDAY
    assert lines[0].amount == pytest.approx(125 * 1 * 2.6)
    assert lines[0].multiplier == 2.6
    assert lines[0].rule_code == "OT_REGULAR_HOLIDAY"


def test_unapproved_late_out_is_not_overtime():
    profile = daily_profile()
    attendance = [AttendanceDay(START, worked_minutes=480, ot_late_out_minutes=60)]

    assert overtime_lines(attendance, calculate_derived_rates(profile), 8) == []


def test_overtime_lines_split_by_day_type():
    profile = daily_profile()
    attendance = [
        AttendanceDay(START, worked_minutes=480, ot_break_minutes=60),
        AttendanceDay(
            START + timedelta(days=1),
            day_type=DayType.SPECIAL_WORKING_DAY,
            worked_minutes=480,
            ot_late_out_minutes=60,
            late_out_approved=True,
        ),
        AttendanceDay(
            START + timedelta(days=5), day_type=DayType.REST_DAY, worked_minutes=540, overtime_rest_day_minutes=60
        ),
    ]

    lines = overtime_lines(attendance, calculate_derived_rates(profile), 8)

    by_category = {line.category: line for line in lines}
    assert by_category[LineCategory.OVERTIME_REGULAR].quantity == 120
    assert by_category[LineCategory.OVERTIME_REGULAR].amount == pytest.approx(125 * 2 * 1.25)
    assert by_category[LineCategory.OVERTIME_REST_DAY].amount == pytest.approx(125 * 1.69)


def test_overtime_uses_the_days_own_rate():
    profile = daily_profile()
    attendance = [
        AttendanceDay(START, worked_minutes=480, ot_break_minutes=60, daily_rate_override=800),
    ]

    lines = overtime_lines(attendance, calculate_derived_rates(profile), 8)

    assert lines[0].amount == pytest.approx(100 * 1.25)


def test_holiday_premium_capped_at_standard_day():
    profile = daily_profile()
    attendance = [AttendanceDay(START, day_type=DayType.REGULAR_HOLIDAY, worked_minutes=600)]

    lines = holiday_premium_lines(attendance, calculate_derived_rates(profile), 480, 8)

    assert len(lines) == 1
    assert lines[0].quantity == 480
    assert lines[0].amount == 2000
    assert lines[0].sort_order == 110


def test_special_holiday_premium_sorts_after_regular():
    profile = daily_profile()
    attendance = [AttendanceDay(START, day_type=DayType.SPECIAL_HOLIDAY, worked_minutes=480)]

    lines = holiday_premium_lines(attendance, calculate_derived_rates(profile), 480, 8)

    assert lines[0].amount == 1300
    assert lines[0].sort_order == 120


def test_unworked_regular_holiday_is_paid():
    profile = daily_profile()
    attendance = [
        AttendanceDay(START, day_type=DayType.REGULAR_HOLIDAY),
        AttendanceDay(START + timedelta(days=1), day_type=DayType.SPECIAL_HOLIDAY),
    ]

    lines = holiday_premium_lines(attendance, calculate_derived_rates(profile), 480, 8)

    assert len(lines) == 1
    assert lines[0].rule_code == "REGULAR_HOLIDAY_UNWORKED"
    assert lines[0].amount == 1000
    assert lines[0].sort_order == 111


def test_rest_day_premium_is_the_additional_portion():
    profile = daily_profile()
    attendance = [AttendanceDay(START, day_type=DayType.REST_DAY, worked_minutes=480)]

    line = rest_day_premium_line(attendance, calculate_derived_rates(profile), 8)

    assert line.amount == pytest.approx(300)
    assert line.multiplier == pytest.approx(0.3)


def test_night_diff_line():
    profile = daily_profile()
    attendance = [AttendanceDay(START, worked_minutes=480, night_diff_minutes=120)]

    line = night_diff_line(attendance, calculate_derived_rates(profile), 8)

    assert line.amount == pytest.approx(25)
    assert line.description == "Night Differential (120 mins @ 10%)"


def test_allowances_are_prorated_per_period_in_field_order():
    profile = monthly_profile(rice_subsidy=2000, transportation_allowance=1000)

    lines = allowance_lines(profile, 2)

    assert [(line.description, line.amount, line.sort_order) for line in lines] == [
        ("Rice Subsidy", 1000, 400),
        ("Transportation Allowance", 500, 401),
    ]


def test_manual_adjustments_and_penalties_are_applied_verbatim():
    adjustments = [
        ManualAdjustment(AdjustmentType.EARNING, "Sales incentive", 1500, id="adj1"),
        ManualAdjustment(AdjustmentType.DEDUCTION, "Uniform", 250.555, id="adj2"),
    ]
    penalties = [PenaltyDeduction("inst1", "pen1", "Cash shortage 1/3", 333.33)]

    adjustment_lines = manual_adjustment_lines(adjustments)
    penalty = penalty_lines(penalties)[0]

    assert adjustment_lines[0].category == LineCategory.ADJUSTMENT_ADD
    assert adjustment_lines[0].sort_order == 800
    assert adjustment_lines[1].category == LineCategory.ADJUSTMENT_DEDUCT
    assert adjustment_lines[1].amount == 250.555
    assert adjustment_lines[1].manual_adjustment_id == "adj2"
    assert penalty.category == LineCategory.PENALTY_DEDUCTION
    assert penalty.penalty_installment_id == "inst1"
    assert penalty.sort_order == 1350


def test_regular_holiday_on_rest_day_pays_260_and_338_percent():
    profile = daily_profile()
    rates = calculate_derived_rates(profile)
    attendance = [
        AttendanceDay(
            START + timedelta(days=5),
            day_type=DayType.REGULAR_HOLIDAY_REST_DAY,
            worked_minutes=540,
            ot_late_out_minutes=60,
            late_out_approved=True,
        ),
        AttendanceDay(START + timedelta(days=12), day_type=DayType.REGULAR_HOLIDAY_REST_DAY),
    ]

    holiday = holiday_premium_lines(attendance, rates, 480, 8)
    overtime = overtime_lines(attendance, rates, 8)

    assert [(line.description, line.amount) for line in holiday] == [
        ("Regular Holiday Rest Day Pay (480 mins @ 260%)", 2600.0),
        ("Regular Holiday Pay - Unworked (1 day)", 1000.0),
    ]
    assert holiday[0].rule_code == "REGULAR_HOLIDAY_REST_DAY_WORKED"
    assert [line.sort_order for line in holiday] == [110, 111]
    assert len(overtime) == 1
    assert overtime[0].description == "Regular Holiday Rest Day OT (60 mins @ 338%)"
    assert overtime[0].amount == pytest.approx(422.5)
    assert overtime[0].rule_code == "OT_REGULAR_HOLIDAY_REST_DAY"


def test_special_holiday_on_rest_day_pays_150_and_195_percent():
    profile = daily_profile()
    rates = calculate_derived_rates(profile)
    attendance = [
        AttendanceDay(
            START + timedelta(days=5),
            day_type=DayType.SPECIAL_HOLIDAY_REST_DAY,
            worked_minutes=540,
            ot_late_out_minutes=60,
            late_out_approved=True,
        ),
        AttendanceDay(START + timedelta(days=12), day_type=DayType.SPECIAL_HOLIDAY_REST_DAY),
    ]

    holiday = holiday_premium_lines(attendance, rates, 480, 8)
    overtime = overtime_lines(attendance, rates, 8)

    # an unworked special holiday is not paid, rest day or not
    assert [(line.description, line.amount) for line in holiday] == [
        ("Special Holiday Rest Day Pay (480 mins @ 150%)", 1500.0),
    ]
    assert holiday[0].sort_order == 120
    assert overtime[0].description == "Special Holiday Rest Day OT (60 mins @ 195%)"
    assert overtime[0].amount == pytest.approx(243.75)


def test_holidays_on_rest_days_are_not_basic_pay_or_rest_day_premium():
    profile = daily_profile()
    rates = calculate_derived_rates(profile)
    attendance = [
        AttendanceDay(START, worked_minutes=480),
        AttendanceDay(START + timedelta(days=5), day_type=DayType.REGULAR_HOLIDAY_REST_DAY, worked_minutes=480),
        AttendanceDay(START + timedelta(days=6), day_type=DayType.SPECIAL_HOLIDAY_REST_DAY, worked_minutes=480),
        AttendanceDay(START + timedelta(days=12), day_type=DayType.REGULAR_HOLIDAY_REST_DAY),
    ]

    lines = basic_pay_lines(profile, PayFrequency.SEMI_MONTHLY, attendance, rates)

    assert work_days(attendance) == attendance[:1]
    assert [(line.quantity, line.amount) for line in lines] == [(1, 1000)]
    assert rest_day_premium_line(attendance, rates, 8) is None
