from datetime import date

from phpayroll.day_types import (
    DAY_TYPE_MULTIPLIER_CODES,
    CalendarEvent,
    build_event_map,
    resolve_day_type,
    resolve_day_types_for_range,
)
from phpayroll.models import DayType
from phpayroll.rulesets import ruleset_from_dict

MONDAY = date(2025, 1, 6)
SATURDAY = date(2025, 1, 4)
SUNDAY = date(2025, 1, 5)


def event(day: date, day_type: DayType, name: str = "Holiday") -> CalendarEvent:
    return CalendarEvent(event_date=day, day_type=day_type, name=name, holiday_id=f"h-{day.isoformat()}")


def test_plain_weekday_is_a_regular_working_day():
    resolution = resolve_day_type(MONDAY)

    assert resolution.day_type == DayType.REGULAR_WORKING_DAY
    assert resolution.multiplier == 1.0
    assert not resolution.is_rest_day
    assert not resolution.paid_if_not_worked


def test_weekend_defaults_to_rest_day():
    resolution = resolve_day_type(SATURDAY)

    assert resolution.day_type == DayType.REST_DAY
    assert resolution.multiplier == 1.3
    assert resolution.is_rest_day


def test_configured_rest_days_replace_the_default():
    assert resolve_day_type(SATURDAY, rest_days={6}).day_type == DayType.REGULAR_WORKING_DAY
    assert resolve_day_type(MONDAY, rest_days={0}).day_type == DayType.REST_DAY


def test_regular_holiday_on_working_day():
    events = build_event_map([event(MONDAY, DayType.REGULAR_HOLIDAY, "Araw ng Kagitingan")])

    resolution = resolve_day_type(MONDAY, events)

    assert resolution.day_type == DayType.REGULAR_HOLIDAY
    assert resolution.multiplier == 2.0
    assert resolution.paid_if_not_worked
    assert resolution.holiday_name == "Araw ng Kagitingan"
    assert not resolution.is_rest_day


def test_holidays_on_rest_days_combine():
    events = build_event_map(
        [event(SATURDAY, DayType.REGULAR_HOLIDAY), event(SUNDAY, DayType.SPECIAL_HOLIDAY)]
    )

    regular = resolve_day_type(SATURDAY, events)
    special = resolve_day_type(SUNDAY, events)

    assert regular.day_type == DayType.REGULAR_HOLIDAY_REST_DAY
    assert regular.multiplier == 2.6
    assert regular.paid_if_not_worked
    assert regular.is_rest_day
    assert special.day_type == DayType.SPECIAL_HOLIDAY_REST_DAY
    assert special.multiplier == 1.5
    assert not special.paid_if_not_worked


def test_special_working_day_overrides_rest_day():
    events = build_event_map([event(SATURDAY, DayType.SPECIAL_WORKING_DAY, "Make-up day")])

    resolution = resolve_day_type(SATURDAY, events)

    assert resolution.day_type == DayType.SPECIAL_WORKING_DAY
    assert not resolution.is_rest_day
    assert resolution.multiplier == 1.0


def test_range_resolution_covers_every_date_in_order():
    new_year = event(date(2025, 1, 1), DayType.REGULAR_HOLIDAY, "New Year's Day")

    resolved = resolve_day_types_for_range(date(2025, 1, 1), date(2025, 1, 7), [new_year])

    assert list(resolved) == [date(2025, 1, day) for day in range(1, 8)]
    assert resolved[date(2025, 1, 1)].day_type == DayType.REGULAR_HOLIDAY
    assert resolved[date(2025, 1, 2)].day_type == DayType.REGULAR_WORKING_DAY
    assert resolved[SATURDAY].day_type == DayType.REST_DAY
    assert resolved[SUNDAY].day_type == DayType.REST_DAY


def test_empty_range_when_end_precedes_start():
    assert resolve_day_types_for_range(date(2025, 1, 7), date(2025, 1, 1)) == {}


def test_multipliers_follow_the_rulesets_table():
    multipliers = {"REGULAR_HOLIDAY": 2.5, "REGULAR_HOLIDAY_REST_DAY": 3.0}
    events = build_event_map([event(MONDAY, DayType.REGULAR_HOLIDAY), event(SATURDAY, DayType.REGULAR_HOLIDAY)])

    assert resolve_day_type(MONDAY, events, multipliers=multipliers).multiplier == 2.5
    assert resolve_day_type(SATURDAY, events, multipliers=multipliers).multiplier == 3.0
    # codes missing from the table keep the statutory default
    assert resolve_day_type(SUNDAY, events, multipliers=multipliers).multiplier == 1.3
    assert resolve_day_type(date(2025, 1, 7), events, multipliers=multipliers).multiplier == 1.0


def test_range_resolution_agrees_with_the_ruleset_payslips_use():
    ruleset = ruleset_from_dict({"version": "custom_v1", "multipliers": {"SPECIAL_HOLIDAY": 1.4}})
    special = event(date(2025, 1, 29), DayType.SPECIAL_HOLIDAY, "Chinese New Year")

    resolved = resolve_day_types_for_range(
        date(2025, 1, 25), date(2025, 1, 29), [special], multipliers=ruleset.multipliers
    )

    for resolution in resolved.values():
        code = DAY_TYPE_MULTIPLIER_CODES.get(resolution.day_type)
        expected = ruleset.multiplier(code) if code else 1.0
        assert resolution.multiplier == expected
    assert resolved[date(2025, 1, 29)].multiplier == 1.4
