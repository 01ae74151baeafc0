from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from .models import DayType
from .wages import PH_MULTIPLIERS

# date.weekday() numbering: Monday is 0, Sunday is 6.
DEFAULT_REST_DAYS = frozenset({5, 6})

# Ruleset multiplier code behind each day type; absent means ordinary pay (1.0).
DAY_TYPE_MULTIPLIER_CODES: Dict[DayType, str] = {
    DayType.REST_DAY: "REST_DAY",
    DayType.SPECIAL_HOLIDAY: "SPECIAL_HOLIDAY",
    DayType.SPECIAL_HOLIDAY_REST_DAY: "SPECIAL_HOLIDAY_REST_DAY",
    DayType.REGULAR_HOLIDAY: "REGULAR_HOLIDAY",
    DayType.REGULAR_HOLIDAY_REST_DAY: "REGULAR_HOLIDAY_REST_DAY",
}

PAID_IF_NOT_WORKED = frozenset({DayType.REGULAR_HOLIDAY, DayType.REGULAR_HOLIDAY_REST_DAY})

_REST_DAY_COMBINATIONS = {
    DayType.REGULAR_HOLIDAY: DayType.REGULAR_HOLIDAY_REST_DAY,
    DayType.SPECIAL_HOLIDAY: DayType.SPECIAL_HOLIDAY_REST_DAY,
}


@dataclass(frozen=True)
class CalendarEvent:
    event_date: date
    day_type: DayType
    name: str
    holiday_id: Optional[str] = None


@dataclass(frozen=True)
class DayTypeResolution:
    day_type: DayType
    multiplier: float
    paid_if_not_worked: bool
    is_rest_day: bool
    holiday_id: Optional[str] = None
    holiday_name: Optional[str] = None


def day_type_multiplier(day_type: DayType, multipliers: Optional[Mapping[str, float]] = None) -> float:
    """Pay multiplier for a day type, read from a ruleset's multiplier table."""
    code = DAY_TYPE_MULTIPLIER_CODES.get(day_type)
    if code is None:
        return 1.0
    table = multipliers or PH_MULTIPLIERS
    return table.get(code, PH_MULTIPLIERS[code])


def _resolution(
    day_type: DayType,
    is_rest_day: bool,
    event: Optional[CalendarEvent] = None,
    multipliers: Optional[Mapping[str, float]] = None,
) -> DayTypeResolution:
    return DayTypeResolution(
        day_type=day_type,
        multiplier=day_type_multiplier(day_type, multipliers),
        paid_if_not_worked=day_type in PAID_IF_NOT_WORKED,
        is_rest_day=is_rest_day,
        holiday_id=event.holiday_id if event else None,
        holiday_name=event.name if event else None,
    )


def build_event_map(events: Iterable[CalendarEvent]) -> Dict[date, CalendarEvent]:
    """Index calendar events by date; a later event for the same date wins."""
    return {event.event_date: event for event in events}


def resolve_day_type(
    day: date,
    events: Optional[Mapping[date, CalendarEvent]] = None,
    rest_days: Iterable[int] = DEFAULT_REST_DAYS,
    multipliers: Optional[Mapping[str, float]] = None,
) -> DayTypeResolution:
    is_rest_day = day.weekday() in frozenset(rest_days)
    event = (events or {}).get(day)

    if event is not None:
        day_type = DayType(event.day_type)
        if is_rest_day and day_type in _REST_DAY_COMBINATIONS:
            return _resolution(_REST_DAY_COMBINATIONS[day_type], True, event, multipliers)
        # Holiday on a normal working day: rest-day status is superseded.
        return _resolution(day_type, False, event, multipliers)

    if is_rest_day:
        return _resolution(DayType.REST_DAY, True, multipliers=multipliers)
    return _resolution(DayType.REGULAR_WORKING_DAY, False, multipliers=multipliers)


def resolve_day_types_for_range(
    start: date,
    end: date,
    events: Iterable[CalendarEvent] = (),
    rest_days: Iterable[int] = DEFAULT_REST_DAYS,
    multipliers: Optional[Mapping[str, float]] = None,
) -> Dict[date, DayTypeResolution]:
    event_map = build_event_map(events)
    rest_day_set = frozenset(rest_days)
    return {
        day: resolve_day_type(day, event_map, rest_day_set, multipliers) for day in dates_in_range(start, end)
    }


def dates_in_range(start: date, end: date) -> List[date]:
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]
