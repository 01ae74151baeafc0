from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union

from .rounding import round_half_up

MANILA_OFFSET_HOURS = 8
# Fixed offset; the Philippines has no daylight saving time.
MANILA_TZ = timezone(timedelta(hours=MANILA_OFFSET_HOURS), "Asia/Manila")

ScheduleTime = Union[time, datetime, str, None]


def company_timezone(offset_hours: float = MANILA_OFFSET_HOURS) -> tzinfo:
    if offset_hours == MANILA_OFFSET_HOURS:
        return MANILA_TZ
    return timezone(timedelta(hours=offset_hours))


def extract_time_components(value: ScheduleTime) -> Optional[Tuple[int, int]]:
    """Return (hours, minutes) for a schedule time of day.

    Accepts ``"HH:MM"`` / ``"HH:MM:SS"`` strings, ``time`` values, and
    ``datetime`` values whose clock fields hold the local time of day.
    Anything unparseable yields ``None``.
    """
    if value is None:
        return None
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            return None
        try:
            return int(parts[0]), int(parts[1])
        except ValueError:
            return None
    if isinstance(value, (datetime, time)):
        return value.hour, value.minute
    return None


def to_local(moment: datetime, tz: tzinfo = MANILA_TZ) -> datetime:
    """Naive datetimes are read as company wall-clock time, never host time."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def at_local_time(day: date, hours: int, minutes: int, tz: tzinfo = MANILA_TZ) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=tz) + timedelta(hours=hours, minutes=minutes)


def build_schedule_range(
    attendance_date: date,
    start: ScheduleTime,
    end: ScheduleTime,
    tz: tzinfo = MANILA_TZ,
    overnight: bool = False,
) -> Optional[Tuple[datetime, datetime]]:
    start_parts = extract_time_components(start)
    end_parts = extract_time_components(end)
    if start_parts is None or end_parts is None:
        return None

    sched_start = at_local_time(attendance_date, *start_parts, tz=tz)
    sched_end = at_local_time(attendance_date, *end_parts, tz=tz)
    if end_parts[0] < start_parts[0] or overnight:
        sched_end += timedelta(days=1)
    return sched_start, sched_end


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, rounded to the nearest minute."""
    return int(round_half_up((end - start).total_seconds() / 60, 0))
