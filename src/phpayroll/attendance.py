from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from .day_types import DayTypeResolution
from .models import AttendanceDay, DayType
from .timeutils import MANILA_TZ, ScheduleTime, build_schedule_range, minutes_between, to_local

NIGHT_DIFF_START = time(22, 0)
NIGHT_DIFF_HOURS = 8
# Shifts shorter than this are assumed to have no break taken.
BREAK_THRESHOLD_MINUTES = 300
DEFAULT_SCHEDULED_MINUTES = 480


@dataclass(frozen=True)
class AttendanceTimes:
    late_minutes: int = 0
    undertime_minutes: int = 0
    ot_early_in_minutes: int = 0
    ot_late_out_minutes: int = 0
    ot_break_minutes: int = 0


@dataclass(frozen=True)
class AttendanceMetrics:
    late_minutes: int = 0
    undertime_minutes: int = 0
    ot_early_in_minutes: int = 0
    ot_late_out_minutes: int = 0
    ot_break_minutes: int = 0
    worked_minutes: int = 0
    night_diff_minutes: int = 0


@dataclass(frozen=True)
class AttendanceRecord:
    """Raw clock data for one employee-day, before any payroll math."""

    attendance_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    scheduled_start: ScheduleTime = None
    scheduled_end: ScheduleTime = None
    shift_break_minutes: int = 60
    break_minutes_applied: Optional[int] = None
    scheduled_work_minutes: Optional[int] = None
    overnight: bool = False
    early_in_approved: bool = False
    late_out_approved: bool = False
    late_in_approved: bool = False
    early_out_approved: bool = False
    is_on_leave: bool = False
    leave_is_paid: bool = True
    daily_rate_override: Optional[float] = None
    id: Optional[str] = None


def break_adjustment(shift_break_minutes: Optional[int], break_minutes_applied: Optional[int]) -> int:
    """Minutes of break given back to the employee by a break override.

    Only positive adjustments count; an override longer than the shift
    break never adds undertime.
    """
    if shift_break_minutes is None or break_minutes_applied is None:
        return 0
    return max(0, shift_break_minutes - break_minutes_applied)


def calculate_attendance_times(
    clock_in: Optional[datetime],
    clock_out: Optional[datetime],
    scheduled_start: ScheduleTime,
    scheduled_end: ScheduleTime,
    attendance_date: date,
    early_in_approved: bool = False,
    late_out_approved: bool = False,
    shift_break_minutes: Optional[int] = None,
    break_minutes_applied: Optional[int] = None,
    tz: tzinfo = MANILA_TZ,
    overnight: bool = False,
) -> AttendanceTimes:
    if clock_in is None or clock_out is None:
        return AttendanceTimes()
    schedule = build_schedule_range(attendance_date, scheduled_start, scheduled_end, tz=tz, overnight=overnight)
    if schedule is None:
        return AttendanceTimes()

    sched_start, sched_end = schedule
    clock_in = to_local(clock_in, tz)
    clock_out = to_local(clock_out, tz)
    adjustment = break_adjustment(shift_break_minutes, break_minutes_applied)

    late = early_in_ot = 0
    # Break overrides never touch lateness.
    if clock_in > sched_start:
        late = minutes_between(sched_start, clock_in)
    elif clock_in < sched_start and early_in_approved:
        early_in_ot = minutes_between(clock_in, sched_start)

    undertime = late_out_ot = break_ot = 0
    if clock_out < sched_end:
        undertime = max(0, minutes_between(clock_out, sched_end) - adjustment)
    else:
        break_ot = adjustment
        if clock_out > sched_end and late_out_approved:
            late_out_ot = minutes_between(sched_end, clock_out)

    return AttendanceTimes(
        late_minutes=late,
        undertime_minutes=undertime,
        ot_early_in_minutes=early_in_ot,
        ot_late_out_minutes=late_out_ot,
        ot_break_minutes=break_ot,
    )


def night_diff_minutes(start: datetime, end: datetime, tz: tzinfo = MANILA_TZ) -> int:
    """Minutes of ``start``..``end`` falling between 22:00 and 06:00 local time."""
    start = to_local(start, tz)
    end = to_local(end, tz)
    if end <= start:
        return 0

    total = timedelta()
    night = start.date() - timedelta(days=1)
    while night <= end.date():
        window_start = datetime.combine(night, NIGHT_DIFF_START, tzinfo=tz)
        window_end = window_start + timedelta(hours=NIGHT_DIFF_HOURS)
        overlap = min(end, window_end) - max(start, window_start)
        if overlap > timedelta():
            total += overlap
        night += timedelta(days=1)
    return minutes_between(start, start + total)


def calculate_attendance_metrics(
    clock_in: Optional[datetime],
    clock_out: Optional[datetime],
    scheduled_start: ScheduleTime,
    scheduled_end: ScheduleTime,
    attendance_date: Optional[date] = None,
    break_minutes: int = 0,
    early_in_approved: bool = False,
    late_out_approved: bool = False,
    late_in_approved: bool = False,
    early_out_approved: bool = False,
    overnight: bool = False,
    shift_break_minutes: Optional[int] = None,
    break_minutes_applied: Optional[int] = None,
    tz: tzinfo = MANILA_TZ,
) -> AttendanceMetrics:
    """Late, undertime, OT, worked and night-differential minutes for a day.

    ``break_minutes`` is the break actually deducted from worked time, and is
    only deducted when the span exceeds five hours. Worked time is bounded by
    the schedule unless early-in or late-out overtime was approved, and night
    differential is measured over that same bounded span.
    """
    if clock_in is None or clock_out is None:
        return AttendanceMetrics()

    clock_in = to_local(clock_in, tz)
    clock_out = to_local(clock_out, tz)
    base_date = attendance_date or clock_in.date()

    times = calculate_attendance_times(
        clock_in,
        clock_out,
        scheduled_start,
        scheduled_end,
        base_date,
        early_in_approved=early_in_approved,
        late_out_approved=late_out_approved,
        shift_break_minutes=shift_break_minutes,
        break_minutes_applied=break_minutes_applied,
        tz=tz,
        overnight=overnight,
    )

    effective_in, effective_out = clock_in, clock_out
    schedule = build_schedule_range(base_date, scheduled_start, scheduled_end, tz=tz, overnight=overnight)
    if schedule is not None:
        sched_start, sched_end = schedule
        if clock_in < sched_start and not early_in_approved:
            effective_in = sched_start
        if clock_out > sched_end and not late_out_approved:
            effective_out = sched_end

    gross = max(0, minutes_between(effective_in, effective_out))
    applied_break = break_minutes if gross > BREAK_THRESHOLD_MINUTES else 0
    worked = max(0, gross - applied_break)

    return AttendanceMetrics(
        late_minutes=0 if late_in_approved else times.late_minutes,
        undertime_minutes=0 if early_out_approved else times.undertime_minutes,
        ot_early_in_minutes=times.ot_early_in_minutes,
        ot_late_out_minutes=times.ot_late_out_minutes,
        ot_break_minutes=times.ot_break_minutes,
        worked_minutes=worked,
        night_diff_minutes=night_diff_minutes(effective_in, effective_out, tz),
    )


def build_attendance_day(
    record: AttendanceRecord,
    resolution: DayTypeResolution,
    standard_minutes: int = DEFAULT_SCHEDULED_MINUTES,
    tz: tzinfo = MANILA_TZ,
) -> AttendanceDay:
    """Turn a raw attendance record into the engine's per-day input."""
    applied_break = (
        record.break_minutes_applied if record.break_minutes_applied is not None else record.shift_break_minutes
    )
    metrics = calculate_attendance_metrics(
        record.clock_in,
        record.clock_out,
        record.scheduled_start,
        record.scheduled_end,
        attendance_date=record.attendance_date,
        break_minutes=applied_break,
        early_in_approved=record.early_in_approved,
        late_out_approved=record.late_out_approved,
        late_in_approved=record.late_in_approved,
        early_out_approved=record.early_out_approved,
        overnight=record.overnight,
        shift_break_minutes=record.shift_break_minutes,
        break_minutes_applied=record.break_minutes_applied,
        tz=tz,
    )

    day_type = resolution.day_type
    worked = metrics.worked_minutes
    has_work = worked > 0
    beyond_standard = max(0, worked - standard_minutes)

    absent = 0
    no_clock = record.clock_in is None and record.clock_out is None
    if no_clock and not record.is_on_leave and day_type in (DayType.REGULAR_WORKING_DAY, DayType.SPECIAL_WORKING_DAY):
        absent = record.scheduled_work_minutes or standard_minutes

    def if_worked(minutes: int) -> int:
        return minutes if has_work else 0

    return AttendanceDay(
        attendance_date=record.attendance_date,
        day_type=day_type,
        worked_minutes=worked,
        late_minutes=if_worked(metrics.late_minutes),
        undertime_minutes=if_worked(metrics.undertime_minutes),
        absent_minutes=absent,
        ot_early_in_minutes=if_worked(metrics.ot_early_in_minutes),
        ot_late_out_minutes=if_worked(metrics.ot_late_out_minutes),
        ot_break_minutes=if_worked(metrics.ot_break_minutes),
        overtime_rest_day_minutes=beyond_standard if day_type == DayType.REST_DAY else 0,
        overtime_holiday_minutes=beyond_standard if day_type.is_holiday else 0,
        night_diff_minutes=if_worked(metrics.night_diff_minutes),
        early_in_approved=record.early_in_approved,
        late_out_approved=record.late_out_approved,
        daily_rate_override=record.daily_rate_override,
        is_on_leave=record.is_on_leave,
        leave_is_paid=record.leave_is_paid,
        holiday_name=resolution.holiday_name,
        id=record.id,
    )
