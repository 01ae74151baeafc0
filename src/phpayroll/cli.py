from __future__ import annotations

import argparse
import json
from datetime import date, datetime
from pathlib import Path

from .attendance import calculate_attendance_metrics
from .batch import compute_payroll
from .core.config import get_settings
from .core.logging import configure_logging
from .day_types import CalendarEvent, resolve_day_types_for_range
from .exceptions import PayrollError
from .rulesets import RulesetRepository
from .schemas import AttendanceMetricsOut, CalendarEventIn, PayrollRequest, PayrollRunOut
from .timeutils import at_local_time, company_timezone, extract_time_components

DEFAULT_RULESET_DIR: Path | None = None


def repository_from_args(args: argparse.Namespace) -> RulesetRepository:
    base_path = args.ruleset_dir or DEFAULT_RULESET_DIR or get_settings().ruleset_dir
    return RulesetRepository(Path(base_path))


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def parse_clock(day: date, value: str) -> datetime:
    """``HH:MM`` on ``day`` in company time, or a full ISO datetime."""
    if "T" in value or "-" in value:
        return datetime.fromisoformat(value)
    parts = extract_time_components(value)
    if parts is None:
        raise ValueError(f"Invalid clock time: {value}")
    return at_local_time(day, *parts, tz=company_timezone(get_settings().utc_offset_hours))


def parse_rest_days(value: str) -> list[int]:
    return [int(day) for day in value.split(",") if day.strip()]


def load_events(path: Path) -> list[CalendarEvent]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    return [CalendarEventIn.model_validate(row).to_domain() for row in data]


def format_summary(result: PayrollRunOut) -> str:
    rows = [
        f"{payslip.employee_id} gross={payslip.gross_pay:.2f} deductions={payslip.total_deductions:.2f} "
        f"net={payslip.net_pay:.2f}"
        for payslip in result.payslips
    ]
    rows.extend(f"{error.employee_id} ERROR {error.error}" for error in result.errors)
    totals = result.totals
    rows.append(
        f"TOTAL employees={result.employee_count} gross={totals.gross_pay:.2f} "
        f"deductions={totals.total_deductions:.2f} net={totals.net_pay:.2f}"
    )
    return "\n".join(rows)


def cmd_compute(args: argparse.Namespace) -> None:
    request = PayrollRequest.model_validate_json(Path(args.input).read_text(encoding="utf-8"))
    settings = get_settings()
    version = args.ruleset or request.ruleset_version or settings.default_ruleset_version
    ruleset = repository_from_args(args).load(version)

    result = PayrollRunOut.from_domain(
        compute_payroll(
            request.pay_period.to_domain(),
            ruleset,
            [employee.to_domain() for employee in request.employees],
            max_workers=args.workers or settings.max_workers,
        )
    )

    output = format_summary(result) if args.summary else result.model_dump_json(indent=2)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"Wrote {result.employee_count} payslips to {args.output}")
    else:
        print(output)


def cmd_attendance(args: argparse.Namespace) -> None:
    day = parse_date(args.date)
    metrics = calculate_attendance_metrics(
        parse_clock(day, args.clock_in),
        parse_clock(day, args.clock_out),
        args.scheduled_start,
        args.scheduled_end,
        attendance_date=day,
        break_minutes=args.break_minutes if args.break_applied is None else args.break_applied,
        early_in_approved=args.early_in_approved,
        late_out_approved=args.late_out_approved,
        late_in_approved=args.late_in_approved,
        early_out_approved=args.early_out_approved,
        overnight=args.overnight,
        shift_break_minutes=args.break_minutes,
        break_minutes_applied=args.break_applied,
        tz=company_timezone(get_settings().utc_offset_hours),
    )
    values = AttendanceMetricsOut.from_domain(metrics).model_dump()
    print(" ".join(f"{name}={value}" for name, value in values.items()))


def cmd_day_types(args: argparse.Namespace) -> None:
    events = load_events(Path(args.events)) if args.events else []
    rest_days = args.rest_days if args.rest_days is not None else get_settings().rest_days
    ruleset = repository_from_args(args).load(args.ruleset or get_settings().default_ruleset_version)
    resolved = resolve_day_types_for_range(
        parse_date(args.start), parse_date(args.end), events, rest_days, ruleset.multipliers
    )
    for day, resolution in resolved.items():
        name = f" {resolution.holiday_name}" if resolution.holiday_name else ""
        print(f"{day.isoformat()} {resolution.day_type.value} x{resolution.multiplier:g}{name}")


def cmd_rulesets(args: argparse.Namespace) -> None:
    default_version = get_settings().default_ruleset_version
    for version in repository_from_args(args).available_versions():
        marker = "*" if version == default_version else " "
        print(f"{marker} {version}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Philippine payroll engine")
    parser.add_argument("--ruleset-dir", help="Directory of <version>.json rulesets")
    sub = parser.add_subparsers(dest="command", required=True)

    compute = sub.add_parser("compute", help="Compute payslips for a pay period from a JSON request")
    compute.add_argument("input", help="Path to the payroll request JSON")
    compute.add_argument("--output", help="Write the result here instead of stdout")
    compute.add_argument("--ruleset", help="Ruleset version, overrides the request's")
    compute.add_argument("--workers", type=int, help="Compute employees on a thread pool")
    compute.add_argument("--summary", action="store_true", help="One line per employee instead of JSON")
    compute.set_defaults(func=cmd_compute)

    attendance = sub.add_parser("attendance", help="Late, undertime, OT and night-diff minutes for one day")
    attendance.add_argument("date")
    attendance.add_argument("clock_in", help="HH:MM or ISO datetime")
    attendance.add_argument("clock_out", help="HH:MM or ISO datetime")
    attendance.add_argument("scheduled_start", help="HH:MM")
    attendance.add_argument("scheduled_end", help="HH:MM")
    attendance.add_argument("--break-minutes", type=int, default=60, help="Scheduled shift break")
    attendance.add_argument("--break-applied", type=int, help="Break actually applied (override)")
    attendance.add_argument("--early-in-approved", action="store_true")
    attendance.add_argument("--late-out-approved", action="store_true")
    attendance.add_argument("--late-in-approved", action="store_true")
    attendance.add_argument("--early-out-approved", action="store_true")
    attendance.add_argument("--overnight", action="store_true")
    attendance.set_defaults(func=cmd_attendance)

    day_types = sub.add_parser("day-types", help="Resolve day types for a date range")
    day_types.add_argument("start")
    day_types.add_argument("end")
    day_types.add_argument("--events", help="JSON list of calendar events")
    day_types.add_argument("--rest-days", type=parse_rest_days, help="Comma-separated weekdays, Monday=0")
    day_types.add_argument("--ruleset", help="Ruleset version whose multipliers to report")
    day_types.set_defaults(func=cmd_day_types)

    rulesets = sub.add_parser("rulesets", help="List available ruleset versions")
    rulesets.set_defaults(func=cmd_rulesets)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(get_settings().log_level)
    try:
        args.func(args)
    except (PayrollError, ValueError) as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main()
