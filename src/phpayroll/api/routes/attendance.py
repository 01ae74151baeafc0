from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from phpayroll.api.deps import get_ruleset_repository
from phpayroll.attendance import build_attendance_day
from phpayroll.core.config import Settings, get_settings
from phpayroll.day_types import build_event_map, resolve_day_type, resolve_day_types_for_range
from phpayroll.exceptions import RulesetNotFoundError
from phpayroll.rulesets import Ruleset, RulesetRepository
from phpayroll.schemas import (
    AttendanceCalculationOut,
    AttendanceCalculationRequest,
    AttendanceDayIn,
    DayTypeOut,
    DayTypesRequest,
)
from phpayroll.timeutils import company_timezone

router = APIRouter(prefix="/attendance", tags=["attendance"])


def load_ruleset(repository: RulesetRepository, settings: Settings, version: Optional[str]) -> Ruleset:
    version = version or settings.default_ruleset_version
    try:
        return repository.load(version)
    except RulesetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Ruleset version {version} not found") from exc


@router.post("/calculate", response_model=AttendanceCalculationOut)
def calculate(
    payload: AttendanceCalculationRequest,
    repository: RulesetRepository = Depends(get_ruleset_repository),
    settings: Settings = Depends(get_settings),
) -> AttendanceCalculationOut:
    ruleset = load_ruleset(repository, settings, payload.ruleset_version)
    record = payload.record.to_domain()
    events = build_event_map(event.to_domain() for event in payload.events)
    resolution = resolve_day_type(record.attendance_date, events, settings.rest_days, ruleset.multipliers)
    day = build_attendance_day(
        record,
        resolution,
        standard_minutes=payload.standard_minutes,
        tz=company_timezone(settings.utc_offset_hours),
    )
    return AttendanceCalculationOut(
        day_type=DayTypeOut.from_domain(record.attendance_date, resolution),
        day=AttendanceDayIn(**vars(day)),
    )


@router.post("/day-types", response_model=list[DayTypeOut])
def day_types(
    payload: DayTypesRequest,
    repository: RulesetRepository = Depends(get_ruleset_repository),
    settings: Settings = Depends(get_settings),
) -> list[DayTypeOut]:
    ruleset = load_ruleset(repository, settings, payload.ruleset_version)
    rest_days = payload.rest_days if payload.rest_days is not None else settings.rest_days
    resolved = resolve_day_types_for_range(
        payload.start_date,
        payload.end_date,
        [event.to_domain() for event in payload.events],
        rest_days,
        ruleset.multipliers,
    )
    return [DayTypeOut.from_domain(day, resolution) for day, resolution in resolved.items()]
