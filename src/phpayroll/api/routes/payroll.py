from fastapi import APIRouter, Depends, HTTPException

from phpayroll.api.deps import get_ruleset_repository
from phpayroll.batch import compute_payroll
from phpayroll.core.config import Settings, get_settings
from phpayroll.core.logging import get_logger
from phpayroll.exceptions import RulesetNotFoundError
from phpayroll.rulesets import RulesetRepository
from phpayroll.schemas import PayrollRequest, PayrollRunOut

router = APIRouter(prefix="/payroll", tags=["payroll"])
logger = get_logger(__name__)


@router.post("/compute", response_model=PayrollRunOut)
def compute(
    payload: PayrollRequest,
    repository: RulesetRepository = Depends(get_ruleset_repository),
    settings: Settings = Depends(get_settings),
) -> PayrollRunOut:
    version = payload.ruleset_version or settings.default_ruleset_version
    try:
        ruleset = repository.load(version)
    except RulesetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Ruleset version {version} not found") from exc

    result = compute_payroll(
        payload.pay_period.to_domain(),
        ruleset,
        [employee.to_domain() for employee in payload.employees],
        max_workers=settings.max_workers,
    )
    logger.info("payroll_request_completed", ruleset_version=version, error_count=len(result.errors))
    return PayrollRunOut.from_domain(result)
