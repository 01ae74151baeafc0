from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from phpayroll.api.deps import get_ruleset_repository
from phpayroll.core.config import Settings, get_settings
from phpayroll.exceptions import RulesetNotFoundError
from phpayroll.rulesets import RulesetRepository

router = APIRouter(prefix="/rulesets", tags=["rulesets"])


class RulesetListOut(BaseModel):
    versions: list[str]
    default_version: str


class RulesetOut(BaseModel):
    version: str
    effective_date: str | None = None
    multipliers: dict[str, float]
    sss_brackets: int
    tax_brackets: int


@router.get("", response_model=RulesetListOut)
def list_rulesets(
    repository: RulesetRepository = Depends(get_ruleset_repository),
    settings: Settings = Depends(get_settings),
) -> RulesetListOut:
    return RulesetListOut(versions=repository.available_versions(), default_version=settings.default_ruleset_version)


@router.get("/{version}", response_model=RulesetOut)
def get_ruleset(version: str, repository: RulesetRepository = Depends(get_ruleset_repository)) -> RulesetOut:
    try:
        ruleset = repository.load(version)
    except RulesetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Ruleset version {version} not found") from exc
    return RulesetOut(
        version=ruleset.version,
        effective_date=ruleset.effective_date.isoformat() if ruleset.effective_date else None,
        multipliers=ruleset.multipliers,
        sss_brackets=len(ruleset.sss.brackets) if ruleset.sss else 0,
        tax_brackets=len(ruleset.tax.brackets) if ruleset.tax else 0,
    )
