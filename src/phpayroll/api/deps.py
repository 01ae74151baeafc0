from fastapi import Depends

from phpayroll.core.config import Settings, get_settings
from phpayroll.rulesets import RulesetRepository


def get_ruleset_repository(settings: Settings = Depends(get_settings)) -> RulesetRepository:
    return RulesetRepository(settings.ruleset_dir)
