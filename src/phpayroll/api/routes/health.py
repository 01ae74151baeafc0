from fastapi import APIRouter, Depends

from phpayroll import __version__
from phpayroll.core.config import Settings, get_settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Liveness probe")
def healthcheck(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    return {"status": "ok", "version": __version__, "default_ruleset": settings.default_ruleset_version}
