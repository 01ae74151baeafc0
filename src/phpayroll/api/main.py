from fastapi import FastAPI

from phpayroll import __version__
from phpayroll.api.routes import attendance, health, payroll, rulesets
from phpayroll.core.config import get_settings
from phpayroll.core.logging import configure_logging, get_logger
from phpayroll.core.monitoring import configure_error_monitoring
from phpayroll.core.observability import configure_observability

settings = get_settings()

configure_logging(settings.log_level)
configure_observability(settings)
configure_error_monitoring(settings)
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name, version=__version__)

app.include_router(health.router)
app.include_router(payroll.router)
app.include_router(attendance.router)
app.include_router(rulesets.router)


@app.on_event("startup")
def startup_event() -> None:
    logger.info("startup_complete", env=settings.env, default_ruleset=settings.default_ruleset_version)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "PH payroll engine running", "environment": settings.env}
