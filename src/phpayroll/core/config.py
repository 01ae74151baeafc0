import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from phpayroll.rulesets import BUNDLED_RULESET_DIR, DEFAULT_RULESET_VERSION

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "PH Payroll Engine"
    log_level: str = "INFO"
    ruleset_dir: Path = Field(default=BUNDLED_RULESET_DIR, description="Directory of <version>.json rulesets")
    default_ruleset_version: str = DEFAULT_RULESET_VERSION
    rest_days: Annotated[list[int], NoDecode] = Field(default=[5, 6], description="Rest weekdays, Monday=0")
    utc_offset_hours: float = Field(default=8, description="Company wall-clock offset from UTC")
    max_workers: Optional[int] = Field(default=None, description="Thread pool size for batch runs")
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error monitoring")
    otlp_endpoint: str | None = Field(default=None, description="OTLP endpoint for traces/metrics")

    model_config = SettingsConfigDict(env_prefix="PHPAYROLL_", extra="ignore")

    @field_validator("rest_days", mode="before")
    @classmethod
    def split_rest_days(cls, value: str | list[int]) -> list[int]:
        if isinstance(value, str):
            return [int(day.strip()) for day in value.split(",") if day.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("PHPAYROLL_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None
