from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .exceptions import RulesetNotFoundError
from .wages import PH_MULTIPLIERS

BUNDLED_RULESET_DIR = Path(__file__).resolve().parent / "data" / "rulesets"
DEFAULT_RULESET_VERSION = "2026_v1"


def _upper_bound(value: Optional[float]) -> float:
    return math.inf if value is None else float(value)


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


@dataclass(frozen=True)
class SssBracket:
    min_salary: float
    max_salary: float
    regular_ss_ee: float
    regular_ss_er: float
    ec_er: float
    mpf_ee: float = 0.0
    mpf_er: float = 0.0

    @property
    def employee_share(self) -> float:
        return self.regular_ss_ee + self.mpf_ee

    @property
    def employer_share(self) -> float:
        return self.regular_ss_er + self.ec_er + self.mpf_er


@dataclass(frozen=True)
class SssTable:
    brackets: Tuple[SssBracket, ...]
    effective_date: Optional[date] = None

    def bracket_for(self, monthly_salary: float) -> SssBracket:
        """Last bracket whose lower bound is at or below the salary.

        Ranges are published to the centavo (5249.99 / 5250), so a salary
        such as 5249.995 belongs to the lower bracket. Salaries past the
        table use the top bracket.
        """
        selected = self.brackets[0]
        for bracket in self.brackets:
            if bracket.min_salary <= monthly_salary:
                selected = bracket
        return selected


@dataclass(frozen=True)
class PhilHealthTable:
    premium_rate: float
    min_base: float
    max_base: float
    ee_share: float
    effective_date: Optional[date] = None


@dataclass(frozen=True)
class PagIbigTable:
    ee_rate: float
    er_rate: float
    max_base: float
    effective_date: Optional[date] = None


@dataclass(frozen=True)
class TaxBracket:
    min_income: float
    max_income: float
    base_tax: float
    excess_rate: float


@dataclass(frozen=True)
class TaxTable:
    brackets: Tuple[TaxBracket, ...]
    effective_date: Optional[date] = None

    def bracket_for(self, annual_income: float) -> TaxBracket:
        """Last bracket whose lower bound is at or below the income.

        Published tables leave one-peso gaps (250000 / 250001); incomes that
        land in a gap fall to the lower bracket instead of the top one.
        """
        selected = self.brackets[0]
        for bracket in self.brackets:
            if bracket.min_income <= annual_income:
                selected = bracket
        return selected


@dataclass(frozen=True)
class Ruleset:
    version: str
    sss: Optional[SssTable] = None
    philhealth: Optional[PhilHealthTable] = None
    pagibig: Optional[PagIbigTable] = None
    tax: Optional[TaxTable] = None
    multipliers: Dict[str, float] = field(default_factory=lambda: dict(PH_MULTIPLIERS))
    effective_date: Optional[date] = None

    def multiplier(self, code: str) -> float:
        return self.multipliers.get(code, PH_MULTIPLIERS[code])

    def with_defaults(self, defaults: "Ruleset") -> "Ruleset":
        return replace(
            self,
            sss=self.sss or defaults.sss,
            philhealth=self.philhealth or defaults.philhealth,
            pagibig=self.pagibig or defaults.pagibig,
            tax=self.tax or defaults.tax,
        )


def ruleset_from_dict(data: dict) -> Ruleset:
    sss = philhealth = pagibig = tax = None
    if data.get("sss"):
        sss = SssTable(
            brackets=tuple(
                SssBracket(
                    min_salary=float(row["min_salary"]),
                    max_salary=_upper_bound(row.get("max_salary")),
                    regular_ss_ee=float(row["regular_ss_ee"]),
                    regular_ss_er=float(row["regular_ss_er"]),
                    ec_er=float(row.get("ec_er", 0)),
                    mpf_ee=float(row.get("mpf_ee", 0)),
                    mpf_er=float(row.get("mpf_er", 0)),
                )
                for row in data["sss"]["brackets"]
            ),
            effective_date=_parse_date(data["sss"].get("effective_date")),
        )
    if data.get("philhealth"):
        cfg = data["philhealth"]
        philhealth = PhilHealthTable(
            premium_rate=float(cfg["premium_rate"]),
            min_base=float(cfg["min_base"]),
            max_base=_upper_bound(cfg.get("max_base")),
            ee_share=float(cfg.get("ee_share", 0.5)),
            effective_date=_parse_date(cfg.get("effective_date")),
        )
    if data.get("pagibig"):
        cfg = data["pagibig"]
        pagibig = PagIbigTable(
            ee_rate=float(cfg["ee_rate"]),
            er_rate=float(cfg["er_rate"]),
            max_base=_upper_bound(cfg.get("max_base")),
            effective_date=_parse_date(cfg.get("effective_date")),
        )
    if data.get("tax"):
        tax = TaxTable(
            brackets=tuple(
                TaxBracket(
                    min_income=float(row["min_income"]),
                    max_income=_upper_bound(row.get("max_income")),
                    base_tax=float(row["base_tax"]),
                    excess_rate=float(row["excess_rate"]),
                )
                for row in data["tax"]["brackets"]
            ),
            effective_date=_parse_date(data["tax"].get("effective_date")),
        )

    multipliers = dict(PH_MULTIPLIERS)
    multipliers.update({code: float(value) for code, value in data.get("multipliers", {}).items()})

    return Ruleset(
        version=str(data["version"]),
        sss=sss,
        philhealth=philhealth,
        pagibig=pagibig,
        tax=tax,
        multipliers=multipliers,
        effective_date=_parse_date(data.get("effective_date")),
    )


class RulesetRepository:
    def __init__(self, base_path: Path = BUNDLED_RULESET_DIR):
        self.base_path = Path(base_path)

    def available_versions(self) -> List[str]:
        return sorted([p.stem for p in self.base_path.glob("*.json")])

    def load(self, version: str) -> Ruleset:
        file_path = self.base_path / f"{version}.json"
        if not file_path.exists():
            raise RulesetNotFoundError(version, file_path)
        with file_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return ruleset_from_dict(data)


@lru_cache
def default_ruleset() -> Ruleset:
    return RulesetRepository().load(DEFAULT_RULESET_VERSION)


def resolve_ruleset(ruleset: Optional[Ruleset]) -> Ruleset:
    """Fill any missing statutory table from the bundled default ruleset."""
    if ruleset is None:
        return default_ruleset()
    return ruleset.with_defaults(default_ruleset())
