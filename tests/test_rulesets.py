import json
import math

import pytest

from phpayroll.exceptions import PayrollError, RulesetNotFoundError
from phpayroll.rulesets import (
    DEFAULT_RULESET_VERSION,
    Ruleset,
    RulesetRepository,
    default_ruleset,
    resolve_ruleset,
    ruleset_from_dict,
)
from phpayroll.wages import PH_MULTIPLIERS


def test_available_versions_lists_bundled_rulesets():
    versions = RulesetRepository().available_versions()

    assert "2024_v1" in versions
    assert DEFAULT_RULESET_VERSION in versions
    assert versions == sorted(versions)


def test_bundled_ruleset_loads_all_tables():
    ruleset = RulesetRepository().load("2026_v1")

    assert ruleset.version == "2026_v1"
    assert ruleset.sss.brackets[0].min_salary == 0
    assert math.isinf(ruleset.sss.brackets[-1].max_salary)
    assert ruleset.philhealth.premium_rate == 0.05
    assert ruleset.pagibig.max_base == 10000
    assert math.isinf(ruleset.tax.brackets[-1].max_income)
    assert ruleset.multiplier("REGULAR_HOLIDAY_OT") == 2.6


def test_missing_version_raises():
    with pytest.raises(RulesetNotFoundError) as excinfo:
        RulesetRepository().load("1999_v1")

    assert isinstance(excinfo.value, FileNotFoundError)
    assert isinstance(excinfo.value, PayrollError)
    assert excinfo.value.version == "1999_v1"


def test_repository_reads_custom_directory(tmp_path):
    path = tmp_path / "custom_v1.json"
    path.write_text(
        json.dumps(
            {
                "version": "custom_v1",
                "multipliers": {"OT_REGULAR": 1.3},
                "pagibig": {"ee_rate": 0.02, "er_rate": 0.02, "max_base": None},
            }
        )
    )
    repo = RulesetRepository(tmp_path)

    ruleset = repo.load("custom_v1")

    assert repo.available_versions() == ["custom_v1"]
    assert ruleset.multiplier("OT_REGULAR") == 1.3
    assert ruleset.multiplier("REST_DAY") == PH_MULTIPLIERS["REST_DAY"]
    assert math.isinf(ruleset.pagibig.max_base)
    assert ruleset.sss is None


def test_missing_tables_fall_back_to_default_ruleset():
    partial = ruleset_from_dict({"version": "partial", "multipliers": {"NIGHT_DIFF": 0.2}})

    resolved = resolve_ruleset(partial)

    assert resolved.version == "partial"
    assert resolved.sss == default_ruleset().sss
    assert resolved.tax == default_ruleset().tax
    assert resolved.multiplier("NIGHT_DIFF") == 0.2


def test_no_ruleset_means_the_default():
    assert resolve_ruleset(None) is default_ruleset()
    assert isinstance(default_ruleset(), Ruleset)
    assert default_ruleset().version == DEFAULT_RULESET_VERSION
