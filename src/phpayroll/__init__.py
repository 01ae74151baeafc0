"""Philippine statutory payroll engine."""

from .batch import PayrollRun, compute_payroll
from .engine import PayrollEngine, compute_employee_payslip
from .exceptions import PayrollError, RulesetNotFoundError, UnknownWageTypeError
from .rulesets import Ruleset, RulesetRepository

__version__ = "0.1.0"

__all__ = [
    "PayrollEngine",
    "PayrollError",
    "PayrollRun",
    "Ruleset",
    "RulesetNotFoundError",
    "RulesetRepository",
    "UnknownWageTypeError",
    "compute_employee_payslip",
    "compute_payroll",
]
