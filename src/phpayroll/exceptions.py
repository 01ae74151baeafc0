from __future__ import annotations


class PayrollError(Exception):
    """Base class for errors raised by the payroll engine."""


class UnknownWageTypeError(PayrollError, ValueError):
    def __init__(self, wage_type: object):
        super().__init__(f"Unknown wage type: {wage_type}")
        self.wage_type = wage_type


class RulesetNotFoundError(PayrollError, FileNotFoundError):
    def __init__(self, version: str, path: object):
        super().__init__(f"Ruleset version {version} not found at {path}")
        self.version = version
