from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

from .core.logging import get_logger
from .core.observability import get_tracer
from .engine import PayrollEngine
from .models import (
    EmployeeError,
    EmployeePayrollInput,
    PayPeriod,
    PayrollRunResult,
    PayrollTotals,
    Payslip,
)
from .rounding import round4
from .rulesets import Ruleset

logger = get_logger(__name__)
tracer = get_tracer(__name__)

Outcome = Union[Payslip, EmployeeError]


class PayrollRun:
    """Computes a whole pay period, one independent payslip per employee."""

    def __init__(self, engine: PayrollEngine, max_workers: Optional[int] = None):
        self.engine = engine
        self.max_workers = max_workers

    def _compute_one(self, employee: EmployeePayrollInput) -> Outcome:
        try:
            return self.engine.compute(employee)
        except Exception as exc:  # recorded against the employee, run continues
            logger.exception(
                "employee_computation_failed",
                employee_id=employee.employee_id,
                pay_period_id=self.engine.pay_period.id,
            )
            return EmployeeError(employee_id=employee.employee_id, error=str(exc) or exc.__class__.__name__)

    def run(self, employees: Sequence[EmployeePayrollInput]) -> PayrollRunResult:
        with tracer.start_as_current_span("compute_payroll") as span:
            span.set_attribute("payroll.employee_count", len(employees))
            if self.max_workers and self.max_workers > 1 and len(employees) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                    outcomes: List[Outcome] = list(pool.map(self._compute_one, employees))
            else:
                outcomes = [self._compute_one(employee) for employee in employees]

        payslips = [outcome for outcome in outcomes if isinstance(outcome, Payslip)]
        errors = [outcome for outcome in outcomes if isinstance(outcome, EmployeeError)]
        totals = summarize(payslips)

        logger.info(
            "payroll_computed",
            pay_period_id=self.engine.pay_period.id,
            employee_count=len(payslips),
            error_count=len(errors),
            net_pay=totals.net_pay,
        )
        return PayrollRunResult(payslips=payslips, totals=totals, employee_count=len(payslips), errors=errors)


def summarize(payslips: Sequence[Payslip]) -> PayrollTotals:
    totals = PayrollTotals()
    for payslip in payslips:
        totals.gross_pay += payslip.gross_pay
        totals.total_earnings += payslip.total_earnings
        totals.total_deductions += payslip.total_deductions
        totals.net_pay += payslip.net_pay
        totals.sss_ee += payslip.statutory.sss_ee
        totals.sss_er += payslip.statutory.sss_er
        totals.philhealth_ee += payslip.statutory.philhealth_ee
        totals.philhealth_er += payslip.statutory.philhealth_er
        totals.pagibig_ee += payslip.statutory.pagibig_ee
        totals.pagibig_er += payslip.statutory.pagibig_er
        totals.withholding_tax += payslip.statutory.withholding_tax

    return PayrollTotals(**{name: round4(value) for name, value in vars(totals).items()})


def compute_payroll(
    pay_period: PayPeriod,
    ruleset: Optional[Ruleset],
    employees: Sequence[EmployeePayrollInput],
    max_workers: Optional[int] = None,
) -> PayrollRunResult:
    return PayrollRun(PayrollEngine(pay_period, ruleset), max_workers=max_workers).run(employees)
