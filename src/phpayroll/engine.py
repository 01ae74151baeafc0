from __future__ import annotations

from typing import List, Optional

from .core.logging import get_logger
from .lines import (
    absent_line,
    allowance_lines,
    basic_pay_lines,
    holiday_premium_lines,
    late_undertime_line,
    manual_adjustment_lines,
    night_diff_line,
    overtime_lines,
    penalty_lines,
    rest_day_premium_line,
    total_late_undertime_minutes,
    work_days,
)
from .models import (
    EmployeePayrollInput,
    LineKind,
    PayPeriod,
    Payslip,
    PayslipLine,
    StatutoryBreakdown,
    YtdSnapshot,
)
from .rounding import round4
from .rulesets import Ruleset, resolve_ruleset
from .statutory import (
    TaxBaseContext,
    TaxBaseStrategy,
    effective_tax_period_number,
    is_eligible_for_statutory,
    pagibig_lines,
    philhealth_lines,
    sss_lines,
    statutory_monthly_base,
    tax_base_strategy,
    withholding_tax_line,
)
from .wages import calculate_derived_rates, periods_per_month

logger = get_logger(__name__)


def sum_kind(lines: List[PayslipLine], kind: LineKind) -> float:
    return round4(sum(line.amount for line in lines if line.category.kind == kind))


class PayrollEngine:
    """Computes one employee's payslip for a pay period under a ruleset."""

    def __init__(self, pay_period: PayPeriod, ruleset: Optional[Ruleset] = None):
        self.pay_period = pay_period
        self.ruleset = resolve_ruleset(ruleset)
        self.periods_per_month = periods_per_month(pay_period.pay_frequency)

    def compute(self, employee: EmployeePayrollInput, strategy: Optional[TaxBaseStrategy] = None) -> Payslip:
        profile = employee.profile
        attendance = employee.attendance
        hours = profile.standard_hours_per_day
        multipliers = self.ruleset.multipliers
        ppm = self.periods_per_month

        rates = calculate_derived_rates(profile)
        lines: List[PayslipLine] = []
        employer_lines: List[PayslipLine] = []

        lines.extend(basic_pay_lines(profile, self.pay_period.pay_frequency, attendance, rates))

        for line in (late_undertime_line(attendance, rates, hours), absent_line(profile, attendance, rates)):
            if line is not None:
                lines.append(line)

        if profile.is_ot_eligible:
            lines.extend(overtime_lines(attendance, rates, hours, multipliers))

        if profile.is_nd_eligible:
            nd_line = night_diff_line(attendance, rates, hours, self.ruleset.multiplier("NIGHT_DIFF"))
            if nd_line is not None:
                lines.append(nd_line)

        lines.extend(
            holiday_premium_lines(attendance, rates, profile.standard_minutes_per_day, hours, multipliers)
        )
        rest_day_line = rest_day_premium_line(attendance, rates, hours, self.ruleset.multiplier("REST_DAY"))
        if rest_day_line is not None:
            lines.append(rest_day_line)

        lines.extend(allowance_lines(profile, ppm))
        lines.extend(manual_adjustment_lines(employee.manual_adjustments))
        lines.extend(penalty_lines(employee.penalty_deductions))

        statutory = StatutoryBreakdown()
        taxable_income = 0.0
        tax_period: Optional[int] = None

        if is_eligible_for_statutory(employee.regularization, self.pay_period, profile.is_benefits_eligible):
            monthly_base = statutory_monthly_base(rates, profile, employee.statutory_override)
            sss = sss_lines(monthly_base, self.ruleset.sss, ppm)
            philhealth = philhealth_lines(monthly_base, self.ruleset.philhealth, ppm)
            pagibig = pagibig_lines(monthly_base, self.ruleset.pagibig, ppm)
            for contribution in (sss, philhealth, pagibig):
                lines.append(contribution.ee_line)
                employer_lines.append(contribution.er_line)

            statutory.sss_ee, statutory.sss_er = sss.ee_line.amount, sss.er_line.amount
            statutory.philhealth_ee, statutory.philhealth_er = philhealth.ee_line.amount, philhealth.er_line.amount
            statutory.pagibig_ee, statutory.pagibig_er = pagibig.ee_line.amount, pagibig.er_line.amount

            strategy = strategy or tax_base_strategy(employee.tax_on_full_earnings)
            taxable_income = strategy.taxable_income(
                TaxBaseContext(
                    profile=profile,
                    rates=rates,
                    work_day_count=len(work_days(attendance)),
                    late_undertime_minutes=total_late_undertime_minutes(attendance),
                    employee_shares=statutory.employee_shares(),
                    lines=lines,
                    periods_per_month=ppm,
                    statutory_override=employee.statutory_override,
                )
            )
            tax_period = effective_tax_period_number(
                self.pay_period.start_date, ppm, employee.previous_ytd.taxable_income
            )
            tax_line = withholding_tax_line(
                taxable_income,
                employee.previous_ytd.taxable_income,
                employee.previous_ytd.tax_withheld,
                tax_period,
                ppm * 12,
                self.ruleset.tax,
            )
            if tax_line is not None:
                lines.append(tax_line)
                statutory.withholding_tax = tax_line.amount

        # sorted() is stable: lines sharing a sort order keep generation order.
        lines = sorted(lines, key=lambda line: line.sort_order)
        employer_lines = sorted(employer_lines, key=lambda line: line.sort_order)

        total_earnings = sum_kind(lines, LineKind.EARNING)
        total_deductions = sum_kind(lines, LineKind.DEDUCTION)
        net_pay = round4(total_earnings - total_deductions)

        previous = employee.previous_ytd
        ytd = YtdSnapshot(
            gross_pay=round4(previous.gross_pay + total_earnings),
            taxable_income=round4(previous.taxable_income + taxable_income),
            tax_withheld=round4(previous.tax_withheld + statutory.withholding_tax),
        )

        logger.debug(
            "payslip_computed",
            employee_id=profile.employee_id,
            pay_period_id=self.pay_period.id,
            line_count=len(lines),
            net_pay=net_pay,
        )
        return Payslip(
            employee_id=profile.employee_id,
            lines=lines,
            employer_lines=employer_lines,
            gross_pay=total_earnings,
            total_earnings=total_earnings,
            total_deductions=total_deductions,
            net_pay=net_pay,
            statutory=statutory,
            taxable_income=taxable_income,
            tax_period_number=tax_period,
            ytd=ytd,
            pay_profile=profile,
        )


def compute_employee_payslip(
    pay_period: PayPeriod, ruleset: Optional[Ruleset], employee: EmployeePayrollInput
) -> Payslip:
    return PayrollEngine(pay_period, ruleset).compute(employee)
