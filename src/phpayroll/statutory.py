from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Sequence

from .models import (
    DerivedRates,
    EmployeeRegularization,
    EmploymentType,
    LineCategory,
    PayPeriod,
    PayProfile,
    PayslipLine,
    StatutoryOverride,
)
from .rounding import round4
from .rulesets import PagIbigTable, PhilHealthTable, SssTable, TaxTable
from .wages import MSC_DAYS, statutory_daily_rate

# Monthly ceilings for non-taxable de minimis benefits.
DE_MINIMIS_MONTHLY_CAPS: Dict[str, float] = {
    "rice_subsidy": 2000,
    "clothing_allowance": 6000 / 12,
    "laundry_allowance": 300,
    "medical_allowance": 250,
}


@dataclass(frozen=True)
class Contribution:
    employee: float
    employer: float

    @property
    def total(self) -> float:
        return self.employee + self.employer


@dataclass(frozen=True)
class ContributionLines:
    contribution: Contribution
    ee_line: PayslipLine
    er_line: PayslipLine


def is_eligible_for_statutory(
    regularization: EmployeeRegularization,
    pay_period: PayPeriod,
    is_benefits_eligible: bool,
) -> bool:
    if not is_benefits_eligible:
        return False
    if regularization.employment_type == EmploymentType.REGULAR:
        return True
    if regularization.regularization_date is not None:
        return regularization.regularization_date <= pay_period.end_date
    return False


def statutory_monthly_base(
    rates: DerivedRates,
    profile: PayProfile,
    override: Optional[StatutoryOverride] = None,
) -> float:
    """MSC used for contributions, or the MSC implied by a declared override wage."""
    if override is None:
        return rates.msc
    daily = statutory_daily_rate(override, profile.standard_work_days_per_month, profile.standard_hours_per_day)
    return daily * MSC_DAYS


def calculate_sss(monthly_salary: float, table: SssTable) -> Contribution:
    bracket = table.bracket_for(monthly_salary)
    return Contribution(employee=bracket.employee_share, employer=bracket.employer_share)


def calculate_philhealth(monthly_salary: float, table: PhilHealthTable) -> Contribution:
    base = min(max(monthly_salary, table.min_base), table.max_base)
    premium = round4(base * table.premium_rate)
    return Contribution(
        employee=round4(premium * table.ee_share),
        employer=round4(premium * (1 - table.ee_share)),
    )


def calculate_pagibig(monthly_salary: float, table: PagIbigTable) -> Contribution:
    base = min(monthly_salary, table.max_base)
    return Contribution(employee=round4(base * table.ee_rate), employer=round4(base * table.er_rate))


def _contribution_lines(
    contribution: Contribution,
    periods_per_month: float,
    agency: str,
    ee_category: LineCategory,
    er_category: LineCategory,
) -> ContributionLines:
    return ContributionLines(
        contribution=contribution,
        ee_line=PayslipLine(
            category=ee_category,
            description=f"{agency} Employee Share",
            amount=round4(contribution.employee / periods_per_month),
            sort_order=ee_category.sort_order,
            rule_code=ee_category.value,
            rule_description=f"{agency} EE (Monthly: {contribution.employee:g})",
        ),
        er_line=PayslipLine(
            category=er_category,
            description=f"{agency} Employer Share",
            amount=round4(contribution.employer / periods_per_month),
            sort_order=er_category.sort_order,
            rule_code=er_category.value,
            rule_description=f"{agency} ER (Monthly: {contribution.employer:g})",
        ),
    )


def sss_lines(monthly_salary: float, table: SssTable, periods_per_month: float) -> ContributionLines:
    return _contribution_lines(
        calculate_sss(monthly_salary, table), periods_per_month, "SSS", LineCategory.SSS_EE, LineCategory.SSS_ER
    )


def philhealth_lines(monthly_salary: float, table: PhilHealthTable, periods_per_month: float) -> ContributionLines:
    return _contribution_lines(
        calculate_philhealth(monthly_salary, table),
        periods_per_month,
        "PhilHealth",
        LineCategory.PHILHEALTH_EE,
        LineCategory.PHILHEALTH_ER,
    )


def pagibig_lines(monthly_salary: float, table: PagIbigTable, periods_per_month: float) -> ContributionLines:
    return _contribution_lines(
        calculate_pagibig(monthly_salary, table),
        periods_per_month,
        "Pag-IBIG",
        LineCategory.PAGIBIG_EE,
        LineCategory.PAGIBIG_ER,
    )


def calculate_annual_tax(annual_taxable_income: float, table: TaxTable) -> float:
    if annual_taxable_income <= 0:
        return 0.0
    bracket = table.bracket_for(annual_taxable_income)
    excess = annual_taxable_income - bracket.min_income
    return round4(bracket.base_tax + excess * bracket.excess_rate)


def calculate_withholding_tax(
    current_period_taxable: float,
    ytd_taxable: float,
    ytd_tax_withheld: float,
    period_number: int,
    total_periods: float,
    table: TaxTable,
) -> float:
    """Cumulative projection: annualize year-to-date income, withhold what is due so far."""
    cumulative = ytd_taxable + current_period_taxable
    projected_annual = cumulative / period_number * total_periods
    annual_tax = calculate_annual_tax(projected_annual, table)
    due_to_date = annual_tax / total_periods * period_number
    return max(0.0, round4(due_to_date - ytd_tax_withheld))


def withholding_tax_line(
    current_period_taxable: float,
    ytd_taxable: float,
    ytd_tax_withheld: float,
    period_number: int,
    total_periods: float,
    table: TaxTable,
) -> Optional[PayslipLine]:
    tax = calculate_withholding_tax(
        current_period_taxable, ytd_taxable, ytd_tax_withheld, period_number, total_periods, table
    )
    if tax <= 0:
        return None
    return PayslipLine(
        category=LineCategory.TAX_WITHHOLDING,
        description="Withholding Tax",
        amount=tax,
        sort_order=LineCategory.TAX_WITHHOLDING.sort_order,
        rule_code="WITHHOLDING_TAX",
        rule_description="Income Tax Withholding (TRAIN Law)",
    )


def calculate_tax_period_number(period_start: date, periods_per_month: float) -> int:
    """Period index within the tax year (1-24 semi-monthly, 1-12 monthly)."""
    previous_months = (period_start.month - 1) * periods_per_month
    within_month = 1
    if periods_per_month == 2:
        within_month = 1 if period_start.day <= 15 else 2
    elif periods_per_month >= 4:
        within_month = min(math.ceil(period_start.day / 7), math.floor(periods_per_month))
    return max(1, math.floor(previous_months + within_month))


def effective_tax_period_number(period_start: date, periods_per_month: float, previous_ytd_taxable: float) -> int:
    """Calendar period, except 1 for an employee with no taxable income yet this year.

    A mid-year hire projected over the calendar period would annualize one
    payroll across many periods and be under-withheld.
    """
    if previous_ytd_taxable > 0:
        return calculate_tax_period_number(period_start, periods_per_month)
    return 1


def non_taxable_allowances(profile: PayProfile, periods_per_month: float) -> float:
    return sum(
        min(getattr(profile, attr), cap) / periods_per_month for attr, cap in DE_MINIMIS_MONTHLY_CAPS.items()
    )


@dataclass(frozen=True)
class TaxBaseContext:
    profile: PayProfile
    rates: DerivedRates
    work_day_count: int
    late_undertime_minutes: int
    employee_shares: float
    lines: Sequence[PayslipLine]
    periods_per_month: float
    statutory_override: Optional[StatutoryOverride] = None


class TaxBaseStrategy:
    name = "base"

    def taxable_income(self, ctx: TaxBaseContext) -> float:
        raise NotImplementedError


class BasicPayTaxBase(TaxBaseStrategy):
    """Basic pay less late/undertime and employee contributions.

    Overtime, holiday premiums, allowances and adjustments stay out of the
    base. A statutory override wage replaces the profile's rates here.
    """

    name = "basic_pay"

    def taxable_income(self, ctx: TaxBaseContext) -> float:
        if ctx.statutory_override is not None:
            hours = ctx.profile.standard_hours_per_day or 8
            daily = statutory_daily_rate(
                ctx.statutory_override, ctx.profile.standard_work_days_per_month, ctx.profile.standard_hours_per_day
            )
            minute = daily / (hours * 60)
        else:
            daily = ctx.rates.daily_rate
            minute = ctx.rates.minute_rate
        basic = round4(daily * ctx.work_day_count)
        late_undertime = round4(minute * ctx.late_undertime_minutes)
        return max(0.0, round4(basic - late_undertime - ctx.employee_shares))


class FullEarningsTaxBase(TaxBaseStrategy):
    """Every earning line less contributions and capped de minimis benefits."""

    name = "full_earnings"

    def taxable_income(self, ctx: TaxBaseContext) -> float:
        earnings = sum(line.amount for line in ctx.lines if line.is_earning)
        exempt = non_taxable_allowances(ctx.profile, ctx.periods_per_month)
        return max(0.0, round4(earnings - ctx.employee_shares - exempt))


def tax_base_strategy(tax_on_full_earnings: bool) -> TaxBaseStrategy:
    return FullEarningsTaxBase() if tax_on_full_earnings else BasicPayTaxBase()
