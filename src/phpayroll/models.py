from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional


class WageType(str, Enum):
    MONTHLY = "MONTHLY"
    DAILY = "DAILY"
    HOURLY = "HOURLY"


class PayFrequency(str, Enum):
    MONTHLY = "MONTHLY"
    SEMI_MONTHLY = "SEMI_MONTHLY"
    BI_WEEKLY = "BI_WEEKLY"
    WEEKLY = "WEEKLY"


class DayType(str, Enum):
    REGULAR_WORKING_DAY = "REGULAR_WORKING_DAY"
    REST_DAY = "REST_DAY"
    REGULAR_HOLIDAY = "REGULAR_HOLIDAY"
    SPECIAL_HOLIDAY = "SPECIAL_HOLIDAY"
    REGULAR_HOLIDAY_REST_DAY = "REGULAR_HOLIDAY_REST_DAY"
    SPECIAL_HOLIDAY_REST_DAY = "SPECIAL_HOLIDAY_REST_DAY"
    SPECIAL_WORKING_DAY = "SPECIAL_WORKING_DAY"

    @property
    def is_holiday(self) -> bool:
        return self in HOLIDAY_DAY_TYPES

    @property
    def is_regular_holiday(self) -> bool:
        return self in (DayType.REGULAR_HOLIDAY, DayType.REGULAR_HOLIDAY_REST_DAY)


HOLIDAY_DAY_TYPES = frozenset(
    {
        DayType.REGULAR_HOLIDAY,
        DayType.SPECIAL_HOLIDAY,
        DayType.REGULAR_HOLIDAY_REST_DAY,
        DayType.SPECIAL_HOLIDAY_REST_DAY,
    }
)


class EmploymentType(str, Enum):
    REGULAR = "REGULAR"
    PROBATIONARY = "PROBATIONARY"
    CONTRACTUAL = "CONTRACTUAL"
    CONSULTANT = "CONSULTANT"
    INTERN = "INTERN"


class AdjustmentType(str, Enum):
    EARNING = "EARNING"
    DEDUCTION = "DEDUCTION"


class LineKind(str, Enum):
    EARNING = "EARNING"
    DEDUCTION = "DEDUCTION"
    EMPLOYER = "EMPLOYER"  # reported, never part of net pay


class LineCategory(str, Enum):
    BASIC_PAY = "BASIC_PAY"
    HOLIDAY_PAY = "HOLIDAY_PAY"
    REST_DAY_PAY = "REST_DAY_PAY"
    OVERTIME_REGULAR = "OVERTIME_REGULAR"
    OVERTIME_REST_DAY = "OVERTIME_REST_DAY"
    OVERTIME_HOLIDAY = "OVERTIME_HOLIDAY"
    NIGHT_DIFFERENTIAL = "NIGHT_DIFFERENTIAL"
    ALLOWANCE = "ALLOWANCE"
    ADJUSTMENT_ADD = "ADJUSTMENT_ADD"
    LATE_UT_DEDUCTION = "LATE_UT_DEDUCTION"
    ABSENT_DEDUCTION = "ABSENT_DEDUCTION"
    SSS_EE = "SSS_EE"
    SSS_ER = "SSS_ER"
    PHILHEALTH_EE = "PHILHEALTH_EE"
    PHILHEALTH_ER = "PHILHEALTH_ER"
    PAGIBIG_EE = "PAGIBIG_EE"
    PAGIBIG_ER = "PAGIBIG_ER"
    TAX_WITHHOLDING = "TAX_WITHHOLDING"
    PENALTY_DEDUCTION = "PENALTY_DEDUCTION"
    ADJUSTMENT_DEDUCT = "ADJUSTMENT_DEDUCT"
    OTHER_DEDUCTION = "OTHER_DEDUCTION"

    @property
    def kind(self) -> LineKind:
        return CATEGORY_KINDS[self]

    @property
    def sort_order(self) -> int:
        return CATEGORY_SORT_ORDER[self]


CATEGORY_KINDS: Dict[LineCategory, LineKind] = {
    LineCategory.BASIC_PAY: LineKind.EARNING,
    LineCategory.HOLIDAY_PAY: LineKind.EARNING,
    LineCategory.REST_DAY_PAY: LineKind.EARNING,
    LineCategory.OVERTIME_REGULAR: LineKind.EARNING,
    LineCategory.OVERTIME_REST_DAY: LineKind.EARNING,
    LineCategory.OVERTIME_HOLIDAY: LineKind.EARNING,
    LineCategory.NIGHT_DIFFERENTIAL: LineKind.EARNING,
    LineCategory.ALLOWANCE: LineKind.EARNING,
    LineCategory.ADJUSTMENT_ADD: LineKind.EARNING,
    LineCategory.LATE_UT_DEDUCTION: LineKind.DEDUCTION,
    LineCategory.ABSENT_DEDUCTION: LineKind.DEDUCTION,
    LineCategory.SSS_EE: LineKind.DEDUCTION,
    LineCategory.SSS_ER: LineKind.EMPLOYER,
    LineCategory.PHILHEALTH_EE: LineKind.DEDUCTION,
    LineCategory.PHILHEALTH_ER: LineKind.EMPLOYER,
    LineCategory.PAGIBIG_EE: LineKind.DEDUCTION,
    LineCategory.PAGIBIG_ER: LineKind.EMPLOYER,
    LineCategory.TAX_WITHHOLDING: LineKind.DEDUCTION,
    LineCategory.PENALTY_DEDUCTION: LineKind.DEDUCTION,
    LineCategory.ADJUSTMENT_DEDUCT: LineKind.DEDUCTION,
    LineCategory.OTHER_DEDUCTION: LineKind.DEDUCTION,
}

# Base sort order per category. Some generators add an offset on top
# (allowances, adjustments, unworked holiday pay).
CATEGORY_SORT_ORDER: Dict[LineCategory, int] = {
    LineCategory.BASIC_PAY: 100,
    LineCategory.HOLIDAY_PAY: 110,
    LineCategory.REST_DAY_PAY: 130,
    LineCategory.OVERTIME_REGULAR: 200,
    LineCategory.OVERTIME_REST_DAY: 210,
    LineCategory.OVERTIME_HOLIDAY: 220,
    LineCategory.NIGHT_DIFFERENTIAL: 300,
    LineCategory.ALLOWANCE: 400,
    LineCategory.ADJUSTMENT_ADD: 800,
    LineCategory.LATE_UT_DEDUCTION: 1015,
    LineCategory.ABSENT_DEDUCTION: 1020,
    LineCategory.SSS_EE: 1100,
    LineCategory.SSS_ER: 1101,
    LineCategory.PHILHEALTH_EE: 1110,
    LineCategory.PHILHEALTH_ER: 1111,
    LineCategory.PAGIBIG_EE: 1120,
    LineCategory.PAGIBIG_ER: 1121,
    LineCategory.TAX_WITHHOLDING: 1200,
    LineCategory.PENALTY_DEDUCTION: 1350,
    LineCategory.ADJUSTMENT_DEDUCT: 1400,
    LineCategory.OTHER_DEDUCTION: 1500,
}


@dataclass(frozen=True)
class PayProfile:
    employee_id: str
    wage_type: WageType
    base_rate: float
    pay_frequency: PayFrequency = PayFrequency.SEMI_MONTHLY
    standard_work_days_per_month: float = 26
    standard_hours_per_day: float = 8
    is_benefits_eligible: bool = True
    is_ot_eligible: bool = True
    is_nd_eligible: bool = True
    # monthly amounts
    rice_subsidy: float = 0.0
    clothing_allowance: float = 0.0
    laundry_allowance: float = 0.0
    medical_allowance: float = 0.0
    transportation_allowance: float = 0.0
    meal_allowance: float = 0.0
    communication_allowance: float = 0.0

    @property
    def standard_minutes_per_day(self) -> float:
        return self.standard_hours_per_day * 60


@dataclass(frozen=True)
class DerivedRates:
    monthly_rate: float
    daily_rate: float
    hourly_rate: float
    minute_rate: float
    msc: float


@dataclass(frozen=True)
class AttendanceDay:
    attendance_date: date
    day_type: DayType = DayType.REGULAR_WORKING_DAY
    worked_minutes: int = 0
    late_minutes: int = 0
    undertime_minutes: int = 0
    absent_minutes: int = 0
    ot_early_in_minutes: int = 0
    ot_late_out_minutes: int = 0
    ot_break_minutes: int = 0
    overtime_rest_day_minutes: int = 0
    overtime_holiday_minutes: int = 0
    night_diff_minutes: int = 0
    early_in_approved: bool = False
    late_out_approved: bool = False
    daily_rate_override: Optional[float] = None
    is_on_leave: bool = False
    leave_is_paid: bool = True
    holiday_name: Optional[str] = None
    id: Optional[str] = None

    @property
    def approved_ot_minutes(self) -> int:
        early_in = self.ot_early_in_minutes if self.early_in_approved else 0
        late_out = self.ot_late_out_minutes if self.late_out_approved else 0
        return early_in + late_out + self.ot_break_minutes


@dataclass(frozen=True)
class PayPeriod:
    id: str
    start_date: date
    end_date: date
    cutoff_date: Optional[date] = None
    pay_date: Optional[date] = None
    period_number: int = 1
    pay_frequency: PayFrequency = PayFrequency.SEMI_MONTHLY


@dataclass(frozen=True)
class EmployeeRegularization:
    employee_id: str
    employment_type: EmploymentType
    regularization_date: Optional[date] = None
    hire_date: Optional[date] = None


@dataclass(frozen=True)
class ManualAdjustment:
    type: AdjustmentType
    description: str
    amount: float
    id: Optional[str] = None
    remarks: Optional[str] = None


@dataclass(frozen=True)
class PenaltyDeduction:
    installment_id: str
    penalty_id: str
    description: str
    amount: float


@dataclass(frozen=True)
class StatutoryOverride:
    base_rate: float
    wage_type: WageType


@dataclass(frozen=True)
class YtdSnapshot:
    gross_pay: float = 0.0
    taxable_income: float = 0.0
    tax_withheld: float = 0.0


@dataclass(frozen=True)
class PayslipLine:
    category: LineCategory
    description: str
    amount: float
    sort_order: int
    rule_code: str
    quantity: Optional[float] = None
    rate: Optional[float] = None
    multiplier: Optional[float] = None
    rule_description: Optional[str] = None
    manual_adjustment_id: Optional[str] = None
    penalty_installment_id: Optional[str] = None

    @property
    def is_earning(self) -> bool:
        return self.category.kind == LineKind.EARNING

    @property
    def is_deduction(self) -> bool:
        return self.category.kind == LineKind.DEDUCTION


@dataclass
class StatutoryBreakdown:
    sss_ee: float = 0.0
    sss_er: float = 0.0
    philhealth_ee: float = 0.0
    philhealth_er: float = 0.0
    pagibig_ee: float = 0.0
    pagibig_er: float = 0.0
    withholding_tax: float = 0.0

    def employee_shares(self) -> float:
        return self.sss_ee + self.philhealth_ee + self.pagibig_ee


@dataclass
class Payslip:
    employee_id: str
    lines: List[PayslipLine]
    employer_lines: List[PayslipLine]
    gross_pay: float
    total_earnings: float
    total_deductions: float
    net_pay: float
    statutory: StatutoryBreakdown
    taxable_income: float
    tax_period_number: Optional[int]
    ytd: YtdSnapshot
    pay_profile: PayProfile

    def lines_for(self, category: LineCategory) -> List[PayslipLine]:
        return [line for line in self.lines if line.category == category]

    def amount_for(self, category: LineCategory) -> float:
        return sum(line.amount for line in self.lines_for(category))


@dataclass
class EmployeePayrollInput:
    profile: PayProfile
    regularization: EmployeeRegularization
    attendance: List[AttendanceDay] = field(default_factory=list)
    manual_adjustments: List[ManualAdjustment] = field(default_factory=list)
    penalty_deductions: List[PenaltyDeduction] = field(default_factory=list)
    statutory_override: Optional[StatutoryOverride] = None
    tax_on_full_earnings: bool = False
    previous_ytd: YtdSnapshot = field(default_factory=YtdSnapshot)

    @property
    def employee_id(self) -> str:
        return self.profile.employee_id


@dataclass
class EmployeeError:
    employee_id: str
    error: str


@dataclass
class PayrollTotals:
    gross_pay: float = 0.0
    total_earnings: float = 0.0
    total_deductions: float = 0.0
    net_pay: float = 0.0
    sss_ee: float = 0.0
    sss_er: float = 0.0
    philhealth_ee: float = 0.0
    philhealth_er: float = 0.0
    pagibig_ee: float = 0.0
    pagibig_er: float = 0.0
    withholding_tax: float = 0.0


@dataclass
class PayrollRunResult:
    payslips: List[Payslip]
    totals: PayrollTotals
    employee_count: int
    errors: List[EmployeeError]
