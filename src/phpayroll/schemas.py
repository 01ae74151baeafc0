from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Optional, Union

from pydantic import BaseModel, Field, model_validator

from .attendance import AttendanceMetrics, AttendanceRecord
from .day_types import CalendarEvent, DayTypeResolution
from .models import (
    AdjustmentType,
    AttendanceDay,
    DayType,
    EmployeeError,
    EmployeePayrollInput,
    EmployeeRegularization,
    EmploymentType,
    LineCategory,
    ManualAdjustment,
    PayFrequency,
    PayPeriod,
    PayProfile,
    PayrollRunResult,
    Payslip,
    PayslipLine,
    PenaltyDeduction,
    StatutoryOverride,
    WageType,
    YtdSnapshot,
)

Money = Annotated[float, Field(ge=0)]
Minutes = Annotated[int, Field(ge=0)]


def _wage_type(value: str) -> Union[WageType, str]:
    # Unknown wage types pass through so the engine reports them per employee.
    try:
        return WageType(value.upper())
    except ValueError:
        return value


class PayProfileIn(BaseModel):
    employee_id: str
    wage_type: str
    base_rate: Money
    pay_frequency: PayFrequency = PayFrequency.SEMI_MONTHLY
    standard_work_days_per_month: Annotated[float, Field(gt=0)] = 26
    standard_hours_per_day: Annotated[float, Field(gt=0)] = 8
    is_benefits_eligible: bool = True
    is_ot_eligible: bool = True
    is_nd_eligible: bool = True
    rice_subsidy: Money = 0
    clothing_allowance: Money = 0
    laundry_allowance: Money = 0
    medical_allowance: Money = 0
    transportation_allowance: Money = 0
    meal_allowance: Money = 0
    communication_allowance: Money = 0

    def to_domain(self) -> PayProfile:
        data = self.model_dump()
        data["wage_type"] = _wage_type(self.wage_type)
        return PayProfile(**data)


class AttendanceDayIn(BaseModel):
    attendance_date: date
    day_type: DayType = DayType.REGULAR_WORKING_DAY
    worked_minutes: Minutes = 0
    late_minutes: Minutes = 0
    undertime_minutes: Minutes = 0
    absent_minutes: Minutes = 0
    ot_early_in_minutes: Minutes = 0
    ot_late_out_minutes: Minutes = 0
    ot_break_minutes: Minutes = 0
    overtime_rest_day_minutes: Minutes = 0
    overtime_holiday_minutes: Minutes = 0
    night_diff_minutes: Minutes = 0
    early_in_approved: bool = False
    late_out_approved: bool = False
    daily_rate_override: Optional[float] = None
    is_on_leave: bool = False
    leave_is_paid: bool = True
    holiday_name: Optional[str] = None
    id: Optional[str] = None

    def to_domain(self) -> AttendanceDay:
        return AttendanceDay(**self.model_dump())


class PayPeriodIn(BaseModel):
    id: str
    start_date: date
    end_date: date
    cutoff_date: Optional[date] = None
    pay_date: Optional[date] = None
    period_number: Annotated[int, Field(ge=1)] = 1
    pay_frequency: PayFrequency = PayFrequency.SEMI_MONTHLY

    @model_validator(mode="after")
    def check_dates(self) -> "PayPeriodIn":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def to_domain(self) -> PayPeriod:
        return PayPeriod(**self.model_dump())


class RegularizationIn(BaseModel):
    employment_type: EmploymentType = EmploymentType.REGULAR
    regularization_date: Optional[date] = None
    hire_date: Optional[date] = None

    def to_domain(self, employee_id: str) -> EmployeeRegularization:
        return EmployeeRegularization(employee_id=employee_id, **self.model_dump())


class ManualAdjustmentIn(BaseModel):
    type: AdjustmentType
    description: str
    amount: float
    id: Optional[str] = None
    remarks: Optional[str] = None

    def to_domain(self) -> ManualAdjustment:
        return ManualAdjustment(**self.model_dump())


class PenaltyDeductionIn(BaseModel):
    installment_id: str
    penalty_id: str
    description: str
    amount: Money

    def to_domain(self) -> PenaltyDeduction:
        return PenaltyDeduction(**self.model_dump())


class StatutoryOverrideIn(BaseModel):
    base_rate: Annotated[float, Field(gt=0)]
    wage_type: WageType

    def to_domain(self) -> StatutoryOverride:
        return StatutoryOverride(base_rate=self.base_rate, wage_type=self.wage_type)


class YtdIn(BaseModel):
    gross_pay: float = 0
    taxable_income: float = 0
    tax_withheld: float = 0

    def to_domain(self) -> YtdSnapshot:
        return YtdSnapshot(**self.model_dump())


class EmployeeIn(BaseModel):
    profile: PayProfileIn
    regularization: RegularizationIn = Field(default_factory=RegularizationIn)
    attendance: list[AttendanceDayIn] = []
    manual_adjustments: list[ManualAdjustmentIn] = []
    penalty_deductions: list[PenaltyDeductionIn] = []
    statutory_override: Optional[StatutoryOverrideIn] = None
    tax_on_full_earnings: bool = False
    previous_ytd: YtdIn = Field(default_factory=YtdIn)

    def to_domain(self) -> EmployeePayrollInput:
        return EmployeePayrollInput(
            profile=self.profile.to_domain(),
            regularization=self.regularization.to_domain(self.profile.employee_id),
            attendance=[day.to_domain() for day in self.attendance],
            manual_adjustments=[adjustment.to_domain() for adjustment in self.manual_adjustments],
            penalty_deductions=[penalty.to_domain() for penalty in self.penalty_deductions],
            statutory_override=self.statutory_override.to_domain() if self.statutory_override else None,
            tax_on_full_earnings=self.tax_on_full_earnings,
            previous_ytd=self.previous_ytd.to_domain(),
        )


class PayrollRequest(BaseModel):
    pay_period: PayPeriodIn
    ruleset_version: Optional[str] = None
    employees: list[EmployeeIn]


class PayslipLineOut(BaseModel):
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

    @classmethod
    def from_domain(cls, line: PayslipLine) -> "PayslipLineOut":
        return cls(
            category=line.category,
            description=line.description,
            amount=line.amount,
            sort_order=line.sort_order,
            rule_code=line.rule_code,
            quantity=line.quantity,
            rate=line.rate,
            multiplier=line.multiplier,
            rule_description=line.rule_description,
            manual_adjustment_id=line.manual_adjustment_id,
            penalty_installment_id=line.penalty_installment_id,
        )


class StatutoryOut(BaseModel):
    sss_ee: float
    sss_er: float
    philhealth_ee: float
    philhealth_er: float
    pagibig_ee: float
    pagibig_er: float
    withholding_tax: float


class PayslipOut(BaseModel):
    employee_id: str
    lines: list[PayslipLineOut]
    employer_lines: list[PayslipLineOut]
    gross_pay: float
    total_earnings: float
    total_deductions: float
    net_pay: float
    statutory: StatutoryOut
    taxable_income: float
    tax_period_number: Optional[int]
    ytd: YtdIn
    wage_type: WageType
    pay_frequency: PayFrequency

    @classmethod
    def from_domain(cls, payslip: Payslip) -> "PayslipOut":
        statutory = payslip.statutory
        return cls(
            employee_id=payslip.employee_id,
            lines=[PayslipLineOut.from_domain(line) for line in payslip.lines],
            employer_lines=[PayslipLineOut.from_domain(line) for line in payslip.employer_lines],
            gross_pay=payslip.gross_pay,
            total_earnings=payslip.total_earnings,
            total_deductions=payslip.total_deductions,
            net_pay=payslip.net_pay,
            statutory=StatutoryOut(
                sss_ee=statutory.sss_ee,
                sss_er=statutory.sss_er,
                philhealth_ee=statutory.philhealth_ee,
                philhealth_er=statutory.philhealth_er,
                pagibig_ee=statutory.pagibig_ee,
                pagibig_er=statutory.pagibig_er,
                withholding_tax=statutory.withholding_tax,
            ),
            taxable_income=payslip.taxable_income,
            tax_period_number=payslip.tax_period_number,
            ytd=YtdIn(
                gross_pay=payslip.ytd.gross_pay,
                taxable_income=payslip.ytd.taxable_income,
                tax_withheld=payslip.ytd.tax_withheld,
            ),
            wage_type=payslip.pay_profile.wage_type,
            pay_frequency=payslip.pay_profile.pay_frequency,
        )


class EmployeeErrorOut(BaseModel):
    employee_id: str
    error: str

    @classmethod
    def from_domain(cls, error: EmployeeError) -> "EmployeeErrorOut":
        return cls(employee_id=error.employee_id, error=error.error)


class PayrollTotalsOut(BaseModel):
    gross_pay: float
    total_earnings: float
    total_deductions: float
    net_pay: float
    sss_ee: float
    sss_er: float
    philhealth_ee: float
    philhealth_er: float
    pagibig_ee: float
    pagibig_er: float
    withholding_tax: float


class PayrollRunOut(BaseModel):
    payslips: list[PayslipOut]
    totals: PayrollTotalsOut
    employee_count: int
    errors: list[EmployeeErrorOut]

    @classmethod
    def from_domain(cls, result: PayrollRunResult) -> "PayrollRunOut":
        return cls(
            payslips=[PayslipOut.from_domain(payslip) for payslip in result.payslips],
            totals=PayrollTotalsOut(**vars(result.totals)),
            employee_count=result.employee_count,
            errors=[EmployeeErrorOut.from_domain(error) for error in result.errors],
        )


class AttendanceRecordIn(BaseModel):
    attendance_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    scheduled_start: Optional[str] = Field(default=None, examples=["09:00"])
    scheduled_end: Optional[str] = Field(default=None, examples=["18:00"])
    shift_break_minutes: Minutes = 60
    break_minutes_applied: Optional[Minutes] = None
    scheduled_work_minutes: Optional[Minutes] = None
    overnight: bool = False
    early_in_approved: bool = False
    late_out_approved: bool = False
    late_in_approved: bool = False
    early_out_approved: bool = False
    is_on_leave: bool = False
    leave_is_paid: bool = True
    daily_rate_override: Optional[float] = None
    id: Optional[str] = None

    def to_domain(self) -> AttendanceRecord:
        return AttendanceRecord(**self.model_dump())


class AttendanceMetricsOut(BaseModel):
    late_minutes: int
    undertime_minutes: int
    ot_early_in_minutes: int
    ot_late_out_minutes: int
    ot_break_minutes: int
    worked_minutes: int
    night_diff_minutes: int

    @classmethod
    def from_domain(cls, metrics: AttendanceMetrics) -> "AttendanceMetricsOut":
        return cls(**vars(metrics))


class CalendarEventIn(BaseModel):
    event_date: date
    day_type: DayType
    name: str
    holiday_id: Optional[str] = None

    def to_domain(self) -> CalendarEvent:
        return CalendarEvent(**self.model_dump())


class DayTypeOut(BaseModel):
    day: date
    day_type: DayType
    multiplier: float
    paid_if_not_worked: bool
    is_rest_day: bool
    holiday_name: Optional[str] = None

    @classmethod
    def from_domain(cls, day: date, resolution: DayTypeResolution) -> "DayTypeOut":
        return cls(
            day=day,
            day_type=resolution.day_type,
            multiplier=resolution.multiplier,
            paid_if_not_worked=resolution.paid_if_not_worked,
            is_rest_day=resolution.is_rest_day,
            holiday_name=resolution.holiday_name,
        )


class AttendanceCalculationRequest(BaseModel):
    record: AttendanceRecordIn
    events: list[CalendarEventIn] = []
    standard_minutes: Annotated[int, Field(gt=0)] = 480
    ruleset_version: Optional[str] = None


class AttendanceCalculationOut(BaseModel):
    day_type: DayTypeOut
    day: AttendanceDayIn


class DayTypesRequest(BaseModel):
    start_date: date
    end_date: date
    events: list[CalendarEventIn] = []
    rest_days: Optional[list[Annotated[int, Field(ge=0, le=6)]]] = None
    ruleset_version: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "DayTypesRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self
