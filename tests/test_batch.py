from datetime import date, timedelta

import pytest

from phpayroll.batch import PayrollRun, compute_payroll, summarize
from phpayroll.engine import PayrollEngine
from phpayroll.models import (
    AttendanceDay,
    EmployeePayrollInput,
    EmployeeRegularization,
    EmploymentType,
    PayPeriod,
    PayProfile,
    WageType,
)

PERIOD = PayPeriod(id="2025-02-A", start_date=date(2025, 2, 1), end_date=date(2025, 2, 15))


def build_employee(employee_id: str, wage_type="MONTHLY", base_rate=26000.0) -> EmployeePayrollInput:
    attendance = [
        AttendanceDay(PERIOD.start_date + timedelta(days=offset), worked_minutes=480) for offset in range(13)
    ]
    return EmployeePayrollInput(
        profile=PayProfile(employee_id=employee_id, wage_type=wage_type, base_rate=base_rate),
        regularization=EmployeeRegularization(employee_id, EmploymentType.REGULAR),
        attendance=attendance,
    )


def test_run_aggregates_totals_across_employees():
    employees = [build_employee("a"), build_employee("b", "DAILY", 800)]

    result = compute_payroll(PERIOD, None, employees)

    assert result.employee_count == 2
    assert result.errors == []
    assert [payslip.employee_id for payslip in result.payslips] == ["a", "b"]
    assert result.totals.gross_pay == pytest.approx(sum(p.gross_pay for p in result.payslips))
    assert result.totals.net_pay == pytest.approx(sum(p.net_pay for p in result.payslips))
    assert result.totals.sss_er == pytest.approx(sum(p.statutory.sss_er for p in result.payslips))


def test_failing_employee_is_recorded_and_run_continues():
    employees = [build_employee("a"), build_employee("broken", "PIECE_RATE", 10), build_employee("c")]

    result = compute_payroll(PERIOD, None, employees)

    assert result.employee_count == 2
    assert [payslip.employee_id for payslip in result.payslips] == ["a", "c"]
    assert len(result.errors) == 1
    assert result.errors[0].employee_id == "broken"
    assert "PIECE_RATE" in result.errors[0].error


def test_thread_pool_preserves_input_order():
    employees = [build_employee(f"emp{index}", "DAILY", 600 + index * 10) for index in range(8)]

    sequential = compute_payroll(PERIOD, None, employees)
    pooled = PayrollRun(PayrollEngine(PERIOD), max_workers=4).run(employees)

    assert [p.employee_id for p in pooled.payslips] == [p.employee_id for p in sequential.payslips]
    assert pooled.totals == sequential.totals


def test_empty_run():
    result = compute_payroll(PERIOD, None, [])

    assert result.employee_count == 0
    assert result.totals.net_pay == 0
    assert summarize([]).gross_pay == 0
